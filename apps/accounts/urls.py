"""
URL Configuration for Accounts App
Manassa - Bilingual E-Learning Platform
"""

from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication (المصادقة)
    path('login/', views.LoginView.as_view(), name='login'),
    path('logout/', views.LogoutView.as_view(), name='logout'),
    path('register/', views.RegisterView.as_view(), name='register'),
    path('device-conflict/', views.DeviceConflictView.as_view(), name='device_conflict'),

    # Profile (الملف الشخصي)
    path('profile/', views.ProfileView.as_view(), name='profile'),
    path('change-password/', views.ChangePasswordView.as_view(), name='change_password'),
]
