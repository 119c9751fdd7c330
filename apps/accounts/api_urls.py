"""Accounts JSON API URLs"""
from django.urls import path
from . import views

app_name = 'accounts_api'

urlpatterns = [
    path('auth/validate-and-check-status', views.ValidateAndCheckStatusView.as_view(), name='validate_and_check_status'),
    path('auth/force-login', views.ForceLoginApiView.as_view(), name='force_login'),
    path('auth/logout', views.LogoutApiView.as_view(), name='logout'),
    path('auth/session', views.SessionStatusApiView.as_view(), name='session_status'),
    path('user/profile', views.UserProfileApiView.as_view(), name='user_profile'),
    path('user/grade', views.UserGradeApiView.as_view(), name='user_grade'),
]
