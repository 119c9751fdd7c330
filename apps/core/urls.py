"""
URL configuration for core app.
"""

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    path('', views.HomeView.as_view(), name='home'),
    path('dashboard/', views.DashboardRedirectView.as_view(), name='dashboard_redirect'),
    path('devtools-warning/', views.DevToolsWarningView.as_view(), name='devtools_warning'),
    path('api/cron/daily-reset', views.DailyResetView.as_view(), name='daily_reset'),
]
