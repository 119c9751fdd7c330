"""
URL configuration for Manassa project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    # Django Admin
    path('manassa-admin/', admin.site.urls),

    # Language switching (ar / en)
    path('i18n/', include('django.conf.urls.i18n')),

    # Core App (Home, Dashboard redirect, dev-tools warning, cron)
    path('', include('apps.core.urls')),

    # Accounts App (Authentication, Device conflict, Profile)
    path('accounts/', include('apps.accounts.urls')),
    path('api/', include('apps.accounts.api_urls')),

    # Teacher App (Course authoring, student oversight)
    path('teacher/', include('apps.teacher.urls')),
    path('api/teacher/', include('apps.teacher.api_urls')),

    # Student App (Browse, learn, quizzes)
    path('student/', include('apps.student.urls')),

    # Courses App (Content delivery, uploads, video proxies, admin reports)
    path('api/', include('apps.courses.urls')),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

# Admin site customization
admin.site.site_header = "إدارة منصّة"
admin.site.site_title = "لوحة تحكم منصّة"
admin.site.index_title = "مرحباً بك في لوحة إدارة المنصة التعليمية"
