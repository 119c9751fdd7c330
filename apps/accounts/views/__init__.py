"""
Views Package - حزمة العروض
Manassa - Bilingual E-Learning Platform

تم تنظيم الـ Views حسب الوظيفة:
- mixins.py: أدوات التحقق من الصلاحيات
- auth.py: تسجيل الدخول، حل تعارض الأجهزة، الخروج، التسجيل
- api.py: واجهات JSON للجلسة والملف الشخصي
- profile.py: الملف الشخصي
"""

# Mixins - أدوات التحقق من الصلاحيات
from .mixins import (
    AdminRequiredMixin,
    TeacherRequiredMixin,
    StudentRequiredMixin,
    ApiAuthMixin,
)

# Authentication Views - المصادقة
from .auth import (
    LoginView,
    DeviceConflictView,
    LogoutView,
    RegisterView,
)

# JSON API Views
from .api import (
    ValidateAndCheckStatusView,
    ForceLoginApiView,
    LogoutApiView,
    SessionStatusApiView,
    UserProfileApiView,
    UserGradeApiView,
)

# Profile Views - الملف الشخصي
from .profile import (
    ProfileView,
    ChangePasswordView,
)

__all__ = [
    # Mixins
    'AdminRequiredMixin',
    'TeacherRequiredMixin',
    'StudentRequiredMixin',
    'ApiAuthMixin',
    # Auth
    'LoginView',
    'DeviceConflictView',
    'LogoutView',
    'RegisterView',
    # API
    'ValidateAndCheckStatusView',
    'ForceLoginApiView',
    'LogoutApiView',
    'SessionStatusApiView',
    'UserProfileApiView',
    'UserGradeApiView',
    # Profile
    'ProfileView',
    'ChangePasswordView',
]
