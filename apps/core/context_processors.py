"""
Context Processors للمتغيرات العامة في القوالب
Manassa - Bilingual E-Learning Platform
"""

from django.conf import settings
from django.utils import translation


def site_settings(request):
    """
    إضافة إعدادات الموقع للقوالب
    """
    language = translation.get_language() or settings.LANGUAGE_CODE
    return {
        'SITE_NAME': 'Manassa',
        'SITE_FULL_NAME': 'منصّة التعليم الإلكتروني',
        'SITE_VERSION': '1.0.0',
        'DEBUG': settings.DEBUG,
        'TEXT_DIRECTION': 'rtl' if translation.get_language_bidi() else 'ltr',
        'CURRENT_LANGUAGE': language,
    }


def user_role_info(request):
    """
    إضافة معلومات دور المستخدم للقوالب
    """
    if request.user.is_authenticated:
        user = request.user
        return {
            'user_role': user.get_role_display(),
            'user_role_code': user.role,
            'is_admin': user.is_admin(),
            'is_teacher': user.is_teacher(),
            'is_student': user.is_student(),
        }
    return {
        'user_role': None,
        'user_role_code': None,
        'is_admin': False,
        'is_teacher': False,
        'is_student': False,
    }
