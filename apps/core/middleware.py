"""
Middleware الجلسة الواحدة
Manassa - Bilingual E-Learning Platform

يتحقق من صف الجلسة في كل طلب لمستخدم مسجل الدخول.
إذا تم تسجيل الدخول من جهاز آخر (أو تمت إعادة التعيين اليومية)
يتم تسجيل خروج هذا الجهاز فوراً.
"""

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import logout
from django.http import JsonResponse
from django.shortcuts import redirect

from apps.accounts.models import UserActivity
from apps.accounts.services import SessionManager, DEVICE_SESSION_KEY, attach_device_session

logger = logging.getLogger('core')


class SingleSessionMiddleware:
    """
    يجب وضعه بعد AuthenticationMiddleware و MessageMiddleware.

    - مسارات /api/ تحصل على 401 JSON {"error": "SESSION_EXPIRED"}
    - باقي المسارات يتم تحويلها لصفحة الدخول مع رسالة
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt_paths = tuple(getattr(settings, 'SINGLE_SESSION_EXEMPT_PATHS', ()))

    def __call__(self, request):
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated and not self.is_exempt(request.path):
            response = self.check_session(request, user)
            if response is not None:
                return response
        return self.get_response(request)

    def is_exempt(self, path):
        return path.startswith(self.exempt_paths)

    def check_session(self, request, user):
        session_id = request.session.get(DEVICE_SESSION_KEY)

        # جلسة Django بدون معرف جهاز: تُنشأ جلسة للأدوار متعددة الأجهزة فقط
        if not session_id and user.is_multi_device():
            attach_device_session(request, user)
            return None

        if SessionManager.validate_session(session_id, user):
            return None

        logger.info(f"Session invalidated for user {user.pk} on {request.path}")
        UserActivity.record(user, 'session_evicted', request=request,
                            description='تم إنهاء الجلسة بسبب تسجيل الدخول من جهاز آخر')
        logout(request)

        if '/api/' in request.path:
            return JsonResponse({'error': 'SESSION_EXPIRED'}, status=401)

        messages.warning(request, 'تم تسجيل الدخول إلى حسابك من جهاز آخر. يرجى تسجيل الدخول مرة أخرى.')
        return redirect(settings.LOGIN_URL)
