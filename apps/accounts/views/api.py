"""
JSON API Views - واجهات الجلسة والملف الشخصي
Manassa - Bilingual E-Learning Platform

=== Endpoints ===
- POST  /api/auth/validate-and-check-status  التحقق من البيانات + هل الحساب مسجل من جهاز آخر
- POST  /api/auth/force-login                تسجيل الخروج من جميع الأجهزة
- POST  /api/auth/logout                     إنهاء جلسة المستخدم الحالي
- GET   /api/auth/session                    حالة الجلسة (يستخدمها مراقب الجلسة في الواجهة)
- GET   /api/user/profile                    بيانات المستخدم
- PATCH /api/user/grade                      تحديث الصف الدراسي (للطلاب فقط)
"""

import json
import logging

from django.conf import settings
from django.contrib.auth import authenticate, logout
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from ..models import User, UserActivity
from ..services import SessionManager, DEVICE_SESSION_KEY
from .mixins import ApiAuthMixin

logger = logging.getLogger('accounts')


def parse_json_body(request):
    """قراءة جسم الطلب كـ JSON، مع الرجوع لبيانات النموذج"""
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except (ValueError, UnicodeDecodeError):
            return None
        return data if isinstance(data, dict) else None
    return request.POST.dict()


def _credentials(request):
    data = parse_json_body(request) or {}
    phone_number = str(data.get('phoneNumber') or '').strip()
    password = data.get('password') or ''
    return phone_number, password


@method_decorator(csrf_exempt, name='dispatch')
class ValidateAndCheckStatusView(View):
    """
    التحقق من بيانات الدخول قبل تسجيل الدخول الفعلي.
    isAlreadyLoggedIn يكون True فقط للطالب المسجل من جهاز آخر.
    """

    def post(self, request):
        phone_number, password = _credentials(request)
        invalid = JsonResponse({'error': 'Invalid credentials', 'isValid': False}, status=401)

        if not phone_number or not password:
            return invalid

        user = authenticate(request, phone_number=phone_number, password=password)
        if user is None:
            return invalid

        return JsonResponse({
            'isValid': True,
            'isAlreadyLoggedIn': SessionManager.has_session_conflict(user),
            'role': user.role,
        })


@method_decorator(csrf_exempt, name='dispatch')
class ForceLoginApiView(View):
    """تسجيل الخروج من جميع الأجهزة بعد التحقق من كلمة المرور"""

    def post(self, request):
        phone_number, password = _credentials(request)
        if not phone_number or not password:
            return JsonResponse({'error': 'Phone number and password are required'}, status=400)

        user = authenticate(request, phone_number=phone_number, password=password)
        if user is None:
            return JsonResponse({'error': 'Invalid credentials'}, status=401)

        SessionManager.force_end_session(user)
        UserActivity.record(user, 'force_login', request=request,
                            description='تسجيل الخروج من جميع الأجهزة (API)')

        return JsonResponse({
            'success': True,
            'message': 'All devices signed out successfully',
        })


@method_decorator(csrf_exempt, name='dispatch')
class LogoutApiView(ApiAuthMixin, View):
    """إنهاء جلسة المستخدم الحالي"""

    def post(self, request):
        user = request.user
        SessionManager.end_session(user)
        UserActivity.record(user, 'logout', request=request)
        logout(request)
        return JsonResponse({'success': True, 'message': 'Logged out successfully'})


class SessionStatusApiView(View):
    """
    حالة الجلسة الحالية.
    الجلسة غير الصالحة يعترضها SingleSessionMiddleware قبل الوصول هنا (401).
    """

    def get(self, request):
        if not request.user.is_authenticated:
            return JsonResponse({'authenticated': False, 'valid': False})
        valid = SessionManager.validate_session(
            request.session.get(DEVICE_SESSION_KEY), request.user
        )
        return JsonResponse({
            'authenticated': True,
            'valid': valid,
            'role': request.user.role,
        })


class UserProfileApiView(ApiAuthMixin, View):
    """بيانات المستخدم الحالي"""

    def get(self, request):
        user = User.objects.filter(pk=request.user.pk).first()
        if user is None:
            return JsonResponse({'error': 'User not found'}, status=404)
        return JsonResponse({
            'id': user.pk,
            'fullName': user.full_name,
            'phoneNumber': user.phone_number,
            'grade': user.grade,
            'role': user.role,
        })


@method_decorator(csrf_exempt, name='dispatch')
class UserGradeApiView(ApiAuthMixin, View):
    """تحديث الصف الدراسي - للطلاب فقط"""

    allowed_roles = (User.Role.STUDENT,)

    def patch(self, request):
        data = parse_json_body(request)
        if data is None:
            return JsonResponse({'error': 'Invalid JSON'}, status=400)

        grade = data.get('grade')
        if grade is not None and grade not in settings.STUDENT_GRADES:
            return JsonResponse({'error': 'Invalid grade'}, status=400)

        user = request.user
        user.grade = grade or None
        user.save(update_fields=['grade', 'updated_at'])

        return JsonResponse({
            'success': True,
            'user': {'id': user.pk, 'grade': user.grade},
        })
