"""
Authentication Views - عروض المصادقة
Manassa - Bilingual E-Learning Platform

هذا الملف يحتوي على جميع Views المتعلقة بـ:
- تسجيل الدخول مع منع الدخول المتزامن للطلاب
- صفحة تعارض الأجهزة (تسجيل الخروج من الأجهزة الأخرى ثم الدخول)
- تسجيل الخروج
- إنشاء حساب طالب
"""

import logging
from urllib.parse import urlencode

from django.contrib import messages
from django.contrib.auth import login, logout
from django.shortcuts import render, redirect
from django.urls import reverse
from django.utils.decorators import method_decorator
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie

from ..forms import LoginForm, DeviceConflictForm, RegisterForm
from ..models import UserActivity
from ..services import SessionManager
from apps.core.models import AuditLog

logger = logging.getLogger('accounts')


def _redirect_after_login(request, user):
    """التوجيه حسب next أو دور المستخدم"""
    next_url = request.POST.get('next') or request.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(
        next_url, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return redirect(next_url)
    return redirect(user.get_dashboard_url_name())


# ========== Login / Logout ==========

@method_decorator(ensure_csrf_cookie, name='dispatch')
class LoginView(View):
    """
    عرض تسجيل الدخول.

    الوظائف:
        - التحقق من رقم الهاتف وكلمة المرور
        - منع الطالب من الدخول إذا كان مسجلاً من جهاز آخر
          (يتم تحويله لصفحة تعارض الأجهزة)
        - إنشاء صف الجلسة (عبر إشارة user_logged_in)
        - تسجيل نشاط الدخول
    """
    template_name = 'accounts/login.html'

    def get(self, request):
        """عرض نموذج تسجيل الدخول."""
        if request.user.is_authenticated:
            return redirect('core:dashboard_redirect')
        form = LoginForm()
        return render(request, self.template_name, {'form': form})

    def post(self, request):
        """معالجة طلب تسجيل الدخول."""
        form = LoginForm(request, data=request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form})

        user = form.get_user()

        if SessionManager.has_session_conflict(user):
            logger.info(f"Login blocked for user {user.pk}: already signed in on another device")
            query = urlencode({'phone_number': user.phone_number})
            return redirect(f"{reverse('accounts:device_conflict')}?{query}")

        login(request, user)
        UserActivity.record(user, 'login', request=request)

        # تذكرني - إذا لم يختر المستخدم، تنتهي الجلسة عند إغلاق المتصفح
        if not form.cleaned_data.get('remember_me'):
            request.session.set_expiry(0)

        messages.success(request, f'مرحباً {user.full_name}!')
        return _redirect_after_login(request, user)


class DeviceConflictView(View):
    """
    تعارض الأجهزة: الحساب مسجل دخول من جهاز آخر.

    GET: يعرض نموذج التأكيد (رقم الهاتف معبأ مسبقاً).
    POST: يعيد التحقق من كلمة المرور، ينهي الجلسة القديمة، ثم يسجل الدخول.
    الجهاز القديم يتم طرده في طلبه التالي عبر SingleSessionMiddleware.
    """
    template_name = 'accounts/device_conflict.html'

    def get(self, request):
        form = DeviceConflictForm(initial={
            'phone_number': request.GET.get('phone_number', ''),
        })
        return render(request, self.template_name, {'form': form})

    def post(self, request):
        form = DeviceConflictForm(request.POST, request=request)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form})

        user = form.user
        SessionManager.force_end_session(user)
        UserActivity.record(user, 'force_login', request=request,
                            description='تسجيل الخروج من جميع الأجهزة')
        AuditLog.log(
            user=user,
            action='force_logout',
            model_name='User',
            object_id=user.pk,
            object_repr=str(user),
            changes={'source': 'device_conflict'},
            request=request,
        )

        login(request, user)
        UserActivity.record(user, 'login', request=request)

        messages.success(request, 'تم تسجيل الخروج من الأجهزة الأخرى وتسجيل دخولك بنجاح.')
        return redirect(user.get_dashboard_url_name())


class LogoutView(View):
    """
    عرض تسجيل الخروج.

    ينهي صف الجلسة ثم جلسة Django.
    """

    def post(self, request):
        if request.user.is_authenticated:
            user = request.user
            SessionManager.end_session(user)
            UserActivity.record(user, 'logout', request=request)
            logout(request)
            messages.success(request, 'تم تسجيل الخروج بنجاح.')
        return redirect('accounts:login')

    def get(self, request):
        return self.post(request)


class RegisterView(View):
    """إنشاء حساب طالب جديد ثم تسجيل دخوله مباشرة."""
    template_name = 'accounts/register.html'

    def get(self, request):
        if request.user.is_authenticated:
            return redirect('core:dashboard_redirect')
        return render(request, self.template_name, {'form': RegisterForm()})

    def post(self, request):
        form = RegisterForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form})

        user = form.save()
        UserActivity.record(user, 'register', request=request)
        logger.info(f"New student registered: {user.pk}")

        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        messages.success(request, 'تم إنشاء حسابك بنجاح!')
        return redirect('student:dashboard')
