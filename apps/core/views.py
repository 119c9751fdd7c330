"""
Core Views - الصفحات العامة
Manassa - Bilingual E-Learning Platform

- الصفحة الرئيسية
- التوجيه للوحة التحكم حسب الدور
- صفحة تحذير أدوات المطور
- مهمة إعادة تعيين الجلسات اليومية (Cron)
"""

import hmac
import logging

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.shortcuts import render, redirect
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.accounts.services import SessionManager
from apps.courses.models import Course
from .models import AuditLog

logger = logging.getLogger('core')


class HomeView(View):
    """الصفحة الرئيسية - أحدث الكورسات المنشورة"""
    template_name = 'core/home.html'

    def get(self, request):
        if request.user.is_authenticated:
            return redirect('core:dashboard_redirect')
        courses = Course.objects.published().select_related('user')[:6]
        return render(request, self.template_name, {'courses': courses})


class DashboardRedirectView(LoginRequiredMixin, View):
    """توجيه المستخدم للوحة التحكم المناسبة لدوره"""

    def get(self, request):
        return redirect(request.user.get_dashboard_url_name())


class DevToolsWarningView(View):
    """تُعرض عند اكتشاف فتح أدوات المطور في صفحة المشغل"""
    template_name = 'core/devtools_warning.html'

    def get(self, request):
        response = render(request, self.template_name)
        response['Cache-Control'] = 'no-store'
        return response


@method_decorator(csrf_exempt, name='dispatch')
class DailyResetView(View):
    """
    GET /api/cron/daily-reset

    ينهي جميع الجلسات النشطة.
    المصادقة: Authorization: Bearer <CRON_SECRET> إذا كان مضبوطاً،
    وإلا يجب وجود الترويسة X-Cron (إلا في وضع DEBUG).
    """

    def get(self, request):
        if not self.is_authorized(request):
            logger.warning("Unauthorized daily reset attempt")
            return JsonResponse({'error': 'Unauthorized'}, status=401)

        count = SessionManager.reset_all_sessions()
        AuditLog.log(
            user=None,
            action='session_reset',
            model_name='User',
            object_repr='daily reset',
            changes={'reset_count': count},
            request=request,
        )
        return JsonResponse({
            'success': True,
            'message': 'Successfully logged out all users',
            'resetCount': count,
            'timestamp': timezone.now().isoformat(),
        })

    def post(self, request):
        return self.get(request)

    @staticmethod
    def is_authorized(request):
        secret = settings.CRON_SECRET
        if secret:
            header = request.headers.get('Authorization', '')
            return hmac.compare_digest(header.encode(), f'Bearer {secret}'.encode())
        return settings.DEBUG or bool(request.headers.get('X-Cron'))
