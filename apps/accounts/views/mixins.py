"""
Access Control Mixins - أدوات التحقق من الصلاحيات
Manassa - Bilingual E-Learning Platform

هذا الملف يحتوي على Mixins للتحقق من صلاحيات المستخدمين.

ملاحظة مهمة:
    هذا الملف لا يستورد أي ملفات داخلية لتجنب مشاكل الاستيراد الدائري.
    يعتمد فقط على Django's built-in mixins.
"""

from django.contrib.auth.mixins import UserPassesTestMixin
from django.http import JsonResponse


class AdminRequiredMixin(UserPassesTestMixin):
    """
    Mixin للتحقق من صلاحيات المدير.

    مثال الاستخدام:
        class UserBalanceView(LoginRequiredMixin, AdminRequiredMixin, View):
            ...
    """

    def test_func(self):
        """التحقق من أن المستخدم مدير."""
        return self.request.user.is_authenticated and self.request.user.is_admin()


class TeacherRequiredMixin(UserPassesTestMixin):
    """
    Mixin للتحقق من صلاحيات المدرس.

    ملاحظة:
        المدير يمكنه الوصول لصفحات المدرسين أيضاً.
    """

    def test_func(self):
        """التحقق من أن المستخدم مدرس أو مدير."""
        return self.request.user.is_authenticated and (
            self.request.user.is_teacher() or self.request.user.is_admin()
        )


class StudentRequiredMixin(UserPassesTestMixin):
    """Mixin للتحقق من أن المستخدم طالب."""

    def test_func(self):
        return self.request.user.is_authenticated and self.request.user.is_student()


class ApiAuthMixin:
    """
    نسخة JSON من LoginRequiredMixin للواجهات البرمجية:
    401 لغير المسجلين، 403 إذا لم يكن الدور ضمن allowed_roles.
    """

    allowed_roles = None

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'error': 'UNAUTHORIZED'}, status=401)
        if self.allowed_roles is not None and not self.has_role(request.user):
            return JsonResponse({'error': 'FORBIDDEN'}, status=403)
        return super().dispatch(request, *args, **kwargs)

    def has_role(self, user):
        if user.is_superuser and 'ADMIN' in self.allowed_roles:
            return True
        return user.role in self.allowed_roles
