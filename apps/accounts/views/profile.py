"""
Profile Views - عروض الملف الشخصي
Manassa - Bilingual E-Learning Platform

- عرض وتحديث الملف الشخصي (مدمج)
- تغيير كلمة المرور
"""

from django.shortcuts import render, redirect
from django.contrib.auth import update_session_auth_hash
from django.contrib.auth.mixins import LoginRequiredMixin
from django.contrib import messages
from django.views import View

from ..models import UserActivity
from ..forms import ProfileUpdateForm, ChangePasswordForm


class ProfileView(LoginRequiredMixin, View):
    """
    عرض وتحديث الملف الشخصي للمستخدم (مدمج).

    GET: يعرض معلومات المستخدم مع نموذج التعديل.
    POST: يحفظ التعديلات على الملف الشخصي.
    """
    template_name = 'accounts/profile.html'

    def _render(self, request, form):
        recent_activities = UserActivity.objects.filter(user=request.user)[:10]
        return render(request, self.template_name, {
            'form': form,
            'recent_activities': recent_activities,
            'active_page': 'profile',
        })

    def get(self, request):
        return self._render(request, ProfileUpdateForm(instance=request.user))

    def post(self, request):
        form = ProfileUpdateForm(request.POST, instance=request.user)
        if form.is_valid():
            form.save()
            UserActivity.record(request.user, 'profile_update', request=request,
                                description='تم تحديث الملف الشخصي')
            messages.success(request, 'تم تحديث الملف الشخصي بنجاح.')
            return redirect('accounts:profile')
        return self._render(request, form)


class ChangePasswordView(LoginRequiredMixin, View):
    """
    تغيير كلمة المرور للمستخدم.

    يتيح للمستخدم تغيير كلمة مروره مع الحفاظ على جلسته النشطة.
    """
    template_name = 'accounts/change_password.html'

    def get(self, request):
        form = ChangePasswordForm(request.user)
        return render(request, self.template_name, {
            'form': form,
            'active_page': 'change_password',
        })

    def post(self, request):
        form = ChangePasswordForm(request.user, request.POST)
        if form.is_valid():
            request.user.set_password(form.cleaned_data['new_password1'])
            request.user.save()
            update_session_auth_hash(request, request.user)
            UserActivity.record(request.user, 'password_change', request=request,
                                description='تم تغيير كلمة المرور')
            messages.success(request, 'تم تغيير كلمة المرور بنجاح.')
            return redirect('accounts:profile')

        return render(request, self.template_name, {
            'form': form,
            'active_page': 'change_password',
        })
