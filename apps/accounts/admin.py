"""
تسجيل نماذج accounts في لوحة تحكم Django
"""

from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm, UserCreationForm
from django.utils.html import format_html

from .models import User, UserActivity
from .services import SessionManager
# استيراد دالة التصدير من تطبيق core
from apps.core.admin import export_to_excel


@admin.action(description="تسجيل خروج المستخدمين المحددين من جميع الأجهزة")
def force_logout(modeladmin, request, queryset):
    for user in queryset.filter(session_active=True):
        SessionManager.force_end_session(user)
    messages.success(request, 'تم إنهاء جلسات المستخدمين المحددين.')


class UserAdminCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('phone_number', 'full_name', 'role', 'grade')
        field_classes = {}


class UserAdminChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
        field_classes = {}


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    form = UserAdminChangeForm
    add_form = UserAdminCreationForm
    list_display = ['phone_number', 'full_name', 'role', 'grade', 'balance', 'session_badge', 'last_login_at']
    list_filter = ['role', 'grade', 'session_active', 'is_active', 'is_staff']
    search_fields = ['phone_number', 'full_name', 'parent_phone_number', 'email']
    ordering = ['-date_joined']

    actions = [export_to_excel, force_logout]

    fieldsets = (
        ('معلومات الهوية', {
            'fields': ('phone_number', 'parent_phone_number', 'full_name', 'email', 'image_url')
        }),
        ('كلمة المرور', {
            'fields': ('password',),
            'description': 'كلمات المرور مشفرة. <a href="../password/">اضغط هنا لتغيير كلمة المرور</a>'
        }),
        ('الدور والصف', {
            'fields': ('role', 'grade', 'balance')
        }),
        ('الجلسة', {
            'fields': ('session_active', 'session_id', 'last_login_at'),
        }),
        ('الصلاحيات', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',)
        }),
        ('التواريخ', {
            'fields': ('date_joined', 'last_login'),
            'classes': ('collapse',)
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('phone_number', 'full_name', 'role', 'grade', 'password1', 'password2'),
        }),
    )

    readonly_fields = ['date_joined', 'last_login', 'session_id', 'last_login_at']

    def session_badge(self, obj):
        color = 'green' if obj.session_active else 'gray'
        label = 'متصل' if obj.session_active else 'غير متصل'
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
            color, label
        )
    session_badge.short_description = 'الجلسة'


@admin.register(UserActivity)
class UserActivityAdmin(admin.ModelAdmin):
    list_display = ['user', 'activity_type', 'ip_address', 'activity_time']
    list_filter = ['activity_type', 'activity_time']
    search_fields = ['user__phone_number', 'user__full_name', 'description']
    readonly_fields = ['activity_time']
    date_hierarchy = 'activity_time'
    actions = [export_to_excel]
