"""
تسجيل نماذج core في لوحة تحكم Django
Manassa - Bilingual E-Learning Platform
"""

from django.contrib import admin
from django.http import HttpResponse
import openpyxl
from .models import AuditLog


# 1. دالة التصدير إلى إكسل (مشتركة بين جميع التطبيقات)
@admin.action(description="تصدير السجلات المحددة إلى ملف Excel")
def export_to_excel(modeladmin, request, queryset):
    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    )
    response['Content-Disposition'] = f'attachment; filename="{queryset.model._meta.model_name}.xlsx"'

    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = 'البيانات المصدّرة'

    # استبعاد الحقول الحساسة والطويلة
    excluded = {'password', 'session_id', 'changes'}
    fields = [field for field in queryset.model._meta.fields if field.name not in excluded]

    # تحويل verbose_name إلى string صريح لتجنب خطأ الترجمة (Proxy objects)
    worksheet.append([str(field.verbose_name) for field in fields])

    for obj in queryset:
        row = []
        for field in fields:
            value = getattr(obj, field.name)
            # تحويل جميع القيم إلى نص بسيط لضمان التوافق مع إكسل
            row.append(str(value) if value is not None else "")
        worksheet.append(row)

    workbook.save(response)
    return response


# 2. سجلات التدقيق (قراءة فقط)
@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_repr', 'ip_address', 'timestamp']
    list_filter = ['action', 'model_name', 'timestamp']
    search_fields = ['user__full_name', 'user__phone_number', 'model_name', 'object_repr']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_repr', 'changes', 'ip_address', 'user_agent', 'timestamp']
    date_hierarchy = 'timestamp'

    actions = [export_to_excel]

    # منع العمليات اليدوية لضمان نزاهة سجلات التدقيق
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
