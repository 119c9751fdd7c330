"""
نماذج core
Manassa - Bilingual E-Learning Platform

- AuditLog: سجل تدقيق لعمليات المدرسين والمديرين
"""

from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    """سجل التدقيق"""

    ACTION_CHOICES = [
        ('create', 'إنشاء'),
        ('update', 'تعديل'),
        ('delete', 'حذف'),
        ('publish', 'نشر'),
        ('unpublish', 'إلغاء النشر'),
        ('force_logout', 'تسجيل خروج إجباري'),
        ('balance', 'تعديل رصيد'),
        ('session_reset', 'إعادة تعيين الجلسات'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        verbose_name='المستخدم'
    )
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, verbose_name='الإجراء')
    model_name = models.CharField(max_length=100, verbose_name='النموذج')
    object_id = models.PositiveBigIntegerField(null=True, blank=True, verbose_name='معرف الكائن')
    object_repr = models.CharField(max_length=255, blank=True, default='', verbose_name='الكائن')
    changes = models.JSONField(default=dict, blank=True, verbose_name='التغييرات')
    ip_address = models.GenericIPAddressField(null=True, blank=True, verbose_name='عنوان IP')
    user_agent = models.TextField(blank=True, default='', verbose_name='المتصفح')
    timestamp = models.DateTimeField(auto_now_add=True, verbose_name='الوقت')

    class Meta:
        db_table = 'audit_logs'
        verbose_name = 'سجل تدقيق'
        verbose_name_plural = 'سجلات التدقيق'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['model_name', 'timestamp'], name='idx_audit_model_time'),
        ]

    def __str__(self):
        return f"{self.get_action_display()} - {self.model_name} - {self.object_repr}"

    @classmethod
    def log(cls, user, action, model_name, object_id=None, object_repr='',
            changes=None, request=None):
        """إنشاء سجل تدقيق مع بيانات الطلب إن وجدت"""
        ip_address = None
        user_agent = ''
        if request is not None:
            from apps.accounts.models import get_client_ip
            ip_address = get_client_ip(request)
            user_agent = request.META.get('HTTP_USER_AGENT', '')
        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None
        return cls.objects.create(
            user=user,
            action=action,
            model_name=model_name,
            object_id=object_id,
            object_repr=str(object_repr)[:255],
            changes=changes or {},
            ip_address=ip_address,
            user_agent=user_agent,
        )
