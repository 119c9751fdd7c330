"""
إنهاء جميع الجلسات النشطة (المهمة اليومية)

الاستخدام:
    python manage.py reset_sessions
"""

from django.core.management.base import BaseCommand

from apps.accounts.services import SessionManager
from apps.core.models import AuditLog


class Command(BaseCommand):
    help = 'تسجيل خروج جميع المستخدمين من جميع الأجهزة'

    def handle(self, *args, **options):
        count = SessionManager.reset_all_sessions()
        AuditLog.log(
            user=None,
            action='session_reset',
            model_name='User',
            object_repr='reset_sessions command',
            changes={'reset_count': count},
        )
        self.stdout.write(self.style.SUCCESS(f'تم إنهاء {count} جلسة نشطة'))
