"""
خدمة إدارة الجلسات - Single Active Session
Manassa - Bilingual E-Learning Platform

=== State Machine (صف الجلسة على جدول المستخدمين) ===
    create_session   -> session_active=True,  session_id=<random>
    validate_session -> المدرس/المدير: صالح إذا session_active
                        الطالب: صالح إذا session_id مطابق و session_active
    end_session      -> session_active=False, session_id=NULL
    reset_all        -> إنهاء كل الجلسات النشطة دفعة واحدة (مهمة يومية)
"""

import logging
import secrets

from django.db import transaction
from django.utils import timezone

from .models import User

logger = logging.getLogger('accounts')


class SessionManager:
    """
    المصدر الوحيد لقراءة وكتابة صف الجلسة.
    جميع الدوال تعمل على قاعدة البيانات مباشرة وليس على نسخة المستخدم في الذاكرة.
    """

    SESSION_ID_BYTES = 32

    @classmethod
    def generate_session_id(cls):
        """معرف عشوائي من 64 خانة hex"""
        return secrets.token_hex(cls.SESSION_ID_BYTES)

    @staticmethod
    def is_user_active(user):
        """هل المستخدم مسجل دخول حالياً من جهاز ما؟"""
        return bool(
            User.objects.filter(pk=user.pk).values_list('session_active', flat=True).first()
        )

    @staticmethod
    def has_session_conflict(user):
        """
        هل يوجد تعارض جلسة؟
        الأدوار متعددة الأجهزة لا يحدث لها تعارض أبداً.
        """
        if user.is_multi_device():
            return False
        return SessionManager.is_user_active(user)

    @classmethod
    @transaction.atomic
    def create_session(cls, user):
        """إنشاء جلسة جديدة وإرجاع معرفها"""
        session_id = cls.generate_session_id()
        now = timezone.now()
        # قفل الصف لتسلسل عمليات الدخول على نفس الحساب
        User.objects.select_for_update().only('pk').get(pk=user.pk)
        User.objects.filter(pk=user.pk).update(
            session_active=True,
            session_id=session_id,
            last_login_at=now,
        )
        user.session_active = True
        user.session_id = session_id
        user.last_login_at = now
        logger.info(f"Session created for user {user.pk}")
        return session_id

    @staticmethod
    def validate_session(session_id, user=None):
        """
        التحقق من صلاحية الجلسة في كل طلب.

        Args:
            session_id: المعرف المخزن في جلسة الجهاز
            user: المستخدم الحالي (اختياري)

        Returns:
            bool
        """
        if user is not None and user.is_multi_device():
            return SessionManager.is_user_active(user)

        if not session_id:
            return False

        row = (
            User.objects
            .filter(session_id=session_id)
            .values('pk', 'session_active', 'session_id')
            .first()
        )
        if row is None or not row['session_active'] or row['session_id'] != session_id:
            return False
        if user is not None and row['pk'] != user.pk:
            return False
        return True

    @staticmethod
    def end_session(user):
        """إنهاء الجلسة"""
        User.objects.filter(pk=user.pk).update(session_active=False, session_id=None)
        user.session_active = False
        user.session_id = None
        logger.info(f"Session ended for user {user.pk}")

    @classmethod
    def force_end_session(cls, user):
        """
        تسجيل الخروج من جميع الأجهزة (Force-login).
        يعيد الكتابة مرة ثانية إذا بقي أحد الحقلين مضبوطاً بعد الكتابة الأولى.
        """
        cls.end_session(user)
        row = User.objects.filter(pk=user.pk).values('session_active', 'session_id').first()
        if row and (row['session_active'] or row['session_id']):
            logger.warning(f"Session row for user {user.pk} still set after end_session, retrying")
            User.objects.filter(pk=user.pk).update(session_active=False, session_id=None)
        logger.info(f"All devices signed out for user {user.pk}")

    @staticmethod
    def reset_all_sessions():
        """إنهاء جميع الجلسات النشطة. يرجع عدد المستخدمين الذين تم تسجيل خروجهم."""
        count = User.objects.filter(session_active=True).update(
            session_active=False,
            session_id=None,
        )
        logger.info(f"Daily reset: {count} user sessions cleared")
        return count


# مفتاح تخزين معرف جلسة الجهاز داخل جلسة Django
DEVICE_SESSION_KEY = 'device_session_id'


def attach_device_session(request, user):
    """إنشاء صف جلسة جديد وربطه بجلسة Django الحالية"""
    session_id = SessionManager.create_session(user)
    request.session[DEVICE_SESSION_KEY] = session_id
    return session_id
