"""
خدمات الكورسات
Manassa - Bilingual E-Learning Platform

- التحقق من صلاحية الوصول للفصول
- الشراء بالرصيد
- التقدم في الكورسات
"""

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Q

from apps.accounts.models import User, UserActivity
from apps.core.models import AuditLog
from .models import Course, Purchase, UserProgress

logger = logging.getLogger('courses')


class InsufficientBalance(Exception):
    """الرصيد غير كافٍ لشراء الكورس"""


class AlreadyPurchased(Exception):
    """الكورس مشترى مسبقاً"""


class CourseNotAvailable(Exception):
    """الكورس غير منشور"""


# ========== Access ==========

def has_active_purchase(user, course):
    if not user.is_authenticated:
        return False
    return Purchase.objects.filter(
        user=user, course=course, status=Purchase.Status.ACTIVE
    ).exists()


def can_manage_course(user, course):
    """المدير أو مالك الكورس"""
    return user.is_authenticated and (user.is_admin() or course.user_id == user.pk)


def can_access_chapter(user, chapter):
    """
    صلاحية مشاهدة محتوى الفصل:
    مدير، مالك، فصل مجاني، كورس مجاني، أو شراء فعال.
    الفصول والكورسات غير المنشورة متاحة لمن يدير الكورس فقط.
    """
    if not user.is_authenticated:
        return False
    course = chapter.course
    if can_manage_course(user, course):
        return True
    if not (chapter.is_published and course.is_published):
        return False
    if chapter.is_free or course.is_free:
        return True
    return has_active_purchase(user, course)


def can_access_course(user, course):
    """صلاحية دخول محتوى الكورس بالكامل (الاختبارات)"""
    if can_manage_course(user, course):
        return True
    if not course.is_published:
        return False
    return course.is_free or has_active_purchase(user, course)


# ========== Purchases ==========

def purchase_course(user, course):
    """
    شراء كورس بخصم سعره من رصيد الطالب.

    Raises:
        CourseNotAvailable: الكورس غير منشور
        AlreadyPurchased: يوجد شراء سابق
        InsufficientBalance: الرصيد أقل من السعر
    """
    if not course.is_published:
        raise CourseNotAvailable()

    with transaction.atomic():
        # قفل صف الطالب لمنع الخصم المزدوج
        buyer = User.objects.select_for_update().get(pk=user.pk)

        if Purchase.objects.filter(user=buyer, course=course).exists():
            raise AlreadyPurchased()

        if buyer.balance < course.price:
            raise InsufficientBalance()

        buyer.balance -= course.price
        buyer.save(update_fields=['balance', 'updated_at'])
        purchase = Purchase.objects.create(
            user=buyer,
            course=course,
            price_paid=course.price,
        )

    user.balance = buyer.balance
    UserActivity.record(user, 'purchase', description=f'شراء كورس: {course.title}')
    logger.info(f"User {user.pk} purchased course {course.pk} for {course.price}")
    return purchase


def add_balance(user, amount, by=None, request=None):
    """إضافة رصيد لطالب (المدير فقط)"""
    amount = Decimal(amount)
    if amount <= 0:
        raise ValueError('المبلغ يجب أن يكون أكبر من صفر')

    with transaction.atomic():
        target = User.objects.select_for_update().get(pk=user.pk)
        old_balance = target.balance
        target.balance += amount
        target.save(update_fields=['balance', 'updated_at'])

    user.balance = target.balance
    AuditLog.log(
        user=by,
        action='balance',
        model_name='User',
        object_id=user.pk,
        object_repr=str(user),
        changes={'old': str(old_balance), 'new': str(target.balance)},
        request=request,
    )
    return target.balance


# ========== Progress ==========

def set_chapter_progress(user, chapter, is_completed):
    progress, _ = UserProgress.objects.update_or_create(
        user=user,
        chapter=chapter,
        defaults={'is_completed': bool(is_completed)},
    )
    return progress


def course_progress(user, course):
    """نسبة الفصول المنشورة المكتملة (0 - 100)"""
    published = course.published_chapters()
    total = published.count()
    if total == 0:
        return 0
    completed = UserProgress.objects.filter(
        user=user, chapter__in=published, is_completed=True
    ).count()
    return round(completed * 100 / total)


def courses_with_progress(user, title=''):
    """
    الكورسات المنشورة المتاحة للطالب حسب صفه الدراسي، مع نسبة التقدم.
    الأحدث أولاً.
    """
    courses = (
        Course.objects.published()
        .for_grade(user.grade)
        .select_related('user')
        .annotate(
            published_count=Count('chapters', filter=Q(chapters__is_published=True), distinct=True),
            completed_count=Count(
                'chapters__user_progress',
                filter=Q(
                    chapters__is_published=True,
                    chapters__user_progress__user=user,
                    chapters__user_progress__is_completed=True,
                ),
                distinct=True,
            ),
        )
        .order_by('-created_at')
    )
    if title:
        courses = courses.filter(title__icontains=title)

    purchased_ids = set(
        Purchase.objects.filter(user=user, status=Purchase.Status.ACTIVE)
        .values_list('course_id', flat=True)
    )

    result = []
    for course in courses:
        total = course.published_count
        course.progress = round(course.completed_count * 100 / total) if total else 0
        course.is_purchased = course.pk in purchased_ids
        result.append(course)
    return result
