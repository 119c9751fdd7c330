"""
نماذج الكورسات
Manassa - Bilingual E-Learning Platform

=== Architecture ===
- Course: كورس يملكه مدرس (user) وله سعر (0 = مجاني) وصف دراسي اختياري
- Chapter: فصل داخل الكورس مع مصدر فيديو واحد (رفع / يوتيوب / جوجل درايف) ومستند
- ChapterAttachment: مرفقات الفصل
- Purchase: شراء كورس (ACTIVE / REVOKED)
- UserProgress: إكمال الفصول
- Quiz / Question / QuizResult / QuizAnswer: الاختبارات والتصحيح
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q, Sum


# ========== Courses ==========

class CourseQuerySet(models.QuerySet):

    def published(self):
        return self.filter(is_published=True)

    def for_grade(self, grade):
        """كورسات الصف المحدد + الكورسات العامة. بدون صف = بدون فلترة"""
        if not grade:
            return self
        return self.filter(Q(grade=grade) | Q(grade__isnull=True) | Q(grade=''))

    def owned_by(self, user):
        return self.filter(user=user)

    def visible_to(self, user):
        """المدير يرى كل الكورسات، المدرس يرى كورساته فقط"""
        if user.is_admin():
            return self.all()
        return self.owned_by(user)


class Course(models.Model):
    """الكورس"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='courses',
        verbose_name='المدرس'
    )
    title = models.CharField(max_length=255, verbose_name='العنوان')
    description = models.TextField(blank=True, default='', verbose_name='الوصف')
    image_url = models.URLField(max_length=1000, blank=True, default='', verbose_name='صورة الكورس')
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name='السعر'
    )
    is_published = models.BooleanField(default=False, db_index=True, verbose_name='منشور')
    grade = models.CharField(max_length=50, null=True, blank=True, verbose_name='الصف الدراسي')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')

    objects = CourseQuerySet.as_manager()

    class Meta:
        db_table = 'courses'
        verbose_name = 'كورس'
        verbose_name_plural = 'الكورسات'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_published', 'grade'], name='idx_course_published_grade'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_free(self):
        return self.price == 0

    def published_chapters(self):
        return self.chapters.filter(is_published=True)


class Chapter(models.Model):
    """فصل داخل الكورس"""

    class VideoType(models.TextChoices):
        UPLOAD = 'UPLOAD', 'فيديو مرفوع'
        YOUTUBE = 'YOUTUBE', 'يوتيوب'
        GOOGLE_DRIVE = 'GOOGLE_DRIVE', 'جوجل درايف'

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='chapters',
        verbose_name='الكورس'
    )
    title = models.CharField(max_length=255, verbose_name='العنوان')
    description = models.TextField(blank=True, default='', verbose_name='الوصف')
    position = models.PositiveIntegerField(default=0, verbose_name='الترتيب')
    is_published = models.BooleanField(default=False, verbose_name='منشور')
    is_free = models.BooleanField(default=False, verbose_name='مجاني')

    video_type = models.CharField(
        max_length=20,
        choices=VideoType.choices,
        null=True,
        blank=True,
        verbose_name='نوع الفيديو'
    )
    video_url = models.URLField(max_length=1000, blank=True, default='', verbose_name='رابط الفيديو')
    youtube_video_id = models.CharField(max_length=20, blank=True, default='', verbose_name='معرف فيديو يوتيوب')
    google_drive_file_id = models.CharField(max_length=100, blank=True, default='', verbose_name='معرف ملف جوجل درايف')

    document_url = models.URLField(max_length=1000, blank=True, default='', verbose_name='رابط المستند')
    document_name = models.CharField(max_length=255, blank=True, default='', verbose_name='اسم المستند')

    created_at = models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')

    class Meta:
        db_table = 'chapters'
        verbose_name = 'فصل'
        verbose_name_plural = 'الفصول'
        ordering = ['course', 'position']
        indexes = [
            models.Index(fields=['course', 'position'], name='idx_chapter_course_pos'),
        ]

    def __str__(self):
        return f"{self.course.title} - {self.title}"

    def has_video(self):
        if self.video_type == self.VideoType.UPLOAD:
            return bool(self.video_url)
        if self.video_type == self.VideoType.YOUTUBE:
            return bool(self.youtube_video_id)
        if self.video_type == self.VideoType.GOOGLE_DRIVE:
            return bool(self.google_drive_file_id)
        return False

    def clear_video(self):
        """مسح جميع مصادر الفيديو (بدون حفظ)"""
        self.video_type = None
        self.video_url = ''
        self.youtube_video_id = ''
        self.google_drive_file_id = ''


class ChapterAttachment(models.Model):
    """مرفق فصل"""

    chapter = models.ForeignKey(
        Chapter,
        on_delete=models.CASCADE,
        related_name='attachments',
        verbose_name='الفصل'
    )
    name = models.CharField(max_length=255, verbose_name='الاسم')
    url = models.URLField(max_length=1000, verbose_name='الرابط')
    position = models.PositiveIntegerField(default=0, verbose_name='الترتيب')
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإضافة')

    class Meta:
        db_table = 'chapter_attachments'
        verbose_name = 'مرفق'
        verbose_name_plural = 'المرفقات'
        ordering = ['position', 'created_at']

    def __str__(self):
        return self.name


# ========== Purchases & Progress ==========

class Purchase(models.Model):
    """شراء كورس"""

    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', 'فعال'
        REVOKED = 'REVOKED', 'ملغي'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='purchases',
        verbose_name='الطالب'
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='purchases',
        verbose_name='الكورس'
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        verbose_name='الحالة'
    )
    price_paid = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name='المبلغ المدفوع'
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الشراء')

    class Meta:
        db_table = 'purchases'
        verbose_name = 'عملية شراء'
        verbose_name_plural = 'عمليات الشراء'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'course'], name='uniq_purchase_user_course'),
        ]

    def __str__(self):
        return f"{self.user.full_name} - {self.course.title}"


class UserProgress(models.Model):
    """تقدم الطالب في فصل"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='progress',
        verbose_name='الطالب'
    )
    chapter = models.ForeignKey(
        Chapter,
        on_delete=models.CASCADE,
        related_name='user_progress',
        verbose_name='الفصل'
    )
    is_completed = models.BooleanField(default=False, verbose_name='مكتمل')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_progress'
        verbose_name = 'تقدم'
        verbose_name_plural = 'التقدم'
        constraints = [
            models.UniqueConstraint(fields=['user', 'chapter'], name='uniq_progress_user_chapter'),
        ]

    def __str__(self):
        return f"{self.user.full_name} - {self.chapter.title}"


# ========== Quizzes ==========

class Quiz(models.Model):
    """اختبار داخل الكورس"""

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name='quizzes',
        verbose_name='الكورس'
    )
    title = models.CharField(max_length=255, verbose_name='العنوان')
    description = models.TextField(blank=True, default='', verbose_name='الوصف')
    position = models.PositiveIntegerField(default=0, verbose_name='الترتيب')
    is_published = models.BooleanField(default=False, verbose_name='منشور')
    max_attempts = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name='عدد المحاولات'
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')

    class Meta:
        db_table = 'quizzes'
        verbose_name = 'اختبار'
        verbose_name_plural = 'الاختبارات'
        ordering = ['course', 'position']

    def __str__(self):
        return self.title

    @property
    def total_points(self):
        return self.questions.aggregate(total=Sum('points'))['total'] or 0


class Question(models.Model):
    """سؤال"""

    class Type(models.TextChoices):
        MULTIPLE_CHOICE = 'MULTIPLE_CHOICE', 'اختيار من متعدد'
        TRUE_FALSE = 'TRUE_FALSE', 'صح / خطأ'
        SHORT_ANSWER = 'SHORT_ANSWER', 'إجابة قصيرة'

    quiz = models.ForeignKey(
        Quiz,
        on_delete=models.CASCADE,
        related_name='questions',
        verbose_name='الاختبار'
    )
    text = models.TextField(verbose_name='نص السؤال')
    type = models.CharField(
        max_length=20,
        choices=Type.choices,
        default=Type.MULTIPLE_CHOICE,
        verbose_name='النوع'
    )
    options = models.JSONField(default=list, blank=True, verbose_name='الاختيارات')
    correct_answer = models.CharField(max_length=500, verbose_name='الإجابة الصحيحة')
    points = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name='الدرجة'
    )
    position = models.PositiveIntegerField(default=0, verbose_name='الترتيب')

    class Meta:
        db_table = 'questions'
        verbose_name = 'سؤال'
        verbose_name_plural = 'الأسئلة'
        ordering = ['quiz', 'position']

    def __str__(self):
        return self.text[:60]


class QuizResult(models.Model):
    """نتيجة محاولة اختبار"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quiz_results',
        verbose_name='الطالب'
    )
    quiz = models.ForeignKey(
        Quiz,
        on_delete=models.CASCADE,
        related_name='results',
        verbose_name='الاختبار'
    )
    score = models.PositiveIntegerField(default=0, verbose_name='الدرجة')
    total_points = models.PositiveIntegerField(default=0, verbose_name='الدرجة الكلية')
    percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name='النسبة المئوية'
    )
    attempt_number = models.PositiveIntegerField(default=1, verbose_name='رقم المحاولة')
    submitted_at = models.DateTimeField(auto_now_add=True, verbose_name='وقت التسليم')

    class Meta:
        db_table = 'quiz_results'
        verbose_name = 'نتيجة اختبار'
        verbose_name_plural = 'نتائج الاختبارات'
        ordering = ['-submitted_at']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'quiz', 'attempt_number'],
                name='uniq_quiz_result_attempt',
            ),
        ]

    def __str__(self):
        return f"{self.user.full_name} - {self.quiz.title} ({self.score}/{self.total_points})"


class QuizAnswer(models.Model):
    """إجابة سؤال داخل محاولة"""

    result = models.ForeignKey(
        QuizResult,
        on_delete=models.CASCADE,
        related_name='answers',
        verbose_name='النتيجة'
    )
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name='answers',
        verbose_name='السؤال'
    )
    student_answer = models.TextField(blank=True, default='', verbose_name='إجابة الطالب')
    correct_answer = models.CharField(max_length=500, verbose_name='الإجابة الصحيحة')
    is_correct = models.BooleanField(default=False, verbose_name='صحيحة')
    points_obtained = models.PositiveIntegerField(default=0, verbose_name='الدرجة المكتسبة')

    class Meta:
        db_table = 'quiz_answers'
        verbose_name = 'إجابة'
        verbose_name_plural = 'الإجابات'
        ordering = ['question__position']

    def __str__(self):
        return f"{self.question} - {self.student_answer}"
