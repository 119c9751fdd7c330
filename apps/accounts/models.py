"""
نماذج الحسابات
Manassa - Bilingual E-Learning Platform

=== Architecture ===
- User: مستخدم مخصص يسجل الدخول برقم الهاتف، ويحمل "صف الجلسة"
  (session_active + session_id) الذي يمنع تسجيل الدخول المتزامن للطلاب.
- UserActivity: سجل نشاط المستخدم (دخول، خروج، طرد الأجهزة، شراء، مشاهدة)
"""

from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class UserManager(BaseUserManager):
    """مدير المستخدمين - الإنشاء برقم الهاتف بدلاً من اسم المستخدم"""

    use_in_migrations = True

    def create_user(self, phone_number, password=None, **extra_fields):
        if not phone_number:
            raise ValueError('رقم الهاتف مطلوب')
        phone_number = phone_number.strip()
        extra_fields.setdefault('role', User.Role.STUDENT)
        user = self.model(phone_number=phone_number, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, phone_number, password=None, **extra_fields):
        extra_fields.setdefault('role', User.Role.ADMIN)
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')

        return self.create_user(phone_number, password, **extra_fields)

    def students(self):
        return self.filter(role=User.Role.STUDENT)


class User(AbstractBaseUser, PermissionsMixin):
    """
    المستخدم

    is_active: تفعيل الحساب (Django)
    session_active / session_id: قفل الجهاز الواحد
    """

    class Role(models.TextChoices):
        STUDENT = 'USER', 'طالب'
        TEACHER = 'TEACHER', 'مدرس'
        ADMIN = 'ADMIN', 'مدير'

    phone_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name='رقم الهاتف'
    )
    parent_phone_number = models.CharField(
        max_length=20,
        blank=True,
        default='',
        verbose_name='رقم هاتف ولي الأمر'
    )
    full_name = models.CharField(max_length=150, verbose_name='الاسم الكامل')
    email = models.EmailField(blank=True, default='', verbose_name='البريد الإلكتروني')
    image_url = models.URLField(max_length=500, blank=True, default='', verbose_name='الصورة')
    role = models.CharField(
        max_length=10,
        choices=Role.choices,
        default=Role.STUDENT,
        db_index=True,
        verbose_name='الدور'
    )
    grade = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        verbose_name='الصف الدراسي'
    )
    balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name='الرصيد'
    )

    # === صف الجلسة ===
    session_active = models.BooleanField(
        default=False,
        db_index=True,
        verbose_name='مسجل الدخول حالياً'
    )
    session_id = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        verbose_name='معرف جلسة الجهاز'
    )
    last_login_at = models.DateTimeField(null=True, blank=True, verbose_name='آخر تسجيل دخول')

    is_active = models.BooleanField(default=True, verbose_name='الحساب مفعّل')
    is_staff = models.BooleanField(default=False, verbose_name='عضو الطاقم')
    date_joined = models.DateTimeField(default=timezone.now, verbose_name='تاريخ الانضمام')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')

    objects = UserManager()

    USERNAME_FIELD = 'phone_number'
    REQUIRED_FIELDS = ['full_name']

    class Meta:
        db_table = 'users'
        verbose_name = 'مستخدم'
        verbose_name_plural = 'المستخدمون'
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['role', 'session_active'], name='idx_user_role_session'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.phone_number})"

    def is_student(self):
        return self.role == self.Role.STUDENT

    def is_teacher(self):
        return self.role == self.Role.TEACHER

    def is_admin(self):
        return self.role == self.Role.ADMIN or self.is_superuser

    def is_multi_device(self):
        """المدرسون والمديرون يمكنهم الدخول من أكثر من جهاز"""
        return self.role in settings.MULTI_DEVICE_ROLES or self.is_superuser

    def get_dashboard_url_name(self):
        if self.is_admin() or self.is_teacher():
            return 'teacher:dashboard'
        return 'student:dashboard'


class UserActivity(models.Model):
    """سجل نشاط المستخدم"""

    ACTIVITY_TYPES = [
        ('login', 'تسجيل دخول'),
        ('logout', 'تسجيل خروج'),
        ('force_login', 'تسجيل خروج من الأجهزة الأخرى'),
        ('session_evicted', 'إنهاء جلسة من جهاز آخر'),
        ('register', 'إنشاء حساب'),
        ('purchase', 'شراء كورس'),
        ('view', 'مشاهدة'),
        ('quiz_submit', 'تسليم اختبار'),
        ('profile_update', 'تحديث الملف الشخصي'),
        ('password_change', 'تغيير كلمة المرور'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='activities',
        verbose_name='المستخدم'
    )
    activity_type = models.CharField(max_length=20, choices=ACTIVITY_TYPES, verbose_name='نوع النشاط')
    description = models.CharField(max_length=255, blank=True, default='', verbose_name='الوصف')
    ip_address = models.GenericIPAddressField(null=True, blank=True, verbose_name='عنوان IP')
    user_agent = models.TextField(blank=True, default='', verbose_name='المتصفح')
    activity_time = models.DateTimeField(auto_now_add=True, verbose_name='الوقت')

    class Meta:
        db_table = 'user_activities'
        verbose_name = 'نشاط مستخدم'
        verbose_name_plural = 'أنشطة المستخدمين'
        ordering = ['-activity_time']
        indexes = [
            models.Index(fields=['user', 'activity_time'], name='idx_activity_user_time'),
        ]

    def __str__(self):
        return f"{self.user.full_name} - {self.get_activity_type_display()}"

    @classmethod
    def record(cls, user, activity_type, request=None, description=''):
        """تسجيل نشاط مع استخراج IP والمتصفح من الطلب"""
        ip_address = None
        user_agent = ''
        if request is not None:
            ip_address = get_client_ip(request)
            user_agent = request.META.get('HTTP_USER_AGENT', '')
        return cls.objects.create(
            user=user,
            activity_type=activity_type,
            description=description[:255],
            ip_address=ip_address,
            user_agent=user_agent,
        )


def get_client_ip(request):
    """استخراج عنوان IP الحقيقي للمستخدم."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')
