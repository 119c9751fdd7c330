from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

import apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('phone_number', models.CharField(max_length=20, unique=True, verbose_name='رقم الهاتف')),
                ('parent_phone_number', models.CharField(blank=True, default='', max_length=20, verbose_name='رقم هاتف ولي الأمر')),
                ('full_name', models.CharField(max_length=150, verbose_name='الاسم الكامل')),
                ('email', models.EmailField(blank=True, default='', max_length=254, verbose_name='البريد الإلكتروني')),
                ('image_url', models.URLField(blank=True, default='', max_length=500, verbose_name='الصورة')),
                ('role', models.CharField(choices=[('USER', 'طالب'), ('TEACHER', 'مدرس'), ('ADMIN', 'مدير')], db_index=True, default='USER', max_length=10, verbose_name='الدور')),
                ('grade', models.CharField(blank=True, max_length=50, null=True, verbose_name='الصف الدراسي')),
                ('balance', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='الرصيد')),
                ('session_active', models.BooleanField(db_index=True, default=False, verbose_name='مسجل الدخول حالياً')),
                ('session_id', models.CharField(blank=True, max_length=64, null=True, unique=True, verbose_name='معرف جلسة الجهاز')),
                ('last_login_at', models.DateTimeField(blank=True, null=True, verbose_name='آخر تسجيل دخول')),
                ('is_active', models.BooleanField(default=True, verbose_name='الحساب مفعّل')),
                ('is_staff', models.BooleanField(default=False, verbose_name='عضو الطاقم')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='تاريخ الانضمام')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'مستخدم',
                'verbose_name_plural': 'المستخدمون',
                'db_table': 'users',
                'ordering': ['-date_joined'],
            },
            managers=[
                ('objects', apps.accounts.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='UserActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('activity_type', models.CharField(choices=[('login', 'تسجيل دخول'), ('logout', 'تسجيل خروج'), ('force_login', 'تسجيل خروج من الأجهزة الأخرى'), ('session_evicted', 'إنهاء جلسة من جهاز آخر'), ('register', 'إنشاء حساب'), ('purchase', 'شراء كورس'), ('view', 'مشاهدة'), ('quiz_submit', 'تسليم اختبار'), ('profile_update', 'تحديث الملف الشخصي'), ('password_change', 'تغيير كلمة المرور')], max_length=20, verbose_name='نوع النشاط')),
                ('description', models.CharField(blank=True, default='', max_length=255, verbose_name='الوصف')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True, verbose_name='عنوان IP')),
                ('user_agent', models.TextField(blank=True, default='', verbose_name='المتصفح')),
                ('activity_time', models.DateTimeField(auto_now_add=True, verbose_name='الوقت')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to=settings.AUTH_USER_MODEL, verbose_name='المستخدم')),
            ],
            options={
                'verbose_name': 'نشاط مستخدم',
                'verbose_name_plural': 'أنشطة المستخدمين',
                'db_table': 'user_activities',
                'ordering': ['-activity_time'],
            },
        ),
        migrations.AddIndex(
            model_name='user',
            index=models.Index(fields=['role', 'session_active'], name='idx_user_role_session'),
        ),
        migrations.AddIndex(
            model_name='useractivity',
            index=models.Index(fields=['user', 'activity_time'], name='idx_activity_user_time'),
        ),
    ]
