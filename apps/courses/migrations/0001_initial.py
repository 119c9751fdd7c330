from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255, verbose_name='العنوان')),
                ('description', models.TextField(blank=True, default='', verbose_name='الوصف')),
                ('image_url', models.URLField(blank=True, default='', max_length=1000, verbose_name='صورة الكورس')),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='السعر')),
                ('is_published', models.BooleanField(db_index=True, default=False, verbose_name='منشور')),
                ('grade', models.CharField(blank=True, max_length=50, null=True, verbose_name='الصف الدراسي')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='courses', to=settings.AUTH_USER_MODEL, verbose_name='المدرس')),
            ],
            options={
                'verbose_name': 'كورس',
                'verbose_name_plural': 'الكورسات',
                'db_table': 'courses',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['is_published', 'grade'], name='idx_course_published_grade')],
            },
        ),
        migrations.CreateModel(
            name='Chapter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255, verbose_name='العنوان')),
                ('description', models.TextField(blank=True, default='', verbose_name='الوصف')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='الترتيب')),
                ('is_published', models.BooleanField(default=False, verbose_name='منشور')),
                ('is_free', models.BooleanField(default=False, verbose_name='مجاني')),
                ('video_type', models.CharField(blank=True, choices=[('UPLOAD', 'فيديو مرفوع'), ('YOUTUBE', 'يوتيوب'), ('GOOGLE_DRIVE', 'جوجل درايف')], max_length=20, null=True, verbose_name='نوع الفيديو')),
                ('video_url', models.URLField(blank=True, default='', max_length=1000, verbose_name='رابط الفيديو')),
                ('youtube_video_id', models.CharField(blank=True, default='', max_length=20, verbose_name='معرف فيديو يوتيوب')),
                ('google_drive_file_id', models.CharField(blank=True, default='', max_length=100, verbose_name='معرف ملف جوجل درايف')),
                ('document_url', models.URLField(blank=True, default='', max_length=1000, verbose_name='رابط المستند')),
                ('document_name', models.CharField(blank=True, default='', max_length=255, verbose_name='اسم المستند')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='chapters', to='courses.course', verbose_name='الكورس')),
            ],
            options={
                'verbose_name': 'فصل',
                'verbose_name_plural': 'الفصول',
                'db_table': 'chapters',
                'ordering': ['course', 'position'],
                'indexes': [models.Index(fields=['course', 'position'], name='idx_chapter_course_pos')],
            },
        ),
        migrations.CreateModel(
            name='ChapterAttachment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, verbose_name='الاسم')),
                ('url', models.URLField(max_length=1000, verbose_name='الرابط')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='الترتيب')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإضافة')),
                ('chapter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attachments', to='courses.chapter', verbose_name='الفصل')),
            ],
            options={
                'verbose_name': 'مرفق',
                'verbose_name_plural': 'المرفقات',
                'db_table': 'chapter_attachments',
                'ordering': ['position', 'created_at'],
            },
        ),
        migrations.CreateModel(
            name='Purchase',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('ACTIVE', 'فعال'), ('REVOKED', 'ملغي')], default='ACTIVE', max_length=10, verbose_name='الحالة')),
                ('price_paid', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, verbose_name='المبلغ المدفوع')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الشراء')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='purchases', to='courses.course', verbose_name='الكورس')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='purchases', to=settings.AUTH_USER_MODEL, verbose_name='الطالب')),
            ],
            options={
                'verbose_name': 'عملية شراء',
                'verbose_name_plural': 'عمليات الشراء',
                'db_table': 'purchases',
                'ordering': ['-created_at'],
                'constraints': [models.UniqueConstraint(fields=('user', 'course'), name='uniq_purchase_user_course')],
            },
        ),
        migrations.CreateModel(
            name='UserProgress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_completed', models.BooleanField(default=False, verbose_name='مكتمل')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('chapter', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='user_progress', to='courses.chapter', verbose_name='الفصل')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='progress', to=settings.AUTH_USER_MODEL, verbose_name='الطالب')),
            ],
            options={
                'verbose_name': 'تقدم',
                'verbose_name_plural': 'التقدم',
                'db_table': 'user_progress',
                'constraints': [models.UniqueConstraint(fields=('user', 'chapter'), name='uniq_progress_user_chapter')],
            },
        ),
        migrations.CreateModel(
            name='Quiz',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255, verbose_name='العنوان')),
                ('description', models.TextField(blank=True, default='', verbose_name='الوصف')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='الترتيب')),
                ('is_published', models.BooleanField(default=False, verbose_name='منشور')),
                ('max_attempts', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name='عدد المحاولات')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='تاريخ الإنشاء')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='تاريخ التحديث')),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quizzes', to='courses.course', verbose_name='الكورس')),
            ],
            options={
                'verbose_name': 'اختبار',
                'verbose_name_plural': 'الاختبارات',
                'db_table': 'quizzes',
                'ordering': ['course', 'position'],
            },
        ),
        migrations.CreateModel(
            name='Question',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('text', models.TextField(verbose_name='نص السؤال')),
                ('type', models.CharField(choices=[('MULTIPLE_CHOICE', 'اختيار من متعدد'), ('TRUE_FALSE', 'صح / خطأ'), ('SHORT_ANSWER', 'إجابة قصيرة')], default='MULTIPLE_CHOICE', max_length=20, verbose_name='النوع')),
                ('options', models.JSONField(blank=True, default=list, verbose_name='الاختيارات')),
                ('correct_answer', models.CharField(max_length=500, verbose_name='الإجابة الصحيحة')),
                ('points', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name='الدرجة')),
                ('position', models.PositiveIntegerField(default=0, verbose_name='الترتيب')),
                ('quiz', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='courses.quiz', verbose_name='الاختبار')),
            ],
            options={
                'verbose_name': 'سؤال',
                'verbose_name_plural': 'الأسئلة',
                'db_table': 'questions',
                'ordering': ['quiz', 'position'],
            },
        ),
        migrations.CreateModel(
            name='QuizResult',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('score', models.PositiveIntegerField(default=0, verbose_name='الدرجة')),
                ('total_points', models.PositiveIntegerField(default=0, verbose_name='الدرجة الكلية')),
                ('percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5, verbose_name='النسبة المئوية')),
                ('attempt_number', models.PositiveIntegerField(default=1, verbose_name='رقم المحاولة')),
                ('submitted_at', models.DateTimeField(auto_now_add=True, verbose_name='وقت التسليم')),
                ('quiz', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='courses.quiz', verbose_name='الاختبار')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='quiz_results', to=settings.AUTH_USER_MODEL, verbose_name='الطالب')),
            ],
            options={
                'verbose_name': 'نتيجة اختبار',
                'verbose_name_plural': 'نتائج الاختبارات',
                'db_table': 'quiz_results',
                'ordering': ['-submitted_at'],
                'constraints': [models.UniqueConstraint(fields=('user', 'quiz', 'attempt_number'), name='uniq_quiz_result_attempt')],
            },
        ),
        migrations.CreateModel(
            name='QuizAnswer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('student_answer', models.TextField(blank=True, default='', verbose_name='إجابة الطالب')),
                ('correct_answer', models.CharField(max_length=500, verbose_name='الإجابة الصحيحة')),
                ('is_correct', models.BooleanField(default=False, verbose_name='صحيحة')),
                ('points_obtained', models.PositiveIntegerField(default=0, verbose_name='الدرجة المكتسبة')),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='courses.question', verbose_name='السؤال')),
                ('result', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='courses.quizresult', verbose_name='النتيجة')),
            ],
            options={
                'verbose_name': 'إجابة',
                'verbose_name_plural': 'الإجابات',
                'db_table': 'quiz_answers',
                'ordering': ['question__position'],
            },
        ),
    ]
