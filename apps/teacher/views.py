"""
Teacher App - لوحة المدرس
Manassa - Bilingual E-Learning Platform

يحتوي على:
- لوحة التحكم (الكورسات، المبيعات، الإيرادات)
- إدارة الكورسات والفصول والاختبارات
- قائمة طلاب الكورس + تصدير Excel
- أدوات المدير: الرصيد وتسجيل الخروج الإجباري
"""

import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db import transaction
from django.db.models import Count, Q, Sum, DecimalField, Value
from django.db.models.functions import Coalesce
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.views.generic import ListView, TemplateView
import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from apps.accounts.forms import BalanceForm
from apps.accounts.models import User, UserActivity
from apps.accounts.services import SessionManager
from apps.accounts.views import AdminRequiredMixin, TeacherRequiredMixin
from apps.core.models import AuditLog
from apps.courses.forms import (
    ChapterForm, ChapterVideoForm, CourseCreateForm, CourseForm,
    QuestionForm, QuizForm, parse_reorder_payload,
)
from apps.courses.mixins import CourseManageMixin
from apps.courses.models import Chapter, Course, Purchase, Question, Quiz
from apps.courses.services import add_balance
from apps.courses.video import InvalidVideoSource
from apps.courses.views.content import set_chapter_video

logger = logging.getLogger('courses')


def audit(request, action, obj, changes=None):
    AuditLog.log(
        user=request.user,
        action=action,
        model_name=obj.__class__.__name__,
        object_id=obj.pk,
        object_repr=str(obj),
        changes=changes or {},
        request=request,
    )


class TeacherView(LoginRequiredMixin, TeacherRequiredMixin, CourseManageMixin, View):
    """أساس مشترك لعروض إدارة المحتوى"""


# ========== Dashboard ==========

class TeacherDashboardView(LoginRequiredMixin, TeacherRequiredMixin, TemplateView):
    """لوحة تحكم المدرس - المدير يرى جميع الكورسات"""
    template_name = 'teacher/dashboard.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['active_page'] = 'dashboard'

        active = Q(purchases__status=Purchase.Status.ACTIVE)
        courses = (
            Course.objects.visible_to(self.request.user)
            .select_related('user')
            .annotate(
                chapter_count=Count('chapters', distinct=True),
                purchase_count=Count('purchases', filter=active, distinct=True),
                revenue=Coalesce(
                    Sum('purchases__price_paid', filter=active),
                    Value(0),
                    output_field=DecimalField(max_digits=12, decimal_places=2),
                ),
            )
            .order_by('-created_at')
        )
        courses = list(courses)
        context['courses'] = courses
        context['stats'] = {
            'total_courses': len(courses),
            'published_courses': sum(1 for c in courses if c.is_published),
            'total_sales': sum(c.purchase_count for c in courses),
            'total_revenue': sum((c.revenue for c in courses), 0),
        }
        return context


# ========== Courses ==========

class CourseCreateView(TeacherView):
    template_name = 'teacher/course_create.html'

    def get(self, request):
        return render(request, self.template_name, {'form': CourseCreateForm(), 'active_page': 'courses'})

    def post(self, request):
        form = CourseCreateForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'form': form, 'active_page': 'courses'})

        course = form.save(commit=False)
        course.user = request.user
        course.save()
        audit(request, 'create', course)
        messages.success(request, f'تم إنشاء الكورس "{course.title}" بنجاح.')
        return redirect('teacher:course_edit', course_id=course.pk)


class CourseEditView(TeacherView):
    template_name = 'teacher/course_edit.html'

    def _render(self, request, course, form):
        return render(request, self.template_name, {
            'course': course,
            'form': form,
            'chapters': course.chapters.order_by('position'),
            'quizzes': course.quizzes.order_by('position'),
            'chapter_form': ChapterForm(),
            'active_page': 'courses',
        })

    def get(self, request, course_id):
        course = self.get_managed_course(course_id)
        return self._render(request, course, CourseForm(instance=course))

    def post(self, request, course_id):
        course = self.get_managed_course(course_id)
        form = CourseForm(request.POST, instance=course)
        if not form.is_valid():
            return self._render(request, course, form)

        course = form.save()
        audit(request, 'update', course, {'fields': form.changed_data})
        messages.success(request, 'تم حفظ التعديلات.')
        return redirect('teacher:course_edit', course_id=course.pk)


class CoursePublishView(TeacherView):
    """نشر / إلغاء نشر الكورس. النشر يتطلب عنواناً وفصلاً منشوراً واحداً على الأقل."""

    def post(self, request, course_id):
        course = self.get_managed_course(course_id)

        if course.is_published:
            course.is_published = False
            course.save(update_fields=['is_published', 'updated_at'])
            audit(request, 'unpublish', course)
            messages.success(request, 'تم إلغاء نشر الكورس.')
        elif not course.title or not course.published_chapters().exists():
            messages.error(request, 'لا يمكن نشر الكورس قبل نشر فصل واحد على الأقل.')
        else:
            course.is_published = True
            course.save(update_fields=['is_published', 'updated_at'])
            audit(request, 'publish', course)
            messages.success(request, 'تم نشر الكورس.')

        return redirect('teacher:course_edit', course_id=course.pk)


class CourseDeleteView(TeacherView):

    def post(self, request, course_id):
        course = self.get_managed_course(course_id)
        title = course.title
        audit(request, 'delete', course)
        course.delete()
        messages.success(request, f'تم حذف الكورس "{title}".')
        return redirect('teacher:dashboard')


# ========== Chapters ==========

class ChapterCreateView(TeacherView):

    def post(self, request, course_id):
        course = self.get_managed_course(course_id)
        title = (request.POST.get('title') or '').strip()
        if not title:
            messages.error(request, 'عنوان الفصل مطلوب.')
            return redirect('teacher:course_edit', course_id=course.pk)

        last = course.chapters.order_by('-position').first()
        chapter = Chapter.objects.create(
            course=course,
            title=title[:255],
            position=(last.position + 1) if last else 0,
        )
        audit(request, 'create', chapter)
        messages.success(request, 'تم إنشاء الفصل.')
        return redirect('teacher:chapter_edit', course_id=course.pk, chapter_id=chapter.pk)


class ChapterEditView(TeacherView):
    template_name = 'teacher/chapter_edit.html'

    def _render(self, request, course, chapter, form, video_form=None):
        return render(request, self.template_name, {
            'course': course,
            'chapter': chapter,
            'form': form,
            'video_form': video_form or ChapterVideoForm(initial={'video_type': chapter.video_type}),
            'attachments': chapter.attachments.all(),
            'active_page': 'courses',
        })

    def get(self, request, course_id, chapter_id):
        course, chapter = self.get_managed_chapter(course_id, chapter_id)
        return self._render(request, course, chapter, ChapterForm(instance=chapter))

    def post(self, request, course_id, chapter_id):
        course, chapter = self.get_managed_chapter(course_id, chapter_id)
        form = ChapterForm(request.POST, instance=chapter)
        if not form.is_valid():
            return self._render(request, course, chapter, form)

        chapter = form.save()
        audit(request, 'update', chapter, {'fields': form.changed_data})
        messages.success(request, 'تم حفظ الفصل.')
        return redirect('teacher:chapter_edit', course_id=course.pk, chapter_id=chapter.pk)


class ChapterVideoView(TeacherView):
    """تعيين مصدر الفيديو من النموذج (يمسح المصادر الأخرى)"""

    def post(self, request, course_id, chapter_id):
        course, chapter = self.get_managed_chapter(course_id, chapter_id)
        form = ChapterVideoForm(request.POST)
        if form.is_valid():
            try:
                set_chapter_video(chapter, form.cleaned_data['video_type'], form.cleaned_data['url'])
            except InvalidVideoSource as e:
                messages.error(request, str(e))
            else:
                chapter.save()
                audit(request, 'update', chapter, {'video_type': chapter.video_type})
                messages.success(request, 'تم حفظ الفيديو.')
        else:
            messages.error(request, 'بيانات الفيديو غير صالحة.')
        return redirect('teacher:chapter_edit', course_id=course.pk, chapter_id=chapter.pk)


class ChapterPublishView(TeacherView):
    """نشر الفصل يتطلب عنواناً ومصدر فيديو"""

    def post(self, request, course_id, chapter_id):
        course, chapter = self.get_managed_chapter(course_id, chapter_id)

        if chapter.is_published:
            chapter.is_published = False
            chapter.save(update_fields=['is_published', 'updated_at'])
            audit(request, 'unpublish', chapter)
            # كورس منشور بدون فصول منشورة يتم إلغاء نشره
            if not course.published_chapters().exists() and course.is_published:
                course.is_published = False
                course.save(update_fields=['is_published', 'updated_at'])
                messages.warning(request, 'تم إلغاء نشر الكورس لعدم وجود فصول منشورة.')
            messages.success(request, 'تم إلغاء نشر الفصل.')
        elif not chapter.title or not chapter.has_video():
            messages.error(request, 'لا يمكن نشر الفصل بدون عنوان وفيديو.')
        else:
            chapter.is_published = True
            chapter.save(update_fields=['is_published', 'updated_at'])
            audit(request, 'publish', chapter)
            messages.success(request, 'تم نشر الفصل.')

        return redirect('teacher:chapter_edit', course_id=course.pk, chapter_id=chapter.pk)


class ChapterDeleteView(TeacherView):

    def post(self, request, course_id, chapter_id):
        course, chapter = self.get_managed_chapter(course_id, chapter_id)
        audit(request, 'delete', chapter)
        chapter.delete()
        if course.is_published and not course.published_chapters().exists():
            course.is_published = False
            course.save(update_fields=['is_published', 'updated_at'])
        messages.success(request, 'تم حذف الفصل.')
        return redirect('teacher:course_edit', course_id=course.pk)


@method_decorator(csrf_exempt, name='dispatch')
class ChapterReorderView(TeacherView):
    """PUT/POST {"list": [{"id": 1, "position": 0}, ...]}"""

    def put(self, request, course_id):
        course = self.get_managed_course(course_id)
        items = parse_reorder_payload(request.body)
        if items is None:
            return JsonResponse({'error': 'Invalid payload'}, status=400)

        ids = {chapter_id for chapter_id, _ in items}
        owned = set(course.chapters.filter(pk__in=ids).values_list('pk', flat=True))
        if owned != ids:
            return JsonResponse({'error': 'Chapter not found'}, status=404)

        with transaction.atomic():
            for chapter_id, position in items:
                Chapter.objects.filter(pk=chapter_id, course=course).update(position=position)

        return JsonResponse({'success': True})

    post = put


# ========== Quizzes ==========

class QuizCreateView(TeacherView):
    template_name = 'teacher/quiz_form.html'

    def get(self, request, course_id):
        course = self.get_managed_course(course_id)
        return render(request, self.template_name, {'course': course, 'form': QuizForm(), 'active_page': 'courses'})

    def post(self, request, course_id):
        course = self.get_managed_course(course_id)
        form = QuizForm(request.POST)
        if not form.is_valid():
            return render(request, self.template_name, {'course': course, 'form': form, 'active_page': 'courses'})

        quiz = form.save(commit=False)
        quiz.course = course
        last = course.quizzes.order_by('-position').first()
        quiz.position = (last.position + 1) if last else 0
        quiz.save()
        audit(request, 'create', quiz)
        messages.success(request, 'تم إنشاء الاختبار.')
        return redirect('teacher:quiz_edit', course_id=course.pk, quiz_id=quiz.pk)


class QuizEditView(TeacherView):
    template_name = 'teacher/quiz_edit.html'

    def _render(self, request, course, quiz, form, question_form=None):
        return render(request, self.template_name, {
            'course': course,
            'quiz': quiz,
            'form': form,
            'questions': quiz.questions.order_by('position'),
            'question_form': question_form or QuestionForm(),
            'active_page': 'courses',
        })

    def get_quiz(self, course_id, quiz_id):
        course = self.get_managed_course(course_id)
        return course, get_object_or_404(Quiz, pk=quiz_id, course=course)

    def get(self, request, course_id, quiz_id):
        course, quiz = self.get_quiz(course_id, quiz_id)
        return self._render(request, course, quiz, QuizForm(instance=quiz))

    def post(self, request, course_id, quiz_id):
        course, quiz = self.get_quiz(course_id, quiz_id)
        form = QuizForm(request.POST, instance=quiz)
        if not form.is_valid():
            return self._render(request, course, quiz, form)

        if form.cleaned_data['is_published'] and not quiz.questions.exists():
            form.add_error('is_published', 'لا يمكن نشر اختبار بدون أسئلة.')
            return self._render(request, course, quiz, form)

        quiz = form.save()
        audit(request, 'update', quiz, {'fields': form.changed_data})
        messages.success(request, 'تم حفظ الاختبار.')
        return redirect('teacher:quiz_edit', course_id=course.pk, quiz_id=quiz.pk)


class QuizDeleteView(QuizEditView):

    def get(self, request, course_id, quiz_id):
        return redirect('teacher:quiz_edit', course_id=course_id, quiz_id=quiz_id)

    def post(self, request, course_id, quiz_id):
        course, quiz = self.get_quiz(course_id, quiz_id)
        audit(request, 'delete', quiz)
        quiz.delete()
        messages.success(request, 'تم حذف الاختبار.')
        return redirect('teacher:course_edit', course_id=course.pk)


class QuestionCreateView(QuizEditView):

    def get(self, request, course_id, quiz_id):
        return redirect('teacher:quiz_edit', course_id=course_id, quiz_id=quiz_id)

    def post(self, request, course_id, quiz_id):
        course, quiz = self.get_quiz(course_id, quiz_id)
        question_form = QuestionForm(request.POST)
        if not question_form.is_valid():
            return self._render(request, course, quiz, QuizForm(instance=quiz), question_form)

        question = question_form.save(commit=False)
        question.quiz = quiz
        question.position = quiz.questions.count()
        question.save()
        audit(request, 'update', quiz, {'question_added': question.pk})
        messages.success(request, 'تمت إضافة السؤال.')
        return redirect('teacher:quiz_edit', course_id=course.pk, quiz_id=quiz.pk)


class QuestionDeleteView(QuizEditView):

    def get(self, request, course_id, quiz_id, question_id):
        return redirect('teacher:quiz_edit', course_id=course_id, quiz_id=quiz_id)

    def post(self, request, course_id, quiz_id, question_id):
        course, quiz = self.get_quiz(course_id, quiz_id)
        question = get_object_or_404(Question, pk=question_id, quiz=quiz)
        question.delete()
        audit(request, 'update', quiz, {'question_deleted': question_id})
        messages.success(request, 'تم حذف السؤال.')
        return redirect('teacher:quiz_edit', course_id=course.pk, quiz_id=quiz.pk)


# ========== Roster ==========

def course_roster(course):
    """الطلاب المشترون مع عدد الفصول المكتملة"""
    return (
        User.objects.filter(
            purchases__course=course,
            purchases__status=Purchase.Status.ACTIVE,
        )
        .annotate(
            completed=Count(
                'progress',
                filter=Q(progress__chapter__course=course, progress__is_completed=True),
                distinct=True,
            ),
        )
        .order_by('full_name')
    )


class CourseRosterView(TeacherView):
    """قائمة طلاب الكورس"""
    template_name = 'teacher/roster.html'

    def get(self, request, course_id):
        course = self.get_managed_course(course_id)
        total = course.published_chapters().count()
        students = []
        for student in course_roster(course):
            students.append({
                'student': student,
                'completed': student.completed,
                'progress': round(student.completed * 100 / total) if total else 0,
            })
        return render(request, self.template_name, {
            'course': course,
            'students': students,
            'total_chapters': total,
            'active_page': 'courses',
        })


class RosterExportExcelView(TeacherView):
    """تصدير قائمة الطلاب مع التقدم إلى Excel"""

    def get(self, request, course_id):
        course = self.get_managed_course(course_id)
        total = course.published_chapters().count()

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = 'الطلاب'
        ws.sheet_view.rightToLeft = True

        header_font = Font(name='Arial', bold=True, color='FFFFFF', size=11)
        header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
        headers = ['#', 'الاسم الكامل', 'رقم الهاتف', 'رقم ولي الأمر', 'الصف', 'الفصول المكتملة', 'التقدم %']
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal='center', vertical='center')

        for i, student in enumerate(course_roster(course), 1):
            ws.append([
                i,
                student.full_name,
                student.phone_number,
                student.parent_phone_number,
                student.grade or '',
                student.completed,
                round(student.completed * 100 / total) if total else 0,
            ])

        response = HttpResponse(
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )
        response['Content-Disposition'] = f'attachment; filename="roster_{course.pk}.xlsx"'
        wb.save(response)
        return response


# ========== Admin tools ==========

class StudentListView(LoginRequiredMixin, AdminRequiredMixin, ListView):
    """قائمة الطلاب (المدير) مع البحث بالاسم أو الهاتف"""
    template_name = 'teacher/students.html'
    context_object_name = 'students'
    paginate_by = 50

    def get_queryset(self):
        queryset = User.objects.students().order_by('-date_joined')
        q = (self.request.GET.get('q') or '').strip()
        if q:
            queryset = queryset.filter(Q(full_name__icontains=q) | Q(phone_number__icontains=q))
        return queryset

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['active_page'] = 'students'
        context['q'] = self.request.GET.get('q', '')
        context['balance_form'] = BalanceForm()
        return context


class UserBalanceView(LoginRequiredMixin, AdminRequiredMixin, View):

    def post(self, request, user_id):
        student = get_object_or_404(User, pk=user_id)
        form = BalanceForm(request.POST)
        if form.is_valid():
            new_balance = add_balance(student, form.cleaned_data['amount'], by=request.user, request=request)
            messages.success(request, f'تم تحديث رصيد {student.full_name} إلى {new_balance}.')
        else:
            messages.error(request, 'المبلغ غير صالح.')
        return redirect('teacher:students')


class UserForceLogoutView(LoginRequiredMixin, AdminRequiredMixin, View):
    """إنهاء جلسة مستخدم من جميع الأجهزة"""

    def post(self, request, user_id):
        target = get_object_or_404(User, pk=user_id)
        SessionManager.force_end_session(target)
        UserActivity.record(target, 'force_login', request=request,
                            description=f'تسجيل خروج إجباري بواسطة {request.user.full_name}')
        audit(request, 'force_logout', target)
        messages.success(request, f'تم تسجيل خروج {target.full_name} من جميع الأجهزة.')
        return redirect('teacher:students')
