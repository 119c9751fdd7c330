"""
Student App - غرفة الدراسة
Manassa - Bilingual E-Learning Platform

يحتوي على:
- لوحة التحكم (الكورسات المشتراة مع التقدم)
- البحث في الكورسات
- صفحة الكورس والشراء بالرصيد
- صفحة الفصل (المشغل، المستند، المرفقات، التقدم)
- الاختبارات
"""

import logging

from django.contrib import messages
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views import View
from django.views.generic import TemplateView

from apps.accounts.views import StudentRequiredMixin
from apps.courses.grading import AttemptsExhausted, attempts_used, grade_quiz
from apps.courses.mixins import ChapterAccessMixin
from apps.courses.models import Chapter, Course, Purchase, Quiz, QuizResult, UserProgress
from apps.courses.services import (
    AlreadyPurchased, CourseNotAvailable, InsufficientBalance,
    can_access_chapter, can_access_course, can_manage_course,
    course_progress, courses_with_progress, has_active_purchase,
    purchase_course, set_chapter_progress,
)

logger = logging.getLogger('courses')


def get_visible_course(user, course_id):
    """كورس منشور، أو أي كورس لمن يديره"""
    course = get_object_or_404(Course.objects.select_related('user'), pk=course_id)
    if not course.is_published and not can_manage_course(user, course):
        raise PermissionDenied('هذا الكورس غير متاح.')
    return course


# ========== Dashboard ==========

class StudentDashboardView(LoginRequiredMixin, StudentRequiredMixin, TemplateView):
    """لوحة تحكم الطالب"""
    template_name = 'student/dashboard.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context['active_page'] = 'dashboard'
        student = self.request.user

        purchased = list(
            Course.objects.filter(
                purchases__user=student,
                purchases__status=Purchase.Status.ACTIVE,
            ).select_related('user').order_by('-purchases__created_at')
        )
        for course in purchased:
            course.progress = course_progress(student, course)
        context['purchased_courses'] = purchased
        context['completed_courses'] = [c for c in purchased if c.progress == 100]
        context['in_progress_courses'] = [c for c in purchased if c.progress < 100]
        context['stats'] = {
            'balance': student.balance,
            'total_courses': len(purchased),
            'completed': sum(1 for c in purchased if c.progress == 100),
        }
        return context


class CourseSearchView(LoginRequiredMixin, TemplateView):
    """البحث في الكورسات المنشورة حسب العنوان والصف الدراسي"""
    template_name = 'student/search.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        title = (self.request.GET.get('title') or '').strip()
        context['active_page'] = 'search'
        context['title'] = title
        context['courses'] = courses_with_progress(self.request.user, title=title)
        return context


# ========== Courses ==========

class StudentCourseDetailView(LoginRequiredMixin, View):
    template_name = 'student/course_detail.html'

    def get(self, request, course_id):
        try:
            course = get_visible_course(request.user, course_id)
        except PermissionDenied as e:
            messages.error(request, str(e))
            return redirect('student:search')

        chapters = []
        for chapter in course.published_chapters().order_by('position'):
            chapters.append({
                'chapter': chapter,
                'locked': not can_access_chapter(request.user, chapter),
            })

        completed_ids = set(
            UserProgress.objects.filter(
                user=request.user, chapter__course=course, is_completed=True
            ).values_list('chapter_id', flat=True)
        )

        return render(request, self.template_name, {
            'course': course,
            'chapters': chapters,
            'completed_ids': completed_ids,
            'quizzes': course.quizzes.filter(is_published=True).order_by('position'),
            'is_purchased': has_active_purchase(request.user, course),
            'has_access': can_access_course(request.user, course),
            'progress': course_progress(request.user, course),
            'active_page': 'search',
        })


class CoursePurchaseView(LoginRequiredMixin, StudentRequiredMixin, View):
    """شراء الكورس بالرصيد"""

    def post(self, request, course_id):
        course = get_object_or_404(Course, pk=course_id)
        try:
            purchase_course(request.user, course)
        except CourseNotAvailable:
            messages.error(request, 'هذا الكورس غير متاح للشراء.')
        except AlreadyPurchased:
            messages.info(request, 'لقد اشتريت هذا الكورس مسبقاً.')
        except InsufficientBalance:
            messages.error(request, 'رصيدك غير كافٍ لشراء هذا الكورس.')
        else:
            messages.success(request, f'تم شراء الكورس "{course.title}" بنجاح.')
        return redirect('student:course_detail', course_id=course.pk)


# ========== Chapters ==========

class ChapterView(LoginRequiredMixin, ChapterAccessMixin, View):
    """صفحة الفصل: المشغل يُحمّل من روابط البروكسي حسب نوع الفيديو"""
    template_name = 'student/chapter.html'

    def get(self, request, course_id, chapter_id):
        chapter = self.get_chapter(chapter_id, course_id)
        try:
            self.check_chapter_access(request.user, chapter)
        except PermissionDenied as e:
            messages.error(request, str(e))
            return redirect('student:course_detail', course_id=course_id)

        course = chapter.course
        next_chapter = (
            course.chapters.filter(is_published=True, position__gt=chapter.position)
            .order_by('position').first()
        )
        progress = UserProgress.objects.filter(user=request.user, chapter=chapter).first()

        return render(request, self.template_name, {
            'course': course,
            'chapter': chapter,
            'attachments': chapter.attachments.all(),
            'is_completed': bool(progress and progress.is_completed),
            'next_chapter': next_chapter,
            'video_types': Chapter.VideoType,
            'active_page': 'search',
        })


class ChapterProgressView(LoginRequiredMixin, ChapterAccessMixin, View):
    """تحديد الفصل كمكتمل / غير مكتمل"""

    def post(self, request, course_id, chapter_id):
        chapter = self.get_chapter(chapter_id, course_id)
        try:
            self.check_chapter_access(request.user, chapter)
        except PermissionDenied:
            return JsonResponse({'error': 'Forbidden'}, status=403)

        is_completed = request.POST.get('is_completed', 'true').lower() in ('1', 'true', 'on', 'yes')
        set_chapter_progress(request.user, chapter, is_completed)
        progress = course_progress(request.user, chapter.course)

        if request.headers.get('x-requested-with') == 'XMLHttpRequest':
            return JsonResponse({'success': True, 'isCompleted': is_completed, 'progress': progress})
        return redirect('student:chapter', course_id=course_id, chapter_id=chapter.pk)


# ========== Quizzes ==========

class QuizAccessMixin:

    def get_quiz(self, request, course_id, quiz_id):
        quiz = get_object_or_404(Quiz.objects.select_related('course'), pk=quiz_id, course_id=course_id)
        if not (quiz.is_published or can_manage_course(request.user, quiz.course)):
            raise PermissionDenied('هذا الاختبار غير متاح.')
        if not can_access_course(request.user, quiz.course):
            raise PermissionDenied('يجب شراء الكورس أولاً.')
        return quiz


class QuizTakeView(LoginRequiredMixin, QuizAccessMixin, View):
    template_name = 'student/quiz_take.html'

    def get(self, request, course_id, quiz_id):
        try:
            quiz = self.get_quiz(request, course_id, quiz_id)
        except PermissionDenied as e:
            messages.error(request, str(e))
            return redirect('student:course_detail', course_id=course_id)

        used = attempts_used(request.user, quiz)
        return render(request, self.template_name, {
            'course': quiz.course,
            'quiz': quiz,
            'questions': quiz.questions.order_by('position'),
            'attempts_used': used,
            'attempts_left': max(quiz.max_attempts - used, 0),
            'previous_results': QuizResult.objects.filter(user=request.user, quiz=quiz),
            'active_page': 'search',
        })

    def post(self, request, course_id, quiz_id):
        try:
            quiz = self.get_quiz(request, course_id, quiz_id)
        except PermissionDenied as e:
            messages.error(request, str(e))
            return redirect('student:course_detail', course_id=course_id)

        answers = {
            key[len('question_'):]: value
            for key, value in request.POST.items()
            if key.startswith('question_')
        }
        try:
            result = grade_quiz(request.user, quiz, answers)
        except AttemptsExhausted:
            messages.error(request, 'لقد استنفدت جميع المحاولات المسموحة لهذا الاختبار.')
            return redirect('student:quiz_take', course_id=course_id, quiz_id=quiz.pk)

        return redirect('student:quiz_result', course_id=course_id, quiz_id=quiz.pk, result_id=result.pk)


class QuizResultView(LoginRequiredMixin, View):
    template_name = 'student/quiz_result.html'

    def get(self, request, course_id, quiz_id, result_id):
        result = get_object_or_404(
            QuizResult.objects.select_related('quiz', 'quiz__course'),
            pk=result_id, quiz_id=quiz_id, quiz__course_id=course_id, user=request.user,
        )
        return render(request, self.template_name, {
            'course': result.quiz.course,
            'quiz': result.quiz,
            'result': result,
            'answers': result.answers.select_related('question'),
            'active_page': 'search',
        })
