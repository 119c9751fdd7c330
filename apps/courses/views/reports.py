"""
Quiz Reports - تقارير الاختبارات للمدير
Manassa - Bilingual E-Learning Platform

- GET /api/admin/quizzes                    جميع الاختبارات مع الدرجة الكلية
- GET /api/admin/quiz-results?quizId=       جميع النتائج مع الإجابات مرتبة حسب السؤال
"""

from django.db.models import Prefetch, Sum
from django.db.models.functions import Coalesce
from django.http import JsonResponse
from django.views import View

from apps.accounts.models import User
from apps.accounts.views import ApiAuthMixin
from ..models import Quiz, QuizAnswer, QuizResult


def quiz_results_queryset(quiz_id=None):
    answers = QuizAnswer.objects.select_related('question').order_by('question__position', 'question_id')
    queryset = (
        QuizResult.objects
        .select_related('user', 'quiz', 'quiz__course')
        .prefetch_related(Prefetch('answers', queryset=answers))
        .order_by('-submitted_at')
    )
    if quiz_id:
        if not str(quiz_id).isdigit():
            return queryset.none()
        queryset = queryset.filter(quiz_id=quiz_id)
    return queryset


def serialize_quiz_result(result):
    quiz = result.quiz
    return {
        'id': result.pk,
        'score': result.score,
        'totalPoints': result.total_points,
        'percentage': float(result.percentage),
        'attemptNumber': result.attempt_number,
        'submittedAt': result.submitted_at.isoformat(),
        'user': {
            'fullName': result.user.full_name,
            'phoneNumber': result.user.phone_number,
        },
        'quiz': {
            'id': quiz.pk,
            'title': quiz.title,
            'course': {'id': quiz.course_id, 'title': quiz.course.title},
        },
        'answers': [
            {
                'questionId': answer.question_id,
                'studentAnswer': answer.student_answer,
                'correctAnswer': answer.correct_answer,
                'isCorrect': answer.is_correct,
                'pointsObtained': answer.points_obtained,
                'question': {
                    'text': answer.question.text,
                    'type': answer.question.type,
                    'points': answer.question.points,
                    'position': answer.question.position,
                },
            }
            for answer in result.answers.all()
        ],
    }


class AdminQuizListView(ApiAuthMixin, View):
    allowed_roles = (User.Role.ADMIN,)

    def get(self, request):
        quizzes = (
            Quiz.objects
            .select_related('course')
            .annotate(points=Coalesce(Sum('questions__points'), 0))
            .order_by('-created_at')
        )
        return JsonResponse([
            {
                'id': quiz.pk,
                'title': quiz.title,
                'courseId': quiz.course_id,
                'course': {'id': quiz.course_id, 'title': quiz.course.title},
                'totalPoints': quiz.points,
            }
            for quiz in quizzes
        ], safe=False)


class AdminQuizResultsView(ApiAuthMixin, View):
    allowed_roles = (User.Role.ADMIN,)

    def get(self, request):
        results = quiz_results_queryset(request.GET.get('quizId'))
        return JsonResponse([serialize_quiz_result(r) for r in results], safe=False)
