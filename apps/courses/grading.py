"""
تصحيح الاختبارات
Manassa - Bilingual E-Learning Platform
"""

import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db import transaction

from apps.accounts.models import UserActivity
from .models import Question, QuizAnswer, QuizResult

logger = logging.getLogger('courses')

TRUE_FALSE_VALUES = ('true', 'false')


class AttemptsExhausted(Exception):
    """الطالب استنفد عدد المحاولات المسموح"""


def normalize_answer(value):
    """إزالة المسافات الزائدة وتوحيد حالة الأحرف"""
    if value is None:
        return ''
    return ' '.join(str(value).split()).casefold()


def is_answer_correct(question, answer):
    if answer is None or str(answer).strip() == '':
        return False
    return normalize_answer(answer) == normalize_answer(question.correct_answer)


def validate_question(question_type, options, correct_answer):
    """
    التحقق من صحة بيانات السؤال قبل الحفظ.

    Returns:
        قائمة رسائل الخطأ (فارغة إذا كان السؤال صالحاً)
    """
    errors = []
    if not str(correct_answer or '').strip():
        errors.append('الإجابة الصحيحة مطلوبة')

    if question_type == Question.Type.MULTIPLE_CHOICE:
        cleaned = [str(o).strip() for o in (options or []) if str(o).strip()]
        if len(cleaned) < 2:
            errors.append('يجب إضافة اختيارين على الأقل')
        elif normalize_answer(correct_answer) not in {normalize_answer(o) for o in cleaned}:
            errors.append('الإجابة الصحيحة يجب أن تكون أحد الاختيارات')
    elif question_type == Question.Type.TRUE_FALSE:
        if normalize_answer(correct_answer) not in TRUE_FALSE_VALUES:
            errors.append('إجابة سؤال صح/خطأ يجب أن تكون true أو false')
    elif question_type != Question.Type.SHORT_ANSWER:
        errors.append('نوع السؤال غير صالح')
    return errors


def attempts_used(user, quiz):
    return QuizResult.objects.filter(user=user, quiz=quiz).count()


@transaction.atomic
def grade_quiz(user, quiz, answers):
    """
    تصحيح محاولة وحفظ النتيجة.

    Args:
        answers: dict {question_id: answer}. الأسئلة بدون إجابة تعتبر خاطئة.

    Raises:
        AttemptsExhausted
    """
    used = attempts_used(user, quiz)
    if used >= quiz.max_attempts:
        raise AttemptsExhausted()

    answers = {str(k): v for k, v in (answers or {}).items()}
    questions = list(quiz.questions.order_by('position', 'pk'))

    score = 0
    total = 0
    graded = []
    for question in questions:
        answer = answers.get(str(question.pk))
        correct = is_answer_correct(question, answer)
        points = question.points if correct else 0
        score += points
        total += question.points
        graded.append((question, answer, correct, points))

    if total:
        percentage = (Decimal(score) * 100 / Decimal(total)).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )
    else:
        percentage = Decimal('0.00')

    result = QuizResult.objects.create(
        user=user,
        quiz=quiz,
        score=score,
        total_points=total,
        percentage=percentage,
        attempt_number=used + 1,
    )
    QuizAnswer.objects.bulk_create([
        QuizAnswer(
            result=result,
            question=question,
            student_answer='' if answer is None else str(answer),
            correct_answer=question.correct_answer,
            is_correct=correct,
            points_obtained=points,
        )
        for question, answer, correct, points in graded
    ])

    UserActivity.record(user, 'quiz_submit', description=f'{quiz.title}: {score}/{total}')
    logger.info(f"User {user.pk} submitted quiz {quiz.pk}: {score}/{total}")
    return result
