"""
Teacher JSON API (/api/teacher/...)
Manassa - Bilingual E-Learning Platform

- GET users                  جميع الطلاب مع عدد المشتريات والتقدم في كورسات المدرس
- GET users/<id>/progress    تقدم طالب ومشترياته في كورسات المدرس
- GET quiz-results?quizId=   نتائج اختبارات كورسات المدرس
"""

from django.db.models import Count, Q
from django.http import JsonResponse
from django.views import View

from apps.accounts.models import User
from apps.accounts.views import ApiAuthMixin
from apps.courses.models import Chapter, Course, Purchase, UserProgress
from apps.courses.views.reports import quiz_results_queryset, serialize_quiz_result


class TeacherApiView(ApiAuthMixin, View):
    allowed_roles = (User.Role.TEACHER, User.Role.ADMIN)

    def course_ids(self):
        return list(Course.objects.visible_to(self.request.user).values_list('pk', flat=True))


class TeacherUsersApiView(TeacherApiView):

    def get(self, request):
        course_ids = self.course_ids()
        users = (
            User.objects.students()
            .annotate(
                purchases_count=Count(
                    'purchases', filter=Q(purchases__course_id__in=course_ids), distinct=True,
                ),
                progress_count=Count(
                    'progress', filter=Q(progress__chapter__course_id__in=course_ids), distinct=True,
                ),
            )
            .order_by('-date_joined')
        )
        return JsonResponse([
            {
                'id': user.pk,
                'fullName': user.full_name,
                'phoneNumber': user.phone_number,
                'parentPhoneNumber': user.parent_phone_number,
                'role': user.role,
                'grade': user.grade,
                'balance': float(user.balance),
                'createdAt': user.date_joined.isoformat(),
                'updatedAt': user.updated_at.isoformat(),
                '_count': {
                    'purchases': user.purchases_count,
                    'userProgress': user.progress_count,
                },
            }
            for user in users
        ], safe=False)


class TeacherUserProgressApiView(TeacherApiView):

    def get(self, request, user_id):
        course_ids = self.course_ids()
        if not course_ids:
            return JsonResponse({'userProgress': [], 'purchases': [], 'allChapters': []})

        student = User.objects.filter(pk=user_id).first()
        if student is None:
            return JsonResponse({'error': 'User not found'}, status=404)

        progress = (
            UserProgress.objects
            .filter(user=student, chapter__course_id__in=course_ids)
            .select_related('chapter', 'chapter__course')
            .order_by('-updated_at')
        )
        purchases = (
            Purchase.objects
            .filter(user=student, course_id__in=course_ids)
            .select_related('course')
            .order_by('-created_at')
        )
        purchased_ids = [p.course_id for p in purchases]
        chapters = (
            Chapter.objects
            .filter(course_id__in=purchased_ids, is_published=True)
            .select_related('course')
            .order_by('course__title', 'position')
        )

        return JsonResponse({
            'userProgress': [
                {
                    'id': p.pk,
                    'chapterId': p.chapter_id,
                    'isCompleted': p.is_completed,
                    'createdAt': p.created_at.isoformat(),
                    'updatedAt': p.updated_at.isoformat(),
                    'chapter': {
                        'id': p.chapter_id,
                        'title': p.chapter.title,
                        'course': {'id': p.chapter.course_id, 'title': p.chapter.course.title},
                    },
                }
                for p in progress
            ],
            'purchases': [
                {
                    'id': p.pk,
                    'status': p.status,
                    'createdAt': p.created_at.isoformat(),
                    'course': {'id': p.course_id, 'title': p.course.title, 'price': float(p.course.price)},
                }
                for p in purchases
            ],
            'allChapters': [
                {
                    'id': c.pk,
                    'title': c.title,
                    'position': c.position,
                    'course': {'id': c.course_id, 'title': c.course.title},
                }
                for c in chapters
            ],
        })


class TeacherQuizResultsApiView(TeacherApiView):

    def get(self, request):
        results = quiz_results_queryset(request.GET.get('quizId')).filter(
            quiz__course_id__in=self.course_ids()
        )
        return JsonResponse([serialize_quiz_result(r) for r in results], safe=False)
