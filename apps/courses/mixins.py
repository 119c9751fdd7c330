"""
Mixins للتحقق من صلاحية الوصول لمحتوى الكورسات
Manassa - Bilingual E-Learning Platform

- ChapterAccessMixin: مشاهدة محتوى فصل (طالب مشترٍ / فصل مجاني / مالك / مدير)
- CourseManageMixin: تعديل كورس (المالك أو المدير)
"""

import logging

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404

from .models import Chapter, Course
from .services import can_access_chapter, can_manage_course

logger = logging.getLogger('courses')


class ChapterAccessMixin:
    """
    Mixin لجلب الفصل والتحقق من صلاحية مشاهدته.

    مثال الاستخدام:
        chapter = self.get_accessible_chapter(chapter_id)
    """

    def get_chapter(self, chapter_id, course_id=None):
        queryset = Chapter.objects.select_related('course', 'course__user')
        if course_id is not None:
            queryset = queryset.filter(course_id=course_id)
        return get_object_or_404(queryset, pk=chapter_id)

    def check_chapter_access(self, user, chapter):
        if not can_access_chapter(user, chapter):
            logger.warning(f"Access denied: user {user.pk} -> chapter {chapter.pk}")
            raise PermissionDenied('ليس لديك صلاحية الوصول لهذا الفصل.')

    def get_accessible_chapter(self, chapter_id, course_id=None):
        chapter = self.get_chapter(chapter_id, course_id)
        self.check_chapter_access(self.request.user, chapter)
        return chapter


class CourseManageMixin:
    """Mixin لجلب الكورس والتحقق من صلاحية تعديله"""

    def get_managed_course(self, course_id):
        course = get_object_or_404(Course.objects.select_related('user'), pk=course_id)
        if not can_manage_course(self.request.user, course):
            logger.warning(f"Manage denied: user {self.request.user.pk} -> course {course.pk}")
            raise PermissionDenied('ليس لديك صلاحية تعديل هذا الكورس.')
        return course

    def get_managed_chapter(self, course_id, chapter_id):
        course = self.get_managed_course(course_id)
        chapter = get_object_or_404(Chapter, pk=chapter_id, course=course)
        return course, chapter
