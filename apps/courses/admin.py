"""
تسجيل نماذج الكورسات في لوحة تحكم Django
Manassa - Bilingual E-Learning Platform
"""

from django.contrib import admin

from apps.core.admin import export_to_excel
from .models import (
    Course, Chapter, ChapterAttachment, Purchase, UserProgress,
    Quiz, Question, QuizResult, QuizAnswer,
)


class ChapterInline(admin.TabularInline):
    model = Chapter
    extra = 0
    fields = ['title', 'position', 'is_published', 'is_free', 'video_type']
    ordering = ['position']


class AttachmentInline(admin.TabularInline):
    model = ChapterAttachment
    extra = 0


class QuestionInline(admin.StackedInline):
    model = Question
    extra = 0


class QuizAnswerInline(admin.TabularInline):
    model = QuizAnswer
    extra = 0
    readonly_fields = ['question', 'student_answer', 'correct_answer', 'is_correct', 'points_obtained']
    can_delete = False


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'user', 'price', 'grade', 'is_published', 'created_at']
    list_filter = ['is_published', 'grade']
    search_fields = ['title', 'user__full_name']
    inlines = [ChapterInline]
    actions = [export_to_excel]


@admin.register(Chapter)
class ChapterAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'position', 'is_published', 'is_free', 'video_type']
    list_filter = ['is_published', 'is_free', 'video_type']
    search_fields = ['title', 'course__title']
    inlines = [AttachmentInline]


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['user', 'course', 'status', 'price_paid', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['user__full_name', 'user__phone_number', 'course__title']
    actions = [export_to_excel]


@admin.register(UserProgress)
class UserProgressAdmin(admin.ModelAdmin):
    list_display = ['user', 'chapter', 'is_completed', 'updated_at']
    list_filter = ['is_completed']
    search_fields = ['user__full_name', 'chapter__title']


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'position', 'max_attempts', 'is_published']
    list_filter = ['is_published']
    search_fields = ['title', 'course__title']
    inlines = [QuestionInline]


@admin.register(QuizResult)
class QuizResultAdmin(admin.ModelAdmin):
    list_display = ['user', 'quiz', 'score', 'total_points', 'percentage', 'attempt_number', 'submitted_at']
    list_filter = ['quiz']
    search_fields = ['user__full_name', 'user__phone_number', 'quiz__title']
    inlines = [QuizAnswerInline]
    actions = [export_to_excel]
