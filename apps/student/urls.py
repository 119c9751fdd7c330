"""
Student App URLs
Manassa - Bilingual E-Learning Platform
"""
from django.urls import path
from . import views

app_name = 'student'

urlpatterns = [
    # Dashboard
    path('dashboard/', views.StudentDashboardView.as_view(), name='dashboard'),
    path('search/', views.CourseSearchView.as_view(), name='search'),

    # Courses
    path('courses/<int:course_id>/', views.StudentCourseDetailView.as_view(), name='course_detail'),
    path('courses/<int:course_id>/purchase/', views.CoursePurchaseView.as_view(), name='course_purchase'),

    # Chapters
    path('courses/<int:course_id>/chapters/<int:chapter_id>/', views.ChapterView.as_view(), name='chapter'),
    path('courses/<int:course_id>/chapters/<int:chapter_id>/progress/', views.ChapterProgressView.as_view(), name='chapter_progress'),

    # Quizzes
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/', views.QuizTakeView.as_view(), name='quiz_take'),
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/results/<int:result_id>/', views.QuizResultView.as_view(), name='quiz_result'),
]
