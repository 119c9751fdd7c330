"""
Teacher App URLs
Manassa - Bilingual E-Learning Platform
"""
from django.urls import path
from . import views

app_name = 'teacher'

urlpatterns = [
    # Dashboard
    path('dashboard/', views.TeacherDashboardView.as_view(), name='dashboard'),

    # Courses
    path('courses/create/', views.CourseCreateView.as_view(), name='course_create'),
    path('courses/<int:course_id>/', views.CourseEditView.as_view(), name='course_edit'),
    path('courses/<int:course_id>/publish/', views.CoursePublishView.as_view(), name='course_publish'),
    path('courses/<int:course_id>/delete/', views.CourseDeleteView.as_view(), name='course_delete'),
    path('courses/<int:course_id>/roster/', views.CourseRosterView.as_view(), name='course_roster'),
    path('courses/<int:course_id>/roster/export/', views.RosterExportExcelView.as_view(), name='roster_export_excel'),

    # Chapters
    path('courses/<int:course_id>/chapters/create/', views.ChapterCreateView.as_view(), name='chapter_create'),
    path('courses/<int:course_id>/chapters/reorder/', views.ChapterReorderView.as_view(), name='chapter_reorder'),
    path('courses/<int:course_id>/chapters/<int:chapter_id>/', views.ChapterEditView.as_view(), name='chapter_edit'),
    path('courses/<int:course_id>/chapters/<int:chapter_id>/video/', views.ChapterVideoView.as_view(), name='chapter_video'),
    path('courses/<int:course_id>/chapters/<int:chapter_id>/publish/', views.ChapterPublishView.as_view(), name='chapter_publish'),
    path('courses/<int:course_id>/chapters/<int:chapter_id>/delete/', views.ChapterDeleteView.as_view(), name='chapter_delete'),

    # Quizzes
    path('courses/<int:course_id>/quizzes/create/', views.QuizCreateView.as_view(), name='quiz_create'),
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/', views.QuizEditView.as_view(), name='quiz_edit'),
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/delete/', views.QuizDeleteView.as_view(), name='quiz_delete'),
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/questions/', views.QuestionCreateView.as_view(), name='question_create'),
    path('courses/<int:course_id>/quizzes/<int:quiz_id>/questions/<int:question_id>/delete/', views.QuestionDeleteView.as_view(), name='question_delete'),

    # Admin tools
    path('students/', views.StudentListView.as_view(), name='students'),
    path('students/<int:user_id>/balance/', views.UserBalanceView.as_view(), name='user_balance'),
    path('students/<int:user_id>/force-logout/', views.UserForceLogoutView.as_view(), name='user_force_logout'),
]
