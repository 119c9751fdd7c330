"""
Teacher JSON API URLs (/api/teacher/...)
"""
from django.urls import path
from . import api

app_name = 'teacher_api'

urlpatterns = [
    path('users', api.TeacherUsersApiView.as_view(), name='users'),
    path('users/<int:user_id>/progress', api.TeacherUserProgressApiView.as_view(), name='user_progress'),
    path('quiz-results', api.TeacherQuizResultsApiView.as_view(), name='quiz_results'),
]
