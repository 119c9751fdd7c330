"""
URL Configuration for Courses App (/api/...)
Manassa - Bilingual E-Learning Platform

- توصيل الفيديو المحمي
- محتوى الفصول (مستندات، مرفقات، مصدر الفيديو)
- الرفع للتخزين السحابي
- تقارير الاختبارات للمدير
"""

from django.urls import path
from . import views

app_name = 'courses'

chapter = 'courses/<int:course_id>/chapters/<int:chapter_id>'

urlpatterns = [
    # ==============================
    # Video Delivery
    # ==============================
    path('video/get-url/<int:chapter_id>', views.VideoUrlView.as_view(), name='video_url'),
    path('video/get-google-drive/<int:chapter_id>', views.GoogleDriveIdView.as_view(), name='video_google_drive'),
    path('video/get-google-drive-stream/<int:chapter_id>', views.GoogleDriveStreamView.as_view(), name='video_google_drive_stream'),
    path('video/proxy/<int:chapter_id>', views.YouTubeProxyView.as_view(), name='video_proxy'),
    path('video/proxy-google-drive/<int:chapter_id>', views.GoogleDriveProxyView.as_view(), name='video_proxy_google_drive'),
    path('video/proxy-upload/<int:chapter_id>', views.UploadProxyView.as_view(), name='video_proxy_upload'),

    # ==============================
    # Chapter Content
    # ==============================
    path(f'{chapter}/document', views.ChapterDocumentView.as_view(), name='chapter_document'),
    path(f'{chapter}/attachments', views.ChapterAttachmentListView.as_view(), name='chapter_attachments'),
    path(f'{chapter}/attachments/<int:attachment_id>', views.ChapterAttachmentDetailView.as_view(), name='chapter_attachment'),
    path(f'{chapter}/video', views.ChapterVideoSourceView.as_view(), name='chapter_video'),

    # ==============================
    # Uploads
    # ==============================
    path('upload', views.UploadView.as_view(), name='upload'),

    # ==============================
    # Admin Reports
    # ==============================
    path('admin/quizzes', views.AdminQuizListView.as_view(), name='admin_quizzes'),
    path('admin/quiz-results', views.AdminQuizResultsView.as_view(), name='admin_quiz_results'),
]
