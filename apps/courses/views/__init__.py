"""
Courses Views Package
Manassa - Bilingual E-Learning Platform

- video: توصيل الفيديو المحمي
- content: المستندات والمرفقات ومصادر الفيديو
- upload: الرفع للتخزين السحابي
- reports: تقارير الاختبارات للمدير
"""

from .video import (
    VideoUrlView, GoogleDriveIdView, GoogleDriveStreamView,
    YouTubeProxyView, GoogleDriveProxyView, UploadProxyView,
)
from .content import (
    ChapterDocumentView, ChapterAttachmentListView,
    ChapterAttachmentDetailView, ChapterVideoSourceView,
)
from .upload import UploadView
from .reports import AdminQuizListView, AdminQuizResultsView
