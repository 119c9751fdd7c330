"""
Video Views - توصيل الفيديو المحمي
Manassa - Bilingual E-Learning Platform

=== Endpoints (/api/video/...) ===
- get-url/<chapter>                 رابط الفيديو المرفوع  {"u": ...}
- get-google-drive/<chapter>        معرف ملف درايف        {"f": ...}
- get-google-drive-stream/<chapter> معرف ملف درايف        {"fileId": ...}
- proxy/<chapter>                   صفحة مشغل يوتيوب (Plyr) بمعرف مشفر
- proxy-google-drive/<chapter>      صفحة iframe لدرايف بمعرف مشفر
- proxy-upload/<chapter>            بث الفيديو المرفوع عبر الخادم مع Range
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views import View

from apps.accounts.models import UserActivity
from apps.core.streaming import stream_remote_file
from ..mixins import ChapterAccessMixin
from ..models import Chapter
from ..video import obfuscate_shift, obfuscate_xor

logger = logging.getLogger('courses')

NO_STORE_HEADERS = {
    'Cache-Control': 'no-store, no-cache, must-revalidate, proxy-revalidate',
    'Pragma': 'no-cache',
    'Expires': '0',
}


def apply_player_headers(response):
    response['X-Frame-Options'] = 'SAMEORIGIN'
    response['X-Content-Type-Options'] = 'nosniff'
    for name, value in NO_STORE_HEADERS.items():
        response[name] = value
    return response


class ChapterVideoMixin(ChapterAccessMixin):
    """
    401 لغير المسجلين، 404 لفصل غير موجود، 403 بدون صلاحية.
    الفصل المحمّل متاح في self.chapter.
    """

    json_errors = False

    def error_response(self, message, status):
        if self.json_errors:
            return JsonResponse({'error': message}, status=status)
        return HttpResponse(message, status=status)

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.error_response('Unauthorized', 401)
        try:
            self.chapter = self.get_accessible_chapter(kwargs['chapter_id'])
        except PermissionDenied:
            return self.error_response('Access denied', 403)
        return super().dispatch(request, *args, **kwargs)

    def record_view(self, request):
        UserActivity.record(request.user, 'view', request=request,
                            description=f'مشاهدة فيديو: {self.chapter.title}')


class VideoUrlView(ChapterVideoMixin, View):
    json_errors = True

    def get(self, request, chapter_id):
        chapter = self.chapter
        if chapter.video_type != Chapter.VideoType.UPLOAD or not chapter.video_url:
            return self.error_response('Video not found', 404)
        return JsonResponse({'u': chapter.video_url}, headers=NO_STORE_HEADERS)


class GoogleDriveIdView(ChapterVideoMixin, View):
    json_errors = True
    response_key = 'f'

    def get(self, request, chapter_id):
        chapter = self.chapter
        if chapter.video_type != Chapter.VideoType.GOOGLE_DRIVE or not chapter.google_drive_file_id:
            return self.error_response('Google Drive video not found', 404)
        return JsonResponse({self.response_key: chapter.google_drive_file_id}, headers=NO_STORE_HEADERS)


class GoogleDriveStreamView(GoogleDriveIdView):
    response_key = 'fileId'


class YouTubeProxyView(ChapterVideoMixin, View):
    """صفحة مشغل يوتيوب. المعرف لا يظهر في HTML إلا مشفراً."""
    template_name = 'courses/player_youtube.html'

    def get(self, request, chapter_id):
        chapter = self.chapter
        if chapter.video_type != Chapter.VideoType.YOUTUBE or not chapter.youtube_video_id:
            return self.error_response('Invalid video type', 400)

        self.record_view(request)
        response = render(request, self.template_name, {
            'obfuscated_id': obfuscate_shift(chapter.youtube_video_id),
        })
        return apply_player_headers(response)


class GoogleDriveProxyView(ChapterVideoMixin, View):
    template_name = 'courses/player_drive.html'

    def get(self, request, chapter_id):
        chapter = self.chapter
        if chapter.video_type != Chapter.VideoType.GOOGLE_DRIVE or not chapter.google_drive_file_id:
            return self.error_response('Invalid video type', 400)

        self.record_view(request)
        response = render(request, self.template_name, {
            'obfuscated_id': obfuscate_xor(chapter.google_drive_file_id),
        })
        return apply_player_headers(response)


class UploadProxyView(ChapterVideoMixin, View):
    """بث الفيديو المرفوع دون كشف رابطه الأصلي"""

    def get(self, request, chapter_id):
        chapter = self.chapter
        if chapter.video_type != Chapter.VideoType.UPLOAD or not chapter.video_url:
            return self.error_response('Video not found', 404)
        return stream_remote_file(request, chapter.video_url)
