"""
Content Views - المستندات والمرفقات ومصادر الفيديو
Manassa - Bilingual E-Learning Platform

=== Endpoints (/api/courses/<course>/chapters/<chapter>/...) ===
- GET    document                 تحميل مستند الفصل (لمن لديه صلاحية)
- POST   document                 تعيين المستند {url, name}      (المالك / المدير)
- DELETE document                 حذف المستند                    (المالك / المدير)
- POST   attachments              إضافة مرفق {url, name}         (المالك / المدير)
- GET    attachments/<id>         تحميل مرفق (لمن لديه صلاحية)
- DELETE attachments/<id>         حذف مرفق                       (المالك / المدير)
- POST   video                    تعيين مصدر الفيديو {type, url}  (المالك / المدير)
- DELETE video                    إزالة الفيديو                  (المالك / المدير)
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.accounts.models import UserActivity
from apps.accounts.views.api import parse_json_body
from apps.core.models import AuditLog
from ..mixins import ChapterAccessMixin, CourseManageMixin
from ..models import Chapter, ChapterAttachment
from ..services import can_manage_course
from ..video import (
    InvalidVideoSource,
    extract_google_drive_file_id,
    extract_youtube_video_id,
    is_valid_google_drive_url,
)

logger = logging.getLogger('courses')


def set_chapter_video(chapter, video_type, url):
    """
    تعيين مصدر فيديو واحد للفصل ومسح المصادر الأخرى (بدون حفظ).

    Raises:
        InvalidVideoSource
    """
    url = (url or '').strip()
    if not url:
        raise InvalidVideoSource('الرابط مطلوب')

    if video_type == Chapter.VideoType.YOUTUBE:
        video_id = extract_youtube_video_id(url)
        if not video_id:
            raise InvalidVideoSource('رابط يوتيوب غير صالح')
        chapter.clear_video()
        chapter.youtube_video_id = video_id
    elif video_type == Chapter.VideoType.GOOGLE_DRIVE:
        if not is_valid_google_drive_url(url):
            raise InvalidVideoSource('رابط جوجل درايف غير صالح')
        file_id = extract_google_drive_file_id(url)
        if not file_id:
            raise InvalidVideoSource('تعذر استخراج معرف الملف من الرابط')
        chapter.clear_video()
        chapter.google_drive_file_id = file_id
    elif video_type == Chapter.VideoType.UPLOAD:
        chapter.clear_video()
        chapter.video_url = url
    else:
        raise InvalidVideoSource('نوع الفيديو غير صالح')

    chapter.video_type = video_type
    return chapter


@method_decorator(csrf_exempt, name='dispatch')
class ChapterContentView(ChapterAccessMixin, CourseManageMixin, View):
    """
    أساس مشترك: 401 لغير المسجلين، PermissionDenied -> 403 JSON.
    عمليات القراءة تتطلب صلاحية المشاهدة، وعمليات التعديل تتطلب صلاحية الإدارة.
    """

    read_methods = ('get', 'head')

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'error': 'Unauthorized'}, status=401)
        course_id = kwargs['course_id']
        chapter_id = kwargs['chapter_id']
        try:
            if request.method.lower() in self.read_methods:
                self.chapter = self.get_accessible_chapter(chapter_id, course_id)
                self.course = self.chapter.course
            else:
                self.course, self.chapter = self.get_managed_chapter(course_id, chapter_id)
        except PermissionDenied as e:
            return JsonResponse({'error': str(e) or 'Forbidden'}, status=403)
        return super().dispatch(request, *args, **kwargs)

    def audit(self, request, action, changes):
        AuditLog.log(
            user=request.user,
            action=action,
            model_name='Chapter',
            object_id=self.chapter.pk,
            object_repr=str(self.chapter),
            changes=changes,
            request=request,
        )


class ChapterDocumentView(ChapterContentView):

    def get(self, request, course_id, chapter_id):
        if not self.chapter.document_url:
            return JsonResponse({'error': 'Document not found'}, status=404)
        UserActivity.record(request.user, 'view', request=request,
                            description=f'تحميل مستند: {self.chapter.document_name or self.chapter.title}')
        return redirect(self.chapter.document_url)

    def post(self, request, course_id, chapter_id):
        data = parse_json_body(request) or {}
        url = str(data.get('url') or '').strip()
        if not url:
            return JsonResponse({'error': 'Missing URL'}, status=400)

        self.chapter.document_url = url
        self.chapter.document_name = str(data.get('name') or '')[:255]
        self.chapter.save(update_fields=['document_url', 'document_name', 'updated_at'])
        self.audit(request, 'update', {'document_url': url})
        return JsonResponse({'success': True, 'url': url})

    def delete(self, request, course_id, chapter_id):
        self.chapter.document_url = ''
        self.chapter.document_name = ''
        self.chapter.save(update_fields=['document_url', 'document_name', 'updated_at'])
        self.audit(request, 'update', {'document_url': None})
        return JsonResponse({'success': True})


class ChapterAttachmentListView(ChapterContentView):

    def get(self, request, course_id, chapter_id):
        attachments = [
            {'id': a.pk, 'name': a.name, 'position': a.position}
            for a in self.chapter.attachments.all()
        ]
        return JsonResponse({'attachments': attachments})

    def post(self, request, course_id, chapter_id):
        data = parse_json_body(request) or {}
        url = str(data.get('url') or '').strip()
        name = str(data.get('name') or '').strip()
        if not url or not name:
            return JsonResponse({'error': 'URL and name are required'}, status=400)

        position = self.chapter.attachments.count()
        attachment = ChapterAttachment.objects.create(
            chapter=self.chapter, name=name[:255], url=url, position=position,
        )
        self.audit(request, 'create', {'attachment': name})
        return JsonResponse({
            'id': attachment.pk,
            'name': attachment.name,
            'url': attachment.url,
            'position': attachment.position,
        }, status=201)


class ChapterAttachmentDetailView(ChapterContentView):

    def get(self, request, course_id, chapter_id, attachment_id):
        attachment = get_object_or_404(ChapterAttachment, pk=attachment_id, chapter=self.chapter)
        UserActivity.record(request.user, 'view', request=request,
                            description=f'تحميل مرفق: {attachment.name}')
        return redirect(attachment.url)

    def delete(self, request, course_id, chapter_id, attachment_id):
        attachment = get_object_or_404(ChapterAttachment, pk=attachment_id, chapter=self.chapter)
        name = attachment.name
        attachment.delete()
        self.audit(request, 'delete', {'attachment': name})
        return JsonResponse({'success': True})


class ChapterVideoSourceView(ChapterContentView):

    def get(self, request, course_id, chapter_id):
        chapter = self.chapter
        data = {'videoType': chapter.video_type, 'hasVideo': chapter.has_video()}
        if can_manage_course(request.user, self.course):
            data.update({
                'videoUrl': chapter.video_url or None,
                'youtubeVideoId': chapter.youtube_video_id or None,
                'googleDriveFileId': chapter.google_drive_file_id or None,
            })
        return JsonResponse(data)

    def post(self, request, course_id, chapter_id):
        data = parse_json_body(request) or {}
        try:
            set_chapter_video(self.chapter, data.get('type'), data.get('url'))
        except InvalidVideoSource as e:
            return JsonResponse({'error': str(e)}, status=400)

        self.chapter.save()
        self.audit(request, 'update', {'video_type': self.chapter.video_type})
        logger.info(f"Video source set for chapter {self.chapter.pk}: {self.chapter.video_type}")
        return JsonResponse({
            'success': True,
            'videoType': self.chapter.video_type,
            'youtubeVideoId': self.chapter.youtube_video_id or None,
            'googleDriveFileId': self.chapter.google_drive_file_id or None,
            'videoUrl': self.chapter.video_url or None,
        })

    def delete(self, request, course_id, chapter_id):
        self.chapter.clear_video()
        # فصل منشور بدون فيديو غير مسموح
        self.chapter.is_published = False
        self.chapter.save()
        self.audit(request, 'update', {'video_type': None})
        return JsonResponse({'success': True})
