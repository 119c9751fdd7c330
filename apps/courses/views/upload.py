"""
Upload View - رفع الملفات للتخزين السحابي
Manassa - Bilingual E-Learning Platform

POST /api/upload  (multipart: file, folder اختياري) -> {url, name, key}
"""

import logging

from django.conf import settings
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from apps.accounts.models import User
from apps.accounts.views import ApiAuthMixin
from ..storage import (
    ObjectStorage,
    StorageError,
    detect_content_type,
    folder_for,
    generate_object_key,
    is_allowed_extension,
)

logger = logging.getLogger('courses')


@method_decorator(csrf_exempt, name='dispatch')
class UploadView(ApiAuthMixin, View):
    """رفع ملف للمدرسين والمديرين فقط"""

    allowed_roles = (User.Role.TEACHER, User.Role.ADMIN)
    storage_class = ObjectStorage

    def post(self, request):
        upload = request.FILES.get('file')
        if upload is None:
            return JsonResponse({'error': 'No file provided'}, status=400)

        if not is_allowed_extension(upload.name):
            return JsonResponse({'error': 'File type not allowed'}, status=400)

        if upload.size > settings.MAX_UPLOAD_SIZE:
            return JsonResponse({'error': 'File too large'}, status=400)

        content_type = detect_content_type(upload.name, upload.content_type)
        folder = (request.POST.get('folder') or '').strip().strip('/') or folder_for(content_type, upload.name)
        key = generate_object_key(upload.name, folder)

        try:
            url = self.storage_class().upload(upload, key, content_type)
        except StorageError:
            return JsonResponse({'error': 'Failed to upload file'}, status=500)

        logger.info(f"User {request.user.pk} uploaded {key} ({upload.size} bytes)")
        return JsonResponse({'url': url, 'name': upload.name, 'key': key})
