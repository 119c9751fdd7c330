"""
التخزين السحابي (Cloudflare R2 عبر واجهة S3)
Manassa - Bilingual E-Learning Platform

- توليد مفاتيح فريدة للملفات
- تحديد نوع المحتوى والمجلد
- رفع الملفات والتحقق من وجودها
"""

import logging
import os
import re
import secrets
import string
import time

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import ClientError
from django.conf import settings

logger = logging.getLogger('courses')

_UNSAFE_KEY_CHARS = re.compile(r'[^a-zA-Z0-9.-]')
_RANDOM_ALPHABET = string.ascii_lowercase + string.digits

MIME_TYPES = {
    # Images
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
    'svg': 'image/svg+xml',
    'ico': 'image/x-icon',
    # Videos
    'mp4': 'video/mp4',
    'webm': 'video/webm',
    'ogg': 'video/ogg',
    'mov': 'video/quicktime',
    'avi': 'video/x-msvideo',
    'mkv': 'video/x-matroska',
    # Audio
    'mp3': 'audio/mpeg',
    'wav': 'audio/wav',
    'm4a': 'audio/mp4',
    # Documents
    'pdf': 'application/pdf',
    'doc': 'application/msword',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'ppt': 'application/vnd.ms-powerpoint',
    'pptx': 'application/vnd.openxmlformats-officedocument.presentationml.presentation',
    'xls': 'application/vnd.ms-excel',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'txt': 'text/plain',
    'csv': 'text/csv',
    # Other
    'json': 'application/json',
    'xml': 'application/xml',
    'zip': 'application/zip',
}

GENERIC_CONTENT_TYPE = 'application/octet-stream'


class StorageError(Exception):
    """فشل عملية على التخزين السحابي"""


def generate_object_key(name, folder=None):
    """[folder/]<epoch-ms>-<random>-<sanitised name>"""
    timestamp = int(time.time() * 1000)
    random_part = ''.join(secrets.choice(_RANDOM_ALPHABET) for _ in range(13))
    sanitized = _UNSAFE_KEY_CHARS.sub('_', name)
    key = f'{timestamp}-{random_part}-{sanitized}'
    return f'{folder}/{key}' if folder else key


def detect_content_type(name, provided=None):
    """النوع المرسل من المتصفح له الأولوية إلا إذا كان عاماً"""
    if provided and provided != GENERIC_CONTENT_TYPE:
        return provided
    ext = name.lower().rsplit('.', 1)[-1] if '.' in name else ''
    return MIME_TYPES.get(ext, GENERIC_CONTENT_TYPE)


def folder_for(content_type, name):
    if content_type.startswith('image/'):
        return 'images'
    if content_type.startswith('video/'):
        return 'videos'
    if content_type.startswith('audio/'):
        return 'audio'
    if content_type == 'application/pdf' or name.lower().endswith('.pdf'):
        return 'documents'
    return 'files'


def allowed_extensions():
    return set(
        settings.ALLOWED_FILE_EXTENSIONS
        + settings.ALLOWED_VIDEO_EXTENSIONS
        + settings.ALLOWED_IMAGE_EXTENSIONS
        + settings.ALLOWED_AUDIO_EXTENSIONS
    )


def is_allowed_extension(name):
    return os.path.splitext(name)[1].lower() in allowed_extensions()


class ObjectStorage:
    """غلاف بسيط حول عميل S3 من boto3"""

    CACHE_CONTROL = 'public, max-age=31536000, immutable'

    def __init__(self, client=None, bucket=None, public_url=None):
        self.client = client or boto3.client(
            's3',
            endpoint_url=settings.R2_ENDPOINT_URL or None,
            aws_access_key_id=settings.R2_ACCESS_KEY_ID,
            aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
            region_name='auto',
        )
        self.bucket = bucket or settings.R2_BUCKET_NAME
        self.public_base = (public_url or settings.R2_PUBLIC_URL).rstrip('/')

    def upload(self, fileobj, key, content_type):
        """رفع ملف (multipart تلقائياً للملفات الكبيرة) وإرجاع رابطه العام"""
        config = TransferConfig(
            multipart_threshold=settings.MULTIPART_THRESHOLD,
            multipart_chunksize=settings.MULTIPART_THRESHOLD,
        )
        try:
            self.client.upload_fileobj(
                fileobj,
                self.bucket,
                key,
                ExtraArgs={
                    'ContentType': content_type,
                    'CacheControl': self.CACHE_CONTROL,
                },
                Config=config,
            )
        except ClientError as e:
            logger.error(f"Upload failed for {key}: {e}")
            raise StorageError(str(e)) from e
        logger.info(f"Uploaded {key} ({content_type})")
        return self.public_url(key)

    def exists(self, key):
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            status = e.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
            code = e.response.get('Error', {}).get('Code')
            if status == 404 or code in ('404', 'NotFound', 'NoSuchKey'):
                return False
            raise StorageError(str(e)) from e
        return True

    def public_url(self, key):
        return f'{self.public_base}/{key}'
