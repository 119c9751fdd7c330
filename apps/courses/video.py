"""
مصادر الفيديو: يوتيوب وجوجل درايف
Manassa - Bilingual E-Learning Platform

يحتوي أيضاً على تشفير المعرفات المستخدم في صفحات المشغل.
التشفير للتمويه فقط وليس حماية حقيقية: يتم فكه بنفس الطريقة في سكربت الصفحة.
"""

import base64
import re
from urllib.parse import urlparse

GOOGLE_DRIVE_DOMAINS = ('drive.google.com', 'docs.google.com')

_DRIVE_PATTERNS = [
    re.compile(r'/file/d/([a-zA-Z0-9_-]+)'),
    re.compile(r'/open\?id=([a-zA-Z0-9_-]+)'),
    re.compile(r'id=([a-zA-Z0-9_-]+)'),
]

_YOUTUBE_ID = re.compile(r'^[a-zA-Z0-9_-]{11}$')
_YOUTUBE_PATTERNS = [
    re.compile(r'(?:youtube\.com/watch\?(?:.*&)?v=)([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:youtu\.be/)([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:youtube(?:-nocookie)?\.com/embed/)([a-zA-Z0-9_-]{11})'),
    re.compile(r'(?:youtube\.com/shorts/)([a-zA-Z0-9_-]{11})'),
]

DRIVE_XOR_KEY = 0x42


class InvalidVideoSource(Exception):
    """رابط فيديو غير صالح"""


# ========== Google Drive ==========

def is_valid_google_drive_url(url):
    if not url or not isinstance(url, str):
        return False
    try:
        hostname = urlparse(url).hostname or ''
    except ValueError:
        return False
    return any(
        hostname == domain or hostname.endswith('.' + domain)
        for domain in GOOGLE_DRIVE_DOMAINS
    )


def extract_google_drive_file_id(url):
    if not url or not isinstance(url, str):
        return None
    for pattern in _DRIVE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def google_drive_embed_url(file_id):
    return f'https://drive.google.com/file/d/{file_id}/preview'


# ========== YouTube ==========

def extract_youtube_video_id(url):
    if not url or not isinstance(url, str):
        return None
    url = url.strip()
    if _YOUTUBE_ID.match(url):
        return url
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


# ========== Obfuscation ==========
# base64 فوق latin-1 حتى يطابق atob() في المتصفح بايت ببايت

def obfuscate_shift(value):
    """إزاحة الحرف i بمقدار (i % 10) + 1 ثم base64"""
    shifted = ''.join(chr(ord(c) + (i % 10) + 1) for i, c in enumerate(value))
    return base64.b64encode(shifted.encode('latin-1')).decode('ascii')


def deobfuscate_shift(value):
    decoded = base64.b64decode(value).decode('latin-1')
    return ''.join(chr(ord(c) - (i % 10) - 1) for i, c in enumerate(decoded))


def obfuscate_xor(value, key=DRIVE_XOR_KEY):
    return base64.b64encode(bytes(ord(c) ^ key for c in value)).decode('ascii')


def deobfuscate_xor(value, key=DRIVE_XOR_KEY):
    return ''.join(chr(b ^ key) for b in base64.b64decode(value))
