"""
محرك البث (Streaming Engine) - تمرير الفيديو من التخزين الخارجي
Manassa - Bilingual E-Learning Platform

يدعم:
- تمرير Range Headers للمصدر (تسريع التحميل والتنقل داخل الفيديو)
- إرجاع 206 Partial Content كما يرسلها المصدر
- عدم كشف رابط الملف الأصلي للمتصفح
"""

import logging

import requests
from django.conf import settings
from django.http import HttpResponse, StreamingHttpResponse

logger = logging.getLogger('core')

# الترويسات التي يتم نقلها من استجابة المصدر كما هي
FORWARDED_HEADERS = ('Content-Length', 'Content-Range', 'Accept-Ranges')


class UpstreamIterator:
    """
    مُكرّر على استجابة requests بنمط stream.
    يغلق الاتصال بالمصدر عند انتهاء البث أو انقطاع العميل.
    """
    def __init__(self, upstream, chunk_size: int = 64 * 1024):
        self.upstream = upstream
        self.chunk_size = chunk_size

    def __iter__(self):
        for chunk in self.upstream.iter_content(chunk_size=self.chunk_size):
            if chunk:
                yield chunk

    def close(self):
        self.upstream.close()


def stream_remote_file(request, url, default_content_type='video/mp4'):
    """
    جلب ملف خارجي وبثه للعميل مع دعم Range.

    Returns:
        StreamingHttpResponse بنفس حالة المصدر (200 أو 206)،
        أو HttpResponse بحالة الخطأ إذا فشل المصدر.
    """
    headers = {}
    range_header = request.META.get('HTTP_RANGE')
    if range_header:
        headers['Range'] = range_header

    try:
        upstream = requests.get(
            url,
            headers=headers,
            stream=True,
            timeout=settings.VIDEO_PROXY_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Upstream fetch failed: {e}")
        return HttpResponse('Failed to fetch video', status=502)

    if not upstream.ok:
        status = upstream.status_code
        upstream.close()
        logger.warning(f"Upstream returned {status}")
        return HttpResponse('Failed to fetch video', status=status)

    response = StreamingHttpResponse(
        UpstreamIterator(upstream, chunk_size=settings.VIDEO_PROXY_CHUNK_SIZE),
        status=upstream.status_code,
        content_type=upstream.headers.get('Content-Type') or default_content_type,
    )
    for name in FORWARDED_HEADERS:
        value = upstream.headers.get(name)
        if value:
            response[name] = value

    response['Cache-Control'] = 'no-store'
    response['X-Content-Type-Options'] = 'nosniff'
    return response
