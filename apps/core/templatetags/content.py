"""
Template Tags لعرض المحتوى
Manassa - Bilingual E-Learning Platform

Usage in templates:
    {% load content %}

    {{ chapter.description|markdownify }}
"""

import markdown
from django import template
from django.utils.html import escape
from django.utils.safestring import mark_safe

register = template.Library()

MARKDOWN_EXTENSIONS = ['tables', 'fenced_code', 'nl2br', 'sane_lists']


@register.filter
def markdownify(text):
    """
    تحويل وصف الكورس/الفصل من Markdown إلى HTML.
    يتم تهريب HTML الخام أولاً حتى لا يُحقن في الصفحة.
    """
    if not text:
        return ''
    html = markdown.markdown(escape(text), extensions=MARKDOWN_EXTENSIONS)
    return mark_safe(html)
