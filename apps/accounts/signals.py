"""
Django Signals للحسابات
Manassa - Bilingual E-Learning Platform

كل تسجيل دخول (صفحة الدخول، لوحة الإدارة، الاختبارات) ينشئ صف جلسة جديد
ويخزن معرفه في جلسة الجهاز.
"""

import logging

from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from .services import attach_device_session

logger = logging.getLogger('accounts')


@receiver(user_logged_in)
def start_device_session(sender, request, user, **kwargs):
    if request is None or not hasattr(request, 'session'):
        return
    attach_device_session(request, user)
