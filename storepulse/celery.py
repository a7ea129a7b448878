"""Celery app for the snapshot and recalculation jobs.

Run a worker with ``celery -A storepulse worker`` and the daily schedule
(``CELERY_BEAT_SCHEDULE`` in settings) with ``celery -A storepulse beat``.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'storepulse.settings')

app = Celery('storepulse')
# every CELERY_* setting is read from Django settings
app.config_from_object('django.conf:settings', namespace='CELERY')
# picks up api/tasks.py
app.autodiscover_tasks()
