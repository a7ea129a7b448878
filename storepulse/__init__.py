from .celery import app as celery_app

# Expose the Celery app for `celery -A storepulse` discovery
__all__ = ('celery_app',)
