"""Django settings for storepulse.

Values come from the environment (or a ``.env`` file next to manage.py) via
django-environ. Analytics knobs are read by the services with
``getattr(settings, NAME, default)`` so every one of them is optional.
"""
from pathlib import Path

import environ
from celery.schedules import crontab

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ['*']),
    TIME_ZONE=(str, 'UTC'),
    LOG_LEVEL=(str, 'INFO'),
)
environ.Env.read_env(BASE_DIR / '.env', overwrite=False)

SECRET_KEY = env('SECRET_KEY', default='django-insecure-storepulse-dev-key')
DEBUG = env('DEBUG')
ALLOWED_HOSTS = env('ALLOWED_HOSTS')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'corsheaders',
    'rest_framework',
    'drf_spectacular',
    'api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'storepulse.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'storepulse.wsgi.application'

DATABASES = {
    'default': env.db('DATABASE_URL', default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'
TIME_ZONE = env('TIME_ZONE')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

# The dashboard endpoints are read-only and served to a separate frontend.
CORS_ALLOW_ALL_ORIGINS = env.bool('CORS_ALLOW_ALL_ORIGINS', default=True)

REST_FRAMEWORK = {
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'StorePulse API',
    'DESCRIPTION': 'Store lifecycle funnel, cohort, heatmap and inactivity analytics.',
    'VERSION': '0.1.0',
}

# --- Celery ---
CELERY_BROKER_URL = env('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = env('CELERY_RESULT_BACKEND', default=None)
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_ALWAYS_EAGER = env.bool('CELERY_TASK_ALWAYS_EAGER', default=False)
CELERY_BEAT_SCHEDULE = {
    'daily-funnel-snapshot': {
        'task': 'api.tasks.take_daily_snapshot_task',
        'schedule': crontab(hour=23, minute=50),
    },
}

# --- Analytics ---
# Installs before this day are reported as one "earlier installs" cohort.
COHORT_PRE_CUTOVER_DATE = env('COHORT_PRE_CUTOVER_DATE', default='2025-12-08')
COHORT_ACTIVE_WINDOW_DAYS = env.int('COHORT_ACTIVE_WINDOW_DAYS', default=14)
COHORT_DISPLAY_LIMIT = env.int('COHORT_DISPLAY_LIMIT', default=6)
WEEKLY_COHORT_START = env('WEEKLY_COHORT_START', default='2024-12-15')
WEEKLY_COHORT_MAX_WEEKS = env.int('WEEKLY_COHORT_MAX_WEEKS', default=12)
WEEKLY_COHORT_EXCLUDED_ACTORS = env.list('WEEKLY_COHORT_EXCLUDED_ACTORS', default=[])
HISTORY_LOOKUP_WORKERS = env.int('HISTORY_LOOKUP_WORKERS', default=8)
ORDER_SCAN_PAGE_SIZE = env.int('ORDER_SCAN_PAGE_SIZE', default=1000)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': env('LOG_LEVEL'),
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
