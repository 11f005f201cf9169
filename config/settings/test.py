"""Test settings for AgriRent project.

Uses an in-memory SQLite database, runs Celery tasks eagerly and pins the
payment gateway credentials so signatures in tests are deterministic.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

RAZORPAY_KEY_ID = ''
RAZORPAY_KEY_SECRET = 'test_key_secret'
RAZORPAY_WEBHOOK_SECRET = 'test_webhook_secret'

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
