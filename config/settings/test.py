"""Settings used by the test suite."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

ENCRYPTION_KEY = 'test-encryption-key'

# never reach a real calendar from tests
GOOGLE_CALENDAR_ID = ''
GOOGLE_SERVICE_ACCOUNT_EMAIL = ''
GOOGLE_PRIVATE_KEY = ''

PROPERTY_TIME_ZONE = 'Europe/Amsterdam'
CONFLICT_RENOTIFY_DAYS = 7
CONFLICT_NOTIFICATION_DEFAULT = False
ADMIN_CONFLICTS_URL = ''

BOOKING_BASE_PRICE = '140'
BOOKING_FAMILY_PRICE = ''
BOOKING_CLEANING_FEE = '75'

LOGGING["handlers"]["console"]["level"] = "WARNING"  # noqa: F405
