"""Production settings for the realty engine.

This module extends the base settings with production specific
configuration. Ensure that sensitive values are provided via
environment variables.
"""

from .base import *  # noqa: F401,F403

# Never run with debug enabled in production
DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405

# Allowed hosts should be defined explicitly via environment variable
ALLOWED_HOSTS = get_env('DJANGO_ALLOWED_HOSTS', '').split(',')  # noqa: F405

# Row locks for reservations and calendar bookings need a real database.
if DATABASES['default']['ENGINE'] == 'django.db.backends.sqlite3':  # noqa: F405
    raise ImproperlyConfigured('Production requires a database with SELECT ... FOR UPDATE support.')  # noqa: F405
