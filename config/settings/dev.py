"""Development settings for the realty engine.

This module extends the base settings with development specific
configuration, such as enabling debug and logging notifications instead of
storing them. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

NOTIFICATION_SINK = get_env('NOTIFICATION_SINK', 'apps.notifications.sinks.LoggingSink')  # noqa: F405
