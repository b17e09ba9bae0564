"""Top-level package for Django configuration.

This package exposes configuration for the realty engine. It contains
settings modules for different environments and the Celery application
that runs the periodic reservation sweep.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
