import os

from celery import Celery
from celery.schedules import crontab  # type: ignore
from celery.signals import worker_shutdown  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("realty_engine")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Reclaim lapsed deposit reservations - daily at midnight
    "expire-reservations": {
        "task": "inquiries.expire_reservations",
        "schedule": crontab(minute=0, hour=0),
    },
}


@worker_shutdown.connect
def close_notification_sink(**kwargs):
    from apps.notifications.sinks import shutdown_sink

    shutdown_sink()
