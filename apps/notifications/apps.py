from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.notifications"

    def ready(self) -> None:
        from django.conf import settings

        from .sinks import install_sink, load_sink

        install_sink(load_sink(getattr(settings, "NOTIFICATION_SINK", None)))
