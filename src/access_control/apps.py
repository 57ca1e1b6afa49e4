"""Permission groups and the authorization gate."""

from django.apps import AppConfig


class AccessControlConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "access_control"
    verbose_name = "Access control"

    def ready(self) -> None:
        # Registers access_control.E001 and E002.
        from . import checks  # noqa: F401
