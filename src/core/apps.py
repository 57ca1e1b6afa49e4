from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Project-wide plumbing: response envelope, error mapping, session middleware,
    markdown rendering and the soft-delete lifecycle."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Core"
