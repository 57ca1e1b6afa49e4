"""App configuration for articles."""

from django.apps import AppConfig


class ArticlesConfig(AppConfig):
    """Markdown articles addressed by id or URL slug."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "articles"
    verbose_name = "Articles"
