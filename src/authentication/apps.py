from django.apps import AppConfig


class AuthenticationConfig(AppConfig):
    """User accounts, salted password hashes and the database session store."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"
    verbose_name = "Accounts and sessions"
