"""User accounts and the database-backed session store.

Note: Django's built-in groups/permissions (``PermissionsMixin``) are not
used. Every user belongs to exactly one ``access_control.Group`` and all
authorization goes through ``access_control.gate``.
"""

from typing import ClassVar, Optional

from django.contrib.auth.models import AbstractBaseUser
from django.db import models
from django.utils import timezone

from .managers import UserManager


class User(AbstractBaseUser):
    """Account identified by its login name with salted bcrypt hashes."""

    id = models.CharField(max_length=255, primary_key=True)
    password_hash = models.CharField(max_length=255)
    salt = models.BinaryField(max_length=64)
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255)
    group = models.ForeignKey("access_control.Group", on_delete=models.PROTECT, related_name="users")
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = "id"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = ["name", "email"]

    objects = UserManager()

    class Meta:
        """Default ordering shows newest users first."""
        ordering = ["-date_joined"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.id

    def set_password(self, raw_password: Optional[str]) -> None:  # type: ignore[override]
        """Re-salt and hash via the manager utility."""

        if raw_password is None:
            self.password_hash = ""
            return
        self.salt = UserManager.generate_salt()
        self.password_hash = UserManager.hash_password(raw_password, self.salt)

    def check_password(self, raw_password: Optional[str]) -> bool:  # type: ignore[override]
        """Delegate to the salted bcrypt verification helper."""

        if raw_password is None:
            return False
        return UserManager.verify_password(self, raw_password)


class SessionQuerySet(models.QuerySet):
    def live(self):
        """Sessions that have not expired and belong to active users."""
        return self.filter(expires__gt=timezone.now(), user__is_active=True)

    def expired(self):
        return self.filter(expires__lte=timezone.now())


class Session(models.Model):
    """Opaque server-issued token bound to one user until ``expires``."""

    id = models.CharField(max_length=255, primary_key=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="sessions")
    expires = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    objects = SessionQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"session for {self.user_id}"

    def is_valid(self, now=None) -> bool:
        """A session is valid strictly before its expiry, and only for active users."""
        now = now or timezone.now()
        return now < self.expires and self.user.is_active


__all__ = ["User", "Session"]
