"""Session service: issuing, resolving and closing opaque session tokens."""

import logging
import secrets

from django.conf import settings
from django.utils import timezone

from .models import Session

logger = logging.getLogger(__name__)

SESSION_TOKEN_BYTES = 24


class SessionService:
    """Handle session issuance, lookup and revocation.

    Expiry is checked on every lookup; there is no background sweep. Expired
    rows are harmless and can be removed with the ``purge_sessions`` command.
    """

    @staticmethod
    def generate_token() -> str:
        return secrets.token_urlsafe(SESSION_TOKEN_BYTES)

    @classmethod
    def open(cls, user) -> Session:
        """Create and persist a new session for ``user``."""
        session = Session.objects.create(
            id=cls.generate_token(),
            user=user,
            expires=timezone.now() + settings.SESSION_TOKEN_TTL,
        )
        logger.info("Opened session for user %s", user.pk)
        return session

    @staticmethod
    def resolve(token: str | None) -> Session | None:
        """Return the live session for ``token``.

        Unknown, expired, and inactive-user sessions all yield None so that
        callers cannot tell them apart from an absent cookie.
        """
        if not token:
            return None
        session = (
            Session.objects.select_related("user", "user__group")
            .filter(pk=token)
            .first()
        )
        if session is None or not session.is_valid():
            return None
        return session

    @staticmethod
    def close(session: Session) -> None:
        Session.objects.filter(pk=session.pk).delete()
        logger.info("Closed session for user %s", session.user_id)

    @staticmethod
    def close_all_for(user, keep: Session | None = None) -> int:
        """Delete every session of ``user`` except ``keep``."""
        qs = Session.objects.filter(user=user)
        if keep is not None:
            qs = qs.exclude(pk=keep.pk)
        deleted, _ = qs.delete()
        if deleted:
            logger.info("Closed %d session(s) for user %s", deleted, user.pk)
        return deleted

    @staticmethod
    def purge_expired() -> int:
        deleted, _ = Session.objects.expired().delete()
        return deleted

    @staticmethod
    def set_cookie(response, session: Session) -> None:
        """Attach the session cookie to ``response``."""
        response.set_cookie(
            settings.SESSION_TOKEN_COOKIE,
            session.pk,
            expires=session.expires,
            secure=settings.SESSION_TOKEN_COOKIE_SECURE,
            domain=settings.SESSION_TOKEN_COOKIE_DOMAIN,
            httponly=True,
            samesite="Strict",
        )

    @staticmethod
    def clear_cookie(response) -> None:
        response.delete_cookie(
            settings.SESSION_TOKEN_COOKIE,
            domain=settings.SESSION_TOKEN_COOKIE_DOMAIN,
            samesite="Strict",
        )


__all__ = ["SessionService", "SESSION_TOKEN_BYTES"]
