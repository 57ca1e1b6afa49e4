"""Middleware resolving the session cookie into the request's actor."""

import logging

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status

from access_control.gate import AuthContext
from authentication.services import SessionService
from core.exceptions import STORAGE_ERROR
from core.response import envelope

logger = logging.getLogger(__name__)


class SessionCookieMiddleware(MiddlewareMixin):
    """Look up the session cookie and attach ``request.user`` and ``request.auth_context``.

    A missing, unknown, or expired token all produce an anonymous actor; the
    request is never rejected here because anonymous readers are allowed.
    """

    def process_request(self, request):  # type: ignore[override]
        """Resolve the session token, if any, into an ``AuthContext``."""
        token = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE)

        try:
            session = SessionService.resolve(token)
        except DatabaseError:
            logger.exception("Session lookup failed")
            return _storage_unavailable()

        if session is None:
            request.user = AnonymousUser()
            request.auth_context = AuthContext.anonymous()
            return None

        request.user = session.user
        request.auth_context = AuthContext.for_session(session)
        return None


def _storage_unavailable() -> JsonResponse:
    return JsonResponse(
        envelope(errors=[STORAGE_ERROR]),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


__all__ = ["SessionCookieMiddleware"]
