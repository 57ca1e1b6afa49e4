"""Domain errors and the DRF exception handler that maps them onto the envelope.

=====================  ======  ==============================================
Error                  Status  Raised by
=====================  ======  ==============================================
``ValidationError``    400     serializers, query parameter parsing
``NotAuthenticated``   401     login, password change, own-profile endpoints
``Forbidden``          403     ``access_control.gate``
``NotFound``           404     missing rows, articles the viewer may not see
``Conflict``           409     duplicate slug or id, blocked purge
``DatabaseError``      500     storage failures
=====================  ======  ==============================================
"""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError, IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .response import envelope

logger = logging.getLogger(__name__)

GENERIC_AUTH_ERROR = "Authentication credentials were not provided or are invalid."
GENERIC_FORBIDDEN = "You do not have permission to perform this action on this resource."
STORAGE_ERROR = "Internal storage error."


class Conflict(APIException):
    """The request clashes with existing state (duplicate slug, blocked purge)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state of the resource."
    default_code = "conflict"


def _error_list(payload: Any) -> list[Any]:
    """Flatten DRF's ``response.data`` into the envelope's error list.

    ``{"detail": msg}`` becomes ``[msg]``; field error dicts are kept whole
    so clients can still tell which field failed.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and set(payload) == {"detail"}:
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Return an enveloped error response for ``exc``, or None to let Django handle it."""

    # Unique or check constraint races that slipped past validation.
    if isinstance(exc, IntegrityError):
        logger.warning("Integrity violation in %s: %s", context.get("view").__class__.__name__, exc)
        return Response(envelope(errors=[Conflict.default_detail]), status=status.HTTP_409_CONFLICT)

    if isinstance(exc, DatabaseError):
        logger.error("Storage error", exc_info=exc)
        return Response(envelope(errors=[STORAGE_ERROR]), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    # DRF downgrades auth failures to 403 when no WWW-Authenticate header is
    # available; cookie sessions have none.
    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code == status.HTTP_401_UNAUTHORIZED:
        errors = _error_list(response.data) if settings.DEBUG_AUTH_ERRORS else [GENERIC_AUTH_ERROR]
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        errors = [GENERIC_FORBIDDEN]
    else:
        errors = _error_list(response.data)

    response.data = envelope(errors=errors)
    return response


__all__ = ["Conflict", "custom_exception_handler", "GENERIC_FORBIDDEN", "STORAGE_ERROR"]
