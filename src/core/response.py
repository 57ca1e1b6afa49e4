"""The ``{"data": ..., "errors": [...]}`` envelope shared by every JSON response.

Views return payloads through :func:`api_response` or inherit one of the base
classes below, which wrap plain DRF responses on the way out. Error paths
(``core.exceptions`` and ``core.middleware``) build their bodies with
:func:`envelope` so success and failure share one shape.
"""

from typing import Any, Iterable

from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import GenericViewSet, ModelViewSet


def envelope(data: Any = None, errors: Iterable[Any] = ()) -> dict:
    return {"data": data, "errors": list(errors)}


def api_response(data: Any, status: int = 200) -> Response:
    """Successful response carrying ``data`` and no errors."""
    return Response(envelope(data), status=status)


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.keys() == {"data", "errors"}


class EnvelopeMixin:
    """Wrap successful DRF responses that a view returned without the envelope.

    Error responses are already enveloped by the exception handler. 204
    responses carry no body, and non-DRF responses (HTML fragments) have no
    ``data`` and pass through untouched.
    """

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        if isinstance(response, Response) and response.status_code < 400 and response.status_code != 204:
            if not _is_enveloped(response.data):
                response.data = envelope(response.data)
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    """Function-style endpoints (auth flows)."""


class BaseViewSet(EnvelopeMixin, ModelViewSet):
    """Plain CRUD resources (groups)."""


class BaseGenericViewSet(EnvelopeMixin, GenericViewSet):
    """Resources that define their own action set (articles, comments, users)."""


__all__ = ["envelope", "api_response", "EnvelopeMixin", "BaseAPIView", "BaseViewSet", "BaseGenericViewSet"]
