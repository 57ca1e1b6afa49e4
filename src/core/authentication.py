"""DRF authentication backed by the session already resolved in middleware.

``SessionCookieMiddleware`` looks the cookie up once per request. DRF runs its
own authenticators on the wrapped request, so this class only reports what
the middleware found: ``request.user`` becomes the account and
``request.auth`` the ``Session`` row.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Surface the middleware's ``auth_context`` as DRF's ``(user, auth)`` pair.

    Anonymous contexts return None so DRF falls back to ``AnonymousUser``.
    No cookie parsing or CSRF enforcement happens here; the session cookie is
    ``SameSite=Strict``.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, Any]]:
        ctx = getattr(request._request, "auth_context", None)
        if ctx is None or ctx.is_anonymous:
            return None
        return ctx.session.user, ctx.session


__all__ = ["MiddlewareUserAuthentication"]
