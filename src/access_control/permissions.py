"""DRF permission class that routes view actions through the authorization gate."""

from rest_framework import permissions

from .gate import AuthContext, authorize


def get_auth_context(request) -> AuthContext:
    """Return the ``AuthContext`` attached by ``SessionCookieMiddleware``.

    DRF's ``Request`` proxies unknown attributes to the wrapped Django request,
    so this works for both request types.
    """
    ctx = getattr(request, "auth_context", None)
    return ctx if ctx is not None else AuthContext.anonymous()


class GatePermission(permissions.BasePermission):
    """Authorize the view's current action via ``view.gate_actions``.

    ``gate_actions`` maps DRF action names (``create``, ``partial_update``,
    ``restore``, ...) to gate ``Action`` members. Actions not listed are
    ungated here; views filter visibility themselves. Ownerless rules are
    decided in ``has_permission``; owned rules wait for the object and take
    the owner from ``view.get_gate_owner(obj)``.

    Views may define ``allows_anonymous(action) -> bool`` to admit anonymous
    actors where the deployment switches permit it.
    """

    message = "You do not have permission to perform this action on this resource."

    def has_permission(self, request, view) -> bool:
        action = self._gate_action(view)
        if action is None or action.rule.owned:
            return True
        authorize(
            get_auth_context(request),
            action,
            allow_anonymous=self._allows_anonymous(view, action),
        )
        return True

    def has_object_permission(self, request, view, obj) -> bool:
        action = self._gate_action(view)
        if action is None or not action.rule.owned:
            return True
        authorize(get_auth_context(request), action, target_owner=view.get_gate_owner(obj))
        return True

    @staticmethod
    def _gate_action(view):
        gate_actions = getattr(view, "gate_actions", None) or {}
        return gate_actions.get(getattr(view, "action", None))

    @staticmethod
    def _allows_anonymous(view, action) -> bool:
        allows = getattr(view, "allows_anonymous", None)
        return bool(allows and allows(action))


__all__ = ["GatePermission", "get_auth_context"]
