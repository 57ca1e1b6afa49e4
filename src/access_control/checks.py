"""System checks for viewsets routed through the authorization gate."""

from django.core.checks import Error, register

from access_control.permissions import GatePermission


@register()
def gated_views_declare_actions(app_configs, **kwargs):
    """Every viewset on the API router that uses ``GatePermission`` must say what it gates.

    access_control.E001: no ``gate_actions`` mapping.
    access_control.E002: owned actions gated without a ``get_gate_owner(obj)``.
    """
    # Deferred: the URLconf imports every app's views.
    from core.urls import api_router

    errors: list[Error] = []
    for prefix, view_cls, _basename in api_router.registry:
        if GatePermission not in getattr(view_cls, "permission_classes", ()):
            continue

        gate_actions = getattr(view_cls, "gate_actions", None)
        if not gate_actions:
            errors.append(
                Error(
                    f"{view_cls.__name__} (/api/{prefix}/) uses GatePermission but defines no gate_actions.",
                    obj=view_cls,
                    id="access_control.E001",
                )
            )
            continue

        owned = sorted(name for name, action in gate_actions.items() if action.rule.owned)
        if owned and not callable(getattr(view_cls, "get_gate_owner", None)):
            errors.append(
                Error(
                    f"{view_cls.__name__} gates owned actions {owned} but defines no get_gate_owner.",
                    obj=view_cls,
                    id="access_control.E002",
                )
            )

    return errors
