"""Soft-delete lifecycle shared by articles and comments.

States::

    VISIBLE --remove--> SOFT_DELETED --restore--> VISIBLE
    VISIBLE | SOFT_DELETED --purge--> PURGED (row deleted, terminal)

Transitions only touch the ``visible`` column (remove/restore) or delete the
row (purge); content is never rewritten. Callers authorize the transition
through ``access_control.gate`` before invoking it.
"""

import enum
import logging

from django.db import models, transaction

from .exceptions import Conflict

logger = logging.getLogger(__name__)


class LifecycleState(str, enum.Enum):
    VISIBLE = "visible"
    SOFT_DELETED = "soft_deleted"
    PURGED = "purged"


def state_of(obj: models.Model) -> LifecycleState:
    if obj.pk is None:
        return LifecycleState.PURGED
    return LifecycleState.VISIBLE if obj.visible else LifecycleState.SOFT_DELETED


def _set_visible(obj: models.Model, visible: bool) -> None:
    # Single-column update so a concurrent content edit is not overwritten.
    type(obj).objects.filter(pk=obj.pk).update(visible=visible)
    obj.visible = visible


def remove(obj: models.Model) -> LifecycleState:
    """Soft-delete ``obj``. Removing an already removed object is a no-op."""
    if state_of(obj) is LifecycleState.VISIBLE:
        _set_visible(obj, False)
        logger.info("Removed %s %s", obj._meta.model_name, obj.pk)
    return state_of(obj)


def restore(obj: models.Model) -> LifecycleState:
    """Make a soft-deleted ``obj`` visible again. Visible objects are left alone."""
    if state_of(obj) is LifecycleState.SOFT_DELETED:
        _set_visible(obj, True)
        logger.info("Restored %s %s", obj._meta.model_name, obj.pk)
    return state_of(obj)


def purge(obj: models.Model, *, blockers: models.QuerySet | None = None) -> LifecycleState:
    """Irreversibly delete ``obj``.

    If ``blockers`` is given and non-empty the purge is refused with
    ``Conflict`` and nothing is deleted.
    """
    label, pk = obj._meta.model_name, obj.pk
    with transaction.atomic():
        if blockers is not None and blockers.exists():
            raise Conflict(f"Cannot purge {label} {pk} while it has dependent records.")
        obj.delete()
    logger.warning("Purged %s %s", label, pk)
    return LifecycleState.PURGED


__all__ = ["LifecycleState", "state_of", "remove", "restore", "purge"]
