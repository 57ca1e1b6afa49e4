"""Authorization gate: pure decisions over an explicit actor context.

Every mutating or visibility-sensitive operation on articles, comments and
users is decided here before the caller performs the effect. Nothing in this
module touches the database; the session and group are resolved up front by
``core.middleware.SessionCookieMiddleware`` and carried in an ``AuthContext``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from rest_framework.exceptions import PermissionDenied

from .models import Permission

if TYPE_CHECKING:  # pragma: no cover
    from authentication.models import Session

    from .models import Group


class Forbidden(PermissionDenied):
    """Gate rejection. The message never says which check failed."""

    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "forbidden"


def group_has_permission(group: "Group", permission: Permission | str) -> bool:
    """Return True if ``group`` holds ``permission`` directly or through ``all``."""
    granted = group.permission_set
    return Permission.ALL.value in granted or Permission(permission).value in granted


@dataclass(frozen=True)
class AuthContext:
    """The acting session (if any) and its resolved group."""

    session: Optional["Session"] = None
    group: Optional["Group"] = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_session(cls, session: "Session") -> "AuthContext":
        return cls(session=session, group=session.user.group)

    @property
    def is_anonymous(self) -> bool:
        return self.session is None or self.group is None

    @property
    def user_id(self) -> str | None:
        return None if self.session is None else self.session.user_id

    def has(self, permission: Permission) -> bool:
        if self.is_anonymous:
            return False
        return group_has_permission(self.group, permission)


@dataclass(frozen=True)
class Rule:
    """How an action is decided.

    ``own`` must be held together with ownership of the target, unless
    ``owned`` is False (create actions have no target owner). ``own=None`` on
    an owned rule means ownership alone suffices. ``foreign`` grants the
    action on any target.
    """

    own: Permission | None
    foreign: Permission | None
    owned: bool = True
    anonymous: bool = False


class Action(enum.Enum):
    CREATE_ARTICLE = "create_article"
    EDIT_ARTICLE = "edit_article"
    DELETE_ARTICLE = "delete_article"
    RESTORE_ARTICLE = "restore_article"
    PURGE_ARTICLE = "purge_article"

    CREATE_COMMENT = "create_comment"
    EDIT_COMMENT = "edit_comment"
    DELETE_COMMENT = "delete_comment"
    RESTORE_COMMENT = "restore_comment"
    PURGE_COMMENT = "purge_comment"

    CREATE_USER = "create_user"
    EDIT_USER = "edit_user"
    DELETE_USER = "delete_user"

    MANAGE_GROUPS = "manage_groups"

    @property
    def rule(self) -> Rule:
        return RULES[self]


# Restore is gated like delete; purge needs the foreign delete permission.
RULES: dict[Action, Rule] = {
    Action.CREATE_ARTICLE: Rule(Permission.CREATE_ARTICLE, None, owned=False),
    Action.EDIT_ARTICLE: Rule(Permission.EDIT_ARTICLE, Permission.EDIT_FOREIGN_ARTICLE),
    Action.DELETE_ARTICLE: Rule(Permission.DELETE_ARTICLE, Permission.DELETE_FOREIGN_ARTICLE),
    Action.RESTORE_ARTICLE: Rule(Permission.DELETE_ARTICLE, Permission.DELETE_FOREIGN_ARTICLE),
    Action.PURGE_ARTICLE: Rule(None, Permission.DELETE_FOREIGN_ARTICLE, owned=False),
    Action.CREATE_COMMENT: Rule(Permission.CREATE_COMMENT, None, owned=False, anonymous=True),
    Action.EDIT_COMMENT: Rule(Permission.EDIT_COMMENT, Permission.EDIT_FOREIGN_COMMENT),
    Action.DELETE_COMMENT: Rule(Permission.DELETE_COMMENT, Permission.DELETE_FOREIGN_COMMENT),
    Action.RESTORE_COMMENT: Rule(Permission.DELETE_COMMENT, Permission.DELETE_FOREIGN_COMMENT),
    Action.PURGE_COMMENT: Rule(None, Permission.DELETE_FOREIGN_COMMENT, owned=False),
    Action.CREATE_USER: Rule(Permission.CREATE_USER, None, owned=False, anonymous=True),
    Action.EDIT_USER: Rule(None, Permission.EDIT_FOREIGN_USER),
    Action.DELETE_USER: Rule(None, Permission.DELETE_FOREIGN_USER),
    Action.MANAGE_GROUPS: Rule(None, Permission.ALL, owned=False),
}


def authorize(
    ctx: AuthContext,
    action: Action,
    target_owner: str | None = None,
    *,
    allow_anonymous: bool = False,
) -> None:
    """Raise ``Forbidden`` unless ``ctx`` may perform ``action``.

    ``target_owner`` is the user id owning the target, or None for targets
    without an owning user (anonymous comments, create actions).
    ``allow_anonymous`` admits anonymous actors to actions whose rule permits
    them; it carries the deployment switch (signups, named comments).
    """
    rule = action.rule

    if ctx.is_anonymous:
        if rule.anonymous and allow_anonymous:
            return
        raise Forbidden()

    if rule.owned:
        owns_target = target_owner is not None and target_owner == ctx.user_id
        if owns_target and (rule.own is None or ctx.has(rule.own)):
            return
    elif rule.own is not None and ctx.has(rule.own):
        return

    if rule.foreign is not None and ctx.has(rule.foreign):
        return

    raise Forbidden()


def is_authorized(
    ctx: AuthContext,
    action: Action,
    target_owner: str | None = None,
    *,
    allow_anonymous: bool = False,
) -> bool:
    """Boolean form of :func:`authorize` for presentation flags."""
    try:
        authorize(ctx, action, target_owner, allow_anonymous=allow_anonymous)
    except Forbidden:
        return False
    return True


__all__ = [
    "Action",
    "AuthContext",
    "Forbidden",
    "Rule",
    "authorize",
    "group_has_permission",
    "is_authorized",
]
