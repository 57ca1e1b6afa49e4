"""Comment forest construction and per-viewer presentation.

The forest is built from the flat, chronologically ordered comment rows of a
single article. Nodes live in an arena keyed by comment id; each node keeps an
ordered list of child nodes, so sibling order is the input order.

Invisible comments stay in the forest so their replies still render. Only
the body is masked, and only for viewers who may not see hidden content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from django.template.loader import render_to_string

from access_control.gate import Action, AuthContext, is_authorized
from access_control.models import Permission
from core.markdown import render_comment

from .models import Comment

logger = logging.getLogger(__name__)

DELETED_PLACEHOLDER = "[deleted]"


@dataclass
class Node:
    comment: Comment
    children: list["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False, compare=False)

    @property
    def id(self) -> int:
        return self.comment.pk

    def walk(self):
        """Yield this node and its descendants depth-first, in display order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


@dataclass
class Forest:
    roots: list[Node]
    index: dict[int, Node]

    def __len__(self) -> int:
        return len(self.index)

    def get(self, comment_id: int) -> Node | None:
        return self.index.get(comment_id)

    def subtree(self, comment_id: int, context: int = 0) -> Node | None:
        """Return the node for ``comment_id`` or its ``context``-th ancestor.

        Climbing stops at a root, so a large ``context`` yields the thread's
        root comment.
        """
        node = self.index.get(comment_id)
        if node is None:
            return None
        for _ in range(max(0, context)):
            if node.parent is None:
                break
            node = node.parent
        return node


def build_forest(comments: Iterable[Comment]) -> Forest:
    """Link flat comment rows into a forest in O(n).

    All comments are indexed first so a reply linked before its parent row
    (clock skew on ``created_at``) still attaches correctly. A reply whose
    parent is missing or lives on another article is kept as a root rather
    than dropped.
    """
    ordered = list(comments)
    index: dict[int, Node] = {c.pk: Node(c) for c in ordered}
    roots: list[Node] = []

    for comment in ordered:
        node = index[comment.pk]
        parent_id = comment.parent_id
        if parent_id is None:
            roots.append(node)
            continue

        parent = index.get(parent_id)
        if parent is None or parent.comment.article_id != comment.article_id or parent is node:
            logger.warning(
                "Comment %s references unknown parent %s on article %s; showing it as a root",
                comment.pk,
                parent_id,
                comment.article_id,
            )
            roots.append(node)
            continue

        node.parent = parent
        parent.children.append(node)

    _break_cycles(index, roots, {c.pk: i for i, c in enumerate(ordered)})
    return Forest(roots=roots, index=index)


def _break_cycles(index: dict[int, Node], roots: list[Node], position: dict[int, int]) -> None:
    # Parent links forming a loop would leave those nodes unreachable from
    # any root; promote one member of each loop to a root.
    reachable = {n.id for root in roots for n in root.walk()}
    promoted = False
    for comment_id, node in index.items():
        if comment_id in reachable:
            continue
        logger.warning("Comment %s is part of a parent cycle; showing it as a root", comment_id)
        node.parent.children.remove(node)
        node.parent = None
        roots.append(node)
        reachable.update(n.id for n in node.walk())
        promoted = True
    if promoted:
        roots.sort(key=lambda n: position[n.id])


def can_view_hidden(comment: Comment, ctx: AuthContext) -> bool:
    """Whether ``ctx`` may see the body of an invisible ``comment``.

    The comment's own author may, as may moderators holding the foreign edit
    or delete permission.
    """
    if ctx.is_anonymous:
        return False
    if comment.owner_id is not None and comment.owner_id == ctx.user_id:
        return True
    return ctx.has(Permission.EDIT_FOREIGN_COMMENT) or ctx.has(Permission.DELETE_FOREIGN_COMMENT)


def visible_content(comment: Comment, ctx: AuthContext) -> str:
    if comment.visible or can_view_hidden(comment, ctx):
        return comment.content
    return DELETED_PLACEHOLDER


def present_comment(comment: Comment, ctx: AuthContext, *, render: bool = False) -> dict:
    """JSON-ready view of one comment for ``ctx`` without children."""
    masked = not comment.visible and not can_view_hidden(comment, ctx)
    content = DELETED_PLACEHOLDER if masked else comment.content
    owner = comment.owner_id
    payload = {
        "id": comment.pk,
        "parent": comment.parent_id,
        "article": comment.article_id,
        "author": owner,
        "name": comment.display_name,
        "content": content,
        "created_at": comment.created_at.isoformat() if comment.created_at else None,
        "visible": comment.visible,
        "editable": is_authorized(ctx, Action.EDIT_COMMENT, owner),
        "deletable": is_authorized(ctx, Action.DELETE_COMMENT, owner),
    }
    if render:
        payload["html"] = "" if masked else render_comment(content)
    return payload


def present(node: Node, ctx: AuthContext, *, render: bool = False) -> dict:
    """Recursive JSON-ready view of ``node`` and its descendants."""
    payload = present_comment(node.comment, ctx, render=render)
    payload["children"] = [present(child, ctx, render=render) for child in node.children]
    return payload


def present_forest(forest: Forest, ctx: AuthContext, *, render: bool = False) -> list[dict]:
    return [present(root, ctx, render=render) for root in forest.roots]


def render_subtree(node: Node, ctx: AuthContext) -> str:
    """Markup fragment for ``node`` and its replies."""
    return render_to_string("comments/subtree.html", {"node": present(node, ctx, render=True)})


__all__ = [
    "DELETED_PLACEHOLDER",
    "Forest",
    "Node",
    "build_forest",
    "can_view_hidden",
    "present",
    "present_comment",
    "present_forest",
    "render_subtree",
    "visible_content",
]
