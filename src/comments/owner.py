"""Tagged owner of a comment: a registered author or a freeform guest name.

The database enforces the same author-xor-name rule with a check
constraint; constructing an owner here catches violations before a write.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Authored:
    user_id: str

    def __post_init__(self):
        if not self.user_id:
            raise ValueError("Authored comments need a user id.")


@dataclass(frozen=True)
class Named:
    name: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Guest comments need a non-empty name.")


CommentOwner = Union[Authored, Named]


def owner_from_fields(author_id: str | None, name: str | None) -> CommentOwner:
    """Build the owner from the two nullable storage columns."""
    if (author_id is None) == (name is None):
        raise ValueError("A comment has exactly one of an author or a name.")
    if author_id is not None:
        return Authored(author_id)
    return Named(name)


def owner_to_fields(owner: CommentOwner) -> dict[str, str | None]:
    """Storage columns for ``owner``; the other column is always None."""
    if isinstance(owner, Authored):
        return {"author_id": owner.user_id, "name": None}
    return {"author_id": None, "name": owner.name}


__all__ = ["Authored", "Named", "CommentOwner", "owner_from_fields", "owner_to_fields"]
