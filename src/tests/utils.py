"""Shared helpers for tests (group seeding, user creation, session cookies)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from access_control.gate import AuthContext
from access_control.models import Group
from articles.models import Article
from authentication.models import Session
from authentication.services import SessionService
from comments.models import Comment
from comments.owner import Authored, Named
from scripts.management.commands.seed_blog import create_seed_groups

User = get_user_model()


def seed_groups() -> dict:
    """Create the base groups for tests.

    Delegates to the same helper used by the ``seed_blog`` management command
    to keep group definitions in a single place.
    """

    return create_seed_groups()


def create_user(user_id: str, password: str, group: Group, **extra):
    """Create a user with a salted bcrypt password for tests."""

    extra.setdefault("name", user_id.title())
    extra.setdefault("email", f"{user_id}@example.com")
    return User.objects.create_user(user_id, password, group=group, **extra)


def login(client: APIClient, user) -> Session:
    """Open a session for ``user`` and attach its cookie to ``client``."""

    session = SessionService.open(user)
    client.cookies[settings.SESSION_TOKEN_COOKIE] = session.pk
    return session


def create_article(author, url: str, *, visible: bool = True, **extra) -> Article:
    extra.setdefault("title", url.replace("-", " ").title())
    extra.setdefault("content", f"Content of {url}.")
    return Article.objects.create(author=author, url=url, visible=visible, **extra)


def create_comment(article, owner, content: str = "text", *, parent=None, visible: bool = True) -> Comment:
    """Create a comment owned by a user (pass the User) or a guest (pass a name)."""

    comment = Comment(article=article, parent=parent, content=content, visible=visible)
    comment.owner = Named(owner) if isinstance(owner, str) else Authored(owner.pk)
    comment.save()
    return comment


def make_context(user_id: str | None, group: Group | None) -> AuthContext:
    """Build an ``AuthContext`` from unsaved instances, without touching the database."""

    if user_id is None:
        return AuthContext.anonymous()
    user = User(id=user_id, name=user_id.title(), group=group)
    session = Session(
        id=f"token-{user_id}",
        user=user,
        expires=datetime.now(timezone.utc) + timedelta(days=1),
    )
    return AuthContext.for_session(session)
