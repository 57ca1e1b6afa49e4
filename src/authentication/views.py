"""Authentication endpoints: register, login, logout, profile, password and user admin."""

import logging
from typing import Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated
from rest_framework.response import Response

from access_control.gate import Action, Forbidden, authorize, is_authorized
from access_control.models import Group, Permission
from access_control.permissions import GatePermission, get_auth_context
from comments.models import Comment
from comments.tree import present_comment
from core.exceptions import Conflict
from core.response import BaseAPIView, BaseGenericViewSet, api_response
from .serializers import (
    LoginSerializer,
    PasswordChangeSerializer,
    ProfileUpdateSerializer,
    PublicUserSerializer,
    RegisterSerializer,
    UserDetailSerializer,
    UserUpdateSerializer,
)
from .services import SessionService

logger = logging.getLogger(__name__)

User = get_user_model()

INITIAL_GROUP = "admin"
DEFAULT_GROUP = "default"


def _session_payload(session) -> dict:
    return {
        "id": session.pk,
        "expires": session.expires.isoformat(),
        "user": UserDetailSerializer(session.user).data,
    }


def _require_session(request):
    ctx = get_auth_context(request)
    if ctx.is_anonymous:
        raise NotAuthenticated("Authentication required")
    return ctx


class RegisterView(BaseAPIView):
    """Create an account.

    The very first account is the initial setup and always joins ``admin``.
    After that, guests may sign up only while ``ALLOW_SIGNUPS`` is on, and
    signed-in actors need ``create_user``. A guest who signs up is logged in.
    """

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        ctx = get_auth_context(request)
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        with transaction.atomic():
            initial_setup = not User.objects.exists()
            if initial_setup:
                group_id = INITIAL_GROUP
            else:
                authorize(ctx, Action.CREATE_USER, allow_anonymous=settings.ALLOW_SIGNUPS)
                if "group" in data and not ctx.has(Permission.EDIT_FOREIGN_USER):
                    raise Forbidden()
                group_id = data.get("group", DEFAULT_GROUP)

            if User.objects.filter(pk=data["id"]).exists():
                raise Conflict("User id is already taken.")
            user = User.objects.create_user(
                data["id"],
                data["password"],
                name=data["name"],
                email=data["email"],
                group=Group.objects.resolve(group_id),
            )

        if initial_setup:
            logger.info("Initial setup complete; %s joined %s", user.pk, group_id)
        else:
            logger.info("Registered user %s in group %s", user.pk, group_id)

        if not ctx.is_anonymous:
            return api_response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)

        session = SessionService.open(user)
        response = api_response(_session_payload(session), status=status.HTTP_201_CREATED)
        SessionService.set_cookie(response, session)
        return response


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Verify credentials, open a session and set the session cookie."""
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = SessionService.open(serializer.validated_data["user"])
        response = api_response(_session_payload(session))
        SessionService.set_cookie(response, session)
        return response


class LogoutView(BaseAPIView):
    """Close the current session. Logging out without a session is a no-op."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        ctx = get_auth_context(request)
        if ctx.session is not None:
            SessionService.close(ctx.session)
        # 204 responses must not include a body.
        response = Response(status=status.HTTP_204_NO_CONTENT)
        SessionService.clear_cookie(response)
        return response


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        """Return the current user's profile."""
        _require_session(request)
        return api_response(UserDetailSerializer(request.user).data)

    # noinspection PyMethodMayBeStatic
    def patch(self, request):
        """Update the display name or email of the current user."""
        _require_session(request)
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(UserDetailSerializer(request.user).data)

    # noinspection PyMethodMayBeStatic
    def delete(self, request):
        """Deactivate the current user and close all of their sessions."""
        _require_session(request)
        _deactivate(request.user)
        response = Response(status=status.HTTP_204_NO_CONTENT)
        SessionService.clear_cookie(response)
        return response


class PasswordView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        """Change the password and close every other session of the user."""
        ctx = _require_session(request)
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        if not user.check_password(serializer.validated_data["old_password"]):
            raise NotAuthenticated("Invalid credentials")

        with transaction.atomic():
            user.set_password(serializer.validated_data["password"])
            user.save(update_fields=["password_hash", "salt", "updated_at"])
            SessionService.close_all_for(user, keep=ctx.session)
        logger.info("Password changed for user %s", user.pk)
        return api_response(UserDetailSerializer(user).data)


class UserViewSet(BaseGenericViewSet):
    """Public profiles plus account administration gated by the user rules."""

    permission_classes = [GatePermission]
    serializer_class = UserDetailSerializer
    lookup_value_regex = "[^/]+"
    gate_actions = {
        "partial_update": Action.EDIT_USER,
        "destroy": Action.DELETE_USER,
    }

    def get_queryset(self):
        return User.objects.select_related("group")

    @staticmethod
    def get_gate_owner(obj):
        return obj.pk

    def retrieve(self, request, pk=None):
        """Full profile for the user themselves and user admins, public fields otherwise."""
        user = self.get_object()
        if is_authorized(get_auth_context(request), Action.EDIT_USER, user.pk):
            return api_response(UserDetailSerializer(user).data)
        return api_response(PublicUserSerializer(user).data)

    def partial_update(self, request, pk=None):
        ctx = get_auth_context(request)
        serializer = UserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = self.get_object()

        changes = serializer.validated_data
        if "group" in changes and not ctx.has(Permission.EDIT_FOREIGN_USER):
            raise Forbidden()
        for field, value in changes.items():
            setattr(user, field, value)
        user.save()
        logger.info("User %s updated by %s", user.pk, ctx.user_id)
        return api_response(UserDetailSerializer(user).data)

    def destroy(self, request, pk=None):
        ctx = get_auth_context(request)
        user = self.get_object()
        _deactivate(user)
        response = Response(status=status.HTTP_204_NO_CONTENT)
        if user.pk == ctx.user_id:
            SessionService.clear_cookie(response)
        return response

    @action(detail=True, methods=["get"])
    def comments(self, request, pk=None):
        """The user's comments on articles the viewer may see, newest first."""
        ctx = get_auth_context(request)
        user = self.get_object()
        qs = (
            Comment.objects.filter(author=user)
            .select_related("author", "article")
            .order_by("-created_at", "-id")
        )
        return api_response([present_comment(c, ctx) for c in qs if c.article.viewable_by(ctx)])


def _deactivate(user) -> None:
    """Soft-delete an account: content stays, sessions are closed."""
    with transaction.atomic():
        user.is_active = False
        user.save(update_fields=["is_active", "updated_at"])
        SessionService.close_all_for(user)
    logger.info("Deactivated user %s", user.pk)


__all__ = [
    "RegisterView",
    "LoginView",
    "LogoutView",
    "MeView",
    "PasswordView",
    "UserViewSet",
]
