"""Serializers for authentication flows (register, login, profile, password)."""

import logging

from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

from access_control.models import Group
from .managers import UserManager

logger = logging.getLogger(__name__)

User = get_user_model()

ILLEGAL_USER_ID_CHARS = frozenset("/?#%&")


def validate_user_id(value: str) -> str:
    """User ids appear in URLs, so they may not contain whitespace or URL syntax."""
    if any(ch.isspace() for ch in value) or ILLEGAL_USER_ID_CHARS.intersection(value):
        raise serializers.ValidationError("User id may not contain whitespace or any of / ? # % &.")
    return value


class RegisterSerializer(serializers.Serializer):
    """Validate a new account.

    ``phone`` is a honeypot: the signup form hides it from humans, so any
    value in it marks the request as spam.
    """

    id = serializers.CharField(max_length=255, validators=[validate_user_id])
    password = serializers.CharField(write_only=True, min_length=8, trim_whitespace=False)
    repeat_password = serializers.CharField(write_only=True, trim_whitespace=False)
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255)
    group = serializers.CharField(required=False, max_length=64)
    phone = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate_phone(self, value):
        if value:
            logger.warning("Rejected spam signup for user id %r", self.initial_data.get("id"))
            raise serializers.ValidationError("You're not supposed to fill out this field.")
        return value

    def validate(self, attrs):
        """Ensure provided passwords match before creation."""
        if attrs.get("password") != attrs.get("repeat_password"):
            raise serializers.ValidationError({"repeat_password": "Passwords do not match."})
        attrs.pop("repeat_password")
        attrs.pop("phone", None)
        return attrs


class LoginSerializer(serializers.Serializer):
    """Authenticate a user via id/password using salted bcrypt verification."""

    id = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        """Authenticate credentials and attach the user to validated_data.

        Unknown ids, inactive accounts and wrong passwords share one message.
        """
        try:
            user = User.objects.select_related("group").get(pk=attrs["id"])
        except User.DoesNotExist:
            raise AuthenticationFailed("Invalid credentials")

        if not user.is_active or not UserManager.verify_password(user, attrs["password"]):
            raise AuthenticationFailed("Invalid credentials")

        attrs["user"] = user
        return attrs


class PasswordChangeSerializer(serializers.Serializer):
    old_password = serializers.CharField(write_only=True, trim_whitespace=False)
    password = serializers.CharField(write_only=True, min_length=8, trim_whitespace=False)
    repeat_password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        if attrs["password"] != attrs["repeat_password"]:
            raise serializers.ValidationError({"repeat_password": "Passwords do not match."})
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    """Full profile payload, shown to the user themselves and to user admins."""

    group = serializers.CharField(source="group_id", read_only=True)

    class Meta:
        """Expose identity fields and group id."""
        model = User
        fields = ["id", "name", "email", "group", "is_active", "date_joined"]
        read_only_fields = fields


class PublicUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "name", "date_joined"]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Patchable fields for /auth/me updates."""

    class Meta:
        """Allow partial updates of the display name and email."""
        model = User
        fields = ["name", "email"]
        extra_kwargs = {field: {"required": False} for field in fields}

    def validate(self, attrs):
        """Reject attempts to change the id or group through this endpoint."""
        initial = getattr(self, "initial_data", {})
        for field in ("id", "group"):
            if field in initial:
                raise serializers.ValidationError({field: "Cannot be updated via this endpoint."})
        return super().validate(attrs)


class UserUpdateSerializer(serializers.ModelSerializer):
    """Fields editable on another user's account."""

    group = serializers.SlugRelatedField(slug_field="id", queryset=Group.objects.all(), required=False)

    class Meta:
        model = User
        fields = ["name", "email", "group"]
        extra_kwargs = {"name": {"required": False}, "email": {"required": False}}


__all__ = [
    "RegisterSerializer",
    "LoginSerializer",
    "PasswordChangeSerializer",
    "UserDetailSerializer",
    "PublicUserSerializer",
    "ProfileUpdateSerializer",
    "UserUpdateSerializer",
]
