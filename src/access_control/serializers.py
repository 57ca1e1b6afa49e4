"""Serializers for group administration."""

from rest_framework import serializers

from .models import Group, Permission


class GroupSerializer(serializers.ModelSerializer):
    """Serialize groups with their permission list.

    Permissions are validated against the closed vocabulary and stored
    de-duplicated in vocabulary order so equal sets serialize identically.
    """

    permissions = serializers.ListField(
        child=serializers.ChoiceField(choices=Permission.choices),
        allow_empty=True,
    )

    class Meta:
        """Expose group id, description and permissions; timestamps are read-only."""

        model = Group
        fields = ["id", "description", "permissions", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]

    def validate_id(self, value):
        """Group ids are immutable once created."""
        if self.instance is not None and value != self.instance.pk:
            raise serializers.ValidationError("Group id cannot be changed.")
        return value

    @staticmethod
    def validate_permissions(value):
        chosen = set(value)
        return [p for p in Permission.values if p in chosen]


__all__ = ["GroupSerializer"]
