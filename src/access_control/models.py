"""Permission vocabulary and the Group model that bundles permissions."""

from django.core.exceptions import ValidationError
from django.db import models
from rest_framework.exceptions import NotFound


class Permission(models.TextChoices):
    """Closed vocabulary of capabilities a group can hold.

    ``ALL`` implies every other permission.
    """

    ALL = "all", "All"
    CREATE_ARTICLE = "create_article", "Create article"
    EDIT_ARTICLE = "edit_article", "Edit own article"
    DELETE_ARTICLE = "delete_article", "Delete own article"
    EDIT_FOREIGN_ARTICLE = "edit_foreign_article", "Edit any article"
    DELETE_FOREIGN_ARTICLE = "delete_foreign_article", "Delete any article"
    CREATE_COMMENT = "create_comment", "Create comment"
    EDIT_COMMENT = "edit_comment", "Edit own comment"
    DELETE_COMMENT = "delete_comment", "Delete own comment"
    EDIT_FOREIGN_COMMENT = "edit_foreign_comment", "Edit any comment"
    DELETE_FOREIGN_COMMENT = "delete_foreign_comment", "Delete any comment"
    CREATE_USER = "create_user", "Create user"
    EDIT_FOREIGN_USER = "edit_foreign_user", "Edit any user"
    DELETE_FOREIGN_USER = "delete_foreign_user", "Delete any user"


class GroupManager(models.Manager):
    """Manager adding a lookup that maps a missing group to ``NotFound``."""

    def resolve(self, group_id: str) -> "Group":
        """Return the group with ``group_id`` or raise ``NotFound``."""
        try:
            return self.get(pk=group_id)
        except Group.DoesNotExist as exc:
            raise NotFound(f"Group '{group_id}' does not exist.") from exc


class Group(models.Model):
    """Named bundle of permissions assigned to users."""

    id = models.CharField(max_length=255, primary_key=True)
    description = models.TextField(blank=True)
    permissions = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = GroupManager()

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.id

    @property
    def permission_set(self) -> frozenset[str]:
        return frozenset(self.permissions or ())

    def clean(self) -> None:
        unknown = sorted(set(self.permissions or ()) - set(Permission.values))
        if unknown:
            raise ValidationError({"permissions": f"Unknown permissions: {', '.join(unknown)}"})


__all__ = ["Permission", "Group", "GroupManager"]
