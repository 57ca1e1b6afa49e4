"""ViewSets for group administration."""

from django.db.models import ProtectedError
from rest_framework import viewsets

from core.exceptions import Conflict
from core.response import BaseViewSet
from .gate import Action
from .models import Group
from .permissions import GatePermission
from .serializers import GroupSerializer


class GroupViewSet(BaseViewSet, viewsets.ModelViewSet):
    """CRUD endpoints for permission groups; every action requires ``all``."""

    serializer_class = GroupSerializer
    permission_classes = [GatePermission]
    queryset = Group.objects.all()
    lookup_value_regex = "[^/]+"
    gate_actions = {
        name: Action.MANAGE_GROUPS
        for name in ("list", "retrieve", "create", "update", "partial_update", "destroy")
    }

    def perform_destroy(self, instance):
        """Refuse to delete groups that still have members."""
        try:
            instance.delete()
        except ProtectedError as exc:
            raise Conflict("Group still has members.") from exc


__all__ = ["GroupViewSet"]
