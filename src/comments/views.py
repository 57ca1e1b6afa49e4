"""Comment endpoints: submission, thread views, edits and the soft-delete lifecycle."""

import logging

from django.conf import settings
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from access_control.gate import Action, authorize
from access_control.permissions import GatePermission, get_auth_context
from core import lifecycle
from core.markdown import render_comment
from core.response import BaseGenericViewSet, api_response
from .models import Comment
from .owner import Authored, Named
from .serializers import CommentEditSerializer, CommentRawSerializer, CommentSubmitSerializer
from .tree import build_forest, present, present_comment, render_subtree, visible_content

logger = logging.getLogger(__name__)


def load_forest(article_id: int):
    """Build the full comment forest of one article."""
    return build_forest(Comment.objects.for_article(article_id))


class CommentViewSet(BaseGenericViewSet):
    """Threaded comments.

    Comments on articles the caller cannot view are reported as missing. Guests
    may comment under a freeform name when ``ALLOW_ANONYMOUS_COMMENTS`` is on.
    """

    permission_classes = [GatePermission]
    serializer_class = CommentRawSerializer
    gate_actions = {
        "partial_update": Action.EDIT_COMMENT,
        "single": Action.EDIT_COMMENT,
        "destroy": Action.DELETE_COMMENT,
        "restore": Action.RESTORE_COMMENT,
        "purge": Action.PURGE_COMMENT,
    }

    def get_queryset(self):
        return Comment.objects.select_related("author", "article")

    def get_object(self):
        obj = get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])
        if not obj.article.viewable_by(get_auth_context(self.request)):
            raise NotFound()
        self.check_object_permissions(self.request, obj)
        return obj

    @staticmethod
    def get_gate_owner(obj):
        return obj.owner_id

    @staticmethod
    def allows_anonymous(gate_action) -> bool:
        return gate_action is Action.CREATE_COMMENT and settings.ALLOW_ANONYMOUS_COMMENTS

    def _context_depth(self) -> int:
        raw = self.request.query_params.get("context", "0")
        try:
            depth = int(raw)
        except ValueError:
            depth = -1
        if depth < 0:
            raise ValidationError({"context": "Must be a non-negative integer."})
        return depth

    def create(self, request):
        ctx = get_auth_context(request)
        serializer = CommentSubmitSerializer(data=request.data, context={"auth_context": ctx})
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        article = data["article"]
        if not article.viewable_by(ctx):
            raise NotFound()
        authorize(
            ctx,
            Action.CREATE_COMMENT,
            allow_anonymous=self.allows_anonymous(Action.CREATE_COMMENT),
        )

        comment = Comment(article=article, parent=data.get("parent"), content=data["content"])
        comment.owner = Named(data["name"].strip()) if ctx.is_anonymous else Authored(ctx.user_id)
        with transaction.atomic():
            comment.save()
        logger.info("Comment %s submitted on article %s by %s", comment.pk, article.pk, comment.display_name)
        return api_response(present_comment(comment, ctx), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        """Comment subtree, optionally climbing ``?context=n`` ancestors first."""
        ctx = get_auth_context(request)
        depth = self._context_depth()
        comment = self.get_object()
        node = load_forest(comment.article_id).subtree(comment.pk, depth)
        render = request.query_params.get("render") in ("1", "true")
        return api_response(present(node, ctx, render=render))

    def partial_update(self, request, pk=None):
        ctx = get_auth_context(request)
        serializer = CommentEditSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = self.get_object()
        comment.content = serializer.validated_data["content"]
        comment.save(update_fields=["content", "updated_at"])
        logger.info("Comment %s edited by %s", comment.pk, ctx.user_id)
        return api_response(present_comment(comment, ctx))

    def destroy(self, request, pk=None):
        comment = self.get_object()
        lifecycle.remove(comment)
        return api_response(present_comment(comment, get_auth_context(request)))

    @action(detail=True, methods=["post"])
    def restore(self, request, pk=None):
        comment = self.get_object()
        lifecycle.restore(comment)
        return api_response(present_comment(comment, get_auth_context(request)))

    @action(detail=True, methods=["post"])
    def purge(self, request, pk=None):
        """Delete the comment permanently. Comments with replies cannot be purged."""
        comment = self.get_object()
        lifecycle.purge(comment, blockers=comment.replies.all())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def single(self, request, pk=None):
        """Raw stored comment, for prefilling the edit form."""
        comment = self.get_object()
        return api_response(CommentRawSerializer(comment).data)

    @action(detail=True, methods=["get"])
    def render(self, request, pk=None):
        """HTML fragment of the comment subtree."""
        ctx = get_auth_context(request)
        depth = self._context_depth()
        comment = self.get_object()
        node = load_forest(comment.article_id).subtree(comment.pk, depth)
        return HttpResponse(render_subtree(node, ctx), content_type="text/html; charset=utf-8")

    @action(detail=True, methods=["get"], url_path="render-content")
    def render_content(self, request, pk=None):
        """HTML of the comment body alone."""
        comment = self.get_object()
        html = render_comment(visible_content(comment, get_auth_context(request)))
        return HttpResponse(html, content_type="text/html; charset=utf-8")


__all__ = ["CommentViewSet", "load_forest"]
