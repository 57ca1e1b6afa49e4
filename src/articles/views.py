"""Article endpoints gated by the authorization gate.

Articles are addressed by numeric id or by URL slug. Drafts and removed
articles behave as missing for viewers who may not edit or delete them.
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from access_control.gate import Action, authorize
from access_control.permissions import GatePermission, get_auth_context
from comments.tree import present_forest
from comments.views import load_forest
from core import lifecycle
from core.response import BaseGenericViewSet, api_response
from .models import Article
from .serializers import ArticleDetailSerializer, ArticleListSerializer, ArticleSerializer, ensure_slug_free

logger = logging.getLogger(__name__)


class ArticleViewSet(mixins.ListModelMixin, BaseGenericViewSet):
    serializer_class = ArticleSerializer
    permission_classes = [GatePermission]
    lookup_url_kwarg = "key"
    lookup_value_regex = "[^/]+"
    gate_actions = {
        "update": Action.EDIT_ARTICLE,
        "partial_update": Action.EDIT_ARTICLE,
        "destroy": Action.DELETE_ARTICLE,
        "restore": Action.RESTORE_ARTICLE,
        "purge": Action.PURGE_ARTICLE,
    }

    def get_queryset(self):
        if self.action == "list":
            return (
                Article.objects.published()
                .select_related("author")
                .annotate(comment_count=Count("comments", filter=Q(comments__visible=True)))
            )
        return Article.objects.select_related("author")

    def get_serializer_class(self):
        if self.action == "list":
            return ArticleListSerializer
        if self.action == "retrieve":
            return ArticleDetailSerializer
        return ArticleSerializer

    @staticmethod
    def get_gate_owner(obj):
        return obj.author_id

    def _lookup(self) -> Article:
        """Fetch the article by id or slug without running the gate."""
        article = self.get_queryset().by_id_or_slug(self.kwargs[self.lookup_url_kwarg]).first()
        if article is None or not article.viewable_by(get_auth_context(self.request)):
            raise NotFound("Article not found.")
        return article

    def get_object(self):
        article = self._lookup()
        self.check_object_permissions(self.request, article)
        return article

    def retrieve(self, request, key=None):
        return api_response(self.get_serializer(self.get_object()).data)

    def create(self, request):
        ctx = get_auth_context(request)
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        authorize(ctx, Action.CREATE_ARTICLE)
        ensure_slug_free(serializer.validated_data["url"])
        with transaction.atomic():
            article = serializer.save(author=request.user)
        logger.info("Article %s (%s) created by %s", article.pk, article.url, ctx.user_id)
        return api_response(self.get_serializer(article).data, status=status.HTTP_201_CREATED)

    def update(self, request, key=None, partial=False):
        """Edit title, slug, content or the published flag; last writer wins.

        Flipping ``visible`` is a remove or restore and needs the delete
        permissions on top of the edit ones.
        """
        ctx = get_auth_context(request)
        article = self._lookup()
        serializer = self.get_serializer(article, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.check_object_permissions(request, article)

        data = serializer.validated_data
        visible = data.get("visible", article.visible)
        if visible != article.visible:
            authorize(ctx, Action.RESTORE_ARTICLE if visible else Action.DELETE_ARTICLE, article.author_id)
        if "url" in data:
            ensure_slug_free(data["url"], article)

        with transaction.atomic():
            serializer.save()
        logger.info("Article %s edited by %s", article.pk, ctx.user_id)
        return api_response(serializer.data)

    def partial_update(self, request, key=None):
        return self.update(request, key=key, partial=True)

    def destroy(self, request, key=None):
        """Soft delete: the article disappears from listings but keeps its content."""
        article = self.get_object()
        lifecycle.remove(article)
        return api_response(self.get_serializer(article).data)

    @action(detail=True, methods=["post"])
    def restore(self, request, key=None):
        article = self.get_object()
        lifecycle.restore(article)
        return api_response(self.get_serializer(article).data)

    @action(detail=True, methods=["post"])
    def purge(self, request, key=None):
        """Delete the article and all of its comments permanently."""
        article = self.get_object()
        lifecycle.purge(article)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def comments(self, request, key=None):
        """Comment forest of the article as seen by the caller."""
        article = self.get_object()
        render = request.query_params.get("render") in ("1", "true")
        forest = load_forest(article.pk)
        return api_response(present_forest(forest, get_auth_context(request), render=render))


__all__ = ["ArticleViewSet"]
