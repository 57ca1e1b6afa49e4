"""Article model: markdown posts with a unique URL slug and a visibility flag."""

from django.conf import settings
from django.db import models

from access_control.gate import Action, AuthContext, is_authorized


class ArticleQuerySet(models.QuerySet):
    def published(self):
        return self.filter(visible=True)

    def by_id_or_slug(self, key: str):
        """Filter on the numeric id when ``key`` is all digits, else on the slug."""
        if str(key).isdigit():
            return self.filter(pk=int(key))
        return self.filter(url=key)


class Article(models.Model):
    """Article with an author so gate own/foreign checks can apply.

    ``visible`` doubles as the published flag: drafts and soft-deleted
    articles are both invisible and never listed.
    """

    title = models.CharField(max_length=255)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="articles")
    url = models.CharField(max_length=255, unique=True)
    content = models.TextField()
    visible = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ArticleQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title

    def viewable_by(self, ctx: AuthContext) -> bool:
        """Drafts and removed articles are only shown to those who may edit or delete them."""
        if self.visible:
            return True
        return is_authorized(ctx, Action.EDIT_ARTICLE, self.author_id) or is_authorized(
            ctx, Action.DELETE_ARTICLE, self.author_id
        )


__all__ = ["Article"]
