"""Threaded comments attached to articles."""

from django.conf import settings
from django.db import models

from .owner import Authored, CommentOwner, owner_from_fields, owner_to_fields


class CommentQuerySet(models.QuerySet):
    def for_article(self, article_id: int):
        """All comments of one article in thread order, visible or not."""
        return (
            self.filter(article_id=article_id)
            .select_related("author")
            .order_by("created_at", "id")
        )


class Comment(models.Model):
    """A reply to an article or to another comment.

    Exactly one of ``author`` (registered user) or ``name`` (guest) is set;
    use :attr:`owner` rather than reading the columns directly.
    """

    parent = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.RESTRICT, related_name="replies"
    )
    article = models.ForeignKey("articles.Article", on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="comments",
    )
    name = models.CharField(max_length=255, null=True, blank=True)
    content = models.TextField()
    visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CommentQuerySet.as_manager()

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(author__isnull=False, name__isnull=True)
                    | models.Q(author__isnull=True, name__isnull=False)
                ),
                name="comment_author_xor_name",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"comment {self.pk} on article {self.article_id}"

    @property
    def owner(self) -> CommentOwner:
        return owner_from_fields(self.author_id, self.name)

    @owner.setter
    def owner(self, value: CommentOwner) -> None:
        for field, column in owner_to_fields(value).items():
            setattr(self, field, column)

    @property
    def owner_id(self) -> str | None:
        """User id owning this comment, or None for guest comments."""
        owner = self.owner
        return owner.user_id if isinstance(owner, Authored) else None

    @property
    def display_name(self) -> str:
        owner = self.owner
        if isinstance(owner, Authored):
            return self.author.name if self.author is not None else owner.user_id
        return owner.name


__all__ = ["Comment"]
