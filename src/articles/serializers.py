"""Serializers for Article CRUD with standard envelope support."""

from rest_framework import serializers

from core.exceptions import Conflict
from core.markdown import description, preview, render_article
from .models import Article

ILLEGAL_SLUG_CHARS = frozenset('^"&,@#$%+*:?;<>[]`{}/')


def validate_slug(value: str) -> str:
    """Slugs are used verbatim in article URLs."""
    if not value:
        raise serializers.ValidationError("URL cannot be empty.")
    if any(ch.isspace() for ch in value):
        raise serializers.ValidationError("URL may not contain whitespace.")
    bad = sorted(ILLEGAL_SLUG_CHARS.intersection(value))
    if bad:
        raise serializers.ValidationError(f"URL may not contain: {' '.join(bad)}")
    # All-digit keys address articles by id.
    if value.isdigit():
        raise serializers.ValidationError("URL may not consist of digits only.")
    return value


def ensure_slug_free(value: str, instance: Article | None = None) -> None:
    """Slugs are unique across all articles, including drafts and removed ones.

    Views call this once the actor is authorized, so a refused caller never
    learns which slugs exist.
    """
    taken = Article.objects.filter(url=value)
    if instance is not None:
        taken = taken.exclude(pk=instance.pk)
    if taken.exists():
        raise Conflict(f"An article with the URL {value!r} already exists.")


class ArticleSerializer(serializers.ModelSerializer):
    author = serializers.PrimaryKeyRelatedField(read_only=True)
    url = serializers.CharField(max_length=255, validators=[validate_slug])

    class Meta:
        """Expose article fields while keeping authorship and timestamps read-only."""
        model = Article
        fields = ["id", "title", "url", "content", "visible", "author", "created_at", "updated_at"]
        read_only_fields = ["id", "author", "created_at", "updated_at"]


class ArticleListSerializer(serializers.ModelSerializer):
    """Listing entry with a rendered preview and the visible comment count."""

    author = serializers.PrimaryKeyRelatedField(read_only=True)
    author_name = serializers.CharField(source="author.name", read_only=True)
    comment_count = serializers.IntegerField(read_only=True)
    preview = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            "id",
            "title",
            "url",
            "author",
            "author_name",
            "created_at",
            "comment_count",
            "description",
            "preview",
        ]
        read_only_fields = fields

    @staticmethod
    def get_preview(obj):
        return preview(obj.content)

    @staticmethod
    def get_description(obj):
        return description(obj.content)


class ArticleDetailSerializer(ArticleSerializer):
    """Single article including its rendered markup."""

    author_name = serializers.CharField(source="author.name", read_only=True)
    html = serializers.SerializerMethodField()

    class Meta(ArticleSerializer.Meta):
        fields = ArticleSerializer.Meta.fields + ["author_name", "html"]

    @staticmethod
    def get_html(obj):
        return render_article(obj.content)


__all__ = [
    "ArticleSerializer",
    "ArticleListSerializer",
    "ArticleDetailSerializer",
    "ensure_slug_free",
    "validate_slug",
]
