"""Serializers for comment submission, editing and raw retrieval."""

from rest_framework import serializers

from articles.models import Article
from .models import Comment


class CommentSubmitSerializer(serializers.Serializer):
    """Validate a new comment.

    Signed-in actors always comment under their account and must not send a
    ``name``; guests must send one. The parent, when given, must belong to the
    same article.
    """

    article = serializers.PrimaryKeyRelatedField(queryset=Article.objects.all())
    parent = serializers.PrimaryKeyRelatedField(
        queryset=Comment.objects.all(), required=False, allow_null=True
    )
    name = serializers.CharField(required=False, allow_null=True, max_length=255)
    content = serializers.CharField(trim_whitespace=False)

    @staticmethod
    def validate_content(value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value

    def validate(self, attrs):
        ctx = self.context["auth_context"]
        parent = attrs.get("parent")
        if parent is not None and parent.article_id != attrs["article"].pk:
            raise serializers.ValidationError({"parent": "Parent comment belongs to another article."})

        name = attrs.get("name")
        if ctx.is_anonymous and not name:
            raise serializers.ValidationError({"name": "A name is required to comment without an account."})
        if not ctx.is_anonymous and name:
            raise serializers.ValidationError({"name": "Signed-in users comment under their account name."})
        return attrs


class CommentEditSerializer(serializers.Serializer):
    content = serializers.CharField(trim_whitespace=False)

    @staticmethod
    def validate_content(value):
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty.")
        return value


class CommentRawSerializer(serializers.ModelSerializer):
    """Unrendered comment used to prefill the edit form."""

    author = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        """Raw stored fields; everything is read-only."""
        model = Comment
        fields = ["id", "parent", "article", "author", "name", "content", "visible", "created_at", "updated_at"]
        read_only_fields = fields


__all__ = ["CommentSubmitSerializer", "CommentEditSerializer", "CommentRawSerializer"]
