from rest_framework import serializers

from apps.domains.community.models import Post


class PostSerializer(serializers.ModelSerializer):
    author_name = serializers.CharField(source="author.display_name", read_only=True)

    class Meta:
        model = Post
        fields = [
            "id",
            "title",
            "slug",
            "body",
            "tags",
            "author",
            "author_name",
            "status",
            "published_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["slug", "author", "published_at", "created_at", "updated_at"]

    def validate_tags(self, value):
        if not isinstance(value, list) or not all(isinstance(t, str) for t in value):
            raise serializers.ValidationError("tags must be a list of strings")
        if len(value) > 20:
            raise serializers.ValidationError("at most 20 tags")
        return value

    def validate_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("title cannot be blank")
        return value
