from rest_framework import serializers

from .models import Module, ModuleProgress


class ModuleSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)

    class Meta:
        model = Module
        fields = [
            "id",
            "course",
            "course_title",
            "title",
            "description",
            "order",
            "type",
            "video_url",
            "video_duration",
            "pdf_url",
            "text_content",
            "duration",
            "resources",
            "is_locked",
            "unlock_after",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
        extra_kwargs = {"order": {"required": False}}

    def validate_resources(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("resources must be a list")
        for item in value:
            if not isinstance(item, dict) or not item.get("url"):
                raise serializers.ValidationError("each resource needs a url")
        return value


class ModuleBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Module
        fields = ["id", "title", "order", "type", "duration", "is_locked"]


class ModuleProgressSerializer(serializers.ModelSerializer):
    module_title = serializers.CharField(source="module.title", read_only=True)

    class Meta:
        model = ModuleProgress
        fields = [
            "id",
            "module",
            "module_title",
            "course",
            "status",
            "started_at",
            "completed_at",
            "last_accessed_at",
            "time_spent",
            "video_position",
            "video_length",
            "video_completed",
            "notes",
        ]
        read_only_fields = fields


class VideoProgressSerializer(serializers.Serializer):
    current_time = serializers.IntegerField(min_value=0, required=False)
    duration = serializers.IntegerField(min_value=0, required=False)
    completed = serializers.BooleanField(required=False)


class ProgressUpdateSerializer(serializers.Serializer):
    time_spent = serializers.IntegerField(min_value=0, required=False)
    video = VideoProgressSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=5000)
