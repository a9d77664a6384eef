from rest_framework import serializers

from apps.core.models import User

from .models import Course


class CourseSerializer(serializers.ModelSerializer):
    instructor_name = serializers.CharField(source="instructor.display_name", read_only=True, default=None)
    group_count = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = "__all__"
        read_only_fields = ["created_by", "created_at", "updated_at"]

    def get_group_count(self, obj):
        return obj.groups.count()

    def validate_instructor(self, value):
        if value is not None and value.role != User.Role.TRAINER:
            raise serializers.ValidationError("Instructor must be a trainer")
        return value

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_status(self, value):
        if self.instance is None and value == Course.Status.ARCHIVED:
            raise serializers.ValidationError("A new course cannot start archived")
        return value
