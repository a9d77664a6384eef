# domains/sessions/serializers.py

from rest_framework import serializers

from .models import Session


TIME_FORMATS = ["%H:%M", "%H:%M:%S"]


# ========================================================
# Session
# ========================================================

class SessionSerializer(serializers.ModelSerializer):
    group_name = serializers.CharField(source="group.name", read_only=True)
    course_title = serializers.CharField(source="course.title", read_only=True)
    trainer_name = serializers.CharField(source="trainer.display_name", read_only=True)
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    actual_duration = serializers.IntegerField(read_only=True)
    can_take_attendance = serializers.BooleanField(read_only=True)

    class Meta:
        model = Session
        fields = "__all__"
        read_only_fields = [
            "group",
            "course",
            "trainer",
            "session_number",
            "duration",
            "status",
            "cancellation_reason",
            "actual_start_time",
            "actual_end_time",
        ]
        ref_name = "ClassSession"


class SessionCreateSerializer(serializers.Serializer):
    group = serializers.IntegerField()
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    scheduled_date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.TimeField(required=False, allow_null=True, input_formats=TIME_FORMATS)
    end_time = serializers.TimeField(required=False, allow_null=True, input_formats=TIME_FORMATS)
    is_online = serializers.BooleanField(required=False, default=False)
    meeting_link = serializers.URLField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True, max_length=200)
    lesson_plan = serializers.JSONField(required=False)


class SessionUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    lesson_plan = serializers.JSONField(required=False)
    meeting_link = serializers.URLField(required=False, allow_blank=True)
    is_online = serializers.BooleanField(required=False)
    location = serializers.CharField(required=False, allow_blank=True, max_length=200)
    scheduled_date = serializers.DateField(required=False)
    start_time = serializers.TimeField(required=False, input_formats=TIME_FORMATS)
    end_time = serializers.TimeField(required=False, input_formats=TIME_FORMATS)
