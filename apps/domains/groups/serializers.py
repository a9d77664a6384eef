from django.db import transaction
from rest_framework import serializers

from apps.core.serializers import UserBriefSerializer

from .models import Group, GroupScheduleSlot


TIME_FORMATS = ["%H:%M", "%H:%M:%S"]


# -------------------------------
# Schedule
# -------------------------------

class GroupScheduleSlotSerializer(serializers.ModelSerializer):
    start_time = serializers.TimeField(format="%H:%M", input_formats=TIME_FORMATS)
    end_time = serializers.TimeField(format="%H:%M", input_formats=TIME_FORMATS)

    class Meta:
        model = GroupScheduleSlot
        fields = ["id", "day_of_week", "start_time", "end_time", "location"]

    def validate(self, attrs):
        if attrs["end_time"] <= attrs["start_time"]:
            raise serializers.ValidationError({"end_time": "end_time must be after start_time"})
        return attrs


# -------------------------------
# Group
# -------------------------------

class GroupSerializer(serializers.ModelSerializer):
    schedule = GroupScheduleSlotSerializer(many=True, required=False)
    course_title = serializers.CharField(source="course.title", read_only=True)
    trainer_name = serializers.CharField(source="trainer.display_name", read_only=True)
    enrolled_count = serializers.IntegerField(read_only=True)
    available_seats = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)
    progress_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = Group
        exclude = ["students"]
        read_only_fields = ["total_sessions", "completed_sessions"]
        ref_name = "CohortGroup"

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end <= start:
            raise serializers.ValidationError({"end_date": "End date must be after start date"})

        trainer = attrs.get("trainer")
        if trainer is not None and trainer.role != "trainer":
            raise serializers.ValidationError({"trainer": "Assigned user must be a trainer"})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        slots = validated_data.pop("schedule", [])
        group = Group.objects.create(**validated_data)
        for slot in slots:
            GroupScheduleSlot.objects.create(group=group, **slot)
        return group

    @transaction.atomic
    def update(self, instance, validated_data):
        slots = validated_data.pop("schedule", None)
        instance = super().update(instance, validated_data)
        if slots is not None:
            instance.schedule.all().delete()
            for slot in slots:
                GroupScheduleSlot.objects.create(group=instance, **slot)
        return instance


class GroupDetailSerializer(GroupSerializer):
    students = UserBriefSerializer(many=True, read_only=True)

    class Meta(GroupSerializer.Meta):
        exclude = None
        fields = "__all__"
        ref_name = "CohortGroupDetail"


class TrainerGroupUpdateSerializer(serializers.ModelSerializer):
    """Trainers may only touch presentation fields of their groups."""

    class Meta:
        model = Group
        fields = ["description", "color"]
