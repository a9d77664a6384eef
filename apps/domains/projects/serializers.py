from rest_framework import serializers

from apps.core.models import User
from apps.core.serializers import UserBriefSerializer

from .models import Competition, Project, ProjectPart, Team


class ProjectPartSerializer(serializers.ModelSerializer):
    part_name = serializers.CharField(source="part.name", read_only=True)

    class Meta:
        model = ProjectPart
        fields = ["id", "part", "part_name", "qty"]


class ProjectSerializer(serializers.ModelSerializer):
    owner_name = serializers.CharField(source="owner.display_name", read_only=True)
    parts = ProjectPartSerializer(source="project_parts", many=True, read_only=True)

    class Meta:
        model = Project
        fields = [
            "id",
            "title",
            "description",
            "owner",
            "owner_name",
            "status",
            "parts",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["owner", "created_at", "updated_at"]


class ProjectPartInputSerializer(serializers.Serializer):
    part = serializers.IntegerField()
    qty = serializers.IntegerField(min_value=1)


class CompetitionSerializer(serializers.ModelSerializer):
    team_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Competition
        fields = "__all__"

    def validate(self, attrs):
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "end_date cannot be before start_date"})
        return attrs


class TeamSerializer(serializers.ModelSerializer):
    competition_name = serializers.CharField(source="competition.name", read_only=True)
    coach_name = serializers.CharField(source="coach.display_name", read_only=True, default=None)
    members = UserBriefSerializer(many=True, read_only=True)
    member_count = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            "id",
            "name",
            "competition",
            "competition_name",
            "coach",
            "coach_name",
            "members",
            "member_count",
            "max_members",
            "created_at",
            "updated_at",
        ]

    def get_member_count(self, obj):
        return len(obj.members.all())

    def validate_coach(self, value):
        if value is not None and value.role != User.Role.TRAINER:
            raise serializers.ValidationError("Coach must be a trainer")
        return value

    def validate_max_members(self, value):
        if self.instance is not None and value < self.instance.members.count():
            raise serializers.ValidationError("max_members cannot be below the current team size")
        return value


class TeamMemberInputSerializer(serializers.Serializer):
    student = serializers.IntegerField()

