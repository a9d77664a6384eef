from rest_framework import serializers

from apps.domains.courses.models import Course
from apps.domains.groups.models import Group
from apps.domains.learning.models import Module
from apps.domains.sessions.models import Session

from .models import Quiz, QuizAttempt


class QuizSerializer(serializers.ModelSerializer):
    """Trainer view: questions include the correct options."""
    course_title = serializers.CharField(source="course.title", read_only=True)
    module_title = serializers.CharField(source="module.title", read_only=True, default=None)
    total_points = serializers.IntegerField(read_only=True)
    total_questions = serializers.IntegerField(read_only=True)

    class Meta:
        model = Quiz
        fields = [
            "id",
            "course",
            "course_title",
            "module",
            "module_title",
            "session",
            "group",
            "title",
            "description",
            "instructions",
            "passing_score",
            "time_limit",
            "max_attempts",
            "shuffle_questions",
            "shuffle_options",
            "show_feedback",
            "questions",
            "total_points",
            "total_questions",
            "is_active",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QuizWriteSerializer(serializers.Serializer):
    course = serializers.PrimaryKeyRelatedField(queryset=Course.objects.all())
    module = serializers.PrimaryKeyRelatedField(queryset=Module.objects.all(), required=False, allow_null=True)
    session = serializers.PrimaryKeyRelatedField(queryset=Session.objects.all(), required=False, allow_null=True)
    group = serializers.PrimaryKeyRelatedField(queryset=Group.objects.all(), required=False, allow_null=True)

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    instructions = serializers.CharField(max_length=2000, required=False, allow_blank=True)
    passing_score = serializers.IntegerField(min_value=0, max_value=100, required=False)
    time_limit = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    max_attempts = serializers.IntegerField(min_value=1, required=False)
    shuffle_questions = serializers.BooleanField(required=False)
    shuffle_options = serializers.BooleanField(required=False)
    show_feedback = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)

    questions = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class QuizAttemptSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.display_name", read_only=True)

    class Meta:
        model = QuizAttempt
        fields = [
            "id",
            "quiz",
            "student",
            "student_name",
            "attempt_number",
            "status",
            "score",
            "earned_points",
            "total_points",
            "passed",
            "started_at",
            "submitted_at",
            "time_spent",
        ]
        read_only_fields = fields


class AnswerSerializer(serializers.Serializer):
    question = serializers.IntegerField()
    selected = serializers.ListField(child=serializers.IntegerField(min_value=0), allow_empty=True)


class SubmitSerializer(serializers.Serializer):
    attempt = serializers.IntegerField()
    answers = AnswerSerializer(many=True)
