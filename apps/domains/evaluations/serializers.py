from rest_framework import serializers

from apps.domains.groups.models import Group

from . import services
from .models import EvaluationCriteria, StudentEvaluation


# -------------------------------
# Criteria
# -------------------------------

class EvaluationCriteriaSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    total_weight = serializers.IntegerField(read_only=True)
    groups = serializers.PrimaryKeyRelatedField(
        queryset=Group.objects.all(),
        many=True,
        required=False,
    )

    class Meta:
        model = EvaluationCriteria
        fields = "__all__"
        read_only_fields = ["created_by", "created_at", "updated_at"]

    def validate_parameters(self, value):
        try:
            return services.validate_criteria_parameters(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))

    def validate(self, attrs):
        applies_to = attrs.get("applies_to", getattr(self.instance, "applies_to", None))
        course = attrs.get("course", getattr(self.instance, "course", None))
        groups = attrs.get("groups")
        if groups is None and self.instance is not None:
            groups = list(self.instance.groups.all())

        if applies_to == EvaluationCriteria.AppliesTo.GROUPS:
            if not groups:
                raise serializers.ValidationError(
                    {"groups": "At least one group is required when applies_to is groups"}
                )
            foreign = [g.id for g in groups if g.course_id != course.id]
            if foreign:
                raise serializers.ValidationError(
                    {"groups": f"Groups not in this course: {foreign}"}
                )
        else:
            attrs["groups"] = []
        return attrs


# -------------------------------
# Evaluation
# -------------------------------

class StudentEvaluationSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source="student.display_name", read_only=True)
    trainer_name = serializers.CharField(source="trainer.display_name", read_only=True)
    session_title = serializers.CharField(source="session.title", read_only=True)
    group_name = serializers.CharField(source="group.name", read_only=True)
    average_skill_rating = serializers.FloatField(read_only=True)
    performance_score = serializers.IntegerField(read_only=True)

    class Meta:
        model = StudentEvaluation
        fields = "__all__"


class StudentSharedEvaluationSerializer(StudentEvaluationSerializer):
    """Student view: trainer notes stay internal."""

    class Meta(StudentEvaluationSerializer.Meta):
        fields = None
        exclude = ["notes", "parent_contact_needed", "shared_with_parent"]


class EvaluationInputSerializer(serializers.Serializer):
    session = serializers.IntegerField(required=False)
    student = serializers.IntegerField(required=False)

    overall_rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    skill_ratings = serializers.DictField(child=serializers.IntegerField(), required=False)
    participation_level = serializers.ChoiceField(
        choices=StudentEvaluation.Participation.choices, required=False
    )
    comprehension_level = serializers.ChoiceField(
        choices=StudentEvaluation.Comprehension.choices, required=False
    )
    attitude = serializers.ChoiceField(choices=StudentEvaluation.Attitude.choices, required=False)
    focus = serializers.IntegerField(min_value=1, max_value=5, required=False)
    attendance_status = serializers.ChoiceField(
        choices=StudentEvaluation.AttendanceStatus.choices, required=False
    )
    parameters = serializers.DictField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    evaluation_date = serializers.DateField(required=False)
    needs_attention = serializers.BooleanField(required=False)
    at_risk = serializers.BooleanField(required=False)
    excelling = serializers.BooleanField(required=False)
    parent_contact_needed = serializers.BooleanField(required=False)


class BulkEvaluationSerializer(serializers.Serializer):
    session = serializers.IntegerField()
    evaluations = serializers.ListField(child=serializers.DictField(), allow_empty=False)
