from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from apps.api.common.models import TimestampModel


SKILLS = ("technical_skills", "problem_solving", "creativity", "teamwork", "communication")

PARTICIPATION_SCORES = {
    "very_low": 1,
    "low": 2,
    "medium": 3,
    "high": 4,
    "very_high": 5,
}

GRADE_SCORES = {"A": 100, "B": 80, "C": 60, "D": 40, "F": 0}

PARAMETER_TYPES = ("rating", "percentage", "grade", "boolean", "text")


def default_skill_ratings():
    return {skill: 3 for skill in SKILLS}


def one_to_five():
    return [MinValueValidator(1), MaxValueValidator(5)]


# ========================================================
# EvaluationCriteria (CLO-defined parameter sets)
# ========================================================

class EvaluationCriteria(TimestampModel):
    """
    parameters: [{name, description, type, rating_scale{min,max}, weight, required, order}]
    """

    class AppliesTo(models.TextChoices):
        COURSE = "course", "Whole course"
        GROUPS = "groups", "Selected groups"

    name = models.CharField(max_length=200)
    description = models.CharField(max_length=500, blank=True, default="")

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="evaluation_criteria",
    )
    applies_to = models.CharField(
        max_length=10,
        choices=AppliesTo.choices,
        default=AppliesTo.COURSE,
    )
    groups = models.ManyToManyField(
        "groups.Group",
        blank=True,
        related_name="evaluation_criteria",
    )

    parameters = models.JSONField(default=list, blank=True)
    include_overall_rating = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True, db_index=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-updated_at", "-id"]
        verbose_name_plural = "evaluation criteria"

    def __str__(self):
        return self.name

    @property
    def total_weight(self) -> int:
        return sum(int(p.get("weight") or 0) for p in self.parameters or [])


# ========================================================
# StudentEvaluation (one per student per session)
# ========================================================

class StudentEvaluation(TimestampModel):
    class Participation(models.TextChoices):
        VERY_LOW = "very_low", "Very low"
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        VERY_HIGH = "very_high", "Very high"

    class Comprehension(models.TextChoices):
        STRUGGLING = "struggling", "Struggling"
        NEEDS_SUPPORT = "needs_support", "Needs support"
        ADEQUATE = "adequate", "Adequate"
        GOOD = "good", "Good"
        EXCELLENT = "excellent", "Excellent"

    class Attitude(models.TextChoices):
        NEGATIVE = "negative", "Negative"
        NEUTRAL = "neutral", "Neutral"
        POSITIVE = "positive", "Positive"
        ENTHUSIASTIC = "enthusiastic", "Enthusiastic"

    class AttendanceStatus(models.TextChoices):
        PRESENT = "present", "Present"
        LATE = "late", "Late"
        ABSENT = "absent", "Absent"
        EXCUSED = "excused", "Excused"

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    session = models.ForeignKey(
        "class_sessions.Session",
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    group = models.ForeignKey(
        "groups.Group",
        on_delete=models.CASCADE,
        related_name="evaluations",
    )
    trainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="given_evaluations",
    )
    criteria = models.ForeignKey(
        EvaluationCriteria,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="evaluations",
    )

    overall_rating = models.PositiveSmallIntegerField(validators=one_to_five())
    skill_ratings = models.JSONField(default=default_skill_ratings)

    participation_level = models.CharField(
        max_length=20, choices=Participation.choices, default=Participation.MEDIUM
    )
    comprehension_level = models.CharField(
        max_length=20, choices=Comprehension.choices, default=Comprehension.ADEQUATE
    )
    attitude = models.CharField(max_length=20, choices=Attitude.choices, default=Attitude.POSITIVE)
    focus = models.PositiveSmallIntegerField(default=3, validators=one_to_five())
    attendance_status = models.CharField(
        max_length=10, choices=AttendanceStatus.choices, default=AttendanceStatus.PRESENT
    )

    parameters = models.JSONField(default=dict, blank=True)
    notes = models.TextField(blank=True, default="")

    # flags
    needs_attention = models.BooleanField(default=False, db_index=True)
    at_risk = models.BooleanField(default=False, db_index=True)
    excelling = models.BooleanField(default=False)
    parent_contact_needed = models.BooleanField(default=False)

    # visibility
    shared_with_student = models.BooleanField(default=False)
    shared_with_parent = models.BooleanField(default=False)
    shared_at = models.DateTimeField(null=True, blank=True)

    evaluation_date = models.DateField(default=timezone.localdate)

    class Meta:
        ordering = ["-evaluation_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "session"],
                name="unique_evaluation_per_session_student",
            )
        ]

    def __str__(self):
        return f"{self.student} / {self.session_id} / {self.overall_rating}"

    # --------------------------------------------------
    # derived scores
    # --------------------------------------------------

    @property
    def average_skill_rating(self) -> float:
        ratings = self.skill_ratings or {}
        values = [float(ratings.get(skill, 3)) for skill in SKILLS]
        return round(sum(values) / len(values), 1)

    @property
    def participation_score(self) -> int:
        return PARTICIPATION_SCORES.get(self.participation_level, 3)

    @property
    def is_flagged(self) -> bool:
        return self.needs_attention or self.at_risk

    @property
    def performance_score(self) -> int:
        """
        0-100.
        With criteria: weighted mean of the normalized parameter values.
        Without: 30% rating, 30% skills, 20% participation, 20% focus.
        """
        if self.criteria_id and self.criteria.parameters:
            score = _weighted_parameter_score(self.criteria.parameters, self.parameters or {})
            if score is not None:
                return score
            return round(self.overall_rating / 5 * 100)

        rating = self.overall_rating / 5 * 30
        skills = self.average_skill_rating / 5 * 30
        participation = self.participation_score / 5 * 20
        focus = (self.focus or 3) / 5 * 20
        return round(rating + skills + participation + focus)


def normalize_parameter(config: dict, value):
    """Single parameter value on a 0-100 scale; None for text / missing."""
    if value is None:
        return None
    kind = config.get("type", "rating")
    if kind == "rating":
        scale = config.get("rating_scale") or {}
        lo, hi = float(scale.get("min", 1)), float(scale.get("max", 5))
        if hi <= lo:
            return None
        return (float(value) - lo) / (hi - lo) * 100
    if kind == "percentage":
        return float(value)
    if kind == "boolean":
        return 100.0 if value else 0.0
    if kind == "grade":
        return float(GRADE_SCORES.get(str(value).upper(), 0))
    return None


def _weighted_parameter_score(configs, values):
    total = weight_sum = 0.0
    for config in configs:
        weight = float(config.get("weight") or 0)
        normalized = normalize_parameter(config, values.get(config.get("name")))
        if normalized is None or weight <= 0:
            continue
        total += normalized * weight
        weight_sum += weight
    if not weight_sum:
        return None
    return round(total / weight_sum)
