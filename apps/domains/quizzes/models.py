from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.api.common.models import TimestampModel


# ========================================================
# Quiz
# ========================================================

class Quiz(TimestampModel):
    """
    Multiple-choice quiz attached to a course.

    ``questions`` holds the question list:
        [{"id", "question", "type": single|multiple, "points", "explanation",
          "options": [{"text", "is_correct"}]}]
    """

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="quizzes",
    )
    module = models.ForeignKey(
        "learning.Module",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quizzes",
    )
    session = models.ForeignKey(
        "class_sessions.Session",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quizzes",
    )
    group = models.ForeignKey(
        "groups.Group",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="quizzes",
    )

    title = models.CharField(max_length=200)
    description = models.CharField(max_length=1000, blank=True, default="")
    instructions = models.CharField(max_length=2000, blank=True, default="")

    passing_score = models.PositiveSmallIntegerField(
        default=70,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    time_limit = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
    )  # minutes
    max_attempts = models.PositiveSmallIntegerField(default=3, validators=[MinValueValidator(1)])
    shuffle_questions = models.BooleanField(default=False)
    shuffle_options = models.BooleanField(default=False)
    show_feedback = models.BooleanField(default=True)

    questions = models.JSONField(default=list)
    is_active = models.BooleanField(default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_quizzes",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title

    @property
    def total_points(self) -> int:
        return sum(int(q.get("points") or 0) for q in self.questions or [])

    @property
    def total_questions(self) -> int:
        return len(self.questions or [])


class QuizAttempt(TimestampModel):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        SUBMITTED = "submitted", "Submitted"
        EXPIRED = "expired", "Expired"

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="quiz_attempts",
    )
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="quiz_attempts",
    )
    attempt_number = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])

    answers = models.JSONField(default=list, blank=True)
    score = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MaxValueValidator(100)],
    )  # percentage
    total_points = models.PositiveIntegerField(default=0)
    earned_points = models.PositiveIntegerField(default=0)
    passed = models.BooleanField(default=False)

    started_at = models.DateTimeField()
    submitted_at = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(default=0)  # seconds
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.IN_PROGRESS,
        db_index=True,
    )

    class Meta:
        unique_together = ("student", "quiz", "attempt_number")
        ordering = ["-attempt_number", "-id"]

    def __str__(self):
        return f"{self.quiz_id}:{self.student_id} #{self.attempt_number}"
