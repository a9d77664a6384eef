from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.api.common.models import TimestampModel


# ========================================================
# Course content
# ========================================================

class Module(TimestampModel):
    """One ordered unit of a course's self-paced content."""

    class Type(models.TextChoices):
        VIDEO = "video", "Video"
        PDF = "pdf", "PDF"
        TEXT = "text", "Text"
        QUIZ = "quiz", "Quiz"
        ASSIGNMENT = "assignment", "Assignment"
        LIVE_SESSION = "live_session", "Live session"

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="modules",
    )
    title = models.CharField(max_length=200)
    description = models.CharField(max_length=1000, blank=True, default="")
    order = models.PositiveSmallIntegerField(validators=[MinValueValidator(1)])
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.TEXT)

    video_url = models.URLField(blank=True, default="")
    video_duration = models.PositiveIntegerField(null=True, blank=True)  # seconds
    pdf_url = models.URLField(blank=True, default="")
    text_content = models.TextField(blank=True, default="")
    duration = models.PositiveIntegerField(null=True, blank=True)  # minutes
    resources = models.JSONField(default=list, blank=True)

    is_locked = models.BooleanField(default=False)
    unlock_after = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="unlocks",
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["course_id", "order", "id"]
        indexes = [models.Index(fields=["course", "order"], name="learning_module_course_order")]

    def __str__(self):
        return f"{self.course_id}#{self.order} {self.title}"


class ModuleProgress(TimestampModel):
    class Status(models.TextChoices):
        NOT_STARTED = "not_started", "Not started"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"

    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="module_progress",
    )
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name="progress_records")
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="module_progress",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NOT_STARTED,
        db_index=True,
    )
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(default=0)  # seconds

    video_position = models.PositiveIntegerField(default=0)
    video_length = models.PositiveIntegerField(default=0)
    video_completed = models.BooleanField(default=False)

    notes = models.TextField(blank=True, default="")

    class Meta:
        unique_together = ("student", "module")
        ordering = ["module__order", "id"]

    def __str__(self):
        return f"{self.student_id}:{self.module_id} {self.status}"
