from datetime import datetime

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.api.common.models import TimestampModel


def default_lesson_plan():
    return {
        "objectives": [],
        "outline": "",
        "materials_needed": [],
        "notes": "",
    }


# ========================================================
# Session (one class meeting of a group)
# ========================================================

class Session(TimestampModel):
    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    # attendance may only be written while the session is in one of these
    ATTENDANCE_OPEN = (Status.SCHEDULED, Status.IN_PROGRESS)

    group = models.ForeignKey(
        "groups.Group",
        on_delete=models.CASCADE,
        related_name="sessions",
    )
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="sessions",
    )
    trainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="trained_sessions",
    )

    session_number = models.PositiveIntegerField(default=1)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, max_length=1000)

    scheduled_date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration = models.PositiveIntegerField(
        help_text="minutes",
        validators=[MinValueValidator(15), MaxValueValidator(480)],
    )

    is_online = models.BooleanField(default=False)
    meeting_link = models.URLField(blank=True, default="")
    location = models.CharField(max_length=200, blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SCHEDULED,
        db_index=True,
    )
    cancellation_reason = models.CharField(max_length=500, blank=True, default="")

    lesson_plan = models.JSONField(default=default_lesson_plan, blank=True)

    actual_start_time = models.DateTimeField(null=True, blank=True)
    actual_end_time = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["scheduled_date", "start_time", "id"]
        indexes = [
            models.Index(fields=["group", "scheduled_date"], name="session_group_date_idx"),
            models.Index(fields=["trainer", "scheduled_date"], name="session_trainer_date_idx"),
        ]

    def __str__(self):
        return f"{self.group.name} - #{self.session_number} {self.title}"

    @property
    def can_take_attendance(self) -> bool:
        return self.status in self.ATTENDANCE_OPEN

    @property
    def actual_duration(self):
        """Minutes between the start / end stamps, None until the session has ended."""
        if not (self.actual_start_time and self.actual_end_time):
            return None
        return int((self.actual_end_time - self.actual_start_time).total_seconds() // 60)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.scheduled_date, self.start_time)
