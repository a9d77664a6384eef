from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models

from apps.api.common.models import TimestampModel
from apps.core.services.time_policy import WEEKDAYS


def default_group_color():
    return getattr(settings, "TRAINHUB_DEFAULT_GROUP_COLOR", "#30c59b")


# ========================================================
# Group (cohort)
# ========================================================

class Group(TimestampModel):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        COMPLETED = "completed", "Completed"
        ARCHIVED = "archived", "Archived"
        CANCELLED = "cancelled", "Cancelled"

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, max_length=500)

    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.PROTECT,
        related_name="groups",
    )
    trainer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="trained_groups",
    )
    students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="student_groups",
    )

    max_students = models.PositiveSmallIntegerField(
        default=30,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )

    start_date = models.DateField()
    end_date = models.DateField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )
    color = models.CharField(
        max_length=7,
        default=default_group_color,
        validators=[RegexValidator(r"^#[0-9A-Fa-f]{6}$", "color must be a hex code like #30c59b")],
    )

    # counters maintained by the session lifecycle
    total_sessions = models.PositiveIntegerField(default=0)
    completed_sessions = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-start_date", "-id"]

    def __str__(self):
        return self.name

    @property
    def enrolled_count(self) -> int:
        return self.students.count()

    @property
    def available_seats(self) -> int:
        return max(self.max_students - self.enrolled_count, 0)

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.max_students

    @property
    def progress_percentage(self) -> int:
        if not self.total_sessions:
            return 0
        return round(self.completed_sessions / self.total_sessions * 100)


# ========================================================
# Schedule template
# ========================================================

class GroupScheduleSlot(models.Model):
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="schedule",
    )
    day_of_week = models.CharField(
        max_length=10,
        choices=[(d, d) for d in WEEKDAYS],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    location = models.CharField(max_length=200, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.group.name} {self.day_of_week} {self.start_time:%H:%M}-{self.end_time:%H:%M}"
