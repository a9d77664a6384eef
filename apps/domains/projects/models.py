from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.api.common.models import TimestampModel


# ========================================================
# Project
# ========================================================

class Project(TimestampModel):
    class Status(models.TextChoices):
        PLANNING = "planning", "Planning"
        ACTIVE = "active", "Active"
        COMPLETED = "completed", "Completed"

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="projects",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PLANNING,
        db_index=True,
    )
    parts = models.ManyToManyField(
        "inventory.Part",
        through="ProjectPart",
        blank=True,
        related_name="projects",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title


class ProjectPart(models.Model):
    """Bill of materials line: how many of a part the project needs."""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name="project_parts")
    part = models.ForeignKey("inventory.Part", on_delete=models.PROTECT, related_name="project_parts")
    qty = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    class Meta:
        unique_together = ("project", "part")
        ordering = ["id"]

    def __str__(self):
        return f"{self.project_id}:{self.part_id} x{self.qty}"


# ========================================================
# Competition / Team
# ========================================================

class Competition(TimestampModel):
    class Status(models.TextChoices):
        UPCOMING = "upcoming", "Upcoming"
        ONGOING = "ongoing", "Ongoing"
        COMPLETED = "completed", "Completed"

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.UPCOMING,
        db_index=True,
    )

    class Meta:
        ordering = ["-start_date", "-id"]

    def __str__(self):
        return self.name


class Team(TimestampModel):
    name = models.CharField(max_length=100)
    competition = models.ForeignKey(Competition, on_delete=models.CASCADE, related_name="teams")
    coach = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="coached_teams",
    )
    members = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="teams",
    )
    max_members = models.PositiveSmallIntegerField(
        default=5,
        validators=[MinValueValidator(1), MaxValueValidator(50)],
    )

    class Meta:
        unique_together = ("competition", "name")
        ordering = ["competition_id", "name"]

    def __str__(self):
        return f"{self.name} ({self.competition_id})"

    @property
    def member_count(self) -> int:
        return self.members.count()

    @property
    def is_full(self) -> bool:
        return self.member_count >= self.max_members
