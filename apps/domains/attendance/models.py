from django.conf import settings
from django.db import models


# ========================================================
# Attendance
# ========================================================

class Attendance(models.Model):
    class Status(models.TextChoices):
        PRESENT = "present", "Present"
        ABSENT = "absent", "Absent"
        LATE = "late", "Late"
        EXCUSED = "excused", "Excused"

    # statuses that count as "attended" in every rate
    ATTENDED = (Status.PRESENT, Status.LATE)

    session = models.ForeignKey(
        "class_sessions.Session",
        on_delete=models.CASCADE,
        related_name="attendances",
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attendances",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PRESENT,
    )
    notes = models.CharField(max_length=500, blank=True, default="")

    marked_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    marked_at = models.DateTimeField()
    check_in_time = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-marked_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "student"],
                name="unique_attendance_per_session_student",
            )
        ]

    def __str__(self):
        return f"{self.student} / {self.session_id} / {self.status}"

    @property
    def attended(self) -> bool:
        return self.status in self.ATTENDED
