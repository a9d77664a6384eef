from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.api.common.models import TimestampModel


# ========================================================
# Leads
# ========================================================

class Lead(TimestampModel):
    """
    A prospect reception is talking to. Becomes a student account on
    conversion; the lead row stays as the sales record.
    """

    class Status(models.TextChoices):
        INTEREST = "interest", "Interest"
        STUDENT = "student", "Student"
        BLACKLIST = "blacklist", "Blacklist"

    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"

    full_name = models.CharField(max_length=200)
    english_name = models.CharField(max_length=200, blank=True, default="")
    first_name = models.CharField(max_length=100, blank=True, default="")
    last_name = models.CharField(max_length=100, blank=True, default="")
    gender = models.CharField(max_length=10, choices=Gender.choices, blank=True, default="")

    father_name = models.CharField(max_length=200, blank=True, default="")
    mother_name = models.CharField(max_length=200, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    age = models.PositiveSmallIntegerField(null=True, blank=True)
    residence = models.CharField(max_length=200, blank=True, default="")
    school_name = models.CharField(max_length=200, blank=True, default="")

    mobile_number = models.CharField(max_length=30, db_index=True)
    mobile_number_label = models.CharField(max_length=50, blank=True, default="Main")
    # [{"number": "...", "label": "..."}]
    additional_numbers = models.JSONField(default=list, blank=True)
    # [{"platform": "...", "handle": "..."}]
    social_media = models.JSONField(default=list, blank=True)

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_leads",
    )
    interest_field = models.CharField(max_length=200, blank=True, default="")
    referral_source = models.CharField(max_length=200, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.INTEREST,
        db_index=True,
    )
    is_banned_from_platform = models.BooleanField(default=False)
    blacklist_reason = models.CharField(max_length=500, blank=True, default="")

    next_follow_up_date = models.DateTimeField(null=True, blank=True, db_index=True)

    converted_student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="source_leads",
    )
    converted_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.full_name} ({self.mobile_number})"

    @property
    def calculated_age(self):
        if not self.date_of_birth:
            return self.age
        today = timezone.localdate()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


class LeadFollowUp(models.Model):
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name="follow_ups")
    note = models.TextField()
    date = models.DateTimeField(default=timezone.now)
    by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-date", "-id"]


class LeadStatusChange(models.Model):
    """Append-only status history of a lead."""

    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name="status_history")
    from_status = models.CharField(max_length=20, choices=Lead.Status.choices, blank=True, default="")
    to_status = models.CharField(max_length=20, choices=Lead.Status.choices)
    reason = models.CharField(max_length=500)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    changed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["changed_at", "id"]


# ========================================================
# Calendar
# ========================================================

class CalendarEvent(TimestampModel):
    class Color(models.TextChoices):
        BLUE = "blue", "Blue"
        GREEN = "green", "Green"
        RED = "red", "Red"
        YELLOW = "yellow", "Yellow"
        PURPLE = "purple", "Purple"
        GRAY = "gray", "Gray"

    title = models.CharField(max_length=300)
    description = models.TextField(blank=True, default="")
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()
    color = models.CharField(max_length=10, choices=Color.choices, default=Color.BLUE)

    # [{"type": "lead", "lead": 3} | {"type": "custom", "name": "...", "phone": "..."}
    #  | {"type": "company", "role": "CEO"}]
    participants = models.JSONField(default=list, blank=True)
    lead = models.ForeignKey(
        Lead,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="events",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["start_time", "id"]

    def __str__(self):
        return f"{self.title} @ {self.start_time:%Y-%m-%d %H:%M}"


# ========================================================
# Contact history
# ========================================================

class ContactRecord(TimestampModel):
    """One call / meeting with a lead. Owns the calendar event created for it."""

    class ContactType(models.TextChoices):
        CALL = "call", "Call"
        MEETING = "meeting", "Meeting"
        EMAIL = "email", "Email"
        OTHER = "other", "Other"

    class Outcome(models.TextChoices):
        SUCCESSFUL = "successful", "Successful"
        NO_ANSWER = "no_answer", "No answer"
        CALLBACK_REQUESTED = "callback_requested", "Callback requested"
        NOT_INTERESTED = "not_interested", "Not interested"
        CONVERTED = "converted", "Converted"
        OTHER = "other", "Other"

    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name="contacts")
    contact_type = models.CharField(max_length=20, choices=ContactType.choices, db_index=True)
    reason = models.CharField(max_length=500)
    outcome = models.CharField(max_length=30, choices=Outcome.choices, db_index=True)
    notes = models.TextField(blank=True, default="")
    contact_date = models.DateTimeField()
    duration = models.PositiveIntegerField(default=30)  # minutes

    event = models.OneToOneField(
        CalendarEvent,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="contact",
    )
    next_follow_up_date = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["-contact_date", "-id"]
        indexes = [models.Index(fields=["lead", "-contact_date"], name="crm_contact_lead_date")]

    def __str__(self):
        return f"{self.contact_type} {self.lead_id} {self.outcome}"
