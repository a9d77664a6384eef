# PATH: apps/domains/crm/services.py
# Reception CRM: leads, status history, conversion to student accounts,
# contact history with its calendar events.

from __future__ import annotations

import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count
from django.utils import timezone

from apps.core.exceptions import DomainError
from trainhub.adapters.db.django import repositories_crm as crm_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import CalendarEvent, ContactRecord, Lead

logger = logging.getLogger(__name__)

User = get_user_model()

S = Lead.Status

OUTCOME_COLORS = {
    ContactRecord.Outcome.SUCCESSFUL: CalendarEvent.Color.GREEN,
    ContactRecord.Outcome.CALLBACK_REQUESTED: CalendarEvent.Color.YELLOW,
    ContactRecord.Outcome.NO_ANSWER: CalendarEvent.Color.GRAY,
    ContactRecord.Outcome.NOT_INTERESTED: CalendarEvent.Color.RED,
    ContactRecord.Outcome.CONVERTED: CalendarEvent.Color.BLUE,
    ContactRecord.Outcome.OTHER: CalendarEvent.Color.PURPLE,
}

COMPANY_ROLES = ("CEO", "CLO", "CTO")

# set by dedicated operations only
PROTECTED_LEAD_FIELDS = (
    "status",
    "is_banned_from_platform",
    "blacklist_reason",
    "converted_student",
    "converted_at",
    "created_by",
)

RECENT_DAYS = 7


# ======================================================
# Leads
# ======================================================

def _clean_mobile(value) -> str:
    mobile = (value or "").strip()
    if not mobile:
        raise DomainError("Full name and mobile number are required")
    return mobile


def create_lead(data: dict, *, by) -> Lead:
    fields = {k: v for k, v in data.items() if k not in PROTECTED_LEAD_FIELDS}
    fields["full_name"] = (fields.get("full_name") or "").strip()
    if not fields["full_name"]:
        raise DomainError("Full name and mobile number are required")
    fields["mobile_number"] = _clean_mobile(fields.get("mobile_number"))

    if crm_repo.lead_mobile_taken(fields["mobile_number"]):
        raise DomainError("A lead with this mobile number already exists", status_code=409)

    lead = crm_repo.lead_create(created_by=by, **fields)
    logger.info("[lead_create] lead_id=%s by=%s", lead.id, getattr(by, "id", None))
    return lead


def update_lead(lead: Lead, data: dict) -> Lead:
    changed = []
    for k, v in data.items():
        if k in PROTECTED_LEAD_FIELDS:
            continue
        if k == "mobile_number":
            v = _clean_mobile(v)
            if crm_repo.lead_mobile_taken(v, exclude_id=lead.id):
                raise DomainError("A lead with this mobile number already exists", status_code=409)
        if k == "full_name" and not (v or "").strip():
            raise DomainError("full_name cannot be empty")
        setattr(lead, k, v)
        changed.append(k)

    if changed:
        lead.save(update_fields=[*changed, "updated_at"])
    logger.info("[lead_update] lead_id=%s fields=%s", lead.id, ",".join(changed))
    return lead


def add_follow_up(lead: Lead, *, note, next_follow_up_date=None, by=None, when=None):
    note = (note or "").strip()
    if not note:
        raise DomainError("Follow-up note is required")

    with DjangoUnitOfWork():
        follow_up = crm_repo.follow_up_create(
            lead=lead,
            note=note,
            date=when or timezone.now(),
            by=by,
        )
        if next_follow_up_date is not None:
            lead.next_follow_up_date = next_follow_up_date
            lead.save(update_fields=["next_follow_up_date", "updated_at"])
    return follow_up


def change_status(lead: Lead, *, new_status, reason, banned: bool = False, by=None) -> Lead:
    """
    Move a lead between interest / student / blacklist. Every move needs a
    reason and lands in the status history.
    """
    if not new_status:
        raise DomainError("New status is required")
    if new_status not in S.values:
        raise DomainError(f"status must be one of {', '.join(S.values)}")
    reason = (reason or "").strip()
    if not reason:
        raise DomainError("Reason is required")

    with DjangoUnitOfWork():
        locked = crm_repo.lead_get_for_update(lead.id)
        old = locked.status
        if old == new_status:
            raise DomainError("Lead is already in this status")

        locked.status = new_status
        if new_status == S.BLACKLIST:
            locked.is_banned_from_platform = bool(banned)
            locked.blacklist_reason = reason[:500]
        elif old == S.BLACKLIST:
            locked.is_banned_from_platform = False
            locked.blacklist_reason = ""
        locked.save(update_fields=["status", "is_banned_from_platform", "blacklist_reason", "updated_at"])

        crm_repo.status_change_create(
            lead=locked,
            from_status=old,
            to_status=new_status,
            reason=reason[:500],
            changed_by=by,
        )

    for f in ("status", "is_banned_from_platform", "blacklist_reason", "updated_at"):
        setattr(lead, f, getattr(locked, f))

    logger.info("[lead_status] lead_id=%s %s->%s", lead.id, old, new_status)
    return lead


def convert_to_student(lead: Lead, *, email, password, username=None, by=None, now=None):
    """
    Create the student account for a lead. Returns (lead, student).
    """
    now = now or timezone.now()
    email = (email or "").strip()
    if not email or not password:
        raise DomainError("Email and password are required to create student account")
    username = (username or email).strip()

    with DjangoUnitOfWork():
        locked = crm_repo.lead_get_for_update(lead.id)
        if locked.converted_student_id is not None:
            raise DomainError("This lead has already been converted to a student", status_code=409)
        if locked.status == S.BLACKLIST and locked.is_banned_from_platform:
            raise DomainError("This lead is banned from the platform", status_code=409)
        if User.objects.filter(email__iexact=email).exists():
            raise DomainError("A user with this email already exists", status_code=409)
        if User.objects.filter(username=username).exists():
            raise DomainError("A user with this username already exists", status_code=409)

        student = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            name=locked.full_name,
            phone=locked.mobile_number[:20],
            role=User.Role.STUDENT,
        )

        old = locked.status
        locked.status = S.STUDENT
        locked.converted_student = student
        locked.converted_at = now
        if old == S.BLACKLIST:
            locked.blacklist_reason = ""
        locked.save(update_fields=["status", "converted_student", "converted_at", "blacklist_reason", "updated_at"])

        if old != S.STUDENT:
            crm_repo.status_change_create(
                lead=locked,
                from_status=old,
                to_status=S.STUDENT,
                reason="Converted to student account",
                changed_by=by,
                changed_at=now,
            )

    logger.info("[lead_convert] lead_id=%s student_id=%s", locked.id, student.id)
    return locked, student


def lead_stats(now=None) -> dict:
    now = now or timezone.now()
    counts = crm_repo.lead_status_counts()
    qs = crm_repo.lead_queryset()
    return {
        "total": sum(counts.values()),
        "interest": counts.get(S.INTEREST, 0),
        "student": counts.get(S.STUDENT, 0),
        "blacklist": counts.get(S.BLACKLIST, 0),
        "recent_leads": qs.filter(created_at__gte=now - timedelta(days=RECENT_DAYS)).count(),
        "needs_follow_up": qs.filter(status=S.INTEREST, next_follow_up_date__lte=now).count(),
    }


# ======================================================
# Calendar events
# ======================================================

def validate_participants(participants) -> list[dict]:
    if participants is None:
        return []
    if not isinstance(participants, list):
        raise DomainError("participants must be a list")

    clean, lead_ids = [], set()
    for p in participants:
        p = p if isinstance(p, dict) else {}
        kind = p.get("type")
        if kind == "lead":
            try:
                lead_id = int(p.get("lead"))
            except (TypeError, ValueError):
                raise DomainError("lead participant needs a lead id")
            lead_ids.add(lead_id)
            clean.append({"type": "lead", "lead": lead_id})
        elif kind == "custom":
            name = (p.get("name") or "").strip()
            if not name:
                raise DomainError("custom participant needs a name")
            clean.append({"type": "custom", "name": name, "phone": (p.get("phone") or "").strip()})
        elif kind == "company":
            if p.get("role") not in COMPANY_ROLES:
                raise DomainError(f"company participant role must be one of {', '.join(COMPANY_ROLES)}")
            clean.append({"type": "company", "role": p["role"]})
        else:
            raise DomainError("participant type must be lead, custom or company")

    missing = lead_ids - crm_repo.existing_lead_ids(lead_ids)
    if missing:
        raise DomainError(f"Lead not found: {', '.join(str(i) for i in sorted(missing))}", status_code=404)
    return clean


def _check_window(start, end) -> None:
    if start is None or end is None:
        raise DomainError("Title, start time, and end time are required")
    if start >= end:
        raise DomainError("End time must be after start time")


def create_event(data: dict, *, by) -> CalendarEvent:
    title = (data.get("title") or "").strip()
    if not title:
        raise DomainError("Title, start time, and end time are required")
    _check_window(data.get("start_time"), data.get("end_time"))
    participants = validate_participants(data.get("participants"))

    event = crm_repo.event_create(
        title=title,
        description=data.get("description") or "",
        start_time=data["start_time"],
        end_time=data["end_time"],
        color=data.get("color") or CalendarEvent.Color.BLUE,
        participants=participants,
        lead=data.get("lead"),
        created_by=by,
    )
    logger.info("[event_create] event_id=%s start=%s", event.id, event.start_time.isoformat())
    return event


def update_event(event: CalendarEvent, data: dict) -> CalendarEvent:
    start = data.get("start_time", event.start_time)
    end = data.get("end_time", event.end_time)
    _check_window(start, end)

    for k in ("title", "description", "color", "lead"):
        if k in data:
            setattr(event, k, data[k])
    if "participants" in data:
        event.participants = validate_participants(data["participants"])
    event.start_time, event.end_time = start, end
    if not (event.title or "").strip():
        raise DomainError("title cannot be empty")
    event.save()
    return event


def events_between(start=None, end=None):
    qs = crm_repo.event_queryset()
    if start is not None:
        qs = qs.filter(start_time__gte=start)
    if end is not None:
        qs = qs.filter(start_time__lte=end)
    return qs.order_by("start_time", "id")


# ======================================================
# Contact history
# ======================================================

def _event_title(record: ContactRecord, lead: Lead) -> str:
    return f"{record.contact_type.capitalize()} with {lead.full_name} - {record.reason}"[:300]


def _event_description(record: ContactRecord) -> str:
    lines = [
        f"Contact Type: {record.contact_type}",
        f"Outcome: {record.outcome.replace('_', ' ')}",
        f"Reason: {record.reason}",
    ]
    if record.notes:
        lines += ["", f"Notes: {record.notes}"]
    return "\n".join(lines)


def _sync_event(record: ContactRecord, event: CalendarEvent, *, title=None, color=None) -> None:
    event.title = title or _event_title(record, record.lead)
    event.description = _event_description(record)
    event.start_time = record.contact_date
    event.end_time = record.contact_date + timedelta(minutes=record.duration or 30)
    event.color = color or OUTCOME_COLORS.get(record.outcome, CalendarEvent.Color.BLUE)
    event.lead = record.lead


def record_contact(lead: Lead, data: dict, *, by) -> ContactRecord:
    """
    Log a call / meeting with a lead. Creates the matching calendar event
    (coloured by outcome) and a follow-up entry on the lead.
    """
    for key in ("contact_type", "reason", "outcome", "contact_date"):
        if not data.get(key):
            raise DomainError("Contact type, call reason, outcome, and contact date are required")

    duration = data.get("duration") or 30
    with DjangoUnitOfWork():
        record = ContactRecord(
            lead=lead,
            contact_type=data["contact_type"],
            reason=data["reason"].strip()[:500],
            outcome=data["outcome"],
            notes=(data.get("notes") or "").strip(),
            contact_date=data["contact_date"],
            duration=duration,
            next_follow_up_date=data.get("next_follow_up_date"),
            created_by=by,
        )
        event = CalendarEvent(
            participants=[{"type": "lead", "lead": lead.id}],
            created_by=by,
        )
        _sync_event(record, event, title=data.get("event_title"), color=data.get("event_color"))
        event.save()

        record.event = event
        record.save()

        if record.next_follow_up_date is not None:
            lead.next_follow_up_date = record.next_follow_up_date
            lead.save(update_fields=["next_follow_up_date", "updated_at"])

        crm_repo.follow_up_create(
            lead=lead,
            note=f"{record.contact_type}: {record.reason} - {record.outcome}",
            date=record.contact_date,
            by=by,
        )

    logger.info(
        "[contact_create] lead_id=%s contact_id=%s outcome=%s event_id=%s",
        lead.id,
        record.id,
        record.outcome,
        event.id,
    )
    return record


CONTACT_FIELDS = ("contact_type", "reason", "outcome", "notes", "contact_date", "duration", "next_follow_up_date")


def update_contact(record: ContactRecord, data: dict) -> ContactRecord:
    with DjangoUnitOfWork():
        for k in CONTACT_FIELDS:
            if k in data:
                setattr(record, k, data[k])
        if not (record.reason or "").strip():
            raise DomainError("reason cannot be empty")
        record.save()

        event = record.event
        if event is not None:
            _sync_event(record, event, title=data.get("event_title"), color=data.get("event_color"))
            event.save()

        if "next_follow_up_date" in data:
            lead = record.lead
            lead.next_follow_up_date = data["next_follow_up_date"]
            lead.save(update_fields=["next_follow_up_date", "updated_at"])

    logger.info("[contact_update] contact_id=%s", record.id)
    return record


def delete_contact(record: ContactRecord) -> None:
    record_id = record.id
    with DjangoUnitOfWork():
        event = record.event
        record.delete()
        if event is not None:
            event.delete()
    logger.info("[contact_delete] contact_id=%s", record_id)


def contact_stats(*, start=None, end=None, lead_id=None) -> dict:
    qs = crm_repo.contact_queryset()
    if lead_id:
        qs = qs.filter(lead_id=lead_id)
    if start is not None:
        qs = qs.filter(contact_date__gte=start)
    if end is not None:
        qs = qs.filter(contact_date__lte=end)

    by_outcome = {r["outcome"]: r["n"] for r in qs.values("outcome").annotate(n=Count("id")).order_by()}
    by_type = {r["contact_type"]: r["n"] for r in qs.values("contact_type").annotate(n=Count("id")).order_by()}
    avg = qs.aggregate(avg=Avg("duration"))["avg"]
    return {
        "total": qs.count(),
        "by_outcome": by_outcome,
        "by_type": by_type,
        "average_duration": round(avg) if avg is not None else 0,
    }
