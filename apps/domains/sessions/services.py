# PATH: apps/domains/sessions/services.py
# Session lifecycle: scheduled -> in_progress -> completed, cancelled from either open state.
# Transitions happen only through these calls (no timers, no automatic moves).

from __future__ import annotations

import logging
from datetime import date, timedelta

from django.utils import timezone

from apps.core.exceptions import DomainError, InvalidTransition, OwnershipError
from apps.core.services.time_policy import (
    duration_minutes,
    month_bounds,
    to_time,
    week_bounds,
    weekday_index,
)
from apps.support.realtime import services as realtime
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Session

logger = logging.getLogger(__name__)

S = Session.Status

TRANSITIONS = {
    S.SCHEDULED: {S.IN_PROGRESS, S.CANCELLED},
    S.IN_PROGRESS: {S.COMPLETED, S.CANCELLED},
    S.COMPLETED: set(),
    S.CANCELLED: set(),
}

MIN_DURATION = 15
MAX_DURATION = 480

DEFAULT_CANCELLATION_REASON = "Cancelled by trainer"

EDITABLE_FIELDS = ("title", "description", "lesson_plan", "meeting_link", "is_online", "location")
RESCHEDULE_FIELDS = ("scheduled_date", "start_time", "end_time")
LIFECYCLE_FIELDS = (
    "status",
    "actual_start_time",
    "actual_end_time",
    "cancellation_reason",
    "updated_at",
)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def _transition(session: Session, target: str) -> None:
    if not can_transition(session.status, target):
        raise InvalidTransition(
            f"Cannot move session from {session.status} to {target}"
        )
    session.status = target


def _notify(session: Session, action: str) -> None:
    realtime.publish(
        realtime.SESSION_UPDATED,
        {
            "session_id": session.id,
            "group_id": session.group_id,
            "status": session.status,
            "action": action,
        },
        rooms=[f"group:{session.group_id}", realtime.user_room(session.trainer_id)],
    )


def ensure_owner(session: Session, trainer) -> None:
    if session.trainer_id != trainer.id:
        raise OwnershipError("You can only manage your own sessions")


# ======================================================
# Scheduling
# ======================================================

def validate_window(start, end) -> int:
    """Return duration in minutes for a start/end pair or raise."""
    st, et = to_time(start), to_time(end)
    if not st or not et:
        raise DomainError("start_time and end_time must be HH:MM")
    minutes = duration_minutes(st, et)
    if minutes <= 0:
        raise DomainError("end_time must be after start_time")
    if not MIN_DURATION <= minutes <= MAX_DURATION:
        raise DomainError(
            f"Session duration must be between {MIN_DURATION} and {MAX_DURATION} minutes"
        )
    return minutes


def next_slot(group, existing_count: int, *, today: date | None = None):
    """
    Pick date / times for the next session from the group's weekly template.

    Slot index cycles through the template; each full cycle moves one week on.
    Dates are counted from the week of max(today, group start); a date that
    still lands before that base is pushed one week forward.
    """
    slots = group_repo.group_schedule_slots(group)
    if not slots:
        return None

    slot = slots[existing_count % len(slots)]
    week_number = existing_count // len(slots)

    today = today or timezone.localdate()
    base = max(today, group.start_date) if group.start_date else today
    week_start, _ = week_bounds(base)
    scheduled = week_start + timedelta(days=week_number * 7 + weekday_index(slot.day_of_week))
    if scheduled < base:
        scheduled += timedelta(days=7)

    return {
        "scheduled_date": scheduled,
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "location": slot.location,
    }


def create_session(*, trainer, group, data: dict, today: date | None = None) -> Session:
    if group.trainer_id != trainer.id:
        raise OwnershipError("Group not found or does not belong to you")
    if group.status != group.Status.ACTIVE:
        raise DomainError("Sessions can only be added to active groups")

    title = (data.get("title") or "").strip()
    if not title:
        raise DomainError("title is required")

    with DjangoUnitOfWork():
        count = session_repo.session_count_group(group)
        fields = {
            "scheduled_date": data.get("scheduled_date"),
            "start_time": data.get("start_time"),
            "end_time": data.get("end_time"),
            "location": data.get("location") or "",
        }
        if not all(fields[k] for k in RESCHEDULE_FIELDS):
            planned = next_slot(group, count, today=today)
            if planned is None:
                raise DomainError(
                    "scheduled_date, start_time and end_time are required when the group has no schedule"
                )
            for k, v in planned.items():
                if not fields.get(k):
                    fields[k] = v

        duration = validate_window(fields["start_time"], fields["end_time"])

        session = session_repo.session_create(
            group=group,
            course_id=group.course_id,
            trainer=trainer,
            session_number=count + 1,
            title=title,
            description=data.get("description") or "",
            scheduled_date=fields["scheduled_date"],
            start_time=to_time(fields["start_time"]),
            end_time=to_time(fields["end_time"]),
            duration=duration,
            location=fields["location"],
            is_online=bool(data.get("is_online", False)),
            meeting_link=data.get("meeting_link") or "",
            lesson_plan=data.get("lesson_plan") or Session._meta.get_field("lesson_plan").get_default(),
        )
        group_repo.group_adjust_counters(group.id, total=1)

    logger.info(
        "[session_create] session_id=%s group_id=%s number=%s date=%s",
        session.id,
        group.id,
        session.session_number,
        session.scheduled_date,
    )
    _notify(session, "created")
    return session


# ======================================================
# Transitions
# ======================================================

def _apply_locked(session: Session, target: str, **changes) -> Session:
    """
    Re-read the row under lock and move it; the caller's copy may be stale.
    """
    with DjangoUnitOfWork():
        current = session_repo.session_get_for_update(session.id)
        _transition(current, target)
        for field, value in changes.items():
            setattr(current, field, value)
        current.save(update_fields=["status", *changes, "updated_at"])
        if target == S.COMPLETED:
            group_repo.group_adjust_counters(current.group_id, completed=1)

    for field in LIFECYCLE_FIELDS:
        setattr(session, field, getattr(current, field))
    return session


def start_session(session: Session, *, now=None) -> Session:
    _apply_locked(session, S.IN_PROGRESS, actual_start_time=now or timezone.now())
    logger.info("[session_start] session_id=%s", session.id)
    _notify(session, "started")
    return session


def end_session(session: Session, *, now=None) -> Session:
    _apply_locked(session, S.COMPLETED, actual_end_time=now or timezone.now())
    logger.info(
        "[session_end] session_id=%s actual_duration=%s",
        session.id,
        session.actual_duration,
    )
    _notify(session, "completed")
    return session


def cancel_session(session: Session, reason: str | None = None) -> Session:
    reason = (reason or "").strip() or DEFAULT_CANCELLATION_REASON
    if len(reason) > 500:
        raise DomainError("Cancellation reason cannot exceed 500 characters")
    _apply_locked(session, S.CANCELLED, cancellation_reason=reason)
    logger.info("[session_cancel] session_id=%s reason=%r", session.id, reason)
    _notify(session, "cancelled")
    return session


def delete_session(session: Session, *, permanent: bool = False, reason: str | None = None):
    """
    permanent=False: cancel with a reason.
    permanent=True: remove the session with its attendance and evaluations.
    """
    if not permanent:
        return cancel_session(session, reason)

    session_id, group_id = session.id, session.group_id
    was_completed = session.status == S.COMPLETED
    with DjangoUnitOfWork():
        session.delete()
        group_repo.group_adjust_counters(
            group_id,
            total=-1,
            completed=-1 if was_completed else 0,
        )
    logger.info("[session_delete] session_id=%s group_id=%s permanent=True", session_id, group_id)
    realtime.publish(
        realtime.SESSION_UPDATED,
        {"session_id": session_id, "group_id": group_id, "action": "deleted"},
        rooms=[f"group:{group_id}"],
    )
    return None


# ======================================================
# Edits
# ======================================================

def update_session(session: Session, changes: dict) -> Session:
    if session.status == S.COMPLETED:
        raise InvalidTransition("Completed sessions cannot be edited")

    unknown = sorted(set(changes) - set(EDITABLE_FIELDS) - set(RESCHEDULE_FIELDS))
    if unknown:
        raise DomainError(f"Fields cannot be changed: {', '.join(unknown)}")

    touched = []
    for field in EDITABLE_FIELDS:
        if field in changes:
            setattr(session, field, changes[field])
            touched.append(field)

    if any(f in changes for f in RESCHEDULE_FIELDS):
        if session.status != S.SCHEDULED:
            raise InvalidTransition("Only scheduled sessions can be rescheduled")
        for field in RESCHEDULE_FIELDS:
            if field in changes:
                value = changes[field]
                if field != "scheduled_date":
                    value = to_time(value)
                setattr(session, field, value)
                touched.append(field)
        session.duration = validate_window(session.start_time, session.end_time)
        touched.append("duration")

    if touched:
        session.save(update_fields=touched + ["updated_at"])
        _notify(session, "updated")
    return session


def update_lesson_plan(session: Session, plan) -> Session:
    if not isinstance(plan, dict):
        raise DomainError("lesson_plan must be an object")
    merged = {**(session.lesson_plan or {}), **plan}
    return update_session(session, {"lesson_plan": merged})


# ======================================================
# Queries
# ======================================================

def calendar_range(view: str, anchor: date) -> tuple[date, date]:
    if view == "day":
        return anchor, anchor
    if view == "week":
        return week_bounds(anchor)
    if view == "month":
        return month_bounds(anchor)
    raise DomainError("view must be one of day, week, month")


def calendar(trainer, view: str, anchor: date):
    start, end = calendar_range(view, anchor)
    qs = session_repo.session_filter_date_range(
        session_repo.session_filter_trainer(trainer), start, end
    )
    return start, end, qs.order_by("scheduled_date", "start_time")


def available_for_attendance(trainer):
    return session_repo.session_filter_open_for_attendance(trainer).order_by(
        "scheduled_date", "start_time"
    )
