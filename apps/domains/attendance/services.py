# PATH: apps/domains/attendance/services.py
# Attendance recording gate + the rate math every dashboard reuses.

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.exceptions import AttendanceLocked, DomainError, RosterError
from apps.core.services.time_policy import percentage
from apps.support.realtime import services as realtime
from trainhub.adapters.db.django import repositories_attendance as attendance_repo
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Attendance

logger = logging.getLogger(__name__)

STATUS_VALUES = tuple(Attendance.Status.values)


# ======================================================
# Aggregation helpers
# ======================================================

def summarize_statuses(statuses: Iterable[str]) -> dict:
    """
    Counts per status plus the attended rate.
    attended = present + late, rate = round(attended / total * 100)
    """
    counts = {s: 0 for s in STATUS_VALUES}
    for s in statuses:
        if s in counts:
            counts[s] += 1
    total = sum(counts.values())
    attended = counts[Attendance.Status.PRESENT] + counts[Attendance.Status.LATE]
    return {
        **counts,
        "total": total,
        "attended": attended,
        "percentage": percentage(attended, total),
    }


def per_student_breakdown(rows: Iterable[dict]) -> dict:
    """rows: dicts with student_id / status -> {student_id: summary}"""
    by_student = defaultdict(list)
    for r in rows:
        by_student[r["student_id"]].append(r["status"])
    return {sid: summarize_statuses(statuses) for sid, statuses in by_student.items()}


def mean_student_rate(rows: Iterable[dict]) -> float:
    """
    Mean over students of attended / total, as a percentage (1 decimal).
    Students without any counted record do not take part in the mean.
    """
    breakdown = per_student_breakdown(rows)
    rates = [b["attended"] / b["total"] for b in breakdown.values() if b["total"]]
    if not rates:
        return 0.0
    return round(sum(rates) / len(rates) * 100, 1)


# ======================================================
# Recording
# ======================================================

def ensure_attendance_open(session) -> None:
    if not session.can_take_attendance:
        raise AttendanceLocked(
            f"Attendance cannot be changed for a {session.status} session"
        )


def _normalize_records(records) -> list[dict]:
    if not isinstance(records, list) or not records:
        raise DomainError("records must be a non-empty list")

    normalized = {}
    for idx, raw in enumerate(records, start=1):
        raw = raw if isinstance(raw, dict) else {}
        student_id = raw.get("student") or raw.get("student_id")
        status = (raw.get("status") or "").strip().lower()
        if not student_id:
            raise DomainError(f"record {idx}: student is required")
        if status not in STATUS_VALUES:
            raise DomainError(
                f"record {idx}: status must be one of {', '.join(STATUS_VALUES)}"
            )
        notes = (raw.get("notes") or "").strip()
        if len(notes) > 500:
            raise DomainError(f"record {idx}: notes cannot exceed 500 characters")
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            raise DomainError(f"record {idx}: invalid student id {student_id!r}")
        check_in = raw.get("check_in_time")
        if isinstance(check_in, str):
            parsed = parse_datetime(check_in)
            if parsed is None:
                raise DomainError(f"record {idx}: invalid check_in_time {check_in!r}")
            check_in = parsed
        # the same student twice in one batch: the later entry wins
        normalized[student_id] = {
            "student_id": student_id,
            "status": status,
            "notes": notes,
            "check_in_time": check_in or None,
        }
    return list(normalized.values())


def _check_in_time(item: dict, previous, now):
    if item["status"] not in Attendance.ATTENDED:
        return None
    if item.get("check_in_time"):
        return item["check_in_time"]
    if previous is not None and previous.status in Attendance.ATTENDED and previous.check_in_time:
        return previous.check_in_time
    return now


def record_attendance(session, records, *, marked_by, now=None) -> dict:
    """
    Upsert one attendance row per (session, student).

    - rejected unless the session is scheduled / in_progress
    - every student must be on the session's group roster
    - the whole batch is written in one transaction
    - a student who was already checked in keeps the first check-in stamp
    """
    ensure_attendance_open(session)
    items = _normalize_records(records)

    roster = group_repo.group_roster_ids(session.group)
    outsiders = sorted(i["student_id"] for i in items if i["student_id"] not in roster)
    if outsiders:
        raise RosterError(
            f"Students not in group {session.group_id}: {', '.join(map(str, outsiders))}"
        )

    now = now or timezone.now()
    saved = []
    created_count = 0

    with DjangoUnitOfWork():
        # the session may have been completed or cancelled since it was loaded
        locked = session_repo.session_get_for_update(session.id)
        ensure_attendance_open(locked)

        previous = attendance_repo.attendance_map_for_students(
            locked, [i["student_id"] for i in items]
        )
        for item in items:
            obj, created = attendance_repo.attendance_upsert(
                session=locked,
                student_id=item["student_id"],
                defaults={
                    "status": item["status"],
                    "notes": item["notes"],
                    "marked_by": marked_by,
                    "marked_at": now,
                    "check_in_time": _check_in_time(item, previous.get(item["student_id"]), now),
                },
            )
            saved.append(obj)
            if created:
                created_count += 1

    logger.info(
        "[attendance_record] session_id=%s records=%s created=%s updated=%s by=%s",
        session.id,
        len(saved),
        created_count,
        len(saved) - created_count,
        getattr(marked_by, "id", None),
    )

    summary = summarize_statuses(a.status for a in saved)
    realtime.publish(
        realtime.ATTENDANCE_SAVED,
        {"session_id": session.id, "group_id": session.group_id, "summary": summary},
        rooms=[f"group:{session.group_id}", realtime.role_room("clo")],
    )
    return {
        "records": saved,
        "created": created_count,
        "updated": len(saved) - created_count,
        "summary": summary,
    }


def session_sheet(session) -> list[dict]:
    """Roster x existing records; unmarked students come back with status None."""
    existing = {a.student_id: a for a in attendance_repo.attendance_filter_session(session)}
    rows = []
    for student in session.group.students.all().order_by("name", "id"):
        a = existing.get(student.id)
        rows.append({
            "student_id": student.id,
            "student_name": student.display_name,
            "attendance_id": a.id if a else None,
            "status": a.status if a else None,
            "notes": a.notes if a else "",
            "marked_at": a.marked_at if a else None,
            "check_in_time": a.check_in_time if a else None,
        })
    return rows


# ======================================================
# Read models
# ======================================================

def clo_attendance_stats(qs=None) -> dict:
    """
    Platform-wide numbers for the CLO attendance screen.
    """
    qs = qs if qs is not None else attendance_repo.attendance_counted()
    statuses = list(qs.values_list("status", flat=True))
    summary = summarize_statuses(statuses)
    session_ids = set(qs.values_list("session_id", flat=True))

    per_session = defaultdict(list)
    for sid, status in qs.values_list("session_id", "status"):
        per_session[sid].append(status)
    session_rates = [summarize_statuses(v)["percentage"] for v in per_session.values()]

    return {
        "total_sessions": len(session_ids),
        "total_student_records": summary["total"],
        "overall_attendance_rate": summary["percentage"],
        "status_distribution": {s: summary[s] for s in STATUS_VALUES},
        "average_session_attendance": (
            round(sum(session_rates) / len(session_rates), 1) if session_rates else 0
        ),
    }


def course_attendance(course) -> dict:
    """Per group and per student attendance inside one course."""
    qs = attendance_repo.attendance_counted().filter(session__course=course)
    rows = list(qs.values("session__group_id", "session__group__name", "student_id", "student__name", "student__username", "status"))

    groups = defaultdict(list)
    names = {}
    for r in rows:
        groups[(r["session__group_id"], r["session__group__name"])].append(r["status"])
        names[r["student_id"]] = r["student__name"] or r["student__username"]

    students = per_student_breakdown(rows)
    return {
        "course": {"id": course.id, "title": course.title},
        "summary": summarize_statuses(r["status"] for r in rows),
        "groups": [
            {"group_id": gid, "group_name": gname, **summarize_statuses(statuses)}
            for (gid, gname), statuses in sorted(groups.items(), key=lambda kv: kv[0][0])
        ],
        "students": [
            {"student_id": sid, "student_name": names.get(sid), **summary}
            for sid, summary in sorted(students.items())
        ],
    }


def student_overview(student, *, recent_limit=10) -> dict:
    """
    Per-course rates for one student plus the latest records.
    """
    qs = attendance_repo.attendance_counted().filter(student=student)
    by_course = defaultdict(list)
    titles = {}
    for cid, title, status in qs.values_list("session__course_id", "session__course__title", "status"):
        by_course[cid].append(status)
        titles[cid] = title

    recent = (
        attendance_repo.attendance_filter_student(student)
        .order_by("-session__scheduled_date", "-marked_at")[:recent_limit]
    )
    return {
        "overall": summarize_statuses(qs.values_list("status", flat=True)),
        "courses": [
            {"course_id": cid, "course_title": titles[cid], **summarize_statuses(statuses)}
            for cid, statuses in sorted(by_course.items())
        ],
        "recent": recent,
    }


def student_course_records(student, course, *, year=None, month=None):
    qs = attendance_repo.attendance_filter_student(student).filter(session__course=course)
    if year and month:
        qs = qs.filter(session__scheduled_date__year=year, session__scheduled_date__month=month)
    return qs.order_by("session__scheduled_date", "session__start_time")
