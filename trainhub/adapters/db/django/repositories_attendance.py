"""
Attendance reads / writes: upsert and aggregation inputs.
"""
from __future__ import annotations


def attendance_queryset():
    from apps.domains.attendance.models import Attendance
    return Attendance.objects.select_related(
        "session",
        "session__group",
        "session__course",
        "student",
        "marked_by",
    )


def attendance_filter_session(session):
    return attendance_queryset().filter(session=session)


def attendance_upsert(*, session, student_id, defaults):
    """(session, student) upsert, last write wins."""
    from apps.domains.attendance.models import Attendance
    return Attendance.objects.update_or_create(
        session=session,
        student_id=student_id,
        defaults=defaults,
    )


def attendance_counted():
    """Rows that feed rates: cancelled sessions never count."""
    from apps.domains.attendance.models import Attendance
    from apps.domains.sessions.models import Session
    return Attendance.objects.exclude(session__status=Session.Status.CANCELLED)


def attendance_rows_for_group(group):
    return list(
        attendance_counted()
        .filter(session__group=group)
        .values("student_id", "status")
    )


def attendance_rows_for_groups(group_ids):
    return list(
        attendance_counted()
        .filter(session__group_id__in=list(group_ids))
        .values("session__group_id", "student_id", "status")
    )


def attendance_filter_student(student):
    return attendance_queryset().filter(student=student)


def attendance_filter_trainer(trainer):
    return attendance_queryset().filter(session__trainer=trainer)


def attendance_status_counts(qs) -> dict:
    from django.db.models import Count
    rows = qs.values("status").annotate(n=Count("id"))
    return {r["status"]: r["n"] for r in rows}


def attendance_map_for_students(session, student_ids) -> dict:
    return {
        a.student_id: a
        for a in attendance_queryset().filter(session=session, student_id__in=student_ids)
    }
