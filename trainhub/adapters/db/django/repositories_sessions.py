"""
Session queries: .objects access for the sessions domain stays here.
"""
from __future__ import annotations


def session_queryset():
    from apps.domains.sessions.models import Session
    return Session.objects.select_related("group", "course", "trainer")


def session_get(session_id):
    return session_queryset().filter(id=session_id).first()


def session_filter_trainer(trainer):
    return session_queryset().filter(trainer=trainer)


def session_filter_group(group):
    return session_queryset().filter(group=group)


def session_count_group(group) -> int:
    from apps.domains.sessions.models import Session
    return Session.objects.filter(group=group).count()


def session_filter_open_for_attendance(trainer):
    from apps.domains.sessions.models import Session
    return session_filter_trainer(trainer).filter(status__in=Session.ATTENDANCE_OPEN)


def session_filter_date_range(qs, start, end):
    return qs.filter(scheduled_date__gte=start, scheduled_date__lte=end)


def session_create(**fields):
    from apps.domains.sessions.models import Session
    return Session.objects.create(**fields)


def session_status_counts(qs) -> dict:
    from django.db.models import Count
    rows = qs.values("status").annotate(n=Count("id"))
    return {r["status"]: r["n"] for r in rows}


def session_get_for_update(session_id):
    """Row-locked re-read; call inside a transaction."""
    from apps.domains.sessions.models import Session
    return (
        Session.objects.select_for_update()
        .select_related("group", "course", "trainer")
        .get(id=session_id)
    )
