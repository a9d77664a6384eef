# PATH: apps/domains/dashboards/services.py
# Role dashboards. Nothing here is stored: every number is recomputed from
# sessions / attendance / enrollments / evaluations on each call.

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Count, Q
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.core.models import User
from apps.core.services.time_policy import percentage, week_bounds
from apps.domains.attendance.services import mean_student_rate, summarize_statuses
from apps.domains.courses.models import Course
from apps.domains.enrollment.models import Enrollment
from apps.domains.groups.models import Group
from apps.domains.sessions.models import Session
from trainhub.adapters.db.django import repositories_attendance as attendance_repo
from trainhub.adapters.db.django import repositories_core as core_repo
from trainhub.adapters.db.django import repositories_courses as course_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from trainhub.adapters.db.django import repositories_evaluations as eval_repo
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo

logger = logging.getLogger(__name__)

TOP_TRAINERS = 5
RECENT_EVALUATIONS = 5
RECENT_ITEMS = 5


def _session_row(s: Session) -> dict:
    return {
        "id": s.id,
        "title": s.title,
        "group_id": s.group_id,
        "group_name": s.group.name,
        "scheduled_date": s.scheduled_date,
        "start_time": s.start_time,
        "end_time": s.end_time,
        "location": s.location,
        "is_online": s.is_online,
        "status": s.status,
    }


def group_rates(group_ids) -> dict:
    """{group_id: mean per-student attendance rate}"""
    rows_by_group = defaultdict(list)
    for r in attendance_repo.attendance_rows_for_groups(group_ids):
        rows_by_group[r["session__group_id"]].append(r)
    return {gid: mean_student_rate(rows_by_group.get(gid, [])) for gid in group_ids}


# ======================================================
# Trainer
# ======================================================

def trainer_dashboard_stats(trainer, *, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    week_start, week_end = week_bounds(today)

    sessions = session_repo.session_filter_trainer(trainer)
    todays = list(sessions.filter(scheduled_date=today).order_by("start_time"))
    active_groups = group_repo.group_filter_trainer(trainer).filter(status=Group.Status.ACTIVE)

    ratings = eval_repo.evaluation_recent_ratings(trainer, limit=RECENT_EVALUATIONS)

    return {
        "active_groups": active_groups.count(),
        "todays_sessions": len(todays),
        "completed_today": sum(1 for s in todays if s.status == Session.Status.COMPLETED),
        "week_sessions": session_repo.session_filter_date_range(sessions, week_start, week_end).count(),
        "total_students": group_repo.group_student_count_for_trainer(trainer),
        "upcoming_sessions": sessions.filter(
            status=Session.Status.SCHEDULED,
            scheduled_date__gte=today,
        ).count(),
        "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0,
        "todays_sessions_list": [_session_row(s) for s in todays],
    }


def trainer_schedule(trainer, *, day: date | None = None) -> list[dict]:
    day = day or timezone.localdate()
    qs = session_repo.session_filter_trainer(trainer).filter(scheduled_date=day)
    return [_session_row(s) for s in qs.order_by("start_time")]


def trainer_performance(trainer, *, period_days: int = 30, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    since = today - timedelta(days=period_days)

    groups = list(group_repo.group_filter_trainer(trainer))
    rates = group_rates([g.id for g in groups])

    counted = attendance_repo.attendance_counted().filter(session__trainer=trainer)
    overall = summarize_statuses(counted.values_list("status", flat=True))

    trend = defaultdict(list)
    for day, status in counted.filter(
        session__scheduled_date__gte=since,
        session__scheduled_date__lte=today,
    ).values_list("session__scheduled_date", "status"):
        trend[day].append(status)

    evaluations = eval_repo.evaluation_filter_trainer(trainer)
    ratings = list(evaluations.values_list("overall_rating", flat=True))
    sessions = session_repo.session_filter_trainer(trainer)

    return {
        "trainer": {"id": trainer.id, "name": trainer.display_name},
        "period_days": period_days,
        "groups": [
            {
                "id": g.id,
                "name": g.name,
                "status": g.status,
                "students": g.enrolled_count,
                "average_attendance": rates.get(g.id, 0.0),
                "progress": g.progress_percentage,
            }
            for g in groups
        ],
        "attendance_rate": overall["percentage"],
        "attendance_trends": [
            {"date": d, **summarize_statuses(statuses)}
            for d, statuses in sorted(trend.items())
        ],
        "sessions": session_repo.session_status_counts(sessions),
        "evaluations": {
            "total": len(ratings),
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0,
        },
    }


# ======================================================
# CLO
# ======================================================

def top_trainers(limit: int = TOP_TRAINERS) -> list[dict]:
    """Trainers ranked by the mean of their active groups' average attendance."""
    groups = list(group_repo.group_filter_active())
    rates = group_rates([g.id for g in groups])

    per_trainer = defaultdict(list)
    names = {}
    for g in groups:
        per_trainer[g.trainer_id].append(rates[g.id])
        names[g.trainer_id] = g.trainer.display_name

    ranked = sorted(
        (
            {
                "trainer_id": tid,
                "name": names[tid],
                "groups": len(values),
                "average_attendance": round(sum(values) / len(values), 1),
            }
            for tid, values in per_trainer.items()
        ),
        key=lambda r: (-r["average_attendance"], r["trainer_id"]),
    )
    return ranked[:limit]


def clo_dashboard(*, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    enrollments = enroll_repo.enrollment_queryset()
    total_enrollments = enrollments.count()
    completed = enrollments.filter(status=Enrollment.Status.COMPLETED).count()
    course_counts = course_repo.course_status_counts()

    attendance = summarize_statuses(
        attendance_repo.attendance_counted().values_list("status", flat=True)
    )

    return {
        "overview": {
            "trainers": core_repo.user_count_role(User.Role.TRAINER),
            "students": core_repo.user_count_role(User.Role.STUDENT),
            "courses": {
                "total": sum(course_counts.values()),
                "published": course_counts.get(Course.Status.PUBLISHED, 0),
                "draft": course_counts.get(Course.Status.DRAFT, 0),
            },
            "groups": {
                "total": group_repo.group_queryset().count(),
                "active": group_repo.group_filter_active().count(),
            },
            "enrollments": {
                "total": total_enrollments,
                "active": enrollments.filter(status=Enrollment.Status.ACTIVE).count(),
                "last_30_days": enrollments.filter(
                    enrolled_at__date__gte=today - timedelta(days=30)
                ).count(),
            },
        },
        "performance": {
            "attendance_rate": attendance["percentage"],
            "completion_rate": round(completed / total_enrollments * 100, 1) if total_enrollments else 0,
        },
        "top_trainers": top_trainers(),
        "recent_activity": {
            "groups": [
                {"id": g.id, "name": g.name, "course": g.course.title, "created_at": g.created_at}
                for g in group_repo.group_queryset().order_by("-created_at", "-id")[:RECENT_ITEMS]
            ],
            "courses": [
                {"id": c.id, "title": c.title, "status": c.status, "created_at": c.created_at}
                for c in course_repo.course_queryset().order_by("-created_at", "-id")[:RECENT_ITEMS]
            ],
        },
    }


def clo_analytics(*, period_days: int = 30, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    since = today - timedelta(days=period_days)
    logger.debug("[clo_analytics] period_days=%s since=%s", period_days, since)

    enrollment_trends = (
        enroll_repo.enrollment_queryset()
        .filter(enrolled_at__date__gte=since)
        .annotate(day=TruncDate("enrolled_at"))
        .values("day")
        .annotate(count=Count("id"))
        .order_by("day")
    )

    per_day = defaultdict(list)
    for day, status in attendance_repo.attendance_counted().filter(
        session__scheduled_date__gte=since,
        session__scheduled_date__lte=today,
    ).values_list("session__scheduled_date", "status"):
        per_day[day].append(status)

    popularity = (
        enroll_repo.enrollment_queryset()
        .values("course_id", "course__title")
        .annotate(
            enrollments=Count("id"),
            active=Count("id", filter=Q(status=Enrollment.Status.ACTIVE)),
            completed=Count("id", filter=Q(status=Enrollment.Status.COMPLETED)),
        )
        .order_by("-enrollments", "course_id")
    )

    workload = defaultdict(lambda: {"groups": 0, "sessions": 0, "students": 0})
    names = {}
    for g in group_repo.group_filter_active().prefetch_related("students"):
        row = workload[g.trainer_id]
        row["groups"] += 1
        row["students"] += g.students.count()
        names[g.trainer_id] = g.trainer.display_name
    for tid, n in (
        session_repo.session_queryset()
        .filter(scheduled_date__gte=since, scheduled_date__lte=today)
        .values_list("trainer_id")
        .annotate(n=Count("id"))
    ):
        if tid in workload:
            workload[tid]["sessions"] = n

    return {
        "period_days": period_days,
        "enrollment_trends": [
            {"date": r["day"], "count": r["count"]} for r in enrollment_trends
        ],
        "attendance_trends": [
            {"date": d, **summarize_statuses(statuses)} for d, statuses in sorted(per_day.items())
        ],
        "course_popularity": [
            {
                "course_id": r["course_id"],
                "title": r["course__title"],
                "enrollments": r["enrollments"],
                "active": r["active"],
                "completed": r["completed"],
                "completion_rate": percentage(r["completed"], r["enrollments"]),
            }
            for r in popularity
        ],
        "trainer_workload": [
            {"trainer_id": tid, "name": names[tid], **row}
            for tid, row in sorted(workload.items())
        ],
    }


# ======================================================
# Student
# ======================================================

def student_dashboard(student, *, today: date | None = None, upcoming_limit: int = 5) -> dict:
    today = today or timezone.localdate()
    enrollments = list(enroll_repo.enrollment_filter_student(student))
    groups = list(group_repo.group_filter_student(student))

    attendance = summarize_statuses(
        attendance_repo.attendance_counted().filter(student=student).values_list("status", flat=True)
    )
    upcoming = (
        session_repo.session_queryset()
        .filter(
            group__in=groups,
            status=Session.Status.SCHEDULED,
            scheduled_date__gte=today,
        )
        .order_by("scheduled_date", "start_time")[:upcoming_limit]
    )

    total = sum((e.total_amount for e in enrollments), Decimal("0"))
    paid = sum((e.paid_amount for e in enrollments), Decimal("0"))

    return {
        "courses": [
            {
                "enrollment_id": e.id,
                "course_id": e.course_id,
                "title": e.course.title,
                "status": e.status,
                "group": e.group.name if e.group_id else None,
            }
            for e in enrollments
        ],
        "groups": [
            {"id": g.id, "name": g.name, "course": g.course.title, "trainer": g.trainer.display_name}
            for g in groups
        ],
        "attendance": {
            "rate": attendance["percentage"],
            "attended": attendance["attended"],
            "total": attendance["total"],
            "absent": attendance["absent"],
        },
        "upcoming_sessions": [_session_row(s) for s in upcoming],
        "payments": {
            "total_amount": total,
            "paid_amount": paid,
            "balance": max(total - paid, Decimal("0")),
        },
    }
