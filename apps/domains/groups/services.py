# PATH: apps/domains/groups/services.py
from __future__ import annotations

import logging

from django.utils import timezone

from apps.core.exceptions import DomainError, RosterError
from apps.core.models import User
from apps.domains.attendance.services import mean_student_rate, per_student_breakdown
from trainhub.adapters.db.django import repositories_attendance as attendance_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo

from .models import Group

logger = logging.getLogger(__name__)


# ======================================================
# Roster
# ======================================================

def add_student(group: Group, student) -> Group:
    if getattr(student, "role", None) != User.Role.STUDENT:
        raise RosterError("Only student accounts can join a group")
    if group.students.filter(id=student.id).exists():
        raise RosterError("Student is already enrolled in this group")
    if group.is_full:
        raise RosterError("Group is full")

    group.students.add(student)
    logger.info("[group_roster] add group_id=%s student_id=%s", group.id, student.id)
    return group


def remove_student(group: Group, student) -> Group:
    if not group.students.filter(id=student.id).exists():
        raise RosterError("Student is not enrolled in this group")

    group.students.remove(student)
    logger.info("[group_roster] remove group_id=%s student_id=%s", group.id, student.id)
    return group


def change_status(group: Group, status: str) -> Group:
    if status not in Group.Status.values:
        raise DomainError(f"status must be one of {', '.join(Group.Status.values)}")
    group.status = status
    group.save(update_fields=["status", "updated_at"])
    return group


def assign_trainer(group: Group, trainer) -> Group:
    if getattr(trainer, "role", None) != User.Role.TRAINER:
        raise DomainError("Assigned user must be a trainer")
    if not trainer.is_active:
        raise DomainError("Trainer account is deactivated")
    group.trainer = trainer
    group.save(update_fields=["trainer", "updated_at"])
    logger.info("[group_assign_trainer] group_id=%s trainer_id=%s", group.id, trainer.id)
    return group


# ======================================================
# Read-time statistics (never stored)
# ======================================================

def average_attendance(group: Group) -> float:
    """
    Mean of per-student attended / total over the group's non-cancelled sessions.
    """
    return mean_student_rate(attendance_repo.attendance_rows_for_group(group))


def group_stats(group: Group, *, today=None) -> dict:
    today = today or timezone.localdate()
    sessions = session_repo.session_filter_group(group)
    counts = session_repo.session_status_counts(sessions)
    upcoming = sessions.filter(status="scheduled", scheduled_date__gte=today).count()

    enrolled = group.enrolled_count
    return {
        "students": {
            "enrolled": enrolled,
            "capacity": group.max_students,
            "utilization_rate": round(enrolled / group.max_students * 100) if group.max_students else 0,
        },
        "sessions": {
            "total": sum(counts.values()),
            "completed": counts.get("completed", 0),
            "upcoming": upcoming,
            "cancelled": counts.get("cancelled", 0),
        },
        "attendance": {
            "average": average_attendance(group),
        },
        "progress": {
            "completed_sessions": group.completed_sessions,
            "total_sessions": group.total_sessions,
            "percentage": group.progress_percentage,
        },
    }


def group_students(group: Group) -> list[dict]:
    """Roster with each student's attendance summary inside this group."""
    breakdown = per_student_breakdown(attendance_repo.attendance_rows_for_group(group))
    empty = {"present": 0, "absent": 0, "late": 0, "excused": 0, "total": 0, "attended": 0, "percentage": 0}
    rows = []
    for s in group.students.all().order_by("name", "id"):
        rows.append({
            "id": s.id,
            "username": s.username,
            "name": s.display_name,
            "email": s.email,
            "attendance": breakdown.get(s.id, empty),
        })
    return rows
