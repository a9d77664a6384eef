# PATH: apps/domains/learning/services.py
# Self-paced course modules: unlock rules, per-student progress and course completion.

from __future__ import annotations

import logging

from django.utils import timezone

from apps.core.exceptions import DomainError, OwnershipError
from apps.core.services.time_policy import percentage
from apps.domains.enrollment.models import Enrollment
from apps.domains.enrollment.services import require_enrollment
from trainhub.adapters.db.django import repositories_courses as course_repo
from trainhub.adapters.db.django import repositories_learning as learning_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Module, ModuleProgress

logger = logging.getLogger(__name__)

P = ModuleProgress.Status

MANAGER_ROLES = ("clo", "admin", "superadmin")


# ======================================================
# Authoring
# ======================================================

def check_course_access(user, course) -> None:
    """CLOs edit any course; trainers only courses they instruct or run a group for."""
    if user.is_superuser or getattr(user, "role", None) in MANAGER_ROLES:
        return
    if not course_repo.course_filter_trainer(user).filter(id=course.id).exists():
        raise OwnershipError("You do not have access to this course")


def validate_module(data: dict, *, course, instance: Module | None = None) -> dict:
    unlock_after = data.get("unlock_after")
    if unlock_after is not None:
        if unlock_after.course_id != course.id:
            raise DomainError("unlock_after must be a module of the same course")
        if instance is not None and unlock_after.id == instance.id:
            raise DomainError("A module cannot unlock itself")
    if data.get("is_locked") and unlock_after is None and (
        instance is None or instance.unlock_after_id is None
    ):
        raise DomainError("A locked module needs unlock_after")
    if instance is None and not data.get("order"):
        data["order"] = learning_repo.module_next_order(course)
    return data


# ======================================================
# Student progress
# ======================================================

def ensure_unlocked(module: Module, student) -> None:
    if module.is_locked and module.unlock_after_id:
        if not learning_repo.progress_completed(student, module.unlock_after_id):
            raise OwnershipError("This module is locked. Complete the previous module first.")


def _touch(progress: ModuleProgress, now) -> None:
    progress.last_accessed_at = now


def open_module(module: Module, student, *, now=None) -> ModuleProgress:
    """Content view: completed enrollments may still read."""
    now = now or timezone.now()
    require_enrollment(student, module.course, allow_completed=True)
    ensure_unlocked(module, student)

    progress, _ = learning_repo.progress_get_or_create(student, module)
    _touch(progress, now)
    progress.save(update_fields=["last_accessed_at", "updated_at"])
    return progress


def start_module(module: Module, student, *, now=None) -> ModuleProgress:
    now = now or timezone.now()
    require_enrollment(student, module.course)
    ensure_unlocked(module, student)

    progress, _ = learning_repo.progress_get_or_create(student, module)
    if progress.status == P.NOT_STARTED:
        progress.status = P.IN_PROGRESS
        progress.started_at = now
        logger.info("[module_start] student_id=%s module_id=%s", student.id, module.id)
    _touch(progress, now)
    progress.save()
    return progress


def course_progress(student, course) -> dict:
    total = learning_repo.module_filter_course(course).count()
    completed = learning_repo.progress_completed_count(student, course)
    return {
        "completed_modules": completed,
        "total_modules": total,
        "percentage": percentage(completed, total),
    }


def complete_module(module: Module, student, *, now=None) -> dict:
    """
    Mark the module completed; the enrollment becomes completed once every
    active module of the course is.
    """
    now = now or timezone.now()
    enrollment = require_enrollment(student, module.course)

    progress = learning_repo.progress_get(student, module)
    if progress is None:
        raise DomainError("Module progress not found. Start the module first.")

    with DjangoUnitOfWork():
        if progress.status != P.COMPLETED:
            progress.status = P.COMPLETED
            progress.completed_at = now
        _touch(progress, now)
        progress.save()

        summary = course_progress(student, module.course)
        if summary["percentage"] >= 100 and enrollment.status == Enrollment.Status.ACTIVE:
            enrollment.status = Enrollment.Status.COMPLETED
            enrollment.save(update_fields=["status", "updated_at"])

    logger.info(
        "[module_complete] student_id=%s module_id=%s course_progress=%s%%",
        student.id,
        module.id,
        summary["percentage"],
    )
    return {
        "progress": progress,
        "course_progress": summary,
        "enrollment_status": enrollment.status,
    }


def update_progress(module: Module, student, *, time_spent=None, video=None, notes=None, now=None) -> ModuleProgress:
    now = now or timezone.now()
    require_enrollment(student, module.course, allow_completed=True)

    progress, _ = learning_repo.progress_get_or_create(student, module)
    if time_spent is not None:
        try:
            seconds = int(time_spent)
        except (TypeError, ValueError):
            raise DomainError("time_spent must be a number of seconds")
        if seconds < 0:
            raise DomainError("time_spent cannot be negative")
        progress.time_spent += seconds
    if video:
        progress.video_position = max(int(video.get("current_time") or 0), 0)
        progress.video_length = max(int(video.get("duration") or 0), 0)
        progress.video_completed = bool(video.get("completed"))
    if notes is not None:
        if len(notes) > 5000:
            raise DomainError("notes cannot exceed 5000 characters")
        progress.notes = notes
    _touch(progress, now)
    progress.save()
    return progress


def progress_snapshot(module: Module, student) -> dict:
    progress = learning_repo.progress_get(student, module)
    if progress is None:
        return {
            "module": module.id,
            "status": P.NOT_STARTED,
            "time_spent": 0,
            "video": {"current_time": 0, "duration": 0, "completed": False},
        }
    return {
        "module": module.id,
        "status": progress.status,
        "started_at": progress.started_at,
        "completed_at": progress.completed_at,
        "last_accessed_at": progress.last_accessed_at,
        "time_spent": progress.time_spent,
        "video": {
            "current_time": progress.video_position,
            "duration": progress.video_length,
            "completed": progress.video_completed,
        },
        "notes": progress.notes,
    }


def neighbour(module: Module, *, forward: bool) -> Module | None:
    return learning_repo.module_neighbour(module, forward=forward)
