# PATH: apps/domains/courses/services.py

from __future__ import annotations

import logging

from apps.core.exceptions import DomainError
from apps.domains.attendance.services import summarize_statuses
from apps.domains.enrollment.models import Enrollment
from apps.domains.groups.models import Group
from trainhub.adapters.db.django import repositories_attendance as attendance_repo
from trainhub.adapters.db.django import repositories_courses as course_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from trainhub.adapters.db.django import repositories_groups as group_repo

from .models import Course

logger = logging.getLogger(__name__)


def delete_course(course: Course) -> None:
    if course_repo.course_has_groups(course):
        raise DomainError("Course has groups; archive it instead of deleting", status_code=409)
    course_id = course.id
    course.delete()
    logger.info("[course_delete] course_id=%s", course_id)


def archive_course(course: Course) -> Course:
    if course.status == Course.Status.ARCHIVED:
        raise DomainError("Course is already archived")
    course.status = Course.Status.ARCHIVED
    course.save(update_fields=["status", "updated_at"])
    logger.info("[course_archive] course_id=%s", course.id)
    return course


def publish_course(course: Course) -> Course:
    if course.status != Course.Status.DRAFT:
        raise DomainError(f"Only draft courses can be published (current: {course.status})")
    course.status = Course.Status.PUBLISHED
    course.save(update_fields=["status", "updated_at"])
    return course


def course_statistics(course: Course) -> dict:
    groups = group_repo.group_filter_course(course)
    enrollments = enroll_repo.enrollment_queryset().filter(course=course)
    active_students = set()
    for g in groups.prefetch_related("students"):
        if g.status == Group.Status.ACTIVE:
            active_students.update(s.id for s in g.students.all())

    attendance = summarize_statuses(
        attendance_repo.attendance_counted()
        .filter(session__course=course)
        .values_list("status", flat=True)
    )
    return {
        "course": {"id": course.id, "title": course.title, "status": course.status},
        "groups": {
            "total": groups.count(),
            "active": groups.filter(status=Group.Status.ACTIVE).count(),
        },
        "enrollments": {
            "total": enrollments.count(),
            "active": enrollments.filter(status=Enrollment.Status.ACTIVE).count(),
        },
        "active_students": len(active_students),
        "attendance_rate": attendance["percentage"],
        "revenue": enroll_repo.payments_completed_total(course=course),
    }
