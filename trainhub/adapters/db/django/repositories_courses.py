"""
Course access: catalogue reads for services and views.
"""
from __future__ import annotations


def course_queryset():
    from apps.domains.courses.models import Course
    return Course.objects.select_related("instructor", "created_by")


def course_filter_status(*statuses):
    return course_queryset().filter(status__in=list(statuses))


def course_filter_trainer(trainer):
    """Courses a trainer instructs or runs a group for."""
    from django.db.models import Q
    return course_queryset().filter(
        Q(instructor=trainer) | Q(groups__trainer=trainer)
    ).distinct()


def course_has_groups(course) -> bool:
    from apps.domains.groups.models import Group
    return Group.objects.filter(course=course).exists()


def course_status_counts() -> dict:
    from django.db.models import Count
    from apps.domains.courses.models import Course
    rows = Course.objects.values("status").annotate(n=Count("id"))
    return {r["status"]: r["n"] for r in rows}
