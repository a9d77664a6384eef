"""
Group / roster / schedule access for services and views.
"""
from __future__ import annotations


def group_queryset():
    from apps.domains.groups.models import Group
    return (
        Group.objects.select_related("course", "trainer")
        .prefetch_related("schedule")
    )


def group_filter_trainer(trainer):
    return group_queryset().filter(trainer=trainer)


def group_filter_course(course):
    return group_queryset().filter(course=course)


def group_filter_active():
    from apps.domains.groups.models import Group
    return group_queryset().filter(status=Group.Status.ACTIVE)


def group_filter_student(student):
    return group_queryset().filter(students=student)


def group_schedule_slots(group):
    return list(group.schedule.all().order_by("id"))


def group_roster_has(group, student_id) -> bool:
    return group.students.filter(id=student_id).exists()


def group_roster_ids(group) -> set:
    return set(group.students.values_list("id", flat=True))


def group_adjust_counters(group_id, *, total=0, completed=0):
    """Counter deltas via F() so concurrent lifecycle calls do not clobber each other."""
    from django.db.models import F
    from django.db.models.functions import Greatest
    from apps.domains.groups.models import Group

    updates = {}
    if total:
        updates["total_sessions"] = Greatest(F("total_sessions") + total, 0)
    if completed:
        updates["completed_sessions"] = Greatest(F("completed_sessions") + completed, 0)
    if updates:
        Group.objects.filter(id=group_id).update(**updates)


def group_student_count_for_trainer(trainer) -> int:
    """Distinct students across the trainer's active groups."""
    from apps.core.models import User
    from apps.domains.groups.models import Group
    return (
        User.objects.filter(
            student_groups__trainer=trainer,
            student_groups__status=Group.Status.ACTIVE,
        )
        .distinct()
        .count()
    )
