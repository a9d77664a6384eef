"""
Course modules and per-student module progress.
"""
from __future__ import annotations


def module_queryset():
    from apps.domains.learning.models import Module
    return Module.objects.select_related("course", "unlock_after")


def module_filter_course(course, *, active_only=True):
    qs = module_queryset().filter(course=course)
    if active_only:
        qs = qs.filter(is_active=True)
    return qs.order_by("order", "id")


def module_filter_courses(course_ids):
    return module_queryset().filter(course_id__in=list(course_ids), is_active=True)


def module_next_order(course) -> int:
    from django.db.models import Max
    from apps.domains.learning.models import Module
    top = Module.objects.filter(course=course).aggregate(m=Max("order"))["m"]
    return (top or 0) + 1


def module_neighbour(module, *, forward: bool):
    qs = module_filter_course(module.course).exclude(id=module.id)
    if forward:
        return qs.filter(order__gt=module.order).order_by("order", "id").first()
    return qs.filter(order__lt=module.order).order_by("-order", "-id").first()


def progress_get(student, module):
    from apps.domains.learning.models import ModuleProgress
    return ModuleProgress.objects.filter(student=student, module=module).first()


def progress_get_or_create(student, module):
    from apps.domains.learning.models import ModuleProgress
    return ModuleProgress.objects.get_or_create(
        student=student,
        module=module,
        defaults={"course_id": module.course_id},
    )


def progress_completed(student, module_id) -> bool:
    from apps.domains.learning.models import ModuleProgress
    return ModuleProgress.objects.filter(
        student=student,
        module_id=module_id,
        status=ModuleProgress.Status.COMPLETED,
    ).exists()


def progress_completed_count(student, course) -> int:
    from apps.domains.learning.models import ModuleProgress
    return ModuleProgress.objects.filter(
        student=student,
        course=course,
        module__is_active=True,
        status=ModuleProgress.Status.COMPLETED,
    ).count()


def progress_filter_student(student, course):
    from apps.domains.learning.models import ModuleProgress
    return ModuleProgress.objects.filter(student=student, course=course).select_related("module")
