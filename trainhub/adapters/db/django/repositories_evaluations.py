"""
StudentEvaluation / EvaluationCriteria access.
"""
from __future__ import annotations


def evaluation_queryset():
    from apps.domains.evaluations.models import StudentEvaluation
    return StudentEvaluation.objects.select_related(
        "student",
        "session",
        "group",
        "trainer",
        "criteria",
    )


def evaluation_filter_trainer(trainer):
    return evaluation_queryset().filter(trainer=trainer)


def evaluation_filter_student_shared(student):
    return evaluation_queryset().filter(student=student, shared_with_student=True)


def evaluation_exists(student_id, session) -> bool:
    from apps.domains.evaluations.models import StudentEvaluation
    return StudentEvaluation.objects.filter(student_id=student_id, session=session).exists()


def evaluation_create(**fields):
    from apps.domains.evaluations.models import StudentEvaluation
    return StudentEvaluation.objects.create(**fields)


def evaluation_recent_ratings(trainer, limit=5):
    return list(
        evaluation_filter_trainer(trainer)
        .order_by("-evaluation_date", "-id")
        .values_list("overall_rating", flat=True)[:limit]
    )


def criteria_queryset():
    from apps.domains.evaluations.models import EvaluationCriteria
    return EvaluationCriteria.objects.select_related("course", "created_by").prefetch_related("groups")


def criteria_for_group(group):
    """Newest active group-specific criteria, else newest active course-wide one."""
    from apps.domains.evaluations.models import EvaluationCriteria
    qs = EvaluationCriteria.objects.filter(is_active=True).order_by("-updated_at", "-id")
    specific = qs.filter(applies_to=EvaluationCriteria.AppliesTo.GROUPS, groups=group).first()
    if specific:
        return specific
    return qs.filter(
        applies_to=EvaluationCriteria.AppliesTo.COURSE,
        course_id=group.course_id,
    ).first()
