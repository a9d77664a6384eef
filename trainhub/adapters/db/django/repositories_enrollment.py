"""
Enrollment / Installment / Payment access: .objects stays inside adapters.
"""
from __future__ import annotations


def enrollment_queryset():
    from apps.domains.enrollment.models import Enrollment
    return Enrollment.objects.select_related("student", "course", "group")


def enrollment_filter_student(student):
    return enrollment_queryset().filter(student=student)


def enrollment_get_for_update(enrollment_id):
    from apps.domains.enrollment.models import Enrollment
    return Enrollment.objects.select_for_update().get(id=enrollment_id)


def enrollment_exists(student, course) -> bool:
    from apps.domains.enrollment.models import Enrollment
    return Enrollment.objects.filter(student=student, course=course).exists()


def enrollment_create(**fields):
    from apps.domains.enrollment.models import Enrollment
    return Enrollment.objects.create(**fields)


def installment_create(**fields):
    from apps.domains.enrollment.models import Installment
    return Installment.objects.create(**fields)


def installment_filter_enrollment(enrollment):
    from apps.domains.enrollment.models import Installment
    return Installment.objects.filter(enrollment=enrollment).order_by("number")


def installment_mark_overdue(enrollments, today) -> int:
    from apps.domains.enrollment.models import Installment
    return Installment.objects.filter(
        enrollment__in=enrollments,
        status=Installment.Status.PENDING,
        due_date__lt=today,
    ).update(status=Installment.Status.OVERDUE)


def payment_queryset():
    from apps.domains.enrollment.models import Payment
    return Payment.objects.select_related("student", "course", "enrollment", "processed_by")


def payment_filter_student(student):
    return payment_queryset().filter(student=student)


def payment_get_for_update(payment_id):
    from apps.domains.enrollment.models import Payment
    return Payment.objects.select_for_update().get(id=payment_id)


def payment_create(**fields):
    from apps.domains.enrollment.models import Payment
    return Payment.objects.create(**fields)


def receipt_number_exists(number) -> bool:
    from apps.domains.enrollment.models import Payment
    return Payment.objects.filter(receipt_number=number).exists()


def receipt_count_with_prefix(prefix) -> int:
    from apps.domains.enrollment.models import Payment
    return Payment.objects.filter(receipt_number__startswith=prefix).count()


def payments_completed_total(**filters):
    from django.db.models import Sum
    from apps.domains.enrollment.models import Payment
    agg = Payment.objects.filter(status=Payment.Status.COMPLETED, **filters).aggregate(total=Sum("amount"))
    return agg["total"] or 0


def enrollment_for_course(student, course, statuses):
    from apps.domains.enrollment.models import Enrollment
    return (
        Enrollment.objects.filter(student=student, course=course, status__in=list(statuses))
        .order_by("-enrolled_at", "-id")
        .first()
    )
