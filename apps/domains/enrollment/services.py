# PATH: apps/domains/enrollment/services.py
# Enrollment + manual payment confirmation. No payment gateway is called:
# "confirm" is a trusted step where a student / the desk enters the transfer reference.

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

from django.db import IntegrityError
from django.utils import timezone

from apps.core.exceptions import DomainError, OwnershipError, PaymentError
from apps.core.models import User
from apps.core.services.time_policy import month_bounds
from apps.domains.groups import services as group_services
from trainhub.adapters.db.django import repositories_core as core_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Enrollment, Installment, Payment

logger = logging.getLogger(__name__)

INSTALLMENT_INTERVAL_DAYS = 30
RECEIPT_PREFIX = "RCP"
RECEIPT_ATTEMPTS = 5


def _money(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise PaymentError(f"Invalid amount: {value!r}")
    return amount.quantize(Decimal("0.01"))


# ======================================================
# Enrollment
# ======================================================

def split_installments(total: Decimal, count: int, first_due: date) -> list[dict]:
    """
    Even split; cents left over from rounding land on the last installment.
    """
    if count <= 0:
        return []
    base = (total / count).quantize(Decimal("0.01"))
    plan = []
    for i in range(count):
        amount = base if i < count - 1 else total - base * (count - 1)
        plan.append({
            "number": i + 1,
            "amount": amount,
            "due_date": first_due + timedelta(days=INSTALLMENT_INTERVAL_DAYS * i),
        })
    return plan


def create_enrollment(
    *,
    student,
    course,
    group=None,
    total_amount=None,
    installments: int = 0,
    first_due_date: date | None = None,
    enrolled_by=None,
    notes: str = "",
) -> Enrollment:
    if getattr(student, "role", None) != User.Role.STUDENT:
        raise DomainError("Only student accounts can be enrolled")
    if course.status == course.Status.ARCHIVED:
        raise DomainError("Archived courses do not accept enrollments")
    if enroll_repo.enrollment_exists(student, course):
        raise DomainError("Student is already enrolled in this course")
    if group is not None and group.course_id != course.id:
        raise DomainError("Group does not belong to this course")

    total = _money(course.price if total_amount is None else total_amount)
    if total < 0:
        raise PaymentError("total_amount cannot be negative")

    with DjangoUnitOfWork():
        enrollment = enroll_repo.enrollment_create(
            student=student,
            course=course,
            group=group,
            total_amount=total,
            enrolled_by=enrolled_by,
            notes=notes or "",
        )
        if group is not None and not group.students.filter(id=student.id).exists():
            group_services.add_student(group, student)

        first_due = first_due_date or (timezone.localdate() + timedelta(days=INSTALLMENT_INTERVAL_DAYS))
        for item in split_installments(total, int(installments or 0), first_due):
            enroll_repo.installment_create(enrollment=enrollment, **item)

    logger.info(
        "[enrollment_create] enrollment_id=%s student_id=%s course_id=%s group_id=%s total=%s installments=%s",
        enrollment.id,
        student.id,
        course.id,
        getattr(group, "id", None),
        total,
        installments,
    )
    return enrollment


def require_enrollment(student, course, *, allow_completed: bool = False) -> Enrollment:
    """The student's enrollment for ``course``; raises when there is none."""
    statuses = [Enrollment.Status.ACTIVE]
    if allow_completed:
        statuses.append(Enrollment.Status.COMPLETED)
    enrollment = enroll_repo.enrollment_for_course(student, course, statuses)
    if enrollment is None:
        raise OwnershipError("You are not enrolled in this course")
    return enrollment


# ======================================================
# Payments
# ======================================================

def next_receipt_number(now=None, *, skip: int = 0) -> str:
    """RCP-YYYYMMDD-NNNNN, sequence restarts every day."""
    now = now or timezone.now()
    prefix = f"{RECEIPT_PREFIX}-{now:%Y%m%d}-"
    seq = enroll_repo.receipt_count_with_prefix(prefix) + 1 + skip
    number = f"{prefix}{seq:05d}"
    while enroll_repo.receipt_number_exists(number):
        seq += 1
        number = f"{prefix}{seq:05d}"
    return number


def _save_with_receipt(payment: Payment, now, update_fields) -> None:
    """
    Assign the next receipt number and save inside a savepoint.
    A concurrent confirm can take the same number first; the unique
    constraint rejects ours and the next number is tried.
    """
    for attempt in range(RECEIPT_ATTEMPTS):
        payment.receipt_number = next_receipt_number(now, skip=attempt)
        try:
            with DjangoUnitOfWork():
                payment.save(update_fields=update_fields)
            return
        except IntegrityError:
            logger.warning(
                "[payment_confirm] receipt collision payment_id=%s number=%s attempt=%s",
                payment.id,
                payment.receipt_number,
                attempt + 1,
            )
    raise PaymentError("Could not allocate a receipt number, please retry")


def initiate_payment(*, student, enrollment: Enrollment, amount, method=Payment.Method.ONLINE, installment_number=None, notes="") -> Payment:
    if enrollment.student_id != student.id:
        raise OwnershipError("Enrollment does not belong to you")
    if enrollment.status != Enrollment.Status.ACTIVE:
        raise PaymentError("Payments are only accepted for active enrollments")

    amount = _money(amount)
    if amount <= 0:
        raise PaymentError("Amount must be greater than zero")
    if amount > enrollment.remaining_amount:
        raise PaymentError(
            f"Amount exceeds the remaining balance ({enrollment.remaining_amount})"
        )
    if method not in Payment.Method.values:
        raise PaymentError(f"method must be one of {', '.join(Payment.Method.values)}")

    payment = enroll_repo.payment_create(
        student=student,
        enrollment=enrollment,
        course_id=enrollment.course_id,
        amount=amount,
        method=method,
        installment_number=installment_number,
        notes=notes or "",
        status=Payment.Status.PENDING,
    )
    logger.info(
        "[payment_initiate] payment_id=%s enrollment_id=%s amount=%s",
        payment.id,
        enrollment.id,
        amount,
    )
    return payment


def _settle_installments(enrollment: Enrollment, now) -> None:
    """Installments fully covered by the paid amount (in order) become paid."""
    covered = Decimal("0")
    for inst in enroll_repo.installment_filter_enrollment(enrollment):
        covered += inst.amount
        if covered <= enrollment.paid_amount and inst.status != Installment.Status.PAID:
            inst.status = Installment.Status.PAID
            inst.paid_at = now
            inst.save(update_fields=["status", "paid_at"])


def confirm_payment(payment: Payment, *, transaction_id: str, processed_by=None, now=None) -> Payment:
    transaction_id = (transaction_id or "").strip()
    if not transaction_id:
        raise PaymentError("transaction_id is required to confirm a payment")

    now = now or timezone.now()
    with DjangoUnitOfWork():
        payment = enroll_repo.payment_get_for_update(payment.id)
        if payment.status not in Payment.CONFIRMABLE:
            raise PaymentError(f"Cannot confirm a {payment.status} payment")

        enrollment = enroll_repo.enrollment_get_for_update(payment.enrollment_id)
        if payment.amount > enrollment.remaining_amount:
            raise PaymentError(
                f"Amount exceeds the remaining balance ({enrollment.remaining_amount})"
            )

        payment.status = Payment.Status.COMPLETED
        payment.transaction_id = transaction_id
        payment.paid_at = now
        payment.processed_by = processed_by
        _save_with_receipt(payment, now, [
            "status",
            "transaction_id",
            "paid_at",
            "receipt_number",
            "processed_by",
            "updated_at",
        ])

        enrollment.paid_amount = enrollment.paid_amount + payment.amount
        enrollment.save(update_fields=["paid_amount", "updated_at"])
        _settle_installments(enrollment, now)

    logger.info(
        "[payment_confirm] payment_id=%s receipt=%s enrollment_id=%s paid=%s remaining=%s",
        payment.id,
        payment.receipt_number,
        enrollment.id,
        enrollment.paid_amount,
        enrollment.remaining_amount,
    )
    return payment


def mark_processing(payment: Payment) -> Payment:
    if payment.status != Payment.Status.PENDING:
        raise PaymentError(f"Cannot process a {payment.status} payment")
    payment.status = Payment.Status.PROCESSING
    payment.save(update_fields=["status", "updated_at"])
    return payment


def fail_payment(payment: Payment, reason: str = "") -> Payment:
    if payment.status not in Payment.CONFIRMABLE:
        raise PaymentError(f"Cannot fail a {payment.status} payment")
    payment.status = Payment.Status.FAILED
    if reason:
        payment.notes = f"{payment.notes}\n{reason}".strip()
    payment.save(update_fields=["status", "notes", "updated_at"])
    logger.info("[payment_fail] payment_id=%s reason=%r", payment.id, reason)
    return payment


def record_payment(*, enrollment: Enrollment, amount, method, processed_by, transaction_id="", notes="") -> Payment:
    """Cash-desk payment: created and confirmed in one step."""
    with DjangoUnitOfWork():
        payment = initiate_payment(
            student=enrollment.student,
            enrollment=enrollment,
            amount=amount,
            method=method,
            notes=notes,
        )
        reference = transaction_id or f"DESK-{payment.id}"
        return confirm_payment(payment, transaction_id=reference, processed_by=processed_by)


# ======================================================
# Read models
# ======================================================

def _installment_row(inst: Installment) -> dict:
    return {
        "enrollment_id": inst.enrollment_id,
        "course_title": inst.enrollment.course.title,
        "number": inst.number,
        "amount": inst.amount,
        "due_date": inst.due_date,
        "status": inst.status,
    }


def payment_summary(student, *, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    enrollments = list(enroll_repo.enrollment_filter_student(student))
    enroll_repo.installment_mark_overdue(enrollments, today)

    total = sum((e.total_amount for e in enrollments), Decimal("0"))
    paid = sum((e.paid_amount for e in enrollments), Decimal("0"))

    pending, overdue = [], []
    for e in enrollments:
        for inst in enroll_repo.installment_filter_enrollment(e).select_related("enrollment__course"):
            if inst.status == Installment.Status.PENDING:
                pending.append(_installment_row(inst))
            elif inst.status == Installment.Status.OVERDUE:
                overdue.append(_installment_row(inst))

    upcoming = sorted(overdue + pending, key=lambda r: r["due_date"])
    return {
        "total_amount": total,
        "paid_amount": paid,
        "remaining_amount": max(total - paid, Decimal("0")),
        "enrollments": [
            {
                "enrollment_id": e.id,
                "course_id": e.course_id,
                "course_title": e.course.title,
                "total_amount": e.total_amount,
                "paid_amount": e.paid_amount,
                "remaining_amount": e.remaining_amount,
                "status": e.status,
            }
            for e in enrollments
        ],
        "pending_installments": pending,
        "overdue_installments": overdue,
        "next_payment_due": upcoming[0] if upcoming else None,
    }


def reception_dashboard(*, today: date | None = None) -> dict:
    """Front-desk counters, computed on every call."""
    today = today or timezone.localdate()
    month_start, month_end = month_bounds(today)
    payments = enroll_repo.payment_queryset()
    enrollments = enroll_repo.enrollment_queryset()

    return {
        "students": core_repo.user_count_role(User.Role.STUDENT),
        "trainers": core_repo.user_count_role(User.Role.TRAINER),
        "enrollments": {
            "total": enrollments.count(),
            "active": enrollments.filter(status=Enrollment.Status.ACTIVE).count(),
            "this_month": enrollments.filter(
                enrolled_at__date__gte=month_start,
                enrolled_at__date__lte=month_end,
            ).count(),
        },
        "payments": {
            "pending": payments.filter(status__in=Payment.CONFIRMABLE).count(),
            "completed_today": payments.filter(
                status=Payment.Status.COMPLETED, paid_at__date=today
            ).count(),
            "revenue_today": enroll_repo.payments_completed_total(paid_at__date=today),
            "revenue_month": enroll_repo.payments_completed_total(
                paid_at__date__gte=month_start,
                paid_at__date__lte=month_end,
            ),
        },
    }
