import datetime as dt
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.exceptions import DomainError, OwnershipError, PaymentError
from apps.domains.courses.models import Course
from apps.domains.enrollment import services
from apps.domains.enrollment.models import Enrollment, Installment, Payment
from apps.domains.enrollment.receipts import build_receipt_pdf
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from tests.conftest import make_user


@pytest.fixture
def enrollment(student, course, reception):
    return services.create_enrollment(
        student=student,
        course=course,
        total_amount="300.00",
        installments=3,
        first_due_date=dt.date(2024, 2, 1),
        enrolled_by=reception,
    )


class TestEnrollment:
    def test_defaults_to_course_price(self, student, course):
        e = services.create_enrollment(student=student, course=course)
        assert e.total_amount == Decimal("300.00")
        assert e.remaining_amount == Decimal("300.00")
        assert e.installments.count() == 0

    def test_installment_plan(self, enrollment):
        plan = list(enrollment.installments.order_by("number"))
        assert [i.amount for i in plan] == [Decimal("100.00")] * 3
        assert plan[1].due_date == dt.date(2024, 3, 2)

    def test_split_puts_remainder_on_last(self):
        plan = services.split_installments(Decimal("100.00"), 3, dt.date(2024, 1, 1))
        assert [p["amount"] for p in plan] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]

    def test_joining_a_group_adds_to_roster(self, course, trainer, db):
        from apps.domains.groups.models import Group
        g = Group.objects.create(
            name="B", course=course, trainer=trainer,
            start_date=dt.date(2024, 1, 1), end_date=dt.date(2024, 2, 1),
        )
        newcomer = make_user("student")
        services.create_enrollment(student=newcomer, course=course, group=g)
        assert g.students.filter(id=newcomer.id).exists()

    def test_one_enrollment_per_course(self, enrollment, student, course):
        with pytest.raises(DomainError, match="already enrolled"):
            services.create_enrollment(student=student, course=course)

    def test_only_students(self, trainer, course):
        with pytest.raises(DomainError, match="student accounts"):
            services.create_enrollment(student=trainer, course=course)

    def test_archived_course(self, student, course):
        course.status = Course.Status.ARCHIVED
        course.save()
        with pytest.raises(DomainError, match="Archived"):
            services.create_enrollment(student=student, course=course)


class TestPayments:
    def test_initiate_then_confirm(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="100")
        assert p.status == Payment.Status.PENDING
        assert p.receipt_number is None

        now = timezone.now()
        p = services.confirm_payment(p, transaction_id="TX-1", now=now)
        assert p.status == Payment.Status.COMPLETED
        assert p.receipt_number == f"RCP-{now:%Y%m%d}-00001"

        enrollment.refresh_from_db()
        assert enrollment.paid_amount == Decimal("100.00")
        assert enrollment.remaining_amount == Decimal("200.00")
        first = enrollment.installments.get(number=1)
        assert first.status == Installment.Status.PAID

    def test_receipt_sequence_per_day(self, enrollment, student):
        now = timezone.now()
        numbers = []
        for _ in range(2):
            p = services.initiate_payment(student=student, enrollment=enrollment, amount="50")
            numbers.append(services.confirm_payment(p, transaction_id="T", now=now).receipt_number)
        assert numbers[1].endswith("-00002")

    def test_receipt_collision_takes_next_number(self, enrollment, student, monkeypatch):
        # both confirms read the sequence before either commits
        monkeypatch.setattr(enroll_repo, "receipt_count_with_prefix", lambda prefix: 0)
        monkeypatch.setattr(enroll_repo, "receipt_number_exists", lambda number: False)

        now = timezone.now()
        first = services.initiate_payment(student=student, enrollment=enrollment, amount="50")
        second = services.initiate_payment(student=student, enrollment=enrollment, amount="50")
        a = services.confirm_payment(first, transaction_id="T1", now=now).receipt_number
        b = services.confirm_payment(second, transaction_id="T2", now=now).receipt_number

        assert a == f"RCP-{now:%Y%m%d}-00001"
        assert b == f"RCP-{now:%Y%m%d}-00002"

    def test_receipt_collision_gives_up(self, enrollment, student, monkeypatch):
        monkeypatch.setattr(enroll_repo, "receipt_count_with_prefix", lambda prefix: 0)
        monkeypatch.setattr(enroll_repo, "receipt_number_exists", lambda number: False)
        monkeypatch.setattr(services, "RECEIPT_ATTEMPTS", 1)

        now = timezone.now()
        first = services.initiate_payment(student=student, enrollment=enrollment, amount="50")
        second = services.initiate_payment(student=student, enrollment=enrollment, amount="50")
        services.confirm_payment(first, transaction_id="T1", now=now)
        with pytest.raises(PaymentError, match="receipt number"):
            services.confirm_payment(second, transaction_id="T2", now=now)

        second.refresh_from_db()
        assert second.status == Payment.Status.PENDING
        enrollment.refresh_from_db()
        assert enrollment.paid_amount == Decimal("50.00")


    def test_confirm_twice_rejected(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        services.confirm_payment(p, transaction_id="A")
        with pytest.raises(PaymentError, match="completed"):
            services.confirm_payment(p, transaction_id="B")

    def test_confirm_from_processing(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        services.mark_processing(p)
        assert services.confirm_payment(p, transaction_id="A").status == Payment.Status.COMPLETED

    def test_failed_cannot_be_confirmed(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        services.fail_payment(p, "card declined")
        assert "card declined" in p.notes
        with pytest.raises(PaymentError):
            services.confirm_payment(p, transaction_id="A")

    def test_requires_transaction_id(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        with pytest.raises(PaymentError, match="transaction_id"):
            services.confirm_payment(p, transaction_id="  ")

    def test_over_remaining_balance(self, enrollment, student):
        with pytest.raises(PaymentError, match="remaining balance"):
            services.initiate_payment(student=student, enrollment=enrollment, amount="300.01")

    def test_two_pending_cannot_overpay(self, enrollment, student):
        a = services.initiate_payment(student=student, enrollment=enrollment, amount="200")
        b = services.initiate_payment(student=student, enrollment=enrollment, amount="200")
        services.confirm_payment(a, transaction_id="A")
        with pytest.raises(PaymentError, match="remaining balance"):
            services.confirm_payment(b, transaction_id="B")

    @pytest.mark.parametrize("amount", ["0", "-5", "abc"])
    def test_invalid_amounts(self, enrollment, student, amount):
        with pytest.raises(PaymentError):
            services.initiate_payment(student=student, enrollment=enrollment, amount=amount)

    def test_someone_elses_enrollment(self, enrollment, student2):
        with pytest.raises(OwnershipError):
            services.initiate_payment(student=student2, enrollment=enrollment, amount="10")

    def test_inactive_enrollment(self, enrollment, student):
        enrollment.status = Enrollment.Status.INACTIVE
        enrollment.save()
        with pytest.raises(PaymentError, match="active enrollments"):
            services.initiate_payment(student=student, enrollment=enrollment, amount="10")

    def test_desk_payment_is_completed(self, enrollment, reception):
        p = services.record_payment(
            enrollment=enrollment, amount="300", method="cash", processed_by=reception
        )
        assert p.status == Payment.Status.COMPLETED
        assert p.transaction_id == f"DESK-{p.id}"
        enrollment.refresh_from_db()
        assert enrollment.is_paid_in_full
        assert not enrollment.installments.exclude(status=Installment.Status.PAID).exists()


class TestReadModels:
    def test_summary_marks_overdue(self, enrollment, student):
        out = services.payment_summary(student, today=dt.date(2024, 2, 15))
        assert out["remaining_amount"] == Decimal("300.00")
        assert len(out["overdue_installments"]) == 1
        assert len(out["pending_installments"]) == 2
        assert out["next_payment_due"]["number"] == 1

    def test_reception_dashboard(self, enrollment, student, reception):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="40")
        services.confirm_payment(p, transaction_id="A", processed_by=reception)
        out = services.reception_dashboard()
        assert out["enrollments"]["active"] == 1
        assert out["payments"]["completed_today"] == 1
        assert Decimal(out["payments"]["revenue_today"]) == Decimal("40.00")


class TestReceipt:
    def test_pdf_for_completed(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        services.confirm_payment(p, transaction_id="A")
        assert build_receipt_pdf(p).startswith(b"%PDF")

    def test_no_pdf_for_pending(self, enrollment, student):
        p = services.initiate_payment(student=student, enrollment=enrollment, amount="10")
        with pytest.raises(ValueError):
            build_receipt_pdf(p)
