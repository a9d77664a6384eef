from decimal import Decimal

import pytest

from apps.core.exceptions import DomainError
from apps.domains.attendance.services import record_attendance
from apps.domains.courses import services
from apps.domains.courses.models import Course
from apps.domains.enrollment.services import create_enrollment, record_payment


class TestLifecycle:
    def test_publish_only_from_draft(self, course, clo):
        with pytest.raises(DomainError, match="Only draft"):
            services.publish_course(course)
        draft = Course.objects.create(title="Drones", instructor=None, created_by=clo)
        assert services.publish_course(draft).status == Course.Status.PUBLISHED

    def test_archive_twice(self, course):
        services.archive_course(course)
        with pytest.raises(DomainError, match="already archived"):
            services.archive_course(course)

    def test_delete_refused_with_groups(self, group, course):
        with pytest.raises(DomainError, match="archive it instead"):
            services.delete_course(course)
        assert Course.objects.filter(id=course.id).exists()

    def test_delete_without_groups(self, course):
        services.delete_course(course)
        assert not Course.objects.exists()


class TestStatistics:
    def test_counts(self, group, session, course, trainer, student, student2, reception):
        record_attendance(
            session,
            [
                {"student": student.id, "status": "present"},
                {"student": student2.id, "status": "absent"},
            ],
            marked_by=trainer,
        )
        enrollment = create_enrollment(student=student, course=course)
        record_payment(enrollment=enrollment, amount="120", method="cash", processed_by=reception)

        out = services.course_statistics(course)
        assert out["groups"] == {"total": 1, "active": 1}
        assert out["enrollments"]["active"] == 1
        assert out["active_students"] == 2
        assert out["attendance_rate"] == 50
        assert Decimal(out["revenue"]) == Decimal("120.00")


class TestApi:
    def test_clo_delete_conflict(self, api, clo, group, course):
        res = api(clo).delete(f"/api/clo/courses/{course.id}/")
        assert res.status_code == 409
        assert "archive" in res.data["detail"]

    def test_trainer_cannot_use_clo_area(self, api, trainer, course):
        assert api(trainer).get("/api/clo/courses/").status_code == 403
