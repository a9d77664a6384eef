import pytest

from apps.core.exceptions import DomainError, OwnershipError
from apps.domains.enrollment import services as enrollment_services
from apps.domains.enrollment.models import Enrollment
from apps.domains.learning import services
from apps.domains.learning.models import Module, ModuleProgress


@pytest.fixture
def enrollment(student, course):
    return enrollment_services.create_enrollment(student=student, course=course)


@pytest.fixture
def modules(course):
    intro = Module.objects.create(course=course, title="Intro", order=1, type=Module.Type.VIDEO)
    wiring = Module.objects.create(
        course=course, title="Wiring", order=2, is_locked=True, unlock_after=intro
    )
    motors = Module.objects.create(course=course, title="Motors", order=3)
    return intro, wiring, motors


class TestProgress:
    def test_start_marks_in_progress(self, enrollment, modules, student):
        progress = services.start_module(modules[0], student)
        assert progress.status == ModuleProgress.Status.IN_PROGRESS
        assert progress.started_at is not None
        assert progress.course_id == modules[0].course_id

    def test_restart_keeps_first_start(self, enrollment, modules, student):
        first = services.start_module(modules[0], student).started_at
        assert services.start_module(modules[0], student).started_at == first

    def test_locked_until_previous_completed(self, enrollment, modules, student):
        intro, wiring, _ = modules
        with pytest.raises(OwnershipError, match="locked"):
            services.start_module(wiring, student)

        services.start_module(intro, student)
        services.complete_module(intro, student)
        assert services.start_module(wiring, student).status == ModuleProgress.Status.IN_PROGRESS

    def test_complete_needs_start(self, enrollment, modules, student):
        with pytest.raises(DomainError, match="Start the module first"):
            services.complete_module(modules[0], student)

    def test_not_enrolled(self, modules, student2):
        with pytest.raises(OwnershipError, match="not enrolled"):
            services.start_module(modules[0], student2)

    def test_course_percentage(self, enrollment, modules, student):
        services.start_module(modules[0], student)
        result = services.complete_module(modules[0], student)
        assert result["course_progress"] == {"completed_modules": 1, "total_modules": 3, "percentage": 33}
        assert result["enrollment_status"] == Enrollment.Status.ACTIVE

    def test_last_module_completes_enrollment(self, enrollment, modules, student):
        for m in modules:
            services.start_module(m, student)
            result = services.complete_module(m, student)
        assert result["course_progress"]["percentage"] == 100
        enrollment.refresh_from_db()
        assert enrollment.status == Enrollment.Status.COMPLETED

    def test_inactive_modules_do_not_count(self, enrollment, modules, student):
        modules[2].is_active = False
        modules[2].save()
        services.start_module(modules[0], student)
        services.complete_module(modules[0], student)
        assert services.course_progress(student, modules[0].course)["total_modules"] == 2

    def test_completed_enrollment_can_still_read(self, enrollment, modules, student):
        enrollment.status = Enrollment.Status.COMPLETED
        enrollment.save()
        assert services.open_module(modules[0], student).last_accessed_at is not None
        with pytest.raises(OwnershipError):
            services.start_module(modules[0], student)

    def test_update_accumulates_time(self, enrollment, modules, student):
        services.update_progress(modules[0], student, time_spent=60)
        progress = services.update_progress(
            modules[0],
            student,
            time_spent=30,
            video={"current_time": 95, "duration": 300, "completed": False},
            notes="gear ratio",
        )
        assert progress.time_spent == 90
        assert progress.video_position == 95
        assert progress.notes == "gear ratio"

    def test_negative_time_rejected(self, enrollment, modules, student):
        with pytest.raises(DomainError, match="negative"):
            services.update_progress(modules[0], student, time_spent=-5)

    def test_snapshot_without_progress(self, modules, student):
        snap = services.progress_snapshot(modules[0], student)
        assert snap["status"] == ModuleProgress.Status.NOT_STARTED
        assert snap["time_spent"] == 0

    def test_neighbours(self, modules):
        intro, wiring, motors = modules
        assert services.neighbour(wiring, forward=True) == motors
        assert services.neighbour(wiring, forward=False) == intro
        assert services.neighbour(motors, forward=True) is None


class TestAuthoring:
    def test_order_defaults_to_end(self, modules, course):
        data = services.validate_module({"title": "Sensors"}, course=course)
        assert data["order"] == 4

    def test_locked_needs_unlock_after(self, course):
        with pytest.raises(DomainError, match="needs unlock_after"):
            services.validate_module({"title": "x", "is_locked": True}, course=course)

    def test_unlock_after_same_course(self, modules, course, clo, trainer):
        from apps.domains.courses.models import Course
        other = Course.objects.create(title="Drones", instructor=trainer, created_by=clo)
        with pytest.raises(DomainError, match="same course"):
            services.validate_module({"title": "x", "unlock_after": modules[0]}, course=other)

    def test_other_trainer_has_no_access(self, course, other_trainer, trainer, clo):
        services.check_course_access(trainer, course)
        services.check_course_access(clo, course)
        with pytest.raises(OwnershipError):
            services.check_course_access(other_trainer, course)


# ======================================================
# HTTP
# ======================================================

class TestModuleApi:
    def test_trainer_creates_module(self, api, trainer, course, modules):
        res = api(trainer).post(
            "/api/trainer/modules/",
            {"course": course.id, "title": "Sensors", "type": "text"},
            format="json",
        )
        assert res.status_code == 201
        assert res.json()["order"] == 4

    def test_other_trainer_cannot_author(self, api, other_trainer, course):
        res = api(other_trainer).post(
            "/api/trainer/modules/", {"course": course.id, "title": "Sensors"}, format="json"
        )
        assert res.status_code == 403

    def test_student_flow(self, api, student, enrollment, modules):
        client = api(student)
        intro = modules[0]

        res = client.get(f"/api/student/modules/{intro.id}/")
        assert res.status_code == 200
        assert res.json()["module"]["title"] == "Intro"

        assert client.post(f"/api/student/modules/{intro.id}/start/").status_code == 200
        res = client.post(f"/api/student/modules/{intro.id}/complete/")
        assert res.status_code == 200
        assert res.json()["course_progress"]["completed_modules"] == 1

        res = client.get(f"/api/student/modules/course-progress/?course={intro.course_id}")
        assert res.json()["percentage"] == 33

    def test_locked_module_is_forbidden(self, api, student, enrollment, modules):
        res = api(student).post(f"/api/student/modules/{modules[1].id}/start/")
        assert res.status_code == 403

    def test_unenrolled_student_sees_nothing(self, api, student2, modules):
        assert api(student2).get(f"/api/student/modules/{modules[0].id}/").status_code == 404

    def test_progress_patch(self, api, student, enrollment, modules):
        res = api(student).patch(
            f"/api/student/modules/{modules[0].id}/progress/",
            {"time_spent": 120, "video": {"current_time": 40, "duration": 100}},
            format="json",
        )
        assert res.status_code == 200
        assert res.json()["time_spent"] == 120
        assert res.json()["video_position"] == 40
