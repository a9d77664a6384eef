import datetime as dt

from apps.domains.attendance.services import record_attendance
from apps.domains.dashboards import services
from apps.domains.enrollment.services import create_enrollment
from apps.domains.evaluations.services import create_evaluation
from apps.domains.sessions.models import Session

DAY = dt.date(2024, 3, 4)


def mark(session, trainer, statuses):
    record_attendance(
        session,
        [{"student": sid, "status": st} for sid, st in statuses.items()],
        marked_by=trainer,
    )


class TestTrainer:
    def test_stats(self, group, make_session, trainer, student):
        make_session(group, day=DAY)
        make_session(group, day=DAY, status=Session.Status.COMPLETED, title="Wrap up")
        s = make_session(group, day=DAY + dt.timedelta(days=7))
        create_evaluation(trainer=trainer, session=s, student_id=student.id, data={"overall_rating": 4})

        out = services.trainer_dashboard_stats(trainer, today=DAY)
        assert out["active_groups"] == 1
        assert out["todays_sessions"] == 2
        assert out["completed_today"] == 1
        assert out["week_sessions"] == 2
        assert out["total_students"] == 2
        assert out["upcoming_sessions"] == 2
        assert out["average_rating"] == 4.0

    def test_schedule_is_own_only(self, group, make_session, trainer, other_trainer):
        make_session(group, day=DAY)
        assert len(services.trainer_schedule(trainer, day=DAY)) == 1
        assert services.trainer_schedule(other_trainer, day=DAY) == []

    def test_performance(self, group, make_session, trainer, student, student2):
        first = make_session(group, day=DAY)
        second = make_session(group, day=DAY + dt.timedelta(days=1))
        mark(first, trainer, {student.id: "present", student2.id: "absent"})
        mark(second, trainer, {student.id: "late", student2.id: "present"})

        out = services.trainer_performance(trainer, today=DAY + dt.timedelta(days=2))
        # Alice 2/2, Bob 1/2
        assert out["groups"][0]["average_attendance"] == 75.0
        assert out["attendance_rate"] == 75
        assert [t["date"] for t in out["attendance_trends"]] == [DAY, DAY + dt.timedelta(days=1)]


class TestCLO:
    def test_dashboard(self, group, session, course, trainer, student, student2):
        mark(session, trainer, {student.id: "present", student2.id: "present"})
        create_enrollment(student=student, course=course)

        out = services.clo_dashboard(today=DAY)
        assert out["overview"]["courses"]["published"] == 1
        assert out["overview"]["groups"]["active"] == 1
        assert out["overview"]["enrollments"]["total"] == 1
        assert out["performance"]["attendance_rate"] == 100
        assert out["top_trainers"][0]["trainer_id"] == trainer.id
        assert out["top_trainers"][0]["average_attendance"] == 100.0

    def test_analytics(self, group, session, course, trainer, student):
        mark(session, trainer, {student.id: "present"})
        create_enrollment(student=student, course=course)

        out = services.clo_analytics(period_days=30, today=DAY + dt.timedelta(days=1))
        assert out["course_popularity"][0]["enrollments"] == 1
        assert out["attendance_trends"][0]["date"] == DAY
        workload = out["trainer_workload"][0]
        assert workload["trainer_id"] == trainer.id
        assert workload["groups"] == 1
        assert workload["sessions"] == 1


class TestStudent:
    def test_dashboard(self, group, make_session, course, trainer, student):
        past = make_session(group, day=DAY)
        make_session(group, day=DAY + dt.timedelta(days=3))
        mark(past, trainer, {student.id: "absent"})
        create_enrollment(student=student, course=course, group=None, total_amount="200")

        out = services.student_dashboard(student, today=DAY + dt.timedelta(days=1))
        assert out["attendance"] == {"rate": 0, "attended": 0, "total": 1, "absent": 1}
        assert [s["scheduled_date"] for s in out["upcoming_sessions"]] == [DAY + dt.timedelta(days=3)]
        assert str(out["payments"]["balance"]) == "200.00"
        assert out["groups"][0]["name"] == "Robotics A"


class TestViews:
    def test_role_areas(self, api, trainer, clo, student):
        assert api(trainer).get("/api/trainer/dashboard/").status_code == 200
        assert api(clo).get("/api/clo/dashboard/").status_code == 200
        assert api(student).get("/api/student/dashboard/").status_code == 200
        assert api(student).get("/api/trainer/dashboard/").status_code == 403
