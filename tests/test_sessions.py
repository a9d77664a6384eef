import datetime as dt

import pytest

from apps.core.exceptions import DomainError, InvalidTransition, OwnershipError
from apps.domains.attendance import services as attendance_services
from apps.domains.groups import services as group_services
from apps.domains.groups.models import Group
from apps.domains.sessions import services
from apps.domains.sessions.models import Session

S = Session.Status


class TestTransitions:
    def test_happy_path_start_then_end(self, session):
        services.start_session(session)
        assert session.status == S.IN_PROGRESS
        assert session.actual_start_time is not None

        services.end_session(session)
        session.refresh_from_db()
        assert session.status == S.COMPLETED
        assert session.actual_end_time is not None

    def test_scheduled_cannot_jump_to_completed(self, session):
        with pytest.raises(InvalidTransition, match="scheduled to completed"):
            services.end_session(session)
        session.refresh_from_db()
        assert session.status == S.SCHEDULED

    def test_cancel_from_in_progress(self, session):
        services.start_session(session)
        services.cancel_session(session, "power outage")
        session.refresh_from_db()
        assert session.status == S.CANCELLED
        assert session.cancellation_reason == "power outage"

    def test_cancel_uses_default_reason(self, session):
        services.cancel_session(session, "   ")
        assert session.cancellation_reason == services.DEFAULT_CANCELLATION_REASON

    @pytest.mark.parametrize("terminal", [S.COMPLETED, S.CANCELLED])
    def test_terminal_states_are_final(self, group, make_session, terminal):
        s = make_session(group, status=terminal)
        for move in (services.start_session, services.end_session, services.cancel_session):
            with pytest.raises(InvalidTransition):
                move(s)

    def test_end_bumps_group_counter(self, group, session):
        services.start_session(session)
        services.end_session(session)
        group.refresh_from_db()
        assert group.completed_sessions == 1

    def test_second_end_on_stale_copy_is_rejected(self, group, session):
        services.start_session(session)
        first = Session.objects.get(id=session.id)
        second = Session.objects.get(id=session.id)

        services.end_session(first)
        with pytest.raises(InvalidTransition, match="completed to completed"):
            services.end_session(second)

        group.refresh_from_db()
        assert group.completed_sessions == 1

    def test_start_on_stale_copy_after_cancel(self, session):
        stale = Session.objects.get(id=session.id)
        services.cancel_session(session, "room flooded")
        with pytest.raises(InvalidTransition):
            services.start_session(stale)
        session.refresh_from_db()
        assert session.status == S.CANCELLED
        assert session.actual_start_time is None


class TestEdits:
    def test_completed_session_cannot_be_edited(self, group, make_session):
        s = make_session(group, status=S.COMPLETED)
        with pytest.raises(InvalidTransition, match="Completed sessions"):
            services.update_session(s, {"title": "New"})

    def test_reschedule_only_when_scheduled(self, group, make_session):
        s = make_session(group, status=S.IN_PROGRESS)
        with pytest.raises(InvalidTransition, match="rescheduled"):
            services.update_session(s, {"scheduled_date": dt.date(2024, 3, 5)})

    def test_reschedule_recomputes_duration(self, session):
        services.update_session(session, {"start_time": "09:00", "end_time": "09:45"})
        session.refresh_from_db()
        assert session.duration == 45

    def test_unknown_field_rejected(self, session):
        with pytest.raises(DomainError, match="cannot be changed"):
            services.update_session(session, {"status": "completed"})

    def test_lesson_plan_merges(self, session):
        services.update_lesson_plan(session, {"outline": "gears"})
        session.refresh_from_db()
        assert session.lesson_plan["outline"] == "gears"
        assert "objectives" in session.lesson_plan


class TestCreate:
    def test_autofill_from_weekly_template(self, weekly_group, trainer):
        today = dt.date(2024, 3, 6)  # Wednesday
        first = services.create_session(
            trainer=trainer, group=weekly_group, data={"title": "Intro"}, today=today
        )
        second = services.create_session(
            trainer=trainer, group=weekly_group, data={"title": "Sensors"}, today=today
        )
        # Monday of the current week is already past, so it rolls a week on
        assert first.scheduled_date == dt.date(2024, 3, 11)
        assert first.start_time == dt.time(10)
        assert second.scheduled_date == dt.date(2024, 3, 7)
        assert second.duration == 90
        assert (first.session_number, second.session_number) == (1, 2)

        weekly_group.refresh_from_db()
        assert weekly_group.total_sessions == 2

    def test_explicit_times_win(self, group, trainer):
        s = services.create_session(
            trainer=trainer,
            group=group,
            data={
                "title": "Custom",
                "scheduled_date": dt.date(2024, 4, 2),
                "start_time": "08:00",
                "end_time": "08:30",
            },
        )
        assert s.duration == 30

    def test_no_template_and_no_times(self, group, trainer):
        with pytest.raises(DomainError, match="required when the group has no schedule"):
            services.create_session(trainer=trainer, group=group, data={"title": "X"})

    def test_other_trainers_group(self, group, other_trainer):
        with pytest.raises(OwnershipError):
            services.create_session(trainer=other_trainer, group=group, data={"title": "X"})

    def test_inactive_group(self, group, trainer):
        group.status = Group.Status.ARCHIVED
        group.save()
        with pytest.raises(DomainError, match="active groups"):
            services.create_session(trainer=trainer, group=group, data={"title": "X"})

    @pytest.mark.parametrize("start,end", [("10:00", "10:10"), ("08:00", "17:00"), ("10:00", "09:00")])
    def test_duration_bounds(self, start, end):
        with pytest.raises(DomainError):
            services.validate_window(start, end)


class TestDelete:
    def test_soft_delete_cancels(self, session):
        result = services.delete_session(session, reason="sick")
        assert result.status == S.CANCELLED

    def test_permanent_delete_adjusts_counters(self, group, session):
        Group.objects.filter(id=group.id).update(total_sessions=1)
        services.delete_session(session, permanent=True)
        group.refresh_from_db()
        assert group.total_sessions == 0
        assert not Session.objects.filter(id=session.id).exists()


class TestCalendar:
    def test_week_range_is_monday_based(self):
        start, end = services.calendar_range("week", dt.date(2024, 3, 6))
        assert start == dt.date(2024, 3, 4)
        assert end == dt.date(2024, 3, 10)

    def test_bad_view(self):
        with pytest.raises(DomainError, match="view must be"):
            services.calendar_range("year", dt.date(2024, 3, 6))


class TestGroupStats:
    def test_one_session_in_each_status(self, group, make_session, trainer, student, student2):
        make_session(group, day=dt.date(2024, 3, 4))
        make_session(group, day=dt.date(2024, 3, 20))
        running = make_session(group, status=S.IN_PROGRESS, day=dt.date(2024, 3, 7))
        make_session(group, status=S.COMPLETED, day=dt.date(2024, 3, 5))
        make_session(group, status=S.CANCELLED, day=dt.date(2024, 3, 6))
        Group.objects.filter(id=group.id).update(
            max_students=4, total_sessions=5, completed_sessions=1
        )
        group.refresh_from_db()

        attendance_services.record_attendance(
            running,
            [{"student": student.id, "status": "present"}, {"student": student2.id, "status": "absent"}],
            marked_by=trainer,
        )

        stats = group_services.group_stats(group, today=dt.date(2024, 3, 10))

        assert stats["sessions"] == {"total": 5, "completed": 1, "upcoming": 1, "cancelled": 1}
        assert stats["students"] == {"enrolled": 2, "capacity": 4, "utilization_rate": 50}
        assert stats["progress"] == {"completed_sessions": 1, "total_sessions": 5, "percentage": 20}
        assert stats["attendance"]["average"] == 50.0


# ======================================================
# HTTP: /api/trainer/sessions/
# ======================================================

class TestSessionApi:
    def test_start_then_end(self, api, trainer, group, session):
        client = api(trainer)
        res = client.post(f"/api/trainer/sessions/{session.id}/start/")
        assert res.status_code == 200
        assert res.data["status"] == S.IN_PROGRESS
        assert res.data["actual_start_time"] is not None

        res = client.post(f"/api/trainer/sessions/{session.id}/end/")
        assert res.status_code == 200
        assert res.data["status"] == S.COMPLETED

        group.refresh_from_db()
        assert group.completed_sessions == 1

    def test_end_twice_conflicts(self, api, trainer, group, make_session):
        s = make_session(group, status=S.IN_PROGRESS)
        client = api(trainer)
        assert client.post(f"/api/trainer/sessions/{s.id}/end/").status_code == 200

        res = client.post(f"/api/trainer/sessions/{s.id}/end/")
        assert res.status_code == 409
        assert "completed" in res.data["detail"]
        group.refresh_from_db()
        assert group.completed_sessions == 1

    def test_other_trainer_cannot_start(self, api, other_trainer, session):
        assert api(other_trainer).post(f"/api/trainer/sessions/{session.id}/start/").status_code == 404
        session.refresh_from_db()
        assert session.status == S.SCHEDULED

    def test_students_are_kept_out(self, api, student, session):
        assert api(student).post(f"/api/trainer/sessions/{session.id}/start/").status_code == 403

    def test_delete_cancels_with_reason(self, api, trainer, session):
        res = api(trainer).delete(
            f"/api/trainer/sessions/{session.id}/", {"reason": "trainer ill"}, format="json"
        )
        assert res.status_code == 200
        assert res.data["status"] == S.CANCELLED
        assert res.data["cancellation_reason"] == "trainer ill"
        assert Session.objects.filter(id=session.id).exists()

    def test_permanent_delete(self, api, trainer, group, session):
        Group.objects.filter(id=group.id).update(total_sessions=1)
        res = api(trainer).delete(f"/api/trainer/sessions/{session.id}/?permanent=true")
        assert res.status_code == 204
        assert not Session.objects.filter(id=session.id).exists()
        group.refresh_from_db()
        assert group.total_sessions == 0

    def test_calendar_week(self, api, trainer, group, make_session):
        inside = make_session(group, day=dt.date(2024, 3, 7))
        make_session(group, day=dt.date(2024, 3, 12))

        res = api(trainer).get("/api/trainer/sessions/calendar/?view=week&date=2024-03-06")
        assert res.status_code == 200
        body = res.json()
        assert (body["start"], body["end"]) == ("2024-03-04", "2024-03-10")
        assert [s["id"] for s in body["sessions"]] == [inside.id]

    def test_calendar_rejects_bad_input(self, api, trainer, db):
        client = api(trainer)
        assert client.get("/api/trainer/sessions/calendar/?date=06-03-2024").status_code == 400
        assert client.get("/api/trainer/sessions/calendar/?view=year&date=2024-03-06").status_code == 400

    def test_available_lists_open_sessions(self, api, trainer, group, make_session):
        open_one = make_session(group, day=dt.date(2024, 3, 4))
        running = make_session(group, status=S.IN_PROGRESS, day=dt.date(2024, 3, 5))
        make_session(group, status=S.COMPLETED, day=dt.date(2024, 3, 6))
        make_session(group, status=S.CANCELLED, day=dt.date(2024, 3, 7))

        res = api(trainer).get(f"/api/trainer/sessions/available/?group={group.id}")
        assert res.status_code == 200
        assert [s["id"] for s in res.data] == [open_one.id, running.id]

    def test_group_stats_endpoint(self, api, trainer, group, session):
        res = api(trainer).get(f"/api/trainer/groups/{group.id}/stats/")
        assert res.status_code == 200
        assert res.data["sessions"]["total"] == 1
        assert res.data["students"]["enrolled"] == 2
