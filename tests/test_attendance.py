import datetime as dt

import pytest

from apps.core.exceptions import AttendanceLocked, DomainError, RosterError
from apps.domains.attendance import services
from apps.domains.attendance.models import Attendance
from apps.domains.groups import services as group_services
from apps.domains.sessions import services as session_services
from apps.domains.sessions.models import Session
from tests.conftest import make_user

S = Session.Status


class TestGate:
    @pytest.mark.parametrize("status", [S.SCHEDULED, S.IN_PROGRESS])
    def test_open_states_accept(self, group, make_session, trainer, student, status):
        s = make_session(group, status=status)
        result = services.record_attendance(
            s, [{"student": student.id, "status": "present"}], marked_by=trainer
        )
        assert result["created"] == 1

    @pytest.mark.parametrize("status", [S.COMPLETED, S.CANCELLED])
    def test_closed_states_reject(self, group, make_session, trainer, student, status):
        s = make_session(group, status=status)
        with pytest.raises(AttendanceLocked, match=status):
            services.record_attendance(
                s, [{"student": student.id, "status": "present"}], marked_by=trainer
            )
        assert not Attendance.objects.filter(session=s).exists()

    def test_student_outside_roster(self, session, trainer, db):
        outsider = make_user("student")
        with pytest.raises(RosterError, match=str(outsider.id)):
            services.record_attendance(
                session, [{"student": outsider.id, "status": "present"}], marked_by=trainer
            )

    def test_bad_status(self, session, trainer, student):
        with pytest.raises(DomainError, match="status must be one of"):
            services.record_attendance(
                session, [{"student": student.id, "status": "sleeping"}], marked_by=trainer
            )

    def test_empty_batch(self, session, trainer):
        with pytest.raises(DomainError, match="non-empty"):
            services.record_attendance(session, [], marked_by=trainer)

    def test_stale_copy_after_session_ended(self, session, trainer, student):
        session_services.start_session(session)
        stale = Session.objects.get(id=session.id)
        session_services.end_session(Session.objects.get(id=session.id))

        assert stale.status == Session.Status.IN_PROGRESS
        with pytest.raises(AttendanceLocked):
            services.record_attendance(
                stale, [{"student": student.id, "status": "present"}], marked_by=trainer
            )
        assert not Attendance.objects.filter(session=session).exists()


class TestUpsert:
    def test_resubmit_overwrites(self, session, trainer, student, student2):
        first = services.record_attendance(
            session,
            [
                {"student": student.id, "status": "absent"},
                {"student": student2.id, "status": "present"},
            ],
            marked_by=trainer,
        )
        assert (first["created"], first["updated"]) == (2, 0)

        second = services.record_attendance(
            session, [{"student": student.id, "status": "late", "notes": "bus"}], marked_by=trainer
        )
        assert (second["created"], second["updated"]) == (0, 1)

        rows = Attendance.objects.filter(session=session)
        assert rows.count() == 2
        alice = rows.get(student=student)
        assert alice.status == "late"
        assert alice.notes == "bus"
        assert alice.check_in_time is not None

    def test_absent_has_no_check_in(self, session, trainer, student):
        services.record_attendance(
            session, [{"student": student.id, "status": "absent"}], marked_by=trainer
        )
        assert Attendance.objects.get(session=session, student=student).check_in_time is None

    def test_duplicate_in_batch_last_wins(self, session, trainer, student):
        result = services.record_attendance(
            session,
            [
                {"student": student.id, "status": "absent"},
                {"student": student.id, "status": "present"},
            ],
            marked_by=trainer,
        )
        assert result["created"] == 1
        assert Attendance.objects.get(session=session, student=student).status == "present"

    def test_summary_counts_late_as_attended(self, session, trainer, student, student2):
        result = services.record_attendance(
            session,
            [
                {"student": student.id, "status": "late"},
                {"student": student2.id, "status": "absent"},
            ],
            marked_by=trainer,
        )
        assert result["summary"]["attended"] == 1
        assert result["summary"]["percentage"] == 50

    def test_resubmit_keeps_first_check_in(self, session, trainer, student):
        first_at = dt.datetime(2024, 3, 4, 10, 2, tzinfo=dt.timezone.utc)
        later = dt.datetime(2024, 3, 4, 11, 30, tzinfo=dt.timezone.utc)
        services.record_attendance(
            session, [{"student": student.id, "status": "present"}], marked_by=trainer, now=first_at
        )
        services.record_attendance(
            session,
            [{"student": student.id, "status": "present", "notes": "left early"}],
            marked_by=trainer,
            now=later,
        )
        row = Attendance.objects.get(session=session, student=student)
        assert row.check_in_time == first_at
        assert row.marked_at == later

    def test_absent_then_present_stamps_now(self, session, trainer, student):
        later = dt.datetime(2024, 3, 4, 10, 40, tzinfo=dt.timezone.utc)
        services.record_attendance(
            session, [{"student": student.id, "status": "absent"}], marked_by=trainer
        )
        services.record_attendance(
            session, [{"student": student.id, "status": "late"}], marked_by=trainer, now=later
        )
        assert Attendance.objects.get(session=session, student=student).check_in_time == later

    def test_supplied_check_in_time_is_kept(self, session, trainer, student):
        services.record_attendance(
            session,
            [{"student": student.id, "status": "late", "check_in_time": "2024-03-04T10:20:00Z"}],
            marked_by=trainer,
        )
        row = Attendance.objects.get(session=session, student=student)
        assert row.check_in_time == dt.datetime(2024, 3, 4, 10, 20, tzinfo=dt.timezone.utc)

    def test_unparseable_check_in_time(self, session, trainer, student):
        with pytest.raises(DomainError, match="check_in_time"):
            services.record_attendance(
                session,
                [{"student": student.id, "status": "present", "check_in_time": "soon"}],
                marked_by=trainer,
            )


class TestRates:
    def test_summarize_statuses(self):
        out = services.summarize_statuses(["present", "late", "absent", "excused"])
        assert out["total"] == 4
        assert out["attended"] == 2
        assert out["percentage"] == 50
        assert out["excused"] == 1

    def test_summarize_empty(self):
        assert services.summarize_statuses([])["percentage"] == 0

    def test_mean_is_over_students_not_records(self):
        rows = [
            {"student_id": 1, "status": "present"},
            {"student_id": 1, "status": "present"},
            {"student_id": 1, "status": "late"},
            {"student_id": 1, "status": "absent"},
            {"student_id": 2, "status": "absent"},
            {"student_id": 2, "status": "present"},
        ]
        # 75% and 50%; pooling the records would give 66.7
        assert services.mean_student_rate(rows) == 62.5

    def test_group_average_skips_cancelled_sessions(
        self, group, make_session, trainer, student, student2
    ):
        s1 = make_session(group, day=dt.date(2024, 3, 4))
        s2 = make_session(group, day=dt.date(2024, 3, 7))
        s3 = make_session(group, day=dt.date(2024, 3, 11))
        s4 = make_session(group, day=dt.date(2024, 3, 14))

        for s, alice, bob in (
            (s1, "present", "present"),
            (s2, "late", "absent"),
            (s3, "absent", "absent"),
            (s4, "present", "present"),
        ):
            services.record_attendance(
                s,
                [{"student": student.id, "status": alice}, {"student": student2.id, "status": bob}],
                marked_by=trainer,
            )
        # records stay, but a cancelled session drops out of every rate
        s3.status = S.CANCELLED
        s3.save()

        # alice 3/3 = 100%, bob 2/3 = 66.67% -> mean 83.3
        assert group_services.average_attendance(group) == 83.3

    def test_group_average_no_records(self, group):
        assert group_services.average_attendance(group) == 0.0


class TestSheet:
    def test_unmarked_students_have_no_status(self, session, trainer, student, student2):
        services.record_attendance(
            session, [{"student": student.id, "status": "present"}], marked_by=trainer
        )
        rows = {r["student_id"]: r for r in services.session_sheet(session)}
        assert rows[student.id]["status"] == "present"
        assert rows[student2.id]["status"] is None
