import datetime as dt

import pytest
from django.utils import timezone

from apps.core.exceptions import DomainError
from apps.core.models import User
from apps.domains.crm import services
from apps.domains.crm.models import CalendarEvent, ContactRecord, Lead, LeadStatusChange


@pytest.fixture
def lead(reception):
    return services.create_lead(
        {"full_name": "Sami Haddad", "mobile_number": "0791234567", "interest_field": "robotics"},
        by=reception,
    )


def at(hour, day=4):
    return timezone.make_aware(dt.datetime(2024, 3, day, hour))


class TestLeads:
    def test_defaults(self, lead, reception):
        assert lead.status == Lead.Status.INTEREST
        assert lead.created_by == reception
        assert lead.mobile_number_label == "Main"

    def test_duplicate_mobile(self, lead, reception):
        with pytest.raises(DomainError, match="mobile number already exists") as exc:
            services.create_lead({"full_name": "Other", "mobile_number": " 0791234567 "}, by=reception)
        assert exc.value.status_code == 409

    def test_name_and_mobile_required(self, reception):
        with pytest.raises(DomainError, match="required"):
            services.create_lead({"full_name": "Nobody", "mobile_number": ""}, by=reception)

    def test_update_skips_protected_fields(self, lead):
        services.update_lead(lead, {"notes": "call after exams", "status": Lead.Status.STUDENT})
        lead.refresh_from_db()
        assert lead.notes == "call after exams"
        assert lead.status == Lead.Status.INTEREST

    def test_update_to_taken_mobile(self, lead, reception):
        other = services.create_lead({"full_name": "Other", "mobile_number": "0780000000"}, by=reception)
        with pytest.raises(DomainError) as exc:
            services.update_lead(other, {"mobile_number": lead.mobile_number})
        assert exc.value.status_code == 409

    def test_follow_up_sets_next_date(self, lead, reception):
        services.add_follow_up(lead, note="Asked for the schedule", next_follow_up_date=at(9, 11), by=reception)
        lead.refresh_from_db()
        assert lead.next_follow_up_date == at(9, 11)
        assert lead.follow_ups.get().note == "Asked for the schedule"

    def test_calculated_age(self, lead):
        lead.date_of_birth = dt.date(2010, 1, 1)
        lead.age = 99
        assert lead.calculated_age == timezone.localdate().year - 2010


class TestStatus:
    def test_reason_required(self, lead):
        with pytest.raises(DomainError, match="Reason is required"):
            services.change_status(lead, new_status=Lead.Status.BLACKLIST, reason="  ")

    def test_same_status_rejected(self, lead):
        with pytest.raises(DomainError, match="already in this status"):
            services.change_status(lead, new_status=Lead.Status.INTEREST, reason="again")

    def test_blacklist_and_back(self, lead, reception):
        services.change_status(
            lead, new_status=Lead.Status.BLACKLIST, reason="abusive calls", banned=True, by=reception
        )
        lead.refresh_from_db()
        assert lead.is_banned_from_platform is True
        assert lead.blacklist_reason == "abusive calls"

        services.change_status(lead, new_status=Lead.Status.INTEREST, reason="apologised")
        lead.refresh_from_db()
        assert lead.is_banned_from_platform is False
        assert lead.blacklist_reason == ""

        history = list(LeadStatusChange.objects.filter(lead=lead).values_list("from_status", "to_status"))
        assert history == [("interest", "blacklist"), ("blacklist", "interest")]


class TestConversion:
    def test_creates_student(self, lead, reception):
        lead, student = services.convert_to_student(
            lead, email="sami@example.com", password="secret12", by=reception
        )
        assert student.role == User.Role.STUDENT
        assert student.name == "Sami Haddad"
        assert student.check_password("secret12")
        assert lead.status == Lead.Status.STUDENT
        assert lead.converted_student == student
        assert lead.status_history.last().to_status == Lead.Status.STUDENT

    def test_only_once(self, lead):
        services.convert_to_student(lead, email="sami@example.com", password="secret12")
        with pytest.raises(DomainError, match="already been converted") as exc:
            services.convert_to_student(lead, email="sami2@example.com", password="secret12")
        assert exc.value.status_code == 409

    def test_email_taken(self, lead, student):
        student.email = "taken@example.com"
        student.save()
        with pytest.raises(DomainError, match="email already exists"):
            services.convert_to_student(lead, email="TAKEN@example.com", password="secret12")
        lead.refresh_from_db()
        assert lead.converted_student is None

    def test_banned_lead(self, lead):
        services.change_status(lead, new_status=Lead.Status.BLACKLIST, reason="fraud", banned=True)
        with pytest.raises(DomainError, match="banned"):
            services.convert_to_student(lead, email="sami@example.com", password="secret12")


class TestStats:
    def test_lead_stats(self, lead, reception):
        other = services.create_lead({"full_name": "B", "mobile_number": "0700000001"}, by=reception)
        services.change_status(other, new_status=Lead.Status.BLACKLIST, reason="spam")
        lead.next_follow_up_date = timezone.now() - dt.timedelta(days=1)
        lead.save()

        stats = services.lead_stats()
        assert stats["total"] == 2
        assert stats["interest"] == 1
        assert stats["blacklist"] == 1
        assert stats["recent_leads"] == 2
        assert stats["needs_follow_up"] == 1


class TestContactHistory:
    def record(self, lead, reception, **extra):
        data = {
            "contact_type": "call",
            "reason": "Course info",
            "outcome": "callback_requested",
            "contact_date": at(10),
            **extra,
        }
        return services.record_contact(lead, data, by=reception)

    def test_creates_event_and_follow_up(self, lead, reception):
        record = self.record(lead, reception, duration=15, next_follow_up_date=at(10, 6))
        event = record.event
        assert event.title == "Call with Sami Haddad - Course info"
        assert event.color == CalendarEvent.Color.YELLOW
        assert event.end_time - event.start_time == dt.timedelta(minutes=15)
        assert event.participants == [{"type": "lead", "lead": lead.id}]

        lead.refresh_from_db()
        assert lead.next_follow_up_date == at(10, 6)
        assert lead.follow_ups.get().note == "call: Course info - callback_requested"

    def test_default_duration(self, lead, reception):
        record = self.record(lead, reception)
        assert record.duration == 30
        assert record.event.end_time == at(10) + dt.timedelta(minutes=30)

    def test_required_fields(self, lead, reception):
        with pytest.raises(DomainError, match="required"):
            services.record_contact(lead, {"contact_type": "call", "outcome": "other"}, by=reception)

    def test_update_moves_event(self, lead, reception):
        record = self.record(lead, reception)
        services.update_contact(record, {"outcome": "successful", "contact_date": at(14), "duration": 60})
        event = CalendarEvent.objects.get(id=record.event_id)
        assert event.color == CalendarEvent.Color.GREEN
        assert event.start_time == at(14)
        assert event.end_time == at(15)

    def test_delete_removes_event(self, lead, reception):
        record = self.record(lead, reception)
        event_id = record.event_id
        services.delete_contact(record)
        assert not ContactRecord.objects.exists()
        assert not CalendarEvent.objects.filter(id=event_id).exists()

    def test_stats(self, lead, reception):
        self.record(lead, reception, duration=20)
        self.record(lead, reception, outcome="no_answer", duration=41)
        self.record(lead, reception, contact_type="meeting", outcome="no_answer", duration=30)
        stats = services.contact_stats(lead_id=lead.id)
        assert stats["total"] == 3
        assert stats["by_outcome"] == {"callback_requested": 1, "no_answer": 2}
        assert stats["by_type"] == {"call": 2, "meeting": 1}
        assert stats["average_duration"] == 30


class TestEvents:
    def test_end_after_start(self, reception):
        with pytest.raises(DomainError, match="End time must be after start time"):
            services.create_event({"title": "Open day", "start_time": at(12), "end_time": at(12)}, by=reception)

    def test_participants_validated(self, lead, reception):
        event = services.create_event(
            {
                "title": "Open day",
                "start_time": at(12),
                "end_time": at(13),
                "participants": [
                    {"type": "lead", "lead": lead.id},
                    {"type": "company", "role": "CLO"},
                    {"type": "custom", "name": "Parent", "phone": "0790000000"},
                ],
            },
            by=reception,
        )
        assert len(event.participants) == 3

        with pytest.raises(DomainError, match="Lead not found") as exc:
            services.create_event(
                {
                    "title": "x",
                    "start_time": at(12),
                    "end_time": at(13),
                    "participants": [{"type": "lead", "lead": 99999}],
                },
                by=reception,
            )
        assert exc.value.status_code == 404

    def test_window_query(self, reception):
        services.create_event({"title": "a", "start_time": at(9, 4), "end_time": at(10, 4)}, by=reception)
        services.create_event({"title": "b", "start_time": at(9, 12), "end_time": at(10, 12)}, by=reception)
        titles = [e.title for e in services.events_between(at(0, 3), at(23, 10))]
        assert titles == ["a"]


# ======================================================
# HTTP: /api/reception/
# ======================================================

class TestCrmApi:
    def test_create_and_duplicate(self, api, reception):
        client = api(reception)
        body = {"full_name": "Lina", "mobile_number": "0795550000"}
        assert client.post("/api/reception/leads/", body, format="json").status_code == 201
        res = client.post("/api/reception/leads/", body, format="json")
        assert res.status_code == 409

    def test_students_are_refused(self, api, student):
        assert api(student).get("/api/reception/leads/").status_code == 403

    def test_change_status_and_convert(self, api, reception, lead):
        client = api(reception)
        res = client.post(
            f"/api/reception/leads/{lead.id}/change-status/",
            {"new_status": "blacklist", "reason": "no show"},
            format="json",
        )
        assert res.status_code == 200
        assert res.json()["status"] == "blacklist"
        assert len(res.json()["status_history"]) == 1

        res = client.post(
            f"/api/reception/leads/{lead.id}/convert/",
            {"email": "sami@example.com", "password": "secret12"},
            format="json",
        )
        assert res.status_code == 201
        assert res.json()["lead"]["status"] == "student"

    def test_contact_history_endpoint(self, api, reception, lead):
        client = api(reception)
        res = client.post(
            f"/api/reception/leads/{lead.id}/contact-history/",
            {
                "contact_type": "meeting",
                "reason": "Visit",
                "outcome": "successful",
                "contact_date": "2024-03-04T10:00:00Z",
            },
            format="json",
        )
        assert res.status_code == 201
        assert res.json()["event"]["color"] == "green"

        res = client.get(f"/api/reception/leads/{lead.id}/contact-history/")
        assert res.json()["count"] == 1

        res = client.get("/api/reception/events/?start=2024-03-04&end=2024-03-04")
        assert [e["title"] for e in res.json()] == ["Meeting with Sami Haddad - Visit"]

    def test_bad_event_window(self, api, reception):
        assert api(reception).get("/api/reception/events/?start=soon").status_code == 400

    def test_stats(self, api, reception, lead):
        res = api(reception).get("/api/reception/leads/stats/")
        assert res.status_code == 200
        assert res.json()["total"] == 1
