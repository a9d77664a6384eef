from decimal import Decimal

from apps.domains.enrollment.models import Enrollment, Payment
from apps.domains.inventory import services as inventory
from apps.domains.inventory.models import Part, StockLedger


class TestAuth:
    def test_token_and_me(self, api, trainer):
        res = api().post(
            "/api/auth/token/",
            {"username": trainer.username, "password": "pass1234!"},
            format="json",
        )
        assert res.status_code == 200
        assert res.data["user"]["role"] == "trainer"
        assert "access_token" in res.cookies

        client = api()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
        me = client.get("/api/auth/me/")
        assert me.status_code == 200
        assert me.data["username"] == trainer.username

    def test_login_cookie_authenticates_without_header(self, api, trainer):
        client = api()
        res = client.post(
            "/api/auth/token/",
            {"username": trainer.username, "password": "pass1234!"},
            format="json",
        )
        assert res.status_code == 200

        # the test client carries the cookie forward; no Authorization header is set
        me = client.get("/api/auth/me/")
        assert me.status_code == 200
        assert me.data["role"] == "trainer"

    def test_configured_authentication_classes_resolve(self):
        from rest_framework.settings import api_settings

        from apps.core.authentication import CookieJWTAuthentication

        assert CookieJWTAuthentication in api_settings.DEFAULT_AUTHENTICATION_CLASSES

    def test_bad_password(self, api, trainer):
        res = api().post(
            "/api/auth/token/",
            {"username": trainer.username, "password": "nope"},
            format="json",
        )
        assert res.status_code in (400, 401)

    def test_anonymous_me(self, api, db):
        assert api().get("/api/auth/me/").status_code == 401


class TestTrainerArea:
    def test_attendance_batch(self, api, trainer, session, student, student2):
        body = {
            "session": session.id,
            "records": [
                {"student": student.id, "status": "present"},
                {"student": student2.id, "status": "late"},
            ],
        }
        res = api(trainer).post("/api/trainer/attendance/", body, format="json")
        assert res.status_code == 201
        assert res.data["summary"]["attended"] == 2

        sheet = api(trainer).get(f"/api/trainer/attendance/session/{session.id}/")
        assert [r["status"] for r in sheet.data["students"]] == ["present", "late"]

    def test_other_trainers_session_is_hidden(self, api, other_trainer, session, student):
        body = {"session": session.id, "records": [{"student": student.id, "status": "present"}]}
        assert api(other_trainer).post("/api/trainer/attendance/", body, format="json").status_code == 404

    def test_export_requires_group(self, api, trainer, group):
        assert api(trainer).get("/api/trainer/attendance/export/").status_code == 400
        res = api(trainer).get(f"/api/trainer/attendance/export/?group={group.id}")
        assert res.status_code == 200
        assert res["Content-Disposition"].endswith('.xlsx"')

    def test_students_are_kept_out(self, api, student):
        assert api(student).get("/api/trainer/attendance/").status_code == 403


class TestReceptionArea:
    def test_enroll_and_take_payment(self, api, reception, student, course):
        res = api(reception).post(
            "/api/reception/enrollments/",
            {"student": student.id, "course": course.id, "installments": 2},
            format="json",
        )
        assert res.status_code == 201
        enrollment = Enrollment.objects.get(id=res.data["id"])
        assert enrollment.installments.count() == 2

        pay = api(reception).post(
            f"/api/reception/enrollments/{enrollment.id}/payment/",
            {"amount": "150.00", "method": "card"},
            format="json",
        )
        assert pay.status_code == 201
        assert pay.data["receipt_number"].startswith("RCP-")

        receipt = api(reception).get(f"/api/reception/payments/{pay.data['id']}/receipt/")
        assert receipt["Content-Type"] == "application/pdf"

        gone = api(reception).delete(f"/api/reception/enrollments/{enrollment.id}/")
        assert gone.status_code == 409

    def test_student_confirms_own_payment(self, api, reception, student, course):
        api(reception).post(
            "/api/reception/enrollments/",
            {"student": student.id, "course": course.id},
            format="json",
        )
        enrollment = Enrollment.objects.get(student=student)
        res = api(student).post(
            "/api/student/payments/initiate/",
            {"enrollment": enrollment.id, "amount": "300.00"},
            format="json",
        )
        assert res.status_code == 201
        done = api(student).post(
            f"/api/student/payments/{res.data['id']}/confirm/",
            {"transaction_id": "BANK-42"},
            format="json",
        )
        assert done.data["status"] == Payment.Status.COMPLETED
        enrollment.refresh_from_db()
        assert enrollment.paid_amount == Decimal("300.00")


class TestInventoryApi:
    def test_shortage_body(self, api, clo, student):
        part = Part.objects.create(name="Servo", sku="SRV-1")
        inventory.manual_adjust(part, 1, StockLedger.Reason.PURCHASE, created_by=clo)
        res = api(student).post(
            "/api/orders/",
            {"items": [{"part": part.id, "qty": 2}]},
            format="json",
        )
        assert res.status_code == 409
        assert res.data["shortages"][0]["available"] == 1

    def test_students_cannot_adjust_stock(self, api, student):
        part = Part.objects.create(name="Servo", sku="SRV-1")
        res = api(student).post(
            "/api/stock/adjust/",
            {"part": part.id, "qty_change": 5, "reason": "purchase"},
            format="json",
        )
        assert res.status_code == 403


class TestHealth:
    def test_health(self, client, db):
        res = client.get("/api/health/")
        assert res.status_code == 200
        assert res.json()["status"] == "healthy"
