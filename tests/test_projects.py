import datetime as dt

import pytest

from apps.core.exceptions import DomainError, OwnershipError, RosterError
from apps.domains.inventory import services as inventory
from apps.domains.inventory.models import Part, StockLedger
from apps.domains.projects import services
from apps.domains.projects.models import Competition, Project, Team
from tests.conftest import make_user


@pytest.fixture
def motor(db, clo):
    part = Part.objects.create(name="DC motor", sku="MOT-1")
    inventory.manual_adjust(part, 3, StockLedger.Reason.PURCHASE, created_by=clo)
    return part


@pytest.fixture
def project(student):
    return Project.objects.create(title="Line follower", owner=student)


@pytest.fixture
def competition(db):
    return Competition.objects.create(
        name="Regional robotics",
        start_date=dt.date(2024, 5, 1),
        end_date=dt.date(2024, 5, 2),
    )


@pytest.fixture
def team(competition, trainer):
    return Team.objects.create(name="Sparks", competition=competition, coach=trainer, max_members=2)


class TestProjectParts:
    def test_upsert(self, project, motor, student):
        assert services.set_project_part(project, motor, 2, by=student)["created"]
        line = services.set_project_part(project, motor, 5, by=student)
        assert not line["created"]
        assert project.project_parts.get().qty == 5

    def test_summary_shortfall(self, project, motor, student):
        services.set_project_part(project, motor, 5, by=student)
        out = services.project_summary(project)
        assert out["parts"][0]["shortfall"] == 2
        assert not out["ready"]
        assert out["orders"] == {}

    def test_only_owner_or_manager(self, project, motor, student2, clo):
        with pytest.raises(OwnershipError):
            services.set_project_part(project, motor, 1, by=student2)
        services.set_project_part(project, motor, 1, by=clo)

    def test_retired_part(self, project, motor, student):
        motor.is_active = False
        motor.save()
        with pytest.raises(DomainError, match="no longer available"):
            services.set_project_part(project, motor, 1, by=student)

    def test_remove_missing_part(self, project, student):
        with pytest.raises(DomainError, match="not on this project") as exc:
            services.remove_project_part(project, 12345, by=student)
        assert exc.value.status_code == 404


class TestTeams:
    def test_capacity(self, team, trainer, student, student2):
        services.add_member(team, student, by=trainer)
        services.add_member(team, student2, by=trainer)
        with pytest.raises(RosterError, match="full"):
            services.add_member(team, make_user("student"), by=trainer)

    def test_one_team_per_competition(self, team, competition, trainer, clo, student):
        other = Team.objects.create(name="Bolts", competition=competition, coach=trainer)
        services.add_member(team, student, by=trainer)
        with pytest.raises(RosterError, match="Sparks"):
            services.add_member(other, student, by=clo)

    def test_coach_or_clo_only(self, team, other_trainer, student):
        with pytest.raises(OwnershipError):
            services.add_member(team, student, by=other_trainer)

    def test_completed_competition(self, team, competition, trainer, student):
        competition.status = Competition.Status.COMPLETED
        competition.save()
        with pytest.raises(RosterError, match="completed"):
            services.add_member(team, student, by=trainer)

    def test_students_only(self, team, trainer, other_trainer):
        with pytest.raises(RosterError):
            services.add_member(team, other_trainer, by=trainer)

    def test_remove(self, team, trainer, student):
        services.add_member(team, student, by=trainer)
        services.remove_member(team, student, by=trainer)
        assert team.member_count == 0
        with pytest.raises(RosterError, match="not on this team"):
            services.remove_member(team, student, by=trainer)


class TestProjectApi:
    def test_list_scoped_to_owner(self, api, project, student2, clo):
        Project.objects.create(title="Arm", owner=student2)
        res = api(student2).get("/api/projects/")
        assert [p["title"] for p in res.data["results"]] == ["Arm"]
        assert api(clo).get("/api/projects/").data["count"] == 2

    def test_create_sets_owner(self, api, student):
        res = api(student).post("/api/projects/", {"title": "Rover"}, format="json")
        assert res.status_code == 201
        assert Project.objects.get(title="Rover").owner == student

    def test_delete_with_orders_conflicts(self, api, project, motor, student):
        inventory.create_order(requested_by=student, items=[{"part": motor.id, "qty": 1}], project=project)
        res = api(student).delete(f"/api/projects/{project.id}/")
        assert res.status_code == 409
        assert Project.objects.filter(id=project.id).exists()

    def test_competition_write_needs_clo(self, api, trainer, clo):
        body = {"name": "Cup", "start_date": "2024-05-01", "end_date": "2024-05-02"}
        assert api(trainer).post("/api/competitions/", body, format="json").status_code == 403
        assert api(clo).post("/api/competitions/", body, format="json").status_code == 201

    def test_coach_adds_member(self, api, team, trainer, student):
        res = api(trainer).post(f"/api/teams/{team.id}/members/", {"student": student.id}, format="json")
        assert res.status_code == 201
        assert team.members.filter(id=student.id).exists()
