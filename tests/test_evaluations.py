import pytest

from apps.core.exceptions import DomainError, OwnershipError, RosterError
from apps.domains.evaluations import services
from apps.domains.evaluations.models import EvaluationCriteria, StudentEvaluation
from apps.domains.sessions.models import Session
from tests.conftest import make_user


def evaluate(trainer, session, student, **data):
    data.setdefault("overall_rating", 4)
    return services.create_evaluation(
        trainer=trainer, session=session, student_id=student.id, data=data
    )


class TestCreate:
    def test_defaults(self, trainer, session, student):
        ev = evaluate(trainer, session, student)
        assert ev.group_id == session.group_id
        assert ev.skill_ratings["teamwork"] == 3
        assert not ev.is_flagged
        # 24 rating + 18 skills + 12 participation + 12 focus
        assert ev.performance_score == 66

    def test_low_rating_is_at_risk(self, trainer, session, student):
        assert evaluate(trainer, session, student, overall_rating=2).at_risk

    def test_struggling_needs_attention(self, trainer, session, student):
        ev = evaluate(trainer, session, student, comprehension_level="struggling")
        assert ev.needs_attention and not ev.at_risk

    def test_absent_needs_attention(self, trainer, session, student):
        assert evaluate(trainer, session, student, attendance_status="absent").needs_attention

    def test_excelling(self, trainer, session, student):
        skills = {s: 5 for s in ("technical_skills", "problem_solving", "creativity", "teamwork")}
        skills["communication"] = 4
        ev = evaluate(trainer, session, student, overall_rating=5, skill_ratings=skills)
        assert ev.average_skill_rating == 4.8
        assert ev.excelling

    def test_duplicate_conflicts(self, trainer, session, student):
        evaluate(trainer, session, student)
        with pytest.raises(DomainError, match="already exists") as exc:
            evaluate(trainer, session, student)
        assert exc.value.status_code == 409

    def test_other_trainers_session(self, other_trainer, session, student):
        with pytest.raises(OwnershipError):
            evaluate(other_trainer, session, student)

    def test_cancelled_session(self, trainer, group, make_session, student):
        s = make_session(group, status=Session.Status.CANCELLED)
        with pytest.raises(DomainError, match="Cancelled"):
            evaluate(trainer, s, student)

    def test_student_outside_roster(self, trainer, session):
        with pytest.raises(RosterError):
            evaluate(trainer, session, make_user("student"))

    @pytest.mark.parametrize("rating", [0, 6, 3.5, True, None])
    def test_rating_range(self, trainer, session, student, rating):
        with pytest.raises(DomainError, match="overall_rating"):
            evaluate(trainer, session, student, overall_rating=rating)

    def test_unknown_skill(self, trainer, session, student):
        with pytest.raises(DomainError, match="Unknown skill"):
            evaluate(trainer, session, student, skill_ratings={"juggling": 3})


class TestUpdate:
    def test_flags_only_raised(self, trainer, session, student):
        ev = evaluate(trainer, session, student, overall_rating=1)
        ev = services.update_evaluation(ev, {"overall_rating": 4}, trainer=trainer)
        assert ev.overall_rating == 4
        assert ev.at_risk

    def test_only_author_edits(self, trainer, other_trainer, session, student):
        ev = evaluate(trainer, session, student)
        with pytest.raises(OwnershipError):
            services.update_evaluation(ev, {"notes": "x"}, trainer=other_trainer)

    def test_identity_fields_locked(self, trainer, session, student):
        ev = evaluate(trainer, session, student)
        with pytest.raises(DomainError, match="cannot be changed"):
            services.update_evaluation(ev, {"student": 99}, trainer=trainer)


class TestCriteria:
    PARAMS = [
        {"name": "Build", "type": "rating", "weight": 60},
        {"name": "Docs", "type": "percentage", "weight": 40},
    ]

    def test_weights_must_total_100(self):
        with pytest.raises(DomainError, match="sum to 100"):
            services.validate_criteria_parameters([
                {"name": "Build", "weight": 60},
                {"name": "Docs", "weight": 30},
            ])

    def test_unweighted_is_fine(self):
        cleaned = services.validate_criteria_parameters([{"name": "Build"}, {"name": "Docs"}])
        assert [p["name"] for p in cleaned] == ["Build", "Docs"]
        assert cleaned[0]["rating_scale"] == {"min": 1, "max": 5}

    def test_duplicate_names(self):
        with pytest.raises(DomainError, match="duplicate"):
            services.validate_criteria_parameters([{"name": "A"}, {"name": "A"}])

    def test_weighted_performance(self, trainer, session, student, course, clo):
        EvaluationCriteria.objects.create(
            name="Build quality",
            course=course,
            parameters=services.validate_criteria_parameters(self.PARAMS),
            created_by=clo,
        )
        ev = evaluate(trainer, session, student, parameters={"Build": 4, "Docs": 50})
        assert ev.criteria is not None
        # (75 * 60 + 50 * 40) / 100
        assert ev.performance_score == 65

    def test_required_parameter(self, trainer, session, student, course, clo):
        EvaluationCriteria.objects.create(
            name="Build quality",
            course=course,
            parameters=services.validate_criteria_parameters(self.PARAMS),
            created_by=clo,
        )
        with pytest.raises(DomainError, match="'Docs' is required"):
            evaluate(trainer, session, student, parameters={"Build": 4})

    def test_group_criteria_wins(self, group, course, clo):
        EvaluationCriteria.objects.create(name="Course", course=course, created_by=clo)
        specific = EvaluationCriteria.objects.create(
            name="Group",
            course=course,
            applies_to=EvaluationCriteria.AppliesTo.GROUPS,
            created_by=clo,
        )
        specific.groups.add(group)
        assert services.criteria_for_group(group) == specific


class TestBulkAndShare:
    def test_bulk_collects_errors(self, trainer, session, student, student2):
        result = services.bulk_create(
            trainer=trainer,
            session=session,
            items=[
                {"student": student.id, "overall_rating": 5},
                {"student": student2.id, "overall_rating": 9},
                {"overall_rating": 3},
            ],
        )
        assert [e.student_id for e in result["created"]] == [student.id]
        assert [e["index"] for e in result["errors"]] == [1, 2]
        assert StudentEvaluation.objects.count() == 1

    def test_share_stamps_once(self, trainer, session, student):
        ev = services.share(evaluate(trainer, session, student))
        first = ev.shared_at
        assert ev.shared_with_student and first is not None
        ev = services.share(ev, parent=True)
        assert ev.shared_with_parent
        assert ev.shared_at == first

    def test_stats(self, trainer, session, student, student2):
        evaluate(trainer, session, student, overall_rating=2)
        evaluate(trainer, session, student2, overall_rating=5)
        out = services.evaluation_stats(StudentEvaluation.objects.all())
        assert out["total"] == 2
        assert out["average_rating"] == 3.5
        assert out["rating_distribution"][5] == 1
        assert out["flagged_students"]["at_risk"] == 1

        flagged = services.flagged_students(StudentEvaluation.objects.all())
        assert [r["student_id"] for r in flagged] == [student.id]
