import datetime as dt

import pytest
from django.utils import timezone

from apps.core.exceptions import DomainError, OwnershipError
from apps.domains.enrollment import services as enrollment_services
from apps.domains.quizzes import services
from apps.domains.quizzes.models import Quiz, QuizAttempt

QUESTIONS = [
    {
        "question": "Which part turns electrical energy into motion?",
        "options": [{"text": "Motor", "is_correct": True}, {"text": "Sensor"}],
        "points": 2,
    },
    {
        "question": "Pick the sensors",
        "type": "multiple",
        "options": [
            {"text": "Ultrasonic", "is_correct": True},
            {"text": "Servo"},
            {"text": "IR", "is_correct": True},
        ],
        "points": 3,
        "explanation": "Servos are actuators.",
    },
]

ALL_RIGHT = [{"question": 1, "selected": [0]}, {"question": 2, "selected": [0, 2]}]


@pytest.fixture
def enrollment(student, course):
    return enrollment_services.create_enrollment(student=student, course=course)


@pytest.fixture
def quiz(trainer, course):
    return services.create_quiz(
        trainer=trainer,
        course=course,
        data={"title": "Motors check", "questions": QUESTIONS, "max_attempts": 2},
    )


class TestAuthoring:
    def test_questions_get_ids(self, quiz):
        assert [q["id"] for q in quiz.questions] == [1, 2]
        assert quiz.questions[0]["type"] == "single"
        assert quiz.total_points == 5

    def test_two_options_minimum(self):
        with pytest.raises(DomainError, match="Question 1 must have text and at least 2 options"):
            services.normalize_questions([{"question": "?", "options": [{"text": "a", "is_correct": True}]}])

    def test_correct_answer_required(self):
        with pytest.raises(DomainError, match="at least one correct answer"):
            services.normalize_questions([{"question": "?", "options": [{"text": "a"}, {"text": "b"}]}])

    def test_single_choice_one_correct(self):
        opts = [{"text": "a", "is_correct": True}, {"text": "b", "is_correct": True}]
        with pytest.raises(DomainError, match="single choice"):
            services.normalize_questions([{"question": "?", "options": opts}])

    def test_other_trainer_cannot_create(self, other_trainer, course):
        with pytest.raises(OwnershipError):
            services.create_quiz(
                trainer=other_trainer, course=course, data={"title": "x", "questions": QUESTIONS}
            )

    def test_duplicate(self, quiz, trainer):
        copy = services.duplicate_quiz(quiz, trainer=trainer)
        assert copy.title == "Motors check (Copy)"
        assert copy.questions == quiz.questions
        assert copy.id != quiz.id

    def test_update_replaces_questions(self, quiz, trainer):
        services.update_quiz(quiz, trainer=trainer, data={"questions": QUESTIONS[:1], "passing_score": 50})
        quiz.refresh_from_db()
        assert quiz.total_questions == 1
        assert quiz.passing_score == 50


class TestScoring:
    def test_all_correct(self, quiz):
        graded, earned, total = services.score_answers(quiz.questions, ALL_RIGHT)
        assert (earned, total) == (5, 5)
        assert all(g["is_correct"] for g in graded)

    def test_multiple_needs_exact_set(self, quiz):
        _, earned, _ = services.score_answers(
            quiz.questions, [{"question": 1, "selected": [0]}, {"question": 2, "selected": [0]}]
        )
        assert earned == 2

    def test_unanswered_counts_against(self, quiz):
        graded, earned, total = services.score_answers(quiz.questions, [{"question": 2, "selected": [2, 0]}])
        assert (earned, total) == (3, 5)
        assert graded[0]["selected"] == []

    def test_single_with_two_selected_is_wrong(self, quiz):
        _, earned, _ = services.score_answers(quiz.questions, [{"question": 1, "selected": [0, 1]}])
        assert earned == 0


class TestAttempts:
    def test_student_view_hides_answers(self, quiz, enrollment, student):
        view = services.student_view(quiz, student)
        assert "is_correct" not in view["questions"][0]["options"][0]
        assert view["can_attempt"] is True
        assert view["attempts_used"] == 0

    def test_not_enrolled(self, quiz, student2):
        with pytest.raises(OwnershipError):
            services.start_attempt(quiz, student2)

    def test_start_returns_open_attempt(self, quiz, enrollment, student):
        first, created = services.start_attempt(quiz, student)
        again, created_again = services.start_attempt(quiz, student)
        assert created and not created_again
        assert again.id == first.id

    def test_submit_scores_and_passes(self, quiz, enrollment, student):
        attempt, _ = services.start_attempt(quiz, student)
        attempt = services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=ALL_RIGHT)
        assert attempt.status == QuizAttempt.Status.SUBMITTED
        assert attempt.score == 100
        assert attempt.passed is True

    def test_below_passing_score(self, quiz, enrollment, student):
        attempt, _ = services.start_attempt(quiz, student)
        attempt = services.submit_attempt(
            quiz, student, attempt_id=attempt.id, answers=[{"question": 1, "selected": [0]}]
        )
        assert attempt.score == 40
        assert attempt.passed is False

    def test_submit_twice(self, quiz, enrollment, student):
        attempt, _ = services.start_attempt(quiz, student)
        services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=ALL_RIGHT)
        with pytest.raises(DomainError, match="already submitted") as exc:
            services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=ALL_RIGHT)
        assert exc.value.status_code == 404

    def test_max_attempts(self, quiz, enrollment, student):
        for _ in range(2):
            attempt, _ = services.start_attempt(quiz, student)
            services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=[])
        with pytest.raises(DomainError, match="Maximum attempts"):
            services.start_attempt(quiz, student)
        assert services.attempt_history(quiz, student)["count"] == 2

    def test_time_limit_on_submit(self, quiz, enrollment, student):
        quiz.time_limit = 10
        quiz.save()
        start = timezone.now() - dt.timedelta(minutes=11)
        attempt, _ = services.start_attempt(quiz, student, now=start)
        with pytest.raises(DomainError, match="Time limit") as exc:
            services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=ALL_RIGHT)
        assert exc.value.status_code == 409
        attempt.refresh_from_db()
        assert attempt.status == QuizAttempt.Status.EXPIRED

    def test_expired_open_attempt_is_replaced(self, quiz, enrollment, student):
        quiz.time_limit = 10
        quiz.save()
        old, _ = services.start_attempt(quiz, student, now=timezone.now() - dt.timedelta(hours=1))
        fresh, created = services.start_attempt(quiz, student)
        assert created
        assert fresh.attempt_number == old.attempt_number + 1
        old.refresh_from_db()
        assert old.status == QuizAttempt.Status.EXPIRED

    def test_best_score_and_results(self, quiz, enrollment, student):
        a, _ = services.start_attempt(quiz, student)
        services.submit_attempt(quiz, student, attempt_id=a.id, answers=[{"question": 1, "selected": [0]}])
        b, _ = services.start_attempt(quiz, student)
        services.submit_attempt(quiz, student, attempt_id=b.id, answers=ALL_RIGHT)
        assert services.attempt_history(quiz, student)["best_score"] == 100

        result = services.attempt_results(quiz, student, a.id)
        assert result["feedback"][1]["explanation"] == "Servos are actuators."
        assert result["feedback"][1]["correct"] == [0, 2]

    def test_feedback_hidden(self, quiz, enrollment, student):
        quiz.show_feedback = False
        quiz.save()
        a, _ = services.start_attempt(quiz, student)
        a = services.submit_attempt(quiz, student, attempt_id=a.id, answers=ALL_RIGHT)
        assert services.feedback(quiz, a) is None


# ======================================================
# HTTP
# ======================================================

class TestQuizApi:
    def test_trainer_creates(self, api, trainer, course):
        res = api(trainer).post(
            "/api/trainer/quizzes/",
            {"course": course.id, "title": "Gears", "questions": QUESTIONS},
            format="json",
        )
        assert res.status_code == 201
        assert res.json()["total_questions"] == 2
        assert Quiz.objects.get(id=res.json()["id"]).created_by == trainer

    def test_invalid_questions_400(self, api, trainer, course):
        res = api(trainer).post(
            "/api/trainer/quizzes/",
            {"course": course.id, "title": "Gears", "questions": [{"question": "?", "options": []}]},
            format="json",
        )
        assert res.status_code == 400

    def test_other_trainer_cannot_see(self, api, other_trainer, quiz):
        assert api(other_trainer).get(f"/api/trainer/quizzes/{quiz.id}/").status_code == 404

    def test_student_takes_quiz(self, api, student, enrollment, quiz):
        client = api(student)
        res = client.get(f"/api/student/quizzes/{quiz.id}/")
        assert res.status_code == 200
        assert res.json()["total_points"] == 5

        res = client.post(f"/api/student/quizzes/{quiz.id}/start/")
        assert res.status_code == 201
        attempt_id = res.json()["id"]
        assert client.post(f"/api/student/quizzes/{quiz.id}/start/").status_code == 200

        res = client.post(
            f"/api/student/quizzes/{quiz.id}/submit/",
            {"attempt": attempt_id, "answers": ALL_RIGHT},
            format="json",
        )
        assert res.status_code == 200
        assert res.json()["score"] == 100
        assert len(res.json()["feedback"]) == 2

        res = client.get(f"/api/student/quizzes/{quiz.id}/results/{attempt_id}/")
        assert res.status_code == 200
        assert res.json()["quiz"]["title"] == "Motors check"

    def test_trainer_sees_attempts(self, api, trainer, student, enrollment, quiz):
        attempt, _ = services.start_attempt(quiz, student)
        services.submit_attempt(quiz, student, attempt_id=attempt.id, answers=ALL_RIGHT)
        res = api(trainer).get(f"/api/trainer/quizzes/{quiz.id}/attempts/")
        assert res.status_code == 200
        assert res.json()[0]["student_name"] == "Alice"

    def test_student_not_enrolled_404(self, api, student2, quiz):
        assert api(student2).get(f"/api/student/quizzes/{quiz.id}/").status_code == 404
