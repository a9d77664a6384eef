# PATH: apps/domains/quizzes/services.py
# Quiz authoring (trainer) and attempts with scoring (student).

from __future__ import annotations

import logging
import random
from datetime import timedelta

from django.utils import timezone

from apps.core.exceptions import DomainError
from apps.core.services.time_policy import percentage
from apps.domains.enrollment.services import require_enrollment
from apps.domains.learning.services import check_course_access
from trainhub.adapters.db.django import repositories_quizzes as quiz_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Quiz, QuizAttempt

logger = logging.getLogger(__name__)

A = QuizAttempt.Status

QUESTION_TYPES = ("single", "multiple")

EDITABLE_FIELDS = (
    "title",
    "description",
    "instructions",
    "passing_score",
    "time_limit",
    "max_attempts",
    "shuffle_questions",
    "shuffle_options",
    "show_feedback",
    "is_active",
    "module",
    "session",
    "group",
)


# ======================================================
# Question validation
# ======================================================

def normalize_questions(questions) -> list[dict]:
    """
    Validate the question list and give every question a stable id (1..n).
    """
    if not isinstance(questions, list) or not questions:
        raise DomainError("At least one question is required")

    normalized = []
    for idx, raw in enumerate(questions, start=1):
        raw = raw if isinstance(raw, dict) else {}
        text = (raw.get("question") or "").strip()
        options = raw.get("options") or []
        if not text or not isinstance(options, list) or len(options) < 2:
            raise DomainError(f"Question {idx} must have text and at least 2 options")
        if len(text) > 1000:
            raise DomainError(f"Question {idx} cannot exceed 1000 characters")

        qtype = raw.get("type") or "single"
        if qtype not in QUESTION_TYPES:
            raise DomainError(f"Question {idx}: type must be single or multiple")

        clean_options = []
        for opt in options:
            opt = opt if isinstance(opt, dict) else {}
            opt_text = (opt.get("text") or "").strip()
            if not opt_text:
                raise DomainError(f"Question {idx}: every option needs text")
            clean_options.append({"text": opt_text[:500], "is_correct": bool(opt.get("is_correct"))})

        correct = sum(1 for o in clean_options if o["is_correct"])
        if correct == 0:
            raise DomainError(f"Question {idx} must have at least one correct answer")
        if qtype == "single" and correct > 1:
            raise DomainError(f"Question {idx} is single choice but has multiple correct answers")

        try:
            points = int(raw.get("points", 1))
        except (TypeError, ValueError):
            raise DomainError(f"Question {idx}: points must be a number")
        if points < 0:
            raise DomainError(f"Question {idx}: points cannot be negative")

        normalized.append({
            "id": idx,
            "question": text,
            "type": qtype,
            "options": clean_options,
            "points": points,
            "explanation": (raw.get("explanation") or "").strip()[:1000],
        })
    return normalized


def _check_links(course, data: dict) -> None:
    module, session, group = data.get("module"), data.get("session"), data.get("group")
    if module is not None and module.course_id != course.id:
        raise DomainError("Module not found in this course", status_code=404)
    if session is not None and session.course_id != course.id:
        raise DomainError("Session does not belong to this course")
    if group is not None and group.course_id != course.id:
        raise DomainError("Group does not belong to this course")


# ======================================================
# Authoring
# ======================================================

def create_quiz(*, trainer, course, data: dict) -> Quiz:
    check_course_access(trainer, course)
    title = (data.get("title") or "").strip()
    if not title:
        raise DomainError("title is required")
    questions = normalize_questions(data.get("questions"))
    _check_links(course, data)

    fields = {k: data[k] for k in EDITABLE_FIELDS if k in data}
    fields["title"] = title
    quiz = quiz_repo.quiz_create(
        course=course,
        questions=questions,
        created_by=trainer,
        **fields,
    )
    logger.info(
        "[quiz_create] quiz_id=%s course_id=%s questions=%s by=%s",
        quiz.id,
        course.id,
        len(questions),
        trainer.id,
    )
    return quiz


def update_quiz(quiz: Quiz, *, trainer, data: dict) -> Quiz:
    check_course_access(trainer, quiz.course)
    _check_links(quiz.course, data)

    changed = []
    for k in EDITABLE_FIELDS:
        if k in data:
            setattr(quiz, k, data[k])
            changed.append(k)
    if "title" in data and not (quiz.title or "").strip():
        raise DomainError("title is required")
    if "questions" in data:
        quiz.questions = normalize_questions(data["questions"])
        changed.append("questions")

    if changed:
        quiz.save(update_fields=[*changed, "updated_at"])
    logger.info("[quiz_update] quiz_id=%s fields=%s", quiz.id, ",".join(changed))
    return quiz


def delete_quiz(quiz: Quiz, *, trainer) -> None:
    check_course_access(trainer, quiz.course)
    quiz_id = quiz.id
    quiz.delete()
    logger.info("[quiz_delete] quiz_id=%s by=%s", quiz_id, trainer.id)


def duplicate_quiz(quiz: Quiz, *, trainer) -> Quiz:
    check_course_access(trainer, quiz.course)
    copy = quiz_repo.quiz_create(
        course=quiz.course,
        module=quiz.module,
        session=quiz.session,
        group=quiz.group,
        title=f"{quiz.title} (Copy)"[:200],
        description=quiz.description,
        instructions=quiz.instructions,
        passing_score=quiz.passing_score,
        time_limit=quiz.time_limit,
        max_attempts=quiz.max_attempts,
        shuffle_questions=quiz.shuffle_questions,
        shuffle_options=quiz.shuffle_options,
        show_feedback=quiz.show_feedback,
        questions=list(quiz.questions),
        is_active=quiz.is_active,
        created_by=trainer,
    )
    logger.info("[quiz_duplicate] quiz_id=%s copy_id=%s", quiz.id, copy.id)
    return copy


# ======================================================
# Student side
# ======================================================

def ensure_available(quiz: Quiz) -> None:
    if not quiz.is_active:
        raise DomainError("Quiz not found", status_code=404)


def student_view(quiz: Quiz, student) -> dict:
    """Questions without the answers, plus the student's attempt budget."""
    ensure_available(quiz)
    require_enrollment(student, quiz.course, allow_completed=True)

    questions = []
    for q in quiz.questions:
        options = [{"index": i, "text": o["text"]} for i, o in enumerate(q["options"])]
        if quiz.shuffle_options:
            random.shuffle(options)
        questions.append({
            "id": q["id"],
            "question": q["question"],
            "type": q["type"],
            "points": q["points"],
            "options": options,
        })
    if quiz.shuffle_questions:
        random.shuffle(questions)

    used = quiz_repo.attempt_submitted(student, quiz).count()
    return {
        "id": quiz.id,
        "course": quiz.course_id,
        "title": quiz.title,
        "description": quiz.description,
        "instructions": quiz.instructions,
        "passing_score": quiz.passing_score,
        "time_limit": quiz.time_limit,
        "max_attempts": quiz.max_attempts,
        "total_points": quiz.total_points,
        "questions": questions,
        "attempts_used": used,
        "can_attempt": used < quiz.max_attempts,
        "best_score": quiz_repo.attempt_best_score(student, quiz),
    }


def _deadline(quiz: Quiz, attempt: QuizAttempt):
    if not quiz.time_limit:
        return None
    return attempt.started_at + timedelta(minutes=quiz.time_limit)


def start_attempt(quiz: Quiz, student, *, now=None) -> tuple[QuizAttempt, bool]:
    """
    Returns (attempt, created). An open attempt is handed back as is unless
    its time limit has run out, in which case it expires and a new one starts.
    """
    now = now or timezone.now()
    ensure_available(quiz)
    require_enrollment(student, quiz.course)

    with DjangoUnitOfWork():
        quiz_repo.quiz_get_for_update(quiz.id)

        existing = quiz_repo.attempt_open(student, quiz)
        if existing is not None:
            deadline = _deadline(quiz, existing)
            if deadline is None or now <= deadline:
                return existing, False
            existing.status = A.EXPIRED
            existing.save(update_fields=["status", "updated_at"])

        if quiz_repo.attempt_submitted(student, quiz).count() >= quiz.max_attempts:
            raise DomainError("Maximum attempts reached for this quiz")

        attempt = quiz_repo.attempt_create(
            student=student,
            quiz=quiz,
            course=quiz.course,
            attempt_number=quiz_repo.attempt_last_number(student, quiz) + 1,
            started_at=now,
        )

    logger.info(
        "[quiz_start] quiz_id=%s student_id=%s attempt=%s",
        quiz.id,
        student.id,
        attempt.attempt_number,
    )
    return attempt, True


def _correct_indices(question: dict) -> list[int]:
    return [i for i, o in enumerate(question["options"]) if o["is_correct"]]


def score_answers(questions: list[dict], answers) -> tuple[list[dict], int, int]:
    """
    Grade every question of the quiz; unanswered questions earn nothing.

    single:   exactly one option selected and it is correct
    multiple: the selected set equals the correct set
    """
    by_question = {}
    for raw in answers or []:
        raw = raw if isinstance(raw, dict) else {}
        try:
            qid = int(raw.get("question"))
        except (TypeError, ValueError):
            continue
        selected = raw.get("selected") or []
        if not isinstance(selected, list):
            selected = [selected]
        clean = []
        for s in selected:
            try:
                clean.append(int(s))
            except (TypeError, ValueError):
                continue
        by_question[qid] = sorted(set(clean))

    graded, earned, total = [], 0, 0
    for q in questions:
        total += q["points"]
        selected = by_question.get(q["id"], [])
        correct = set(_correct_indices(q))
        if q["type"] == "single":
            ok = len(selected) == 1 and selected[0] in correct
        else:
            ok = bool(selected) and set(selected) == correct
        points = q["points"] if ok else 0
        earned += points
        graded.append({
            "question": q["id"],
            "question_text": q["question"],
            "selected": selected,
            "is_correct": ok,
            "points_earned": points,
        })
    return graded, earned, total


def submit_attempt(quiz: Quiz, student, *, attempt_id, answers, now=None) -> QuizAttempt:
    now = now or timezone.now()
    if answers is None:
        raise DomainError("answers are required")

    expired = False
    with DjangoUnitOfWork():
        attempt = quiz_repo.attempt_get_for_update(attempt_id, student=student, quiz=quiz)
        if attempt is None or attempt.status != A.IN_PROGRESS:
            raise DomainError("Quiz attempt not found or already submitted", status_code=404)

        deadline = _deadline(quiz, attempt)
        if deadline is not None and now > deadline:
            attempt.status = A.EXPIRED
            attempt.save(update_fields=["status", "updated_at"])
            expired = True
        else:
            graded, earned, total = score_answers(quiz.questions, answers)
            attempt.answers = graded
            attempt.earned_points = earned
            attempt.total_points = total
            attempt.score = percentage(earned, total)
            attempt.passed = attempt.score >= quiz.passing_score
            attempt.status = A.SUBMITTED
            attempt.submitted_at = now
            attempt.time_spent = max(int((now - attempt.started_at).total_seconds()), 0)
            attempt.save()

    if expired:
        logger.info("[quiz_submit] expired quiz_id=%s attempt_id=%s", quiz.id, attempt.id)
        raise DomainError("Time limit exceeded for this attempt", status_code=409)

    logger.info(
        "[quiz_submit] quiz_id=%s student_id=%s attempt=%s score=%s passed=%s",
        quiz.id,
        student.id,
        attempt.attempt_number,
        attempt.score,
        attempt.passed,
    )
    return attempt


def feedback(quiz: Quiz, attempt: QuizAttempt, *, with_options: bool = False) -> list[dict] | None:
    """Per-question breakdown; None when the quiz hides feedback."""
    if not quiz.show_feedback:
        return None
    questions = {q["id"]: q for q in quiz.questions}
    rows = []
    for answer in attempt.answers:
        q = questions.get(answer["question"])
        if q is None:
            # question removed since the attempt
            continue
        row = {
            "question": answer["question_text"],
            "selected": answer["selected"],
            "correct": _correct_indices(q),
            "is_correct": answer["is_correct"],
            "points_earned": answer["points_earned"],
            "explanation": q.get("explanation", ""),
        }
        if with_options:
            row["options"] = [
                {"index": i, "text": o["text"], "is_correct": o["is_correct"]}
                for i, o in enumerate(q["options"])
            ]
        rows.append(row)
    return rows


def attempt_history(quiz: Quiz, student) -> dict:
    attempts = quiz_repo.attempt_submitted(student, quiz).order_by("-attempt_number")
    return {
        "count": attempts.count(),
        "best_score": quiz_repo.attempt_best_score(student, quiz),
        "attempts": attempts,
    }


def attempt_results(quiz: Quiz, student, attempt_id) -> dict:
    attempt = quiz_repo.attempt_submitted(student, quiz).filter(id=attempt_id).first()
    if attempt is None:
        raise DomainError("Quiz attempt not found", status_code=404)
    return {
        "attempt": attempt,
        "quiz": {
            "title": quiz.title,
            "passing_score": quiz.passing_score,
            "total_questions": quiz.total_questions,
        },
        "feedback": feedback(quiz, attempt, with_options=True),
    }
