"""
Quiz / QuizAttempt access for the quizzes domain.
"""
from __future__ import annotations


def quiz_queryset():
    from apps.domains.quizzes.models import Quiz
    return Quiz.objects.select_related("course", "module", "session", "group", "created_by")


def quiz_filter_courses(course_ids):
    return quiz_queryset().filter(course_id__in=list(course_ids))


def quiz_get_for_update(quiz_id):
    from apps.domains.quizzes.models import Quiz
    return Quiz.objects.select_for_update().get(id=quiz_id)


def quiz_create(**fields):
    from apps.domains.quizzes.models import Quiz
    return Quiz.objects.create(**fields)


def attempt_queryset():
    from apps.domains.quizzes.models import QuizAttempt
    return QuizAttempt.objects.select_related("quiz", "student", "course")


def attempt_filter(student, quiz):
    return attempt_queryset().filter(student=student, quiz=quiz)


def attempt_submitted(student, quiz):
    from apps.domains.quizzes.models import QuizAttempt
    return attempt_filter(student, quiz).filter(status=QuizAttempt.Status.SUBMITTED)


def attempt_open(student, quiz):
    from apps.domains.quizzes.models import QuizAttempt
    return attempt_filter(student, quiz).filter(status=QuizAttempt.Status.IN_PROGRESS).first()


def attempt_last_number(student, quiz) -> int:
    from django.db.models import Max
    return attempt_filter(student, quiz).aggregate(n=Max("attempt_number"))["n"] or 0


def attempt_best_score(student, quiz):
    from django.db.models import Max
    return attempt_submitted(student, quiz).aggregate(best=Max("score"))["best"]


def attempt_create(**fields):
    from apps.domains.quizzes.models import QuizAttempt
    return QuizAttempt.objects.create(**fields)


def attempt_get_for_update(attempt_id, *, student, quiz):
    from apps.domains.quizzes.models import QuizAttempt
    return (
        QuizAttempt.objects.select_for_update()
        .filter(id=attempt_id, student=student, quiz=quiz)
        .first()
    )


def attempt_filter_quiz(quiz):
    return attempt_queryset().filter(quiz=quiz).order_by("student__name", "-attempt_number")
