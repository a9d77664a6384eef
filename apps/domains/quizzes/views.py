# PATH: apps/domains/quizzes/views.py

from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsStudent, IsTrainer
from apps.domains.enrollment.models import Enrollment
from trainhub.adapters.db.django import repositories_courses as course_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from trainhub.adapters.db.django import repositories_quizzes as quiz_repo

from . import services
from .serializers import (
    QuizAttemptSerializer,
    QuizSerializer,
    QuizWriteSerializer,
    SubmitSerializer,
)


# ======================================================
# Trainer
# ======================================================

class TrainerQuizViewSet(DomainErrorMixin, ModelViewSet):
    """
    Quizzes of the courses a trainer instructs or runs a group for

    ✔ GET course/{course_id}/: one course's quizzes
    ✔ POST {id}/duplicate/: copy titled "... (Copy)"
    ✔ GET {id}/attempts/: every student's attempts
    """
    serializer_class = QuizSerializer
    permission_classes = [IsAuthenticated, IsTrainer]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["course", "module", "group", "is_active"]
    search_fields = ["title", "description"]

    def get_queryset(self):
        courses = course_repo.course_filter_trainer(self.request.user).values("id")
        return quiz_repo.quiz_queryset().filter(course_id__in=courses)

    def create(self, request, *args, **kwargs):
        serializer = QuizWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        course = data.pop("course")
        quiz = services.create_quiz(trainer=request.user, course=course, data=data)
        return Response(QuizSerializer(quiz).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        quiz = self.get_object()
        serializer = QuizWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("course", None)
        quiz = services.update_quiz(quiz, trainer=request.user, data=data)
        return Response(QuizSerializer(quiz).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_quiz(self.get_object(), trainer=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path=r"course/(?P<course_id>\d+)")
    def by_course(self, request, course_id=None):
        course = get_object_or_404(course_repo.course_queryset(), id=course_id)
        services.check_course_access(request.user, course)
        qs = quiz_repo.quiz_queryset().filter(course=course)
        return Response(QuizSerializer(qs, many=True).data)

    @action(detail=True, methods=["post"])
    def duplicate(self, request, pk=None):
        copy = services.duplicate_quiz(self.get_object(), trainer=request.user)
        return Response(QuizSerializer(copy).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def attempts(self, request, pk=None):
        attempts = quiz_repo.attempt_filter_quiz(self.get_object())
        return Response(QuizAttemptSerializer(attempts, many=True).data)


# ======================================================
# Student
# ======================================================

class StudentQuizViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """
    GET  /student/quizzes/                 active quizzes of enrolled courses
    GET  /student/quizzes/{id}/            questions without answers
    POST /student/quizzes/{id}/start/ | submit/
    GET  /student/quizzes/{id}/attempts/
    GET  /student/quizzes/{id}/results/{attempt_id}/
    """
    serializer_class = QuizSerializer
    permission_classes = [IsAuthenticated, IsStudent]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["course", "module"]

    def get_queryset(self):
        course_ids = enroll_repo.enrollment_filter_student(self.request.user).filter(
            status__in=[Enrollment.Status.ACTIVE, Enrollment.Status.COMPLETED]
        ).values_list("course_id", flat=True)
        return quiz_repo.quiz_filter_courses(course_ids).filter(is_active=True)

    def list(self, request, *args, **kwargs):
        qs = self.filter_queryset(self.get_queryset())
        return Response([
            {
                "id": q.id,
                "course": q.course_id,
                "course_title": q.course.title,
                "title": q.title,
                "total_questions": q.total_questions,
                "passing_score": q.passing_score,
                "time_limit": q.time_limit,
                "max_attempts": q.max_attempts,
            }
            for q in qs
        ])

    def retrieve(self, request, *args, **kwargs):
        return Response(services.student_view(self.get_object(), request.user))

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        attempt, created = services.start_attempt(self.get_object(), request.user)
        return Response(
            QuizAttemptSerializer(attempt).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        quiz = self.get_object()
        serializer = SubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        attempt = services.submit_attempt(
            quiz,
            request.user,
            attempt_id=serializer.validated_data["attempt"],
            answers=[dict(a) for a in serializer.validated_data["answers"]],
        )
        return Response({
            **QuizAttemptSerializer(attempt).data,
            "feedback": services.feedback(quiz, attempt),
        })

    @action(detail=True, methods=["get"])
    def attempts(self, request, pk=None):
        history = services.attempt_history(self.get_object(), request.user)
        return Response({
            "count": history["count"],
            "best_score": history["best_score"],
            "attempts": QuizAttemptSerializer(history["attempts"], many=True).data,
        })

    @action(detail=True, methods=["get"], url_path=r"results/(?P<attempt_id>\d+)")
    def results(self, request, pk=None, attempt_id=None):
        result = services.attempt_results(self.get_object(), request.user, attempt_id)
        return Response({
            "attempt": QuizAttemptSerializer(result["attempt"]).data,
            "quiz": result["quiz"],
            "feedback": result["feedback"],
        })
