# PATH: apps/domains/evaluations/views.py

from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet, ReadOnlyModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.models import User
from apps.core.permissions import IsCLO, IsStudent, IsTrainer
from apps.domains.groups.models import Group
from trainhub.adapters.db.django import repositories_evaluations as eval_repo
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo

from . import services
from .filters import StudentEvaluationFilter
from .serializers import (
    BulkEvaluationSerializer,
    EvaluationCriteriaSerializer,
    EvaluationInputSerializer,
    StudentEvaluationSerializer,
    StudentSharedEvaluationSerializer,
)


def _flagged_payload(rows):
    return [
        {
            "student_id": r["student_id"],
            "student_name": r["student_name"],
            "evaluations": StudentEvaluationSerializer(r["evaluations"], many=True).data,
        }
        for r in rows
    ]


# ======================================================
# Trainer
# ======================================================

class TrainerEvaluationViewSet(DomainErrorMixin, ModelViewSet):
    """
    Trainer's own evaluations

    ✔ create / bulk: session must be the trainer's and not cancelled
    ✔ flags raised automatically from ratings
    """
    serializer_class = StudentEvaluationSerializer
    permission_classes = [IsAuthenticated, IsTrainer]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = StudentEvaluationFilter
    search_fields = ["student__name", "session__title"]

    def get_queryset(self):
        return eval_repo.evaluation_filter_trainer(self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = EvaluationInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        session_id, student_id = data.pop("session", None), data.pop("student", None)
        if not session_id or not student_id:
            return Response(
                {"detail": "session and student are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if "overall_rating" not in data:
            return Response(
                {"detail": "overall_rating is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        session = get_object_or_404(session_repo.session_queryset(), id=session_id)
        evaluation = services.create_evaluation(
            trainer=request.user,
            session=session,
            student_id=student_id,
            data=data,
        )
        return Response(
            StudentEvaluationSerializer(evaluation).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        evaluation = self.get_object()
        serializer = EvaluationInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("session", None)
        data.pop("student", None)

        evaluation = services.update_evaluation(evaluation, data, trainer=request.user)
        return Response(StudentEvaluationSerializer(evaluation).data)

    @action(detail=False, methods=["post"])
    def bulk(self, request):
        serializer = BulkEvaluationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = get_object_or_404(
            session_repo.session_queryset(),
            id=serializer.validated_data["session"],
        )
        result = services.bulk_create(
            trainer=request.user,
            session=session,
            items=serializer.validated_data["evaluations"],
        )
        return Response(
            {
                "created": StudentEvaluationSerializer(result["created"], many=True).data,
                "errors": result["errors"],
            },
            status=status.HTTP_201_CREATED if result["created"] else status.HTTP_400_BAD_REQUEST,
        )

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.evaluation_stats(self.filter_queryset(self.get_queryset())))

    @action(detail=False, methods=["get"])
    def flagged(self, request):
        rows = services.flagged_students(self.filter_queryset(self.get_queryset()))
        return Response(_flagged_payload(rows))

    @action(detail=False, methods=["get"], url_path=r"session/(?P<session_id>\d+)")
    def by_session(self, request, session_id=None):
        session = get_object_or_404(session_repo.session_filter_trainer(request.user), id=session_id)
        qs = self.get_queryset().filter(session=session).order_by("-overall_rating", "student__name")
        return Response({
            "session": {"id": session.id, "title": session.title, "status": session.status},
            "evaluations": StudentEvaluationSerializer(qs, many=True).data,
        })

    @action(detail=False, methods=["get"], url_path=r"student/(?P<student_id>\d+)")
    def by_student(self, request, student_id=None):
        student = get_object_or_404(User, id=student_id, role=User.Role.STUDENT)
        qs = self.filter_queryset(self.get_queryset()).filter(student=student)
        return Response({
            "student": {"id": student.id, "name": student.display_name},
            "stats": services.evaluation_stats(qs),
            "evaluations": StudentEvaluationSerializer(qs, many=True).data,
        })

    @action(detail=False, methods=["get"], url_path=r"criteria/(?P<group_id>\d+)")
    def criteria(self, request, group_id=None):
        group = get_object_or_404(group_repo.group_filter_trainer(request.user), id=group_id)
        criteria = services.criteria_for_group(group)
        if criteria is None:
            return Response({"criteria": None})
        return Response({"criteria": EvaluationCriteriaSerializer(criteria).data})

    @action(detail=True, methods=["post"])
    def share(self, request, pk=None):
        evaluation = services.share(
            self.get_object(),
            student=bool(request.data.get("student", True)),
            parent=bool(request.data.get("parent", False)),
        )
        return Response(StudentEvaluationSerializer(evaluation).data)


# ======================================================
# CLO
# ======================================================

class CLOEvaluationViewSet(DomainErrorMixin, ReadOnlyModelViewSet):
    serializer_class = StudentEvaluationSerializer
    permission_classes = [IsAuthenticated, IsCLO]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = StudentEvaluationFilter
    search_fields = ["student__name", "trainer__name", "group__name"]

    def get_queryset(self):
        return eval_repo.evaluation_queryset()

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.evaluation_stats(self.filter_queryset(self.get_queryset())))

    @action(detail=False, methods=["get"], url_path=r"group/(?P<group_id>\d+)")
    def by_group(self, request, group_id=None):
        group = get_object_or_404(Group, id=group_id)
        qs = self.get_queryset().filter(group=group)
        return Response({
            "group": {"id": group.id, "name": group.name},
            "stats": services.evaluation_stats(qs),
            "evaluations": StudentEvaluationSerializer(qs, many=True).data,
        })


class CLOEvaluationCriteriaViewSet(DomainErrorMixin, ModelViewSet):
    serializer_class = EvaluationCriteriaSerializer
    permission_classes = [IsAuthenticated, IsCLO]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["course", "applies_to", "is_active"]
    search_fields = ["name"]

    def get_queryset(self):
        return eval_repo.criteria_queryset()

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)


# ======================================================
# Student
# ======================================================

class StudentEvaluationViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    serializer_class = StudentSharedEvaluationSerializer
    permission_classes = [IsAuthenticated, IsStudent]

    def get_queryset(self):
        return eval_repo.evaluation_filter_student_shared(self.request.user)
