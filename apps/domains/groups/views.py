# PATH: apps/domains/groups/views.py

from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.models import User
from apps.core.permissions import IsCLO, IsTrainer
from trainhub.adapters.db.django import repositories_groups as group_repo

from . import services
from .filters import GroupFilter
from .serializers import (
    GroupDetailSerializer,
    GroupSerializer,
    TrainerGroupUpdateSerializer,
)


# ======================================================
# Shared roster / stats actions
# ======================================================

class GroupRosterActionsMixin:
    """
    GET/POST   {group}/students/
    DELETE     {group}/students/{student_id}/
    GET        {group}/stats/
    """

    @action(detail=True, methods=["get", "post"], url_path="students")
    def students(self, request, pk=None):
        group = self.get_object()
        if request.method == "GET":
            return Response(services.group_students(group))

        student_id = request.data.get("student") or request.data.get("student_id")
        if not student_id:
            return Response(
                {"detail": "student is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        student = get_object_or_404(User, id=student_id)
        services.add_student(group, student)
        return Response(
            GroupDetailSerializer(group).data,
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["delete"], url_path=r"students/(?P<student_id>\d+)")
    def remove_student(self, request, pk=None, student_id=None):
        group = self.get_object()
        student = get_object_or_404(User, id=student_id)
        services.remove_student(group, student)
        return Response(GroupDetailSerializer(group).data)

    @action(detail=True, methods=["get"])
    def stats(self, request, pk=None):
        return Response(services.group_stats(self.get_object()))


# ======================================================
# Trainer
# ======================================================

class TrainerGroupViewSet(
    DomainErrorMixin,
    GroupRosterActionsMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsTrainer]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = GroupFilter
    search_fields = ["name", "course__title"]

    def get_queryset(self):
        return group_repo.group_filter_trainer(self.request.user)

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return TrainerGroupUpdateSerializer
        if self.action == "retrieve":
            return GroupDetailSerializer
        return GroupSerializer


# ======================================================
# CLO
# ======================================================

class CLOGroupViewSet(DomainErrorMixin, GroupRosterActionsMixin, ModelViewSet):
    permission_classes = [IsAuthenticated, IsCLO]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = GroupFilter
    search_fields = ["name", "course__title", "trainer__name"]

    def get_queryset(self):
        return group_repo.group_queryset()

    def get_serializer_class(self):
        if self.action == "retrieve":
            return GroupDetailSerializer
        return GroupSerializer

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def change_status(self, request, pk=None):
        group = services.change_status(self.get_object(), request.data.get("status"))
        return Response(GroupSerializer(group).data)

    @action(detail=True, methods=["post"], url_path="assign-trainer")
    def assign_trainer(self, request, pk=None):
        trainer_id = request.data.get("trainer") or request.data.get("trainer_id")
        if not trainer_id:
            return Response(
                {"detail": "trainer is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        trainer = get_object_or_404(User, id=trainer_id)
        group = services.assign_trainer(self.get_object(), trainer)
        return Response(GroupSerializer(group).data)
