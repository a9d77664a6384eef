# PATH: apps/domains/projects/views.py

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.exceptions import DomainError
from apps.core.models import User
from apps.core.permissions import IsCLOOrReadOnly
from apps.domains.inventory.serializers import OrderSerializer
from trainhub.adapters.db.django import repositories_inventory as inventory_repo
from trainhub.adapters.db.django import repositories_projects as project_repo

from . import services
from .filters import CompetitionFilter, ProjectFilter, TeamFilter
from .serializers import (
    CompetitionSerializer,
    ProjectPartInputSerializer,
    ProjectSerializer,
    TeamMemberInputSerializer,
    TeamSerializer,
)


# ======================================================
# Projects
# ======================================================

class ProjectViewSet(DomainErrorMixin, ModelViewSet):
    """
    Projects with their parts list

    ✔ anyone signed in creates; owner (or CLO) edits
    ✔ GET/POST {id}/parts/, DELETE {id}/parts/{part_id}/
    ✔ GET {id}/orders/, GET {id}/summary/
    """
    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = ProjectFilter
    search_fields = ["title", "description"]

    def get_queryset(self):
        user = self.request.user
        if services.is_manager(user):
            return project_repo.project_queryset()
        return project_repo.project_filter_owner(user)

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    def perform_update(self, serializer):
        services.check_project_owner(serializer.instance, self.request.user)
        serializer.save()

    def perform_destroy(self, instance):
        services.check_project_owner(instance, self.request.user)
        if project_repo.project_orders(instance).exists():
            raise DomainError(
                "Projects with part orders cannot be deleted; mark them completed instead",
                status_code=409,
            )
        instance.delete()

    @action(detail=True, methods=["get", "post"])
    def parts(self, request, pk=None):
        project = self.get_object()
        if request.method == "GET":
            return Response(services.project_summary(project)["parts"])

        serializer = ProjectPartInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        part = get_object_or_404(inventory_repo.part_queryset(), id=serializer.validated_data["part"])
        line = services.set_project_part(
            project, part, serializer.validated_data["qty"], by=request.user
        )
        return Response(line, status=status.HTTP_201_CREATED if line["created"] else status.HTTP_200_OK)

    @action(detail=True, methods=["delete"], url_path=r"parts/(?P<part_id>\d+)")
    def remove_part(self, request, pk=None, part_id=None):
        services.remove_project_part(self.get_object(), part_id, by=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def orders(self, request, pk=None):
        orders = project_repo.project_orders(self.get_object())
        return Response(OrderSerializer(orders, many=True).data)

    @action(detail=True, methods=["get"])
    def summary(self, request, pk=None):
        return Response(services.project_summary(self.get_object()))


# ======================================================
# Competitions / Teams
# ======================================================

class CompetitionViewSet(DomainErrorMixin, ModelViewSet):
    serializer_class = CompetitionSerializer
    permission_classes = [IsAuthenticated, IsCLOOrReadOnly]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = CompetitionFilter
    search_fields = ["name", "description"]

    def get_queryset(self):
        return project_repo.competition_queryset()

    @action(detail=True, methods=["get"])
    def teams(self, request, pk=None):
        teams = project_repo.team_filter_competition(self.get_object())
        return Response(TeamSerializer(teams, many=True).data)


class TeamViewSet(DomainErrorMixin, ModelViewSet):
    """
    Teams inside a competition

    ✔ create / update / delete: CLO
    ✔ members: CLO or the team's coach, capacity checked
    """
    serializer_class = TeamSerializer

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = TeamFilter
    search_fields = ["name", "competition__name"]

    def get_permissions(self):
        if self.action in ("members", "remove_member"):
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsCLOOrReadOnly()]

    def get_queryset(self):
        return project_repo.team_queryset()

    @action(detail=True, methods=["post"])
    def members(self, request, pk=None):
        serializer = TeamMemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = self.get_object()
        student = get_object_or_404(User, id=serializer.validated_data["student"])
        services.add_member(team, student, by=request.user)
        return Response(TeamSerializer(self.get_object()).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"members/(?P<student_id>\d+)")
    def remove_member(self, request, pk=None, student_id=None):
        team = self.get_object()
        student = get_object_or_404(User, id=student_id)
        services.remove_member(team, student, by=request.user)
        return Response(TeamSerializer(self.get_object()).data)
