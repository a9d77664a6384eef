# PATH: apps/domains/sessions/views.py

from datetime import date

from django.shortcuts import get_object_or_404
from django.utils import timezone

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsTrainer
from apps.domains.attendance.services import summarize_statuses
from apps.domains.groups.models import Group
from trainhub.adapters.db.django import repositories_sessions as session_repo

from . import services
from .filters import SessionFilter
from .serializers import (
    SessionCreateSerializer,
    SessionSerializer,
    SessionUpdateSerializer,
)


class TrainerSessionViewSet(DomainErrorMixin, ModelViewSet):
    """
    Trainer's own sessions

    ✔ create: date / times default to the group's weekly schedule
    ✔ start / end: explicit lifecycle calls
    ✔ DELETE: cancel with reason, ?permanent=true removes the session
    """
    serializer_class = SessionSerializer
    permission_classes = [IsAuthenticated, IsTrainer]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = SessionFilter
    search_fields = ["title", "group__name"]

    def get_queryset(self):
        return session_repo.session_filter_trainer(self.request.user).order_by(
            "scheduled_date", "start_time", "id"
        )

    def retrieve(self, request, *args, **kwargs):
        session = self.get_object()
        data = SessionSerializer(session).data
        data["attendance_summary"] = summarize_statuses(
            session.attendances.values_list("status", flat=True)
        )
        return Response(data)

    def create(self, request, *args, **kwargs):
        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        group = get_object_or_404(Group, id=data.pop("group"))
        session = services.create_session(trainer=request.user, group=group, data=data)
        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        session = self.get_object()
        serializer = SessionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        session = services.update_session(session, dict(serializer.validated_data))
        return Response(SessionSerializer(session).data)

    def destroy(self, request, *args, **kwargs):
        session = self.get_object()
        permanent = str(request.query_params.get("permanent", "")).lower() in ("1", "true", "yes")
        reason = request.data.get("reason") or request.query_params.get("reason")

        result = services.delete_session(session, permanent=permanent, reason=reason)
        if result is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(SessionSerializer(result).data)

    # =========================================================
    # Lifecycle
    # =========================================================

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        session = services.start_session(self.get_object())
        return Response(SessionSerializer(session).data)

    @action(detail=True, methods=["post"])
    def end(self, request, pk=None):
        session = services.end_session(self.get_object())
        return Response(SessionSerializer(session).data)

    @action(detail=True, methods=["put", "patch"], url_path="lesson-plan")
    def lesson_plan(self, request, pk=None):
        plan = request.data.get("lesson_plan", request.data)
        session = services.update_lesson_plan(self.get_object(), plan)
        return Response(SessionSerializer(session).data)

    # =========================================================
    # Queries
    # =========================================================

    @action(detail=False, methods=["get"])
    def calendar(self, request):
        """
        GET /api/trainer/sessions/calendar/?view=week&date=2025-01-06
        """
        view = request.query_params.get("view", "week")
        raw_date = request.query_params.get("date")
        try:
            anchor = date.fromisoformat(raw_date) if raw_date else timezone.localdate()
        except ValueError:
            return Response(
                {"detail": "date must be YYYY-MM-DD"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        start, end, qs = services.calendar(request.user, view, anchor)
        return Response({
            "view": view,
            "start": start,
            "end": end,
            "sessions": SessionSerializer(qs, many=True).data,
        })

    @action(detail=False, methods=["get"])
    def available(self, request):
        """Sessions attendance can still be taken for (scheduled / in_progress)."""
        qs = services.available_for_attendance(request.user)
        group = request.query_params.get("group")
        if group:
            qs = qs.filter(group_id=group)
        return Response(SessionSerializer(qs, many=True).data)
