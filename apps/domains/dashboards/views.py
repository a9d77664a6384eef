# PATH: apps/domains/dashboards/views.py

from datetime import date

from django.utils import timezone

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsCLO, IsStudent, IsTrainer

from . import services


def _period(request, default=30):
    raw = request.query_params.get("period", default)
    try:
        period = int(raw)
    except (TypeError, ValueError):
        return None
    return period if 1 <= period <= 365 else None


class TrainerDashboardView(APIView):
    permission_classes = [IsAuthenticated, IsTrainer]

    def get(self, request):
        return Response(services.trainer_dashboard_stats(request.user))


class TrainerScheduleView(APIView):
    """GET /api/trainer/dashboard/schedule/?date=YYYY-MM-DD (default today)"""
    permission_classes = [IsAuthenticated, IsTrainer]

    def get(self, request):
        raw = request.query_params.get("date")
        try:
            day = date.fromisoformat(raw) if raw else timezone.localdate()
        except ValueError:
            return Response(
                {"detail": "date must be YYYY-MM-DD"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response({"date": day, "sessions": services.trainer_schedule(request.user, day=day)})


class CLODashboardView(APIView):
    permission_classes = [IsAuthenticated, IsCLO]

    def get(self, request):
        return Response(services.clo_dashboard())


class CLOAnalyticsView(APIView):
    permission_classes = [IsAuthenticated, IsCLO]

    def get(self, request):
        period = _period(request)
        if period is None:
            return Response(
                {"detail": "period must be a number of days between 1 and 365"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(services.clo_analytics(period_days=period))


class StudentDashboardView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        return Response(services.student_dashboard(request.user))
