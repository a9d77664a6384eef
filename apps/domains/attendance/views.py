# apps/domains/attendance/views.py
import io

from django.http import HttpResponse
from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ReadOnlyModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsCLO, IsStudent, IsTrainer
from apps.domains.courses.models import Course
from trainhub.adapters.db.django import repositories_attendance as attendance_repo
from trainhub.adapters.db.django import repositories_groups as group_repo
from trainhub.adapters.db.django import repositories_sessions as session_repo

from . import services
from .filters import AttendanceFilter
from .serializers import (
    AttendanceBatchSerializer,
    AttendanceSerializer,
    AttendanceSheetRowSerializer,
)
from .utils.excel import build_attendance_excel


# =========================================================
# Trainer
# =========================================================

class TrainerAttendanceViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    GenericViewSet,
):
    """
    POST /api/trainer/attendance/                      batch upsert for one session
    GET  /api/trainer/attendance/session/{id}/         roster x records
    GET  /api/trainer/attendance/export/?group={id}    xlsx matrix
    """
    serializer_class = AttendanceSerializer
    permission_classes = [IsAuthenticated, IsTrainer]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = AttendanceFilter
    search_fields = ["student__name", "student__username"]

    def get_queryset(self):
        return attendance_repo.attendance_filter_trainer(self.request.user).order_by(
            "-session__scheduled_date", "student__name"
        )

    def create(self, request, *args, **kwargs):
        serializer = AttendanceBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = get_object_or_404(
            session_repo.session_filter_trainer(request.user),
            id=serializer.validated_data["session"],
        )
        result = services.record_attendance(
            session,
            [dict(r) for r in serializer.validated_data["records"]],
            marked_by=request.user,
        )
        return Response(
            {
                "session": session.id,
                "created": result["created"],
                "updated": result["updated"],
                "summary": result["summary"],
                "records": AttendanceSerializer(result["records"], many=True).data,
            },
            status=status.HTTP_201_CREATED if result["created"] else status.HTTP_200_OK,
        )

    @action(detail=False, methods=["get"], url_path=r"session/(?P<session_id>\d+)")
    def session(self, request, session_id=None):
        session = get_object_or_404(
            session_repo.session_filter_trainer(request.user),
            id=session_id,
        )
        rows = services.session_sheet(session)
        return Response({
            "session": {
                "id": session.id,
                "title": session.title,
                "status": session.status,
                "scheduled_date": session.scheduled_date,
                "can_take_attendance": session.can_take_attendance,
            },
            "summary": services.summarize_statuses(r["status"] for r in rows if r["status"]),
            "students": AttendanceSheetRowSerializer(rows, many=True).data,
        })

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        group_id = request.query_params.get("group")
        if not group_id:
            return Response(
                {"detail": "group parameter is required"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        group = get_object_or_404(group_repo.group_filter_trainer(request.user), id=group_id)

        wb, filename = build_attendance_excel(group)
        buf = io.BytesIO()
        wb.save(buf)
        response = HttpResponse(
            buf.getvalue(),
            content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response


# =========================================================
# CLO
# =========================================================

class CLOAttendanceViewSet(DomainErrorMixin, ReadOnlyModelViewSet):
    serializer_class = AttendanceSerializer
    permission_classes = [IsAuthenticated, IsCLO]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = AttendanceFilter
    search_fields = ["student__name", "session__title", "session__group__name"]

    def get_queryset(self):
        return attendance_repo.attendance_queryset().order_by("-session__scheduled_date", "-id")

    @action(detail=False, methods=["get"])
    def stats(self, request):
        qs = self.filter_queryset(attendance_repo.attendance_counted())
        return Response(services.clo_attendance_stats(qs))

    @action(detail=False, methods=["get"], url_path=r"course/(?P<course_id>\d+)")
    def course(self, request, course_id=None):
        course = get_object_or_404(Course, id=course_id)
        return Response(services.course_attendance(course))


# =========================================================
# Student
# =========================================================

class StudentAttendanceViewSet(DomainErrorMixin, GenericViewSet):
    serializer_class = AttendanceSerializer
    permission_classes = [IsAuthenticated, IsStudent]

    def get_queryset(self):
        return attendance_repo.attendance_filter_student(self.request.user)

    def list(self, request):
        data = services.student_overview(request.user)
        data["recent"] = AttendanceSerializer(data["recent"], many=True).data
        return Response(data)

    @action(detail=False, methods=["get"], url_path=r"courses/(?P<course_id>\d+)")
    def course(self, request, course_id=None):
        course = get_object_or_404(Course, id=course_id)
        records = services.student_course_records(request.user, course)
        return Response({
            "course": {"id": course.id, "title": course.title},
            "summary": services.summarize_statuses(
                r.status for r in records if r.session.status != r.session.Status.CANCELLED
            ),
            "records": AttendanceSerializer(records, many=True).data,
        })

    @action(
        detail=False,
        methods=["get"],
        url_path=r"courses/(?P<course_id>\d+)/month/(?P<year>\d{4})/(?P<month>\d{1,2})",
    )
    def month(self, request, course_id=None, year=None, month=None):
        year, month = int(year), int(month)
        if not 1 <= month <= 12:
            return Response(
                {"detail": "month must be between 1 and 12"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        course = get_object_or_404(Course, id=course_id)
        records = services.student_course_records(request.user, course, year=year, month=month)
        return Response({
            "year": year,
            "month": month,
            "days": [
                {
                    "date": r.session.scheduled_date,
                    "session_id": r.session_id,
                    "session_title": r.session.title,
                    "status": r.status,
                }
                for r in records
            ],
        })
