# PATH: apps/domains/learning/views.py

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsCLO, IsStudent, IsTrainer
from apps.domains.enrollment.models import Enrollment
from trainhub.adapters.db.django import repositories_courses as course_repo
from trainhub.adapters.db.django import repositories_enrollment as enroll_repo
from trainhub.adapters.db.django import repositories_learning as learning_repo

from . import services
from .serializers import (
    ModuleBriefSerializer,
    ModuleProgressSerializer,
    ModuleSerializer,
    ProgressUpdateSerializer,
)


# ======================================================
# Authoring (trainer / CLO)
# ======================================================

class _ModuleAuthoringViewSet(DomainErrorMixin, ModelViewSet):
    """
    Course modules, ordered per course

    ✔ ?course= narrows the list
    ✔ order defaults to the end of the course
    """
    serializer_class = ModuleSerializer

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["course", "type", "is_active"]
    search_fields = ["title", "description"]

    def base_queryset(self):
        return learning_repo.module_queryset()

    def get_queryset(self):
        return self.base_queryset().order_by("course_id", "order", "id")

    def perform_create(self, serializer):
        course = serializer.validated_data["course"]
        services.check_course_access(self.request.user, course)
        data = services.validate_module(dict(serializer.validated_data), course=course)
        serializer.save(order=data["order"])

    def perform_update(self, serializer):
        instance = serializer.instance
        course = serializer.validated_data.get("course", instance.course)
        services.check_course_access(self.request.user, course)
        services.validate_module(
            dict(serializer.validated_data), course=course, instance=instance
        )
        serializer.save()


class TrainerModuleViewSet(_ModuleAuthoringViewSet):
    permission_classes = [IsAuthenticated, IsTrainer]

    def base_queryset(self):
        courses = course_repo.course_filter_trainer(self.request.user).values("id")
        return learning_repo.module_queryset().filter(course_id__in=courses)


class CLOModuleViewSet(_ModuleAuthoringViewSet):
    permission_classes = [IsAuthenticated, IsCLO]


# ======================================================
# Student
# ======================================================

class StudentModuleViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """
    GET  /student/modules/?course=       modules of enrolled courses
    GET  /student/modules/{id}/          content + progress
    POST /student/modules/{id}/start/ | complete/
    GET|PATCH /student/modules/{id}/progress/
    GET  /student/modules/{id}/next/ | previous/
    GET  /student/modules/course-progress/?course=
    """
    serializer_class = ModuleSerializer
    permission_classes = [IsAuthenticated, IsStudent]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["course"]

    def get_queryset(self):
        course_ids = enroll_repo.enrollment_filter_student(self.request.user).filter(
            status__in=[Enrollment.Status.ACTIVE, Enrollment.Status.COMPLETED]
        ).values_list("course_id", flat=True)
        return learning_repo.module_filter_courses(course_ids).order_by("course_id", "order", "id")

    def retrieve(self, request, *args, **kwargs):
        module = self.get_object()
        progress = services.open_module(module, request.user)
        return Response({
            "module": ModuleSerializer(module).data,
            "progress": ModuleProgressSerializer(progress).data,
        })

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        progress = services.start_module(self.get_object(), request.user)
        return Response(ModuleProgressSerializer(progress).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        result = services.complete_module(self.get_object(), request.user)
        return Response({
            "progress": ModuleProgressSerializer(result["progress"]).data,
            "course_progress": result["course_progress"],
            "enrollment_status": result["enrollment_status"],
        })

    @action(detail=True, methods=["get", "patch"])
    def progress(self, request, pk=None):
        module = self.get_object()
        if request.method == "GET":
            return Response(services.progress_snapshot(module, request.user))

        serializer = ProgressUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        progress = services.update_progress(
            module,
            request.user,
            time_spent=data.get("time_spent"),
            video=data.get("video"),
            notes=data.get("notes"),
        )
        return Response(ModuleProgressSerializer(progress).data)

    @action(detail=True, methods=["get"])
    def next(self, request, pk=None):
        found = services.neighbour(self.get_object(), forward=True)
        return Response(ModuleBriefSerializer(found).data if found else None)

    @action(detail=True, methods=["get"])
    def previous(self, request, pk=None):
        found = services.neighbour(self.get_object(), forward=False)
        return Response(ModuleBriefSerializer(found).data if found else None)

    @action(detail=False, methods=["get"], url_path="course-progress")
    def course_progress(self, request):
        course_id = request.query_params.get("course")
        if not course_id:
            return Response({"detail": "course is required"}, status=status.HTTP_400_BAD_REQUEST)
        course = get_object_or_404(course_repo.course_queryset(), id=course_id)
        services.require_enrollment(request.user, course, allow_completed=True)
        modules = learning_repo.progress_filter_student(request.user, course)
        return Response({
            **services.course_progress(request.user, course),
            "modules": ModuleProgressSerializer(modules, many=True).data,
        })
