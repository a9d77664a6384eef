# PATH: apps/domains/courses/views.py

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ModelViewSet, ReadOnlyModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsCLO, IsTrainer
from trainhub.adapters.db.django import repositories_courses as course_repo

from . import services
from .filters import CourseFilter
from .serializers import CourseSerializer


class CLOCourseViewSet(DomainErrorMixin, ModelViewSet):
    """
    Course catalogue (CLO)

    ✔ DELETE refused while groups use the course
    ✔ archive / publish / statistics
    """
    serializer_class = CourseSerializer
    permission_classes = [IsAuthenticated, IsCLO]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = CourseFilter
    search_fields = ["title", "description"]

    def get_queryset(self):
        return course_repo.course_queryset()

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        services.delete_course(self.get_object())
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def archive(self, request, pk=None):
        return Response(CourseSerializer(services.archive_course(self.get_object())).data)

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        return Response(CourseSerializer(services.publish_course(self.get_object())).data)

    @action(detail=True, methods=["get"])
    def statistics(self, request, pk=None):
        return Response(services.course_statistics(self.get_object()))


class TrainerCourseViewSet(ReadOnlyModelViewSet):
    serializer_class = CourseSerializer
    permission_classes = [IsAuthenticated, IsTrainer]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = CourseFilter
    search_fields = ["title"]

    def get_queryset(self):
        return course_repo.course_filter_trainer(self.request.user)
