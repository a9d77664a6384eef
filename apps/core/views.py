# apps/core/views.py

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_yasg.utils import swagger_auto_schema

from trainhub.adapters.db.django import repositories_core as core_repo
from apps.api.common.mixins import DomainErrorMixin
from apps.core.models import User
from apps.core.permissions import IsCLO, IsReception
from apps.core.serializers import (
    AccountWriteSerializer,
    ProfileSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


# --------------------------------------------------
# Auth: /auth/me/
# --------------------------------------------------

class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(auto_schema=None)
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data)


# --------------------------------------------------
# Profile
# --------------------------------------------------

class ProfileViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @action(detail=False, methods=["get"])
    def me(self, request):
        serializer = ProfileSerializer(request.user)
        return Response(serializer.data)

    @action(detail=False, methods=["patch"], url_path="update-me")
    def update_me(self, request):
        serializer = ProfileSerializer(
            request.user,
            data=request.data,
            partial=True,
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=["post"], url_path="change-password")
    def change_password(self, request):
        old_pw = request.data.get("old_password")
        new_pw = request.data.get("new_password")

        if not old_pw or not new_pw:
            return Response(
                {"detail": "old_password and new_password are required"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if not request.user.check_password(old_pw):
            return Response(
                {"detail": "Current password is incorrect."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        request.user.set_password(new_pw)
        request.user.save(update_fields=["password"])
        logger.info("[change_password] user_id=%s", request.user.id)

        return Response({"detail": "Password changed."})


# --------------------------------------------------
# Account management
# --------------------------------------------------

class _AccountViewSet(viewsets.ModelViewSet):
    """
    Shared behaviour: list/create/update accounts restricted to
    ``managed_roles``; DELETE deactivates instead of removing the row.
    """
    managed_roles: tuple = ()
    filter_backends = [SearchFilter]
    search_fields = ["username", "name", "email", "phone"]
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = core_repo.user_filter_roles(self.managed_roles)
        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role)
        is_active = self.request.query_params.get("is_active")
        if is_active in ("true", "false"):
            qs = qs.filter(is_active=(is_active == "true"))
        return qs

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return AccountWriteSerializer
        return UserSerializer

    def get_serializer(self, *args, **kwargs):
        serializer_class = self.get_serializer_class()
        kwargs.setdefault("context", self.get_serializer_context())
        if serializer_class is AccountWriteSerializer:
            kwargs["allowed_roles"] = self.managed_roles
        return serializer_class(*args, **kwargs)

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active"])
        logger.info("[account_deactivate] user_id=%s by=%s", instance.id, self.request.user.id)

    @action(detail=True, methods=["patch"])
    def reactivate(self, request, pk=None):
        user = self.get_object()
        user.is_active = True
        user.save(update_fields=["is_active"])
        return Response(UserSerializer(user).data)


class ReceptionUserViewSet(_AccountViewSet):
    """Reception desk registers students and trainers."""
    permission_classes = [IsAuthenticated, IsReception]
    managed_roles = (User.Role.STUDENT, User.Role.TRAINER)


class CLOTrainerViewSet(DomainErrorMixin, _AccountViewSet):
    permission_classes = [IsAuthenticated, IsCLO]
    managed_roles = (User.Role.TRAINER,)

    def perform_create(self, serializer):
        serializer.save(role=User.Role.TRAINER)

    @action(detail=True, methods=["get"])
    def performance(self, request, pk=None):
        """
        GET /api/clo/trainers/{id}/performance/?period=30
        """
        from apps.domains.dashboards.services import trainer_performance

        trainer = self.get_object()
        try:
            period = int(request.query_params.get("period", 30))
        except (TypeError, ValueError):
            return Response(
                {"detail": "period must be an integer"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(trainer_performance(trainer, period_days=period))
