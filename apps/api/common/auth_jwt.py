# JWT issuance with the user's role attached; the access token is also set as a cookie.
from __future__ import annotations

from django.conf import settings
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.core.authentication import access_cookie_name
from trainhub.adapters.db.django import repositories_core as core_repo


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Login by username/password; role and display name travel in the token."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role
        token["name"] = user.name or ""
        return token

    def validate(self, attrs):
        username = (attrs.get("username") or "").strip()
        password = attrs.get("password") or ""

        user = core_repo.user_get_by_username(username)
        if not user or not user.check_password(password):
            raise serializers.ValidationError(
                {"detail": "Invalid username or password."},
                code="authorization",
            )
        if not user.is_active:
            raise serializers.ValidationError(
                {"detail": "This account has been deactivated."},
                code="authorization",
            )

        refresh = self.get_token(user)
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user": {
                "id": user.id,
                "username": user.username,
                "name": user.name,
                "role": user.role,
            },
        }


class RoleTokenObtainPairView(TokenObtainPairView):
    serializer_class = RoleTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        access = (response.data or {}).get("access")
        if response.status_code == 200 and access:
            lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
            response.set_cookie(
                access_cookie_name(),
                access,
                max_age=int(lifetime.total_seconds()),
                httponly=True,
                secure=getattr(settings, "SESSION_COOKIE_SECURE", False),
                samesite="Lax",
            )
        return response
