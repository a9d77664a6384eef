# PATH: apps/api/config/urls.py
from django.contrib import admin
from django.urls import path, include

from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework.permissions import AllowAny

from apps.api.common.views import health_check

schema_view = get_schema_view(
    openapi.Info(
        title="TrainHub API",
        default_version="v1",
        description="Training centre operations: courses, sessions, attendance, payments, inventory",
    ),
    public=True,
    permission_classes=[AllowAny],
)


urlpatterns = [
    # =========================
    # Admin
    # =========================
    path("admin/", admin.site.urls),

    # =========================
    # Health / Docs
    # =========================
    path("api/health/", health_check, name="health-check"),
    path("api/docs/", schema_view.with_ui("swagger", cache_timeout=0), name="swagger-ui"),

    # =========================
    # API
    # =========================
    path("api/", include("apps.api.v1.urls")),
]
