# apps/core/urls.py

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from apps.api.common.auth_jwt import RoleTokenObtainPairView
from rest_framework_simplejwt.views import TokenRefreshView

from apps.core.views import (
    MeView,
    ProfileViewSet,
    ReceptionUserViewSet,
    CLOTrainerViewSet,
)

router = SimpleRouter()
router.register("profile", ProfileViewSet, basename="profile")

urlpatterns = [
    path("token/", RoleTokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("me/", MeView.as_view(), name="core-me"),
    path("", include(router.urls)),
]

reception_router = SimpleRouter()
reception_router.register("users", ReceptionUserViewSet, basename="reception-users")

clo_router = SimpleRouter()
clo_router.register("trainers", CLOTrainerViewSet, basename="clo-trainers")

reception_urlpatterns = reception_router.urls
clo_urlpatterns = clo_router.urls
