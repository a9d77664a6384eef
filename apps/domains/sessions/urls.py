from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import TrainerSessionViewSet

router = SimpleRouter()
router.register(r"sessions", TrainerSessionViewSet, basename="trainer-sessions")

trainer_urlpatterns = [
    path("", include(router.urls)),
]
