from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CLOGroupViewSet, TrainerGroupViewSet

trainer_router = SimpleRouter()
trainer_router.register(r"groups", TrainerGroupViewSet, basename="trainer-groups")

clo_router = SimpleRouter()
clo_router.register(r"groups", CLOGroupViewSet, basename="clo-groups")

trainer_urlpatterns = [
    path("", include(trainer_router.urls)),
]

clo_urlpatterns = [
    path("", include(clo_router.urls)),
]
