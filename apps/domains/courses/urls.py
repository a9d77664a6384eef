from rest_framework.routers import SimpleRouter

from .views import CLOCourseViewSet, TrainerCourseViewSet

clo_router = SimpleRouter()
clo_router.register(r"courses", CLOCourseViewSet, basename="clo-courses")

trainer_router = SimpleRouter()
trainer_router.register(r"courses", TrainerCourseViewSet, basename="trainer-courses")

clo_urlpatterns = clo_router.urls
trainer_urlpatterns = trainer_router.urls
