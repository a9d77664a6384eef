from rest_framework.routers import SimpleRouter

from .views import CLOModuleViewSet, StudentModuleViewSet, TrainerModuleViewSet

trainer_router = SimpleRouter()
trainer_router.register(r"modules", TrainerModuleViewSet, basename="trainer-modules")

clo_router = SimpleRouter()
clo_router.register(r"modules", CLOModuleViewSet, basename="clo-modules")

student_router = SimpleRouter()
student_router.register(r"modules", StudentModuleViewSet, basename="student-modules")

trainer_urlpatterns = trainer_router.urls
clo_urlpatterns = clo_router.urls
student_urlpatterns = student_router.urls
