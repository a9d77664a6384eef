from rest_framework.routers import SimpleRouter

from .views import (
    CLOEvaluationCriteriaViewSet,
    CLOEvaluationViewSet,
    StudentEvaluationViewSet,
    TrainerEvaluationViewSet,
)

trainer_router = SimpleRouter()
trainer_router.register(r"evaluations", TrainerEvaluationViewSet, basename="trainer-evaluations")

clo_router = SimpleRouter()
clo_router.register(r"evaluations", CLOEvaluationViewSet, basename="clo-evaluations")
clo_router.register(r"evaluation-criteria", CLOEvaluationCriteriaViewSet, basename="clo-evaluation-criteria")

student_router = SimpleRouter()
student_router.register(r"evaluations", StudentEvaluationViewSet, basename="student-evaluations")

trainer_urlpatterns = trainer_router.urls
clo_urlpatterns = clo_router.urls
student_urlpatterns = student_router.urls
