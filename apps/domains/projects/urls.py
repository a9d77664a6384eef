from rest_framework.routers import SimpleRouter

from .views import CompetitionViewSet, ProjectViewSet, TeamViewSet

router = SimpleRouter()
router.register(r"projects", ProjectViewSet, basename="projects")
router.register(r"competitions", CompetitionViewSet, basename="competitions")
router.register(r"teams", TeamViewSet, basename="teams")

urlpatterns = router.urls
