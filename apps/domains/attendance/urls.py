# apps/domains/attendance/urls.py
from rest_framework.routers import SimpleRouter

from .views import (
    CLOAttendanceViewSet,
    StudentAttendanceViewSet,
    TrainerAttendanceViewSet,
)

trainer_router = SimpleRouter()
trainer_router.register(r"attendance", TrainerAttendanceViewSet, basename="trainer-attendance")

clo_router = SimpleRouter()
clo_router.register(r"attendance", CLOAttendanceViewSet, basename="clo-attendance")

student_router = SimpleRouter()
student_router.register(r"attendance", StudentAttendanceViewSet, basename="student-attendance")

trainer_urlpatterns = trainer_router.urls
clo_urlpatterns = clo_router.urls
student_urlpatterns = student_router.urls
