from django.urls import path

from .views import (
    CLOAnalyticsView,
    CLODashboardView,
    StudentDashboardView,
    TrainerDashboardView,
    TrainerScheduleView,
)

trainer_urlpatterns = [
    path("dashboard/", TrainerDashboardView.as_view(), name="trainer-dashboard"),
    path("dashboard/schedule/", TrainerScheduleView.as_view(), name="trainer-schedule"),
]

clo_urlpatterns = [
    path("dashboard/", CLODashboardView.as_view(), name="clo-dashboard"),
    path("analytics/", CLOAnalyticsView.as_view(), name="clo-analytics"),
]

student_urlpatterns = [
    path("dashboard/", StudentDashboardView.as_view(), name="student-dashboard"),
]
