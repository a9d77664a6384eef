# PATH: apps/api/v1/urls.py
from django.urls import path, include

from apps.core import urls as core_urls
from apps.domains.attendance import urls as attendance_urls
from apps.domains.courses import urls as course_urls
from apps.domains.crm import urls as crm_urls
from apps.domains.dashboards import urls as dashboard_urls
from apps.domains.enrollment import urls as enrollment_urls
from apps.domains.evaluations import urls as evaluation_urls
from apps.domains.groups import urls as group_urls
from apps.domains.learning import urls as learning_urls
from apps.domains.quizzes import urls as quiz_urls
from apps.domains.sessions import urls as session_urls

# =========================
# Role areas
# =========================

trainer_urlpatterns = (
    dashboard_urls.trainer_urlpatterns
    + course_urls.trainer_urlpatterns
    + group_urls.trainer_urlpatterns
    + session_urls.trainer_urlpatterns
    + attendance_urls.trainer_urlpatterns
    + evaluation_urls.trainer_urlpatterns
    + learning_urls.trainer_urlpatterns
    + quiz_urls.trainer_urlpatterns
)

clo_urlpatterns = (
    dashboard_urls.clo_urlpatterns
    + core_urls.clo_urlpatterns
    + course_urls.clo_urlpatterns
    + group_urls.clo_urlpatterns
    + attendance_urls.clo_urlpatterns
    + evaluation_urls.clo_urlpatterns
    + learning_urls.clo_urlpatterns
)

student_urlpatterns = (
    dashboard_urls.student_urlpatterns
    + attendance_urls.student_urlpatterns
    + evaluation_urls.student_urlpatterns
    + enrollment_urls.student_urlpatterns
    + learning_urls.student_urlpatterns
    + quiz_urls.student_urlpatterns
)

reception_urlpatterns = (
    core_urls.reception_urlpatterns
    + enrollment_urls.reception_urlpatterns
    + crm_urls.reception_urlpatterns
)

urlpatterns = [
    path("auth/", include("apps.core.urls")),

    path("trainer/", include(trainer_urlpatterns)),
    path("clo/", include(clo_urlpatterns)),
    path("student/", include(student_urlpatterns)),
    path("reception/", include(reception_urlpatterns)),

    # =========================
    # Shared resources
    # =========================
    path("", include("apps.domains.inventory.urls")),
    path("", include("apps.domains.projects.urls")),
    path("", include("apps.domains.community.api.urls")),
]
