from rest_framework.routers import SimpleRouter

from .views import (
    ReceptionEnrollmentViewSet,
    ReceptionPaymentViewSet,
    StudentPaymentViewSet,
)

student_router = SimpleRouter()
student_router.register(r"payments", StudentPaymentViewSet, basename="student-payments")

reception_router = SimpleRouter()
reception_router.register(r"enrollments", ReceptionEnrollmentViewSet, basename="reception-enrollments")
reception_router.register(r"payments", ReceptionPaymentViewSet, basename="reception-payments")

student_urlpatterns = student_router.urls
reception_urlpatterns = reception_router.urls
