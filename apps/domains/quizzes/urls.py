from rest_framework.routers import SimpleRouter

from .views import StudentQuizViewSet, TrainerQuizViewSet

trainer_router = SimpleRouter()
trainer_router.register(r"quizzes", TrainerQuizViewSet, basename="trainer-quizzes")

student_router = SimpleRouter()
student_router.register(r"quizzes", StudentQuizViewSet, basename="student-quizzes")

trainer_urlpatterns = trainer_router.urls
student_urlpatterns = student_router.urls
