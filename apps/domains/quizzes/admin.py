from django.contrib import admin

from .models import Quiz, QuizAttempt


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "course", "passing_score", "max_attempts", "is_active")
    list_filter = ("is_active",)
    search_fields = ("title", "course__title")


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "quiz", "student", "attempt_number", "status", "score", "passed")
    list_filter = ("status", "passed")
    search_fields = ("quiz__title", "student__name")
