from django.contrib import admin

from .models import EvaluationCriteria, StudentEvaluation


@admin.register(EvaluationCriteria)
class EvaluationCriteriaAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "course", "applies_to", "is_active", "updated_at")
    list_display_links = ("id", "name")
    list_filter = ("is_active", "applies_to")
    search_fields = ("name", "course__title")
    filter_horizontal = ("groups",)


@admin.register(StudentEvaluation)
class StudentEvaluationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "student",
        "session",
        "trainer",
        "overall_rating",
        "needs_attention",
        "at_risk",
        "excelling",
        "evaluation_date",
    )
    list_display_links = ("id", "student")
    list_filter = ("needs_attention", "at_risk", "excelling", "overall_rating")
    search_fields = ("student__name", "session__title", "group__name")
    ordering = ("-evaluation_date", "-id")
