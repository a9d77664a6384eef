from django.contrib import admin

from .models import Competition, Project, ProjectPart, Team


class ProjectPartInline(admin.TabularInline):
    model = ProjectPart
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "owner", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "owner__name")
    inlines = [ProjectPartInline]


@admin.register(Competition)
class CompetitionAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "start_date", "end_date", "status")
    list_filter = ("status",)
    search_fields = ("name",)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "competition", "coach", "max_members")
    list_filter = ("competition",)
    search_fields = ("name",)
    filter_horizontal = ("members",)
