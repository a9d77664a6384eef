# domains/sessions/admin.py

from django.contrib import admin
from .models import Session


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "group",
        "session_number",
        "title",
        "scheduled_date",
        "start_time",
        "status",
    )
    list_display_links = ("id", "title")
    list_filter = ("status", "is_online")
    search_fields = ("title", "group__name")
    ordering = ("group", "session_number")
