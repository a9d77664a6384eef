from django.contrib import admin
from .models import Attendance


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "session", "status", "marked_by", "marked_at")
    list_display_links = ("id", "student")
    list_filter = ("status", "session__group")
    search_fields = ("student__name", "student__username", "session__title")
    ordering = ("-marked_at",)
