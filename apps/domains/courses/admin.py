from django.contrib import admin

from .models import Course


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "level", "instructor", "price", "status")
    list_display_links = ("id", "title")
    list_filter = ("status", "level", "category")
    search_fields = ("title", "category")
    ordering = ("-id",)
