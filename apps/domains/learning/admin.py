from django.contrib import admin

from .models import Module, ModuleProgress


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ("id", "course", "order", "title", "type", "is_locked", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("title", "course__title")


@admin.register(ModuleProgress)
class ModuleProgressAdmin(admin.ModelAdmin):
    list_display = ("id", "student", "module", "status", "time_spent", "completed_at")
    list_filter = ("status",)
    search_fields = ("student__name", "module__title")
