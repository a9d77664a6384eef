from django.contrib import admin

from .models import Group, GroupScheduleSlot


class GroupScheduleSlotInline(admin.TabularInline):
    model = GroupScheduleSlot
    extra = 0


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "course",
        "trainer",
        "status",
        "start_date",
        "end_date",
        "max_students",
    )
    list_display_links = ("id", "name")
    list_filter = ("status", "course")
    search_fields = ("name", "course__title", "trainer__name")
    filter_horizontal = ("students",)
    inlines = [GroupScheduleSlotInline]
