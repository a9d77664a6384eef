from django.contrib import admin

from .models import CalendarEvent, ContactRecord, Lead, LeadFollowUp, LeadStatusChange


class LeadFollowUpInline(admin.TabularInline):
    model = LeadFollowUp
    extra = 0


class LeadStatusChangeInline(admin.TabularInline):
    model = LeadStatusChange
    extra = 0
    readonly_fields = ("from_status", "to_status", "reason", "changed_by", "changed_at")


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):
    list_display = ("id", "full_name", "mobile_number", "status", "assigned_to", "next_follow_up_date", "created_at")
    list_display_links = ("id", "full_name")
    list_filter = ("status", "is_banned_from_platform")
    search_fields = ("full_name", "first_name", "last_name", "mobile_number")
    inlines = [LeadFollowUpInline, LeadStatusChangeInline]


@admin.register(ContactRecord)
class ContactRecordAdmin(admin.ModelAdmin):
    list_display = ("id", "lead", "contact_type", "outcome", "contact_date", "duration", "created_by")
    list_filter = ("contact_type", "outcome")
    search_fields = ("lead__full_name", "reason", "notes")


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "start_time", "end_time", "color", "lead")
    list_filter = ("color",)
    search_fields = ("title", "description")
