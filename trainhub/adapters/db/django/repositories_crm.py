"""
Leads, contact history and reception calendar.
"""
from __future__ import annotations


def lead_queryset():
    from apps.domains.crm.models import Lead
    return Lead.objects.select_related("assigned_to", "converted_student", "created_by")


def lead_get_for_update(lead_id):
    from apps.domains.crm.models import Lead
    return Lead.objects.select_for_update().get(id=lead_id)


def lead_mobile_taken(mobile_number, *, exclude_id=None) -> bool:
    from apps.domains.crm.models import Lead
    qs = Lead.objects.filter(mobile_number=mobile_number)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    return qs.exists()


def lead_create(**fields):
    from apps.domains.crm.models import Lead
    return Lead.objects.create(**fields)


def lead_status_counts() -> dict:
    from django.db.models import Count
    from apps.domains.crm.models import Lead
    rows = Lead.objects.values("status").annotate(n=Count("id"))
    return {r["status"]: r["n"] for r in rows}


def follow_up_create(**fields):
    from apps.domains.crm.models import LeadFollowUp
    return LeadFollowUp.objects.create(**fields)


def status_change_create(**fields):
    from apps.domains.crm.models import LeadStatusChange
    return LeadStatusChange.objects.create(**fields)


def contact_queryset():
    from apps.domains.crm.models import ContactRecord
    return ContactRecord.objects.select_related("lead", "event", "created_by")


def contact_create(**fields):
    from apps.domains.crm.models import ContactRecord
    return ContactRecord.objects.create(**fields)


def event_queryset():
    from apps.domains.crm.models import CalendarEvent
    return CalendarEvent.objects.select_related("lead", "created_by")


def event_create(**fields):
    from apps.domains.crm.models import CalendarEvent
    return CalendarEvent.objects.create(**fields)


def existing_lead_ids(ids) -> set:
    from apps.domains.crm.models import Lead
    return set(Lead.objects.filter(id__in=list(ids)).values_list("id", flat=True))
