import django_filters

from apps.api.common.filters import split_multi

from .models import ContactRecord, Lead


class LeadFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    interest_field = django_filters.CharFilter(field_name="interest_field", lookup_expr="iexact")
    referral_source = django_filters.CharFilter(field_name="referral_source", lookup_expr="iexact")
    assigned_to = django_filters.NumberFilter(field_name="assigned_to_id")
    from_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    to_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Lead
        fields = []


class ContactRecordFilter(django_filters.FilterSet):
    lead = django_filters.NumberFilter(field_name="lead_id")
    contact_type = django_filters.CharFilter(field_name="contact_type")
    outcome = django_filters.CharFilter(method="filter_outcome")
    start_date = django_filters.DateFilter(field_name="contact_date", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="contact_date", lookup_expr="date__lte")

    def filter_outcome(self, qs, name, value):
        return qs.filter(outcome__in=split_multi(value))

    class Meta:
        model = ContactRecord
        fields = []
