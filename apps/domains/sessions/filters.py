import django_filters

from apps.api.common.filters import split_multi

from .models import Session


class SessionFilter(django_filters.FilterSet):
    group = django_filters.NumberFilter(field_name="group_id")
    course = django_filters.NumberFilter(field_name="course_id")
    status = django_filters.CharFilter(method="filter_status")
    date_from = django_filters.DateFilter(field_name="scheduled_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="scheduled_date", lookup_expr="lte")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Session
        fields = []
