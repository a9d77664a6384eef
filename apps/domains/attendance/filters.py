import django_filters

from apps.api.common.filters import split_multi

from .models import Attendance


class AttendanceFilter(django_filters.FilterSet):
    """
    - status accepts a comma separated list
    - date range on the session's scheduled date
    """

    session = django_filters.NumberFilter(field_name="session_id")
    group = django_filters.NumberFilter(field_name="session__group_id")
    course = django_filters.NumberFilter(field_name="session__course_id")
    student = django_filters.NumberFilter(field_name="student_id")
    status = django_filters.CharFilter(method="filter_status")
    date_from = django_filters.DateFilter(field_name="session__scheduled_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="session__scheduled_date", lookup_expr="lte")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Attendance
        fields = [
            "session",
            "group",
            "course",
            "student",
        ]
