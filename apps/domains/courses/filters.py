import django_filters

from apps.api.common.filters import split_multi

from .models import Course


class CourseFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    level = django_filters.CharFilter(field_name="level")
    instructor = django_filters.NumberFilter(field_name="instructor_id")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Course
        fields = []
