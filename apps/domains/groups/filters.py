import django_filters

from apps.api.common.filters import split_multi

from .models import Group


class GroupFilter(django_filters.FilterSet):
    course = django_filters.NumberFilter(field_name="course_id")
    trainer = django_filters.NumberFilter(field_name="trainer_id")
    student = django_filters.NumberFilter(field_name="students")
    status = django_filters.CharFilter(method="filter_status")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Group
        fields = []
