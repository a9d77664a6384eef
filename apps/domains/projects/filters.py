import django_filters

from apps.api.common.filters import split_multi

from .models import Competition, Project, Team


class ProjectFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    owner = django_filters.NumberFilter(field_name="owner_id")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Project
        fields = []


class CompetitionFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    date_from = django_filters.DateFilter(field_name="end_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="start_date", lookup_expr="lte")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Competition
        fields = []


class TeamFilter(django_filters.FilterSet):
    competition = django_filters.NumberFilter(field_name="competition_id")
    coach = django_filters.NumberFilter(field_name="coach_id")
    member = django_filters.NumberFilter(field_name="members", distinct=True)

    class Meta:
        model = Team
        fields = []
