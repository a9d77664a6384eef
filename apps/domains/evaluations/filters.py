import django_filters
from django.db.models import Q

from .models import StudentEvaluation


class StudentEvaluationFilter(django_filters.FilterSet):
    group = django_filters.NumberFilter(field_name="group_id")
    session = django_filters.NumberFilter(field_name="session_id")
    student = django_filters.NumberFilter(field_name="student_id")
    trainer = django_filters.NumberFilter(field_name="trainer_id")
    rating = django_filters.NumberFilter(field_name="overall_rating")
    flagged = django_filters.BooleanFilter(method="filter_flagged")
    date_from = django_filters.DateFilter(field_name="evaluation_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="evaluation_date", lookup_expr="lte")

    def filter_flagged(self, qs, name, value):
        if value:
            return qs.filter(Q(needs_attention=True) | Q(at_risk=True))
        return qs.filter(needs_attention=False, at_risk=False)

    class Meta:
        model = StudentEvaluation
        fields = []
