# -*- coding: utf-8 -*-

import django_filters

from apps.api.common.filters import split_multi

from .models import Enrollment, Payment


# ==================================================
# Enrollment Filter
# ==================================================

class EnrollmentFilter(django_filters.FilterSet):
    student_name = django_filters.CharFilter(method="filter_student_name")
    status = django_filters.CharFilter(method="filter_status")

    course = django_filters.NumberFilter(field_name="course_id")
    group = django_filters.NumberFilter(field_name="group_id")
    student = django_filters.NumberFilter(field_name="student_id")
    enrolled_from = django_filters.DateFilter(field_name="enrolled_at", lookup_expr="date__gte")
    enrolled_to = django_filters.DateFilter(field_name="enrolled_at", lookup_expr="date__lte")

    def filter_student_name(self, qs, name, value):
        return qs.filter(student__name__icontains=value)

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Enrollment
        fields = []


# ==================================================
# Payment Filter
# ==================================================

class PaymentFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    course = django_filters.NumberFilter(field_name="course_id")
    enrollment = django_filters.NumberFilter(field_name="enrollment_id")
    method = django_filters.CharFilter(field_name="method")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Payment
        fields = []
