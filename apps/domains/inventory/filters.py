import django_filters

from apps.api.common.filters import split_multi

from .models import Order, StockLedger, StockLevel


class StockLevelFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="part__category", lookup_expr="iexact")
    low = django_filters.BooleanFilter(method="filter_low")

    def filter_low(self, qs, name, value):
        from .services import low_stock_threshold
        if value:
            return qs.filter(available_qty__lt=low_stock_threshold())
        return qs

    class Meta:
        model = StockLevel
        fields = []


class StockLedgerFilter(django_filters.FilterSet):
    part = django_filters.NumberFilter(field_name="part_id")
    reason = django_filters.CharFilter(method="filter_reason")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    def filter_reason(self, qs, name, value):
        return qs.filter(reason__in=split_multi(value))

    class Meta:
        model = StockLedger
        fields = []


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    project = django_filters.NumberFilter(field_name="project_id")
    requested_by = django_filters.NumberFilter(field_name="requested_by_id")

    def filter_status(self, qs, name, value):
        return qs.filter(status__in=split_multi(value))

    class Meta:
        model = Order
        fields = []
