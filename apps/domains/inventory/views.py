# PATH: apps/domains/inventory/views.py

from django.shortcuts import get_object_or_404

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet
from django_filters.rest_framework import DjangoFilterBackend

from apps.api.common.mixins import DomainErrorMixin
from apps.core.permissions import IsInventoryManager, is_inventory_manager
from apps.domains.projects.models import Project
from trainhub.adapters.db.django import repositories_inventory as inventory_repo

from . import services
from .filters import OrderFilter, StockLedgerFilter, StockLevelFilter
from .serializers import (
    OrderCreateSerializer,
    OrderSerializer,
    PartSerializer,
    StockAdjustSerializer,
    StockLevelSerializer,
)


# ======================================================
# Parts
# ======================================================

class PartViewSet(DomainErrorMixin, ModelViewSet):
    """
    Parts catalogue

    ✔ read: any signed-in user
    ✔ write: CLO / admin
    """
    serializer_class = PartSerializer
    permission_classes = [IsAuthenticated, IsInventoryManager]

    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["category", "is_active"]
    search_fields = ["name", "sku", "part_number", "description"]
    ordering_fields = ["name", "category", "created_at"]
    ordering = ["name"]

    def get_queryset(self):
        return inventory_repo.part_queryset()

    def destroy(self, request, *args, **kwargs):
        part = self.get_object()
        if inventory_repo.ledger_queryset().filter(part=part).exists():
            # ledger rows keep their part; retire it instead
            part.is_active = False
            part.save(update_fields=["is_active", "updated_at"])
            return Response(PartSerializer(part).data)
        part.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        return Response(services.part_history(self.get_object()))


# ======================================================
# Stock
# ======================================================

class StockViewSet(DomainErrorMixin, mixins.ListModelMixin, GenericViewSet):
    """
    GET  /api/stock/                  levels
    GET  /api/stock/stats/            totals, low stock, categories
    GET  /api/stock/recent/           latest ledger rows
    GET  /api/stock/history/?part=    ledger rows, filterable
    POST /api/stock/adjust/           manual movement (managers)
    """
    serializer_class = StockLevelSerializer
    permission_classes = [IsAuthenticated, IsInventoryManager]

    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = StockLevelFilter
    search_fields = ["part__name", "part__sku"]

    def get_queryset(self):
        return inventory_repo.stock_levels_queryset().order_by("part__name")

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(services.stock_stats())

    @action(detail=False, methods=["get"])
    def recent(self, request):
        try:
            limit = max(1, min(int(request.query_params.get("limit", 10)), 100))
        except ValueError:
            return Response({"detail": "limit must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(services.recent_movements(limit))

    @action(detail=False, methods=["get"])
    def history(self, request):
        qs = StockLedgerFilter(
            request.query_params,
            queryset=inventory_repo.ledger_queryset().order_by("-created_at", "-id"),
        ).qs
        page = self.paginate_queryset(qs)
        rows = [services.movement_row(r) for r in (page if page is not None else qs)]
        if page is not None:
            return self.get_paginated_response(rows)
        return Response(rows)

    @action(detail=False, methods=["post"])
    def adjust(self, request):
        serializer = StockAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        part = get_object_or_404(inventory_repo.part_queryset(), id=data["part"])
        level = services.manual_adjust(
            part,
            data["qty_change"],
            data["reason"],
            created_by=request.user,
            notes=data.get("notes", ""),
        )
        return Response(StockLevelSerializer(level).data)


# ======================================================
# Orders
# ======================================================

class OrderViewSet(
    DomainErrorMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    """
    Part orders

    ✔ create: anyone signed in; stock reserved immediately
    ✔ approve / reject / fulfill: managers
    ✔ cancel: owner or manager
    """
    serializer_class = OrderSerializer
    permission_classes = [IsAuthenticated]

    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_queryset(self):
        qs = inventory_repo.order_queryset().order_by("-created_at", "-id")
        if is_inventory_manager(self.request.user):
            return qs
        return qs.filter(requested_by=self.request.user)

    def _require_manager(self, request):
        if not is_inventory_manager(request.user):
            return Response(
                {"detail": IsInventoryManager.message},
                status=status.HTTP_403_FORBIDDEN,
            )
        return None

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        project = None
        if data.get("project"):
            project = get_object_or_404(Project, id=data["project"])
        order = services.create_order(
            requested_by=request.user,
            items=[dict(i) for i in data["items"]],
            project=project,
            notes=data.get("notes", ""),
        )
        order = inventory_repo.order_queryset().get(id=order.id)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        denied = self._require_manager(request)
        if denied:
            return denied
        order = services.approve_order(self.get_object(), by=request.user)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        denied = self._require_manager(request)
        if denied:
            return denied
        order = services.reject_order(self.get_object(), by=request.user)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def fulfill(self, request, pk=None):
        denied = self._require_manager(request)
        if denied:
            return denied
        order = services.fulfill_order(self.get_object(), by=request.user)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = services.cancel_order(
            self.get_object(),
            by=request.user,
            is_manager=is_inventory_manager(request.user),
        )
        return Response(OrderSerializer(order).data)
