"""
Parts / stock ledger / orders: ledger sums live here.
"""
from __future__ import annotations


def part_queryset():
    from apps.domains.inventory.models import Part
    return Part.objects.select_related("stock")


def part_get(part_id):
    from apps.domains.inventory.models import Part
    return Part.objects.get(id=part_id)


def parts_by_ids(part_ids) -> dict:
    from apps.domains.inventory.models import Part
    return {p.id: p for p in Part.objects.filter(id__in=list(part_ids))}


def stock_level_for_update(part):
    """Locked StockLevel row, created empty on first touch."""
    from apps.domains.inventory.models import StockLevel
    StockLevel.objects.get_or_create(part=part)
    return StockLevel.objects.select_for_update().select_related("part").get(part=part)


def stock_levels_queryset():
    from apps.domains.inventory.models import StockLevel
    return StockLevel.objects.select_related("part")


def ledger_create(**fields):
    from apps.domains.inventory.models import StockLedger
    return StockLedger.objects.create(**fields)


def ledger_queryset():
    from apps.domains.inventory.models import StockLedger
    return StockLedger.objects.select_related("part", "created_by", "order")


def ledger_totals(part) -> dict:
    """available = sum(qty_change); used / damaged = units moved under those reasons."""
    from django.db.models import Q, Sum
    from apps.domains.inventory.models import StockLedger

    R = StockLedger.Reason
    agg = StockLedger.objects.filter(part=part).aggregate(
        available=Sum("qty_change"),
        used=Sum("quantity", filter=Q(reason__in=[R.USED, R.FULFILL])),
        damaged=Sum("quantity", filter=Q(reason=R.DAMAGED)),
    )
    return {k: v or 0 for k, v in agg.items()}


def order_queryset():
    from apps.domains.inventory.models import Order
    return Order.objects.select_related("requested_by", "decided_by", "project").prefetch_related(
        "items__part"
    )


def order_get_for_update(order_id):
    from apps.domains.inventory.models import Order
    return Order.objects.select_for_update().get(id=order_id)


def order_create(**fields):
    from apps.domains.inventory.models import Order
    return Order.objects.create(**fields)


def order_item_create(**fields):
    from apps.domains.inventory.models import OrderItem
    return OrderItem.objects.create(**fields)


def order_items(order):
    from apps.domains.inventory.models import OrderItem
    return list(OrderItem.objects.filter(order=order).select_related("part").order_by("id"))
