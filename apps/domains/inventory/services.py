# PATH: apps/domains/inventory/services.py
# Every stock movement is a ledger row; StockLevel is recomputed from the ledger
# inside the same transaction, so the cached level always equals the ledger sums.

from __future__ import annotations

import logging
from collections import OrderedDict

from django.conf import settings
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.core.exceptions import DomainError, InvalidTransition, OwnershipError, StockShortage
from apps.support.realtime import services as realtime
from trainhub.adapters.db.django import repositories_inventory as inventory_repo
from trainhub.adapters.db.django.uow import DjangoUnitOfWork

from .models import Order, Part, StockLedger, StockLevel

logger = logging.getLogger(__name__)

Reason = StockLedger.Reason
OrderStatus = Order.Status

ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.APPROVED, OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.APPROVED: {OrderStatus.FULFILLED, OrderStatus.CANCELLED},
    OrderStatus.REJECTED: set(),
    OrderStatus.FULFILLED: set(),
    OrderStatus.CANCELLED: set(),
}

POSITIVE_ONLY = (Reason.PURCHASE, Reason.RETURN)
NEGATIVE_ONLY = (Reason.USED, Reason.DAMAGED)


def low_stock_threshold() -> int:
    return int(getattr(settings, "TRAINHUB_LOW_STOCK_THRESHOLD", 10))


def _publish_stock(level: StockLevel, action: str) -> None:
    realtime.publish(
        realtime.STOCK_UPDATE,
        {"part_id": level.part_id, "available_qty": level.available_qty, "action": action},
    )


def _publish_order(event: str, order: Order) -> None:
    realtime.publish(
        event,
        {"order_id": order.id, "status": order.status, "requested_by": order.requested_by_id},
        rooms=[realtime.role_room("clo"), realtime.user_room(order.requested_by_id)],
    )


# ======================================================
# Ledger
# ======================================================

def adjust_stock(
    part: Part,
    qty_change: int,
    reason: str,
    *,
    created_by=None,
    order: Order | None = None,
    notes: str = "",
    quantity: int | None = None,
) -> StockLevel:
    """
    Append one ledger row and refresh the part's StockLevel from the ledger.
    A change that would take available stock below zero is rejected.
    """
    if reason not in Reason.values:
        raise DomainError(f"reason must be one of {', '.join(Reason.values)}")

    with DjangoUnitOfWork() as uow:
        level = inventory_repo.stock_level_for_update(part)
        if qty_change < 0 and level.available_qty + qty_change < 0:
            raise StockShortage(
                f"Not enough stock for {part.name}",
                shortages=[{
                    "part_id": part.id,
                    "part_name": part.name,
                    "requested": -qty_change,
                    "available": level.available_qty,
                }],
            )

        inventory_repo.ledger_create(
            part=part,
            qty_change=qty_change,
            quantity=abs(qty_change) if quantity is None else quantity,
            reason=reason,
            order=order,
            created_by=created_by,
            notes=notes or "",
        )
        totals = inventory_repo.ledger_totals(part)
        level.available_qty = totals["available"]
        level.used_qty = totals["used"]
        level.damaged_qty = totals["damaged"]
        level.save(update_fields=["available_qty", "used_qty", "damaged_qty", "updated_at"])
        uow.after_commit(lambda: _publish_stock(level, reason))

    logger.info(
        "[stock_adjust] part_id=%s change=%+d reason=%s available=%s order_id=%s",
        part.id,
        qty_change,
        reason,
        level.available_qty,
        getattr(order, "id", None),
    )
    return level


def manual_adjust(part: Part, qty_change, reason: str, *, created_by, notes: str = "") -> StockLevel:
    """Operator adjustment; order-flow reasons are not accepted here."""
    if reason not in StockLedger.MANUAL:
        raise DomainError(f"reason must be one of {', '.join(StockLedger.MANUAL)}")
    try:
        qty_change = int(qty_change)
    except (TypeError, ValueError):
        raise DomainError("qty_change must be an integer")
    if qty_change == 0:
        raise DomainError("qty_change cannot be zero")
    if reason in POSITIVE_ONLY and qty_change < 0:
        raise DomainError(f"{reason} must add stock")
    if reason in NEGATIVE_ONLY and qty_change > 0:
        raise DomainError(f"{reason} must remove stock")
    return adjust_stock(part, qty_change, reason, created_by=created_by, notes=notes)


# ======================================================
# Orders
# ======================================================

def _normalize_items(items) -> OrderedDict:
    if not isinstance(items, list) or not items:
        raise DomainError("items must be a non-empty list")
    merged = OrderedDict()
    for idx, raw in enumerate(items, start=1):
        raw = raw if isinstance(raw, dict) else {}
        part_id = raw.get("part") or raw.get("part_id")
        try:
            part_id, qty = int(part_id), int(raw.get("qty"))
        except (TypeError, ValueError):
            raise DomainError(f"item {idx}: part and qty must be integers")
        if qty < 1:
            raise DomainError(f"item {idx}: qty must be at least 1")
        merged[part_id] = merged.get(part_id, 0) + qty
    return merged


def create_order(*, requested_by, items, project=None, notes: str = "") -> Order:
    wanted = _normalize_items(items)
    parts = inventory_repo.parts_by_ids(wanted)
    missing = sorted(set(wanted) - set(parts))
    if missing:
        raise DomainError(f"Unknown parts: {', '.join(map(str, missing))}")
    inactive = sorted(pid for pid, p in parts.items() if not p.is_active)
    if inactive:
        raise DomainError(f"Parts are not orderable: {', '.join(map(str, inactive))}")

    with DjangoUnitOfWork() as uow:
        # lock in id order so two orders over the same parts cannot deadlock
        levels = {pid: inventory_repo.stock_level_for_update(parts[pid]) for pid in sorted(wanted)}
        shortages = [
            {
                "part_id": pid,
                "part_name": parts[pid].name,
                "requested": qty,
                "available": levels[pid].available_qty,
            }
            for pid, qty in wanted.items()
            if levels[pid].available_qty < qty
        ]
        if shortages:
            raise StockShortage("Insufficient stock for one or more parts", shortages=shortages)

        order = inventory_repo.order_create(
            requested_by=requested_by,
            project=project,
            notes=notes or "",
        )
        for pid, qty in wanted.items():
            inventory_repo.order_item_create(order=order, part=parts[pid], qty=qty)
            adjust_stock(parts[pid], -qty, Reason.RESERVE, created_by=requested_by, order=order)
        uow.after_commit(lambda: _publish_order(realtime.ORDER_NEW, order))

    logger.info(
        "[order_create] order_id=%s by=%s items=%s",
        order.id,
        requested_by.id,
        dict(wanted),
    )
    return order


def _move_order(order: Order, target: str, *, by, ledger_reason: str | None = None, sign: int = 0) -> Order:
    with DjangoUnitOfWork() as uow:
        order = inventory_repo.order_get_for_update(order.id)
        if target not in ORDER_TRANSITIONS.get(order.status, set()):
            raise InvalidTransition(f"Cannot move order from {order.status} to {target}")

        if ledger_reason:
            for item in inventory_repo.order_items(order):
                adjust_stock(
                    item.part,
                    sign * item.qty,
                    ledger_reason,
                    created_by=by,
                    order=order,
                    quantity=item.qty,
                )

        order.status = target
        order.decided_by = by
        order.decided_at = timezone.now()
        order.save(update_fields=["status", "decided_by", "decided_at", "updated_at"])
        uow.after_commit(lambda: _publish_order(realtime.ORDER_UPDATE, order))

    logger.info("[order_%s] order_id=%s by=%s", target, order.id, getattr(by, "id", None))
    return order


def approve_order(order: Order, *, by) -> Order:
    return _move_order(order, OrderStatus.APPROVED, by=by)


def reject_order(order: Order, *, by) -> Order:
    return _move_order(order, OrderStatus.REJECTED, by=by, ledger_reason=Reason.RELEASE, sign=1)


def fulfill_order(order: Order, *, by) -> Order:
    # reserved units leave the shelf: availability already dropped at reserve time
    return _move_order(order, OrderStatus.FULFILLED, by=by, ledger_reason=Reason.FULFILL, sign=0)


def cancel_order(order: Order, *, by, is_manager: bool = False) -> Order:
    if not is_manager and order.requested_by_id != by.id:
        raise OwnershipError("You do not have permission to cancel this order")
    return _move_order(order, OrderStatus.CANCELLED, by=by, ledger_reason=Reason.CANCEL, sign=1)


# ======================================================
# Read models
# ======================================================

def stock_stats(*, recent_limit: int = 10) -> dict:
    threshold = low_stock_threshold()
    levels = inventory_repo.stock_levels_queryset()
    agg = levels.aggregate(
        total_parts=Count("id"),
        low_stock=Count("id", filter=Q(available_qty__lt=threshold)),
        out_of_stock=Count("id", filter=Q(available_qty__lte=0)),
        total_available=Sum("available_qty"),
    )
    categories = (
        levels.values("part__category")
        .annotate(parts=Count("id"), available=Sum("available_qty"))
        .order_by("part__category")
    )
    return {
        "total_parts": agg["total_parts"] or 0,
        "low_stock": agg["low_stock"] or 0,
        "out_of_stock": agg["out_of_stock"] or 0,
        "total_available": agg["total_available"] or 0,
        "low_stock_threshold": threshold,
        "categories": [
            {"category": c["part__category"] or "", "parts": c["parts"], "available": c["available"] or 0}
            for c in categories
        ],
        "recent_movements": recent_movements(recent_limit),
    }


def movement_row(row: StockLedger) -> dict:
    return {
        "id": row.id,
        "part_id": row.part_id,
        "part_name": row.part.name,
        "sku": row.part.sku,
        "qty_change": row.qty_change,
        "quantity": row.quantity,
        "reason": row.reason,
        "order_id": row.order_id,
        "notes": row.notes,
        "created_at": row.created_at,
        "created_by": row.created_by.display_name if row.created_by_id else None,
    }


def recent_movements(limit: int = 10) -> list[dict]:
    return [movement_row(r) for r in inventory_repo.ledger_queryset().order_by("-created_at", "-id")[:limit]]


def part_history(part: Part) -> list[dict]:
    return [movement_row(r) for r in inventory_repo.ledger_queryset().filter(part=part).order_by("-created_at", "-id")]
