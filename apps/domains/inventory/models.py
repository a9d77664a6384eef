# PATH: apps/domains/inventory/models.py
# Parts catalogue + append-only stock ledger. StockLevel is a cache of the ledger sums.

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.api.common.models import TimestampModel


class Part(TimestampModel):
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    part_number = models.CharField(max_length=64, blank=True, default="")
    category = models.CharField(max_length=100, blank=True, default="", db_index=True)
    description = models.TextField(blank=True, default="")
    group_label = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return f"{self.name} ({self.sku})" if self.sku else self.name


class StockLevel(models.Model):
    part = models.OneToOneField(Part, on_delete=models.CASCADE, related_name="stock")
    available_qty = models.IntegerField(default=0)
    used_qty = models.PositiveIntegerField(default=0)
    damaged_qty = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["part__name"]

    def __str__(self):
        return f"{self.part.name}: {self.available_qty}"


class StockLedger(models.Model):
    """
    qty_change: signed effect on available stock.
    quantity:   units moved, also for rows that do not change availability (fulfill).
    """

    class Reason(models.TextChoices):
        PURCHASE = "purchase", "Purchase"
        ADJUSTMENT = "adjustment", "Adjustment"
        USED = "used", "Used"
        DAMAGED = "damaged", "Damaged"
        RETURN = "return", "Return"
        RESERVE = "reserve", "Reserved for order"
        RELEASE = "release", "Reservation released"
        FULFILL = "fulfill", "Order fulfilled"
        CANCEL = "cancel", "Order cancelled"
        OTHER = "other", "Other"

    # reasons an operator may post by hand; the rest belong to the order flow
    MANUAL = (
        Reason.PURCHASE,
        Reason.ADJUSTMENT,
        Reason.USED,
        Reason.DAMAGED,
        Reason.RETURN,
        Reason.OTHER,
    )

    part = models.ForeignKey(Part, on_delete=models.CASCADE, related_name="ledger")
    qty_change = models.IntegerField()
    quantity = models.PositiveIntegerField(default=0)
    reason = models.CharField(max_length=20, choices=Reason.choices, db_index=True)
    order = models.ForeignKey(
        "inventory.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ledger",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.CharField(max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.part_id} {self.qty_change:+d} ({self.reason})"


class Order(TimestampModel):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        FULFILLED = "fulfilled", "Fulfilled"
        CANCELLED = "cancelled", "Cancelled"

    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="part_orders",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    notes = models.TextField(blank=True, default="")

    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Order #{self.id} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    part = models.ForeignKey(Part, on_delete=models.PROTECT, related_name="order_items")
    qty = models.PositiveIntegerField(validators=[MinValueValidator(1)])

    class Meta:
        unique_together = ("order", "part")

    def __str__(self):
        return f"{self.part} x{self.qty}"
