from django.contrib import admin

from .models import Order, OrderItem, Part, StockLedger, StockLevel


@admin.register(Part)
class PartAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "sku", "category", "is_active")
    list_display_links = ("id", "name")
    list_filter = ("category", "is_active")
    search_fields = ("name", "sku", "part_number")


@admin.register(StockLevel)
class StockLevelAdmin(admin.ModelAdmin):
    list_display = ("part", "available_qty", "used_qty", "damaged_qty", "updated_at")
    search_fields = ("part__name", "part__sku")
    readonly_fields = ("available_qty", "used_qty", "damaged_qty")


@admin.register(StockLedger)
class StockLedgerAdmin(admin.ModelAdmin):
    list_display = ("id", "part", "qty_change", "quantity", "reason", "order", "created_by", "created_at")
    list_filter = ("reason",)
    search_fields = ("part__name", "part__sku", "notes")
    ordering = ("-created_at",)

    # the ledger is append-only; corrections go through a new adjustment row
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "requested_by", "project", "status", "decided_by", "created_at")
    list_filter = ("status",)
    search_fields = ("requested_by__name", "notes")
    inlines = [OrderItemInline]
