from rest_framework import serializers

from .models import Order, OrderItem, Part, StockLedger, StockLevel


class StockLevelSerializer(serializers.ModelSerializer):
    part_name = serializers.CharField(source="part.name", read_only=True)
    sku = serializers.CharField(source="part.sku", read_only=True)
    category = serializers.CharField(source="part.category", read_only=True)

    class Meta:
        model = StockLevel
        fields = [
            "id",
            "part",
            "part_name",
            "sku",
            "category",
            "available_qty",
            "used_qty",
            "damaged_qty",
            "updated_at",
        ]
        read_only_fields = fields


class PartSerializer(serializers.ModelSerializer):
    available_qty = serializers.SerializerMethodField()

    class Meta:
        model = Part
        fields = "__all__"

    def get_available_qty(self, obj):
        stock = getattr(obj, "stock", None)
        return stock.available_qty if stock else 0

    def validate_sku(self, value):
        return value.strip() or None if value else None


class StockAdjustSerializer(serializers.Serializer):
    part = serializers.IntegerField()
    qty_change = serializers.IntegerField()
    reason = serializers.ChoiceField(choices=[(r, r) for r in StockLedger.MANUAL])
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)


class OrderItemSerializer(serializers.ModelSerializer):
    part_name = serializers.CharField(source="part.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "part", "part_name", "qty"]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    requested_by_name = serializers.CharField(source="requested_by.display_name", read_only=True)

    class Meta:
        model = Order
        fields = "__all__"
        read_only_fields = ["requested_by", "status", "decided_by", "decided_at"]
        ref_name = "PartOrder"


class OrderItemInputSerializer(serializers.Serializer):
    part = serializers.IntegerField()
    qty = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    project = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
