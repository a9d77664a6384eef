import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Part",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=200)),
                ("sku", models.CharField(blank=True, max_length=64, null=True, unique=True)),
                ("part_number", models.CharField(blank=True, default="", max_length=64)),
                ("category", models.CharField(blank=True, db_index=True, default="", max_length=100)),
                ("description", models.TextField(blank=True, default="")),
                ("group_label", models.CharField(blank=True, default="", max_length=100)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name", "id"],
            },
        ),
        migrations.CreateModel(
            name="StockLevel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("available_qty", models.IntegerField(default=0)),
                ("used_qty", models.PositiveIntegerField(default=0)),
                ("damaged_qty", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("part", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="stock", to="inventory.part")),
            ],
            options={
                "ordering": ["part__name"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("fulfilled", "Fulfilled"), ("cancelled", "Cancelled")], db_index=True, default="pending", max_length=20)),
                ("notes", models.TextField(blank=True, default="")),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("decided_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("requested_by", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="part_orders", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("qty", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="inventory.order")),
                ("part", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="order_items", to="inventory.part")),
            ],
            options={
                "unique_together": {("order", "part")},
            },
        ),
        migrations.CreateModel(
            name="StockLedger",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("qty_change", models.IntegerField()),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("reason", models.CharField(choices=[("purchase", "Purchase"), ("adjustment", "Adjustment"), ("used", "Used"), ("damaged", "Damaged"), ("return", "Return"), ("reserve", "Reserved for order"), ("release", "Reservation released"), ("fulfill", "Order fulfilled"), ("cancel", "Order cancelled"), ("other", "Other")], db_index=True, max_length=20)),
                ("notes", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ledger", to="inventory.order")),
                ("part", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="ledger", to="inventory.part")),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
