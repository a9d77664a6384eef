import pytest
from django.db.models import Sum

from apps.core.exceptions import DomainError, InvalidTransition, OwnershipError, StockShortage
from apps.domains.inventory import services
from apps.domains.inventory.models import Order, Part, StockLedger, StockLevel

Reason = StockLedger.Reason


@pytest.fixture
def motor(db, clo):
    part = Part.objects.create(name="DC motor", sku="MOT-1", category="motors")
    services.manual_adjust(part, 10, Reason.PURCHASE, created_by=clo)
    return part


@pytest.fixture
def sensor(db, clo):
    part = Part.objects.create(name="IR sensor", sku="SEN-1", category="sensors")
    services.manual_adjust(part, 3, Reason.PURCHASE, created_by=clo)
    return part


def level(part):
    return StockLevel.objects.get(part=part)


def assert_matches_ledger(part):
    lvl = level(part)
    ledger = StockLedger.objects.filter(part=part)
    assert lvl.available_qty == ledger.aggregate(s=Sum("qty_change"))["s"]
    used = ledger.filter(reason__in=[Reason.USED, Reason.FULFILL]).aggregate(s=Sum("quantity"))["s"] or 0
    assert lvl.used_qty == used


class TestManualAdjust:
    def test_purchase_and_use(self, motor, clo):
        services.manual_adjust(motor, -4, Reason.USED, created_by=clo)
        assert level(motor).available_qty == 6
        assert level(motor).used_qty == 4
        assert_matches_ledger(motor)

    def test_damaged_is_tracked(self, motor, clo):
        services.manual_adjust(motor, -2, Reason.DAMAGED, created_by=clo)
        assert level(motor).damaged_qty == 2

    @pytest.mark.parametrize("qty,reason", [(-1, "purchase"), (-1, "return"), (1, "used"), (1, "damaged")])
    def test_sign_rules(self, motor, clo, qty, reason):
        with pytest.raises(DomainError):
            services.manual_adjust(motor, qty, reason, created_by=clo)

    def test_adjustment_either_way(self, motor, clo):
        services.manual_adjust(motor, -3, Reason.ADJUSTMENT, created_by=clo)
        services.manual_adjust(motor, 1, Reason.ADJUSTMENT, created_by=clo)
        assert level(motor).available_qty == 8

    def test_order_reasons_rejected(self, motor, clo):
        with pytest.raises(DomainError, match="reason must be one of"):
            services.manual_adjust(motor, -1, Reason.RESERVE, created_by=clo)

    def test_zero(self, motor, clo):
        with pytest.raises(DomainError, match="cannot be zero"):
            services.manual_adjust(motor, 0, Reason.ADJUSTMENT, created_by=clo)

    def test_never_below_zero(self, motor, clo):
        with pytest.raises(StockShortage) as exc:
            services.manual_adjust(motor, -11, Reason.USED, created_by=clo)
        assert exc.value.shortages[0]["available"] == 10
        assert level(motor).available_qty == 10


class TestOrders:
    def order(self, user, *items):
        return services.create_order(
            requested_by=user,
            items=[{"part": p.id, "qty": q} for p, q in items],
        )

    def test_create_reserves(self, motor, sensor, student):
        order = self.order(student, (motor, 4), (sensor, 1))
        assert order.status == Order.Status.PENDING
        assert order.items.count() == 2
        assert level(motor).available_qty == 6
        assert StockLedger.objects.filter(order=order, reason=Reason.RESERVE).count() == 2

    def test_duplicate_lines_merge(self, motor, student):
        order = self.order(student, (motor, 2), (motor, 3))
        assert order.items.get().qty == 5

    def test_shortage_lists_every_part(self, motor, sensor, student):
        with pytest.raises(StockShortage) as exc:
            self.order(student, (motor, 11), (sensor, 4))
        assert {s["part_id"] for s in exc.value.shortages} == {motor.id, sensor.id}
        assert not Order.objects.exists()
        assert level(motor).available_qty == 10

    def test_unknown_and_inactive_parts(self, motor, student):
        with pytest.raises(DomainError, match="Unknown parts"):
            services.create_order(requested_by=student, items=[{"part": 999, "qty": 1}])
        motor.is_active = False
        motor.save()
        with pytest.raises(DomainError, match="not orderable"):
            self.order(student, (motor, 1))

    def test_empty_items(self, student):
        with pytest.raises(DomainError, match="non-empty"):
            services.create_order(requested_by=student, items=[])

    def test_reject_releases(self, motor, student, clo):
        order = self.order(student, (motor, 4))
        services.reject_order(order, by=clo)
        assert level(motor).available_qty == 10
        assert_matches_ledger(motor)

    def test_fulfill_moves_to_used(self, motor, student, clo):
        order = self.order(student, (motor, 4))
        services.approve_order(order, by=clo)
        order = services.fulfill_order(order, by=clo)
        assert order.status == Order.Status.FULFILLED
        assert order.decided_by == clo
        assert level(motor).available_qty == 6
        assert level(motor).used_qty == 4
        assert_matches_ledger(motor)

    def test_cancel_after_approval_releases(self, motor, student, clo):
        order = self.order(student, (motor, 4))
        services.approve_order(order, by=clo)
        services.cancel_order(order, by=student)
        assert level(motor).available_qty == 10

    def test_fulfill_needs_approval(self, motor, student, clo):
        order = self.order(student, (motor, 1))
        with pytest.raises(InvalidTransition):
            services.fulfill_order(order, by=clo)

    def test_terminal_states(self, motor, student, clo):
        order = self.order(student, (motor, 1))
        services.reject_order(order, by=clo)
        with pytest.raises(InvalidTransition):
            services.approve_order(order, by=clo)
        with pytest.raises(InvalidTransition):
            services.cancel_order(order, by=student)

    def test_cancel_ownership(self, motor, student, student2, clo):
        order = self.order(student, (motor, 1))
        with pytest.raises(OwnershipError):
            services.cancel_order(order, by=student2)
        services.cancel_order(order, by=clo, is_manager=True)
        assert Order.objects.get(id=order.id).status == Order.Status.CANCELLED


class TestReadModels:
    def test_stats(self, motor, sensor, settings):
        settings.TRAINHUB_LOW_STOCK_THRESHOLD = 5
        out = services.stock_stats(recent_limit=1)
        assert out["total_parts"] == 2
        assert out["low_stock"] == 1
        assert out["total_available"] == 13
        assert [c["category"] for c in out["categories"]] == ["motors", "sensors"]
        assert len(out["recent_movements"]) == 1

    def test_history_newest_first(self, motor, clo):
        services.manual_adjust(motor, -1, Reason.USED, created_by=clo)
        rows = services.part_history(motor)
        assert [r["reason"] for r in rows] == ["used", "purchase"]
        assert rows[0]["created_by"] == clo.display_name
