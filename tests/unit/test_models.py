"""Unit tests for the order aggregate rules kept on the models."""
from decimal import Decimal

import pytest

from orders_inventory import models


class TestOrderAggregate:

    def test_subtotal_and_total(self):
        order = models.Order(owner_id=1, status=models.OrderStatus.PENDING)
        order.lines = [
            models.OrderLine(product_id=1, quantity=3, unit_price=Decimal("2.50")),
            models.OrderLine(product_id=2, quantity=1, unit_price=Decimal("4.00")),
        ]

        assert order.lines[0].subtotal == Decimal("7.50")
        assert order.compute_total() == Decimal("11.50")

    def test_empty_order_total_is_zero(self):
        assert models.Order(owner_id=1).compute_total() == Decimal("0")

    def test_unit_price_cannot_be_changed(self):
        line = models.OrderLine(product_id=1, quantity=1, unit_price=Decimal("10.00"))

        with pytest.raises(ValueError, match="snapshot"):
            line.unit_price = Decimal("12.00")
        assert line.unit_price == Decimal("10.00")

    @pytest.mark.parametrize(
        "status, is_final",
        [
            (models.OrderStatus.PENDING, False),
            (models.OrderStatus.SHIPPED, False),
            (models.OrderStatus.CANCELLED, True),
            (models.OrderStatus.DELIVERED, True),
        ],
    )
    def test_is_final(self, status, is_final):
        assert models.Order(owner_id=1, status=status).is_final is is_final

    def test_state_machine(self):
        pending = models.Order(owner_id=1, status=models.OrderStatus.PENDING)
        shipped = models.Order(owner_id=1, status=models.OrderStatus.SHIPPED)

        assert pending.can_transition_to(models.OrderStatus.SHIPPED)
        assert pending.can_transition_to(models.OrderStatus.CANCELLED)
        assert not pending.can_transition_to(models.OrderStatus.DELIVERED)
        assert shipped.can_transition_to(models.OrderStatus.DELIVERED)
        assert shipped.can_transition_to(models.OrderStatus.CANCELLED)
        assert not shipped.can_transition_to(models.OrderStatus.PENDING)
        for status in models.TERMINAL_STATUSES:
            assert models.ALLOWED_TRANSITIONS[status] == frozenset()
