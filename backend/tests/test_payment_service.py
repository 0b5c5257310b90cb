"""
Tests for PaymentService and payment references.
"""

import re

import pytest

from rest_api.models import DiningTable
from rest_api.services.domain import OrderStatusService, PaymentService, generate_payment_reference
from rest_api.services.domain.payment_service import transaction_notice
from shared.config.constants import OrderStatus, PaymentStatus, TableStatus
from shared.utils.exceptions import (
    AlreadyPaidError,
    InvalidStateError,
    OrderNotFoundError,
    PaymentAmountError,
    ValidationError,
)
from tests.conftest import place_order

REFERENCE_PATTERN = re.compile(r"^PAY-\d+-[0-9a-z]{9}$")


class TestPaymentReference:
    def test_format(self):
        assert REFERENCE_PATTERN.match(generate_payment_reference())

    def test_uses_given_timestamp(self):
        assert generate_payment_reference(1718900000000).startswith("PAY-1718900000000-")

    def test_references_differ(self):
        references = {generate_payment_reference(1718900000000) for _ in range(200)}
        assert len(references) == 200


class TestFinalizePayment:
    """Full settlement of an order."""

    def test_payment_completes_order(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 2)])

        result = PaymentService(db_session).finalize(order.id, "CASH", 6000, actor_id=waiter_user.id)

        paid = result.order
        assert paid.status == OrderStatus.COMPLETED
        assert paid.payment_status == PaymentStatus.PAID
        assert paid.payment_method == "CASH"
        assert paid.payment_amount_cents == 6000
        assert REFERENCE_PATTERN.match(paid.payment_reference)
        assert paid.completed_at is not None
        assert result.change_cents == 1000

    def test_exact_amount_has_no_change(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["chapman"], 1)])
        result = PaymentService(db_session).finalize(order.id, "CARD", 1200)
        assert result.change_cents == 0

    def test_payment_skips_transition_table(self, db_session, waiter_user, menu):
        """A pending order can be paid directly."""
        order = place_order(db_session, waiter_user, [(menu["chapman"], 1)])
        result = PaymentService(db_session).finalize(order.id, "TRANSFER", 1200)
        assert result.order.status == OrderStatus.COMPLETED

    def test_payment_releases_table(self, db_session, waiter_user, menu, dining_table):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)], table=dining_table)

        result = PaymentService(db_session).finalize(order.id, "CASH", 2500)

        assert result.table_released is True
        assert db_session.get(DiningTable, dining_table.id).status == TableStatus.AVAILABLE

    def test_amount_below_total(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        with pytest.raises(PaymentAmountError):
            PaymentService(db_session).finalize(order.id, "CASH", 2499)

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, db_session, waiter_user, menu, amount):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        with pytest.raises(PaymentAmountError):
            PaymentService(db_session).finalize(order.id, "CASH", amount)

    def test_unknown_method(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        with pytest.raises(ValidationError):
            PaymentService(db_session).finalize(order.id, "BITCOIN", 2500)

    def test_already_paid(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        service = PaymentService(db_session)
        service.finalize(order.id, "CASH", 2500)

        with pytest.raises(AlreadyPaidError) as exc:
            service.finalize(order.id, "CASH", 2500)
        assert exc.value.status_code == 409

    def test_cancelled_order_cannot_be_paid(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        OrderStatusService(db_session).update_status(order.id, OrderStatus.CANCELLED)

        with pytest.raises(InvalidStateError):
            PaymentService(db_session).finalize(order.id, "CASH", 2500)

    def test_missing_order(self, db_session):
        with pytest.raises(OrderNotFoundError):
            PaymentService(db_session).finalize(999, "CASH", 100)

    def test_paid_order_can_not_be_reopened(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 1)])
        PaymentService(db_session).finalize(order.id, "CASH", 2500)

        with pytest.raises(ValidationError):
            OrderStatusService(db_session).update_status(order.id, OrderStatus.READY)


class TestTransactionNotice:
    def test_notice_lists_paid_lines(self, db_session, waiter_user, menu):
        order = place_order(db_session, waiter_user, [(menu["jollof"], 2), (menu["chapman"], 1)])
        result = PaymentService(db_session).finalize(order.id, "CARD", 6200)

        notice = transaction_notice(result.order, "Test Waiter", "WAITER")

        assert notice["order_id"] == order.id
        assert notice["total_cents"] == 6200
        assert notice["payment_method"] == "CARD"
        assert "2x Jollof Rice (₦25.00)" in notice["items"]
        assert len(notice["items"]) == 2
        assert notice["amount_paid_cents"] == 6200
        assert notice["payment_reference"] == result.order.payment_reference
        assert notice["payment_reference"]
