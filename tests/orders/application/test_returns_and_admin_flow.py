"""Application tests for returns, replacements and admin status changes."""

import pytest
from orders.order.order import Order, OrderStatus, PaymentStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture
def delivered_wallet_order(lifecycle, collaborators, cart_items):
    collaborators.wallet.balances["user-001"] = 850.0
    order_id = lifecycle.place_order("user-001", cart_items, payment_method="WALLET").order_id
    lifecycle.update_status_admin(order_id, "DELIVERED")
    collaborators.inventory.calls.clear()
    return order_id


@pytest.fixture
def delivered_cod_order(lifecycle, collaborators, cart_items):
    order_id = lifecycle.place_order("user-001", cart_items, payment_method="COD").order_id
    lifecycle.update_status_admin(order_id, "DELIVERED")
    collaborators.inventory.calls.clear()
    return order_id


class TestReturns:
    def test_request_return(self, lifecycle, delivered_wallet_order):
        result = lifecycle.request_return(delivered_wallet_order, "Screen flickers")
        assert result.message == "Return request submitted"
        assert result.status == OrderStatus.RETURN_REQUESTED.value

        order = current_domain.repository_for(Order).get(delivered_wallet_order)
        assert order.cancel_reason == "Screen flickers"

    def test_cancel_return_request(self, lifecycle, delivered_wallet_order):
        lifecycle.request_return(delivered_wallet_order, "Screen flickers")
        result = lifecycle.cancel_return_request(delivered_wallet_order)
        assert result.status == OrderStatus.DELIVERED.value

    def test_return_requires_delivery(self, lifecycle, cart_items):
        order_id = lifecycle.place_order("user-001", cart_items).order_id
        with pytest.raises(ValidationError):
            lifecycle.request_return(order_id, "Changed my mind")

    def test_admin_approval_refunds_and_restocks(self, lifecycle, collaborators, delivered_wallet_order):
        lifecycle.request_return(delivered_wallet_order, "Screen flickers")

        result = lifecycle.return_order_by_admin(delivered_wallet_order)

        assert result.message == "Return approved and refunded to wallet"
        assert result.status == OrderStatus.RETURNED.value
        assert result.payment_status == PaymentStatus.REFUNDED.value

        credits = collaborators.wallet.credits()
        assert len(credits) == 1
        assert credits[0]["amount"] == 850.0
        assert credits[0]["reason"] == "Order return refund"
        assert credits[0]["source"] == "RETURN_APPROVED"
        assert sorted(call["product_id"] for call in collaborators.inventory.calls) == ["prod-001", "prod-002"]

    def test_admin_approval_default_reason(self, lifecycle, delivered_wallet_order):
        lifecycle.return_order_by_admin(delivered_wallet_order)
        order = current_domain.repository_for(Order).get(delivered_wallet_order)
        assert order.cancel_reason == "Return approved by admin"

    def test_returning_twice_is_rejected(self, lifecycle, collaborators, delivered_wallet_order):
        lifecycle.return_order_by_admin(delivered_wallet_order)
        with pytest.raises(ValidationError):
            lifecycle.return_order_by_admin(delivered_wallet_order)
        assert len(collaborators.wallet.credits()) == 1

    def test_unpaid_cod_return_is_not_refunded(self, lifecycle, collaborators, delivered_cod_order):
        result = lifecycle.return_order_by_admin(delivered_cod_order)
        assert result.status == OrderStatus.RETURNED.value
        assert collaborators.wallet.credits() == []


class TestReplacements:
    def test_request_and_cancel(self, lifecycle, delivered_cod_order):
        result = lifecycle.request_replacement(delivered_cod_order, "Wrong colour")
        assert result.message == "Replacement request submitted"
        assert result.status == OrderStatus.REPLACEMENT_REQUESTED.value

        result = lifecycle.cancel_replacement_request(delivered_cod_order)
        assert result.status == OrderStatus.DELIVERED.value

    def test_cancel_without_request(self, lifecycle, delivered_cod_order):
        with pytest.raises(ValidationError):
            lifecycle.cancel_replacement_request(delivered_cod_order)


class TestUpdateStatusAdmin:
    def test_sets_status_and_note(self, lifecycle, cart_items):
        order_id = lifecycle.place_order("user-001", cart_items).order_id

        result = lifecycle.update_status_admin(order_id, "shipped", "Handed to courier")

        assert result.message == "Order status updated successfully"
        assert result.status == OrderStatus.SHIPPED.value
        assert current_domain.repository_for(Order).get(order_id).admin_note == "Handed to courier"

    def test_any_status_is_accepted(self, lifecycle, cart_items):
        order_id = lifecycle.place_order("user-001", cart_items).order_id
        lifecycle.update_status_admin(order_id, "CANCELLED")
        assert lifecycle.update_status_admin(order_id, "PACKED").status == OrderStatus.PACKED.value

    def test_returned_goes_through_return_approval(self, lifecycle, collaborators, delivered_wallet_order):
        result = lifecycle.update_status_admin(delivered_wallet_order, "RETURNED")

        assert result.message == "Return approved and refunded to wallet"
        assert len(collaborators.wallet.credits()) == 1

    def test_returned_from_other_states_is_a_plain_update(self, lifecycle, collaborators, cart_items):
        order_id = lifecycle.place_order("user-001", cart_items).order_id

        result = lifecycle.update_status_admin(order_id, "RETURNED")

        assert result.message == "Order status updated successfully"
        assert result.status == OrderStatus.RETURNED.value
        assert collaborators.wallet.credits() == []

    @pytest.mark.parametrize("status", [None, "", "LOST"])
    def test_bad_status_is_rejected_before_lookup(self, lifecycle, status):
        with pytest.raises(ValidationError):
            lifecycle.update_status_admin("missing-order", status)

    def test_unknown_order(self, lifecycle):
        with pytest.raises(ObjectNotFoundError):
            lifecycle.update_status_admin("missing-order", "SHIPPED")
