"""Application tests for placing orders with each payment method."""

import pytest
from orders.clients.port import Address
from orders.order.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from protean import current_domain
from protean.exceptions import ValidationError


def _stored(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestPlaceCashOnDeliveryOrder:
    def test_end_to_end(self, lifecycle, collaborators, cart_items):
        result = lifecycle.place_order("user-001", cart_items, payment_method="COD", user_email="jane@example.com")

        assert result.success is True
        assert result.message == "Order placed successfully (COD)"
        assert result.subtotal == 750.0
        assert result.total_amount == 850.0
        assert result.status == OrderStatus.PENDING.value
        assert result.payment_status == PaymentStatus.PENDING.value
        assert result.total_items == 2

        order = _stored(result.order_id)
        assert order.order_number == result.order_number
        assert order.paid_amount == 850.0
        assert order.paid_at is not None

    def test_stock_is_taken_for_each_line(self, lifecycle, collaborators, cart_items):
        lifecycle.place_order("user-001", cart_items, payment_method="COD")
        calls = sorted(collaborators.inventory.calls, key=lambda call: call["product_id"])
        assert calls == [
            {"method": "decrement", "product_id": "prod-001", "quantity": 2},
            {"method": "decrement", "product_id": "prod-002", "quantity": 1},
        ]

    def test_cart_is_cleared_and_customer_notified(self, lifecycle, collaborators, cart_items):
        result = lifecycle.place_order("user-001", cart_items, user_email="jane@example.com")
        assert collaborators.cart.cleared == ["user-001"]
        assert collaborators.notifier.sent == [
            {"kind": "order_confirmation", "order_id": result.order_id, "recipient": "jane@example.com"}
        ]

    def test_two_lines_with_zone_delivery(self, lifecycle, collaborators):
        collaborators.addresses.add(Address(id="addr-050", pincode="560001", city="Bengaluru", state="Karnataka"))
        collaborators.delivery.pin_charges["560001"] = 50.0
        items = [
            {"product_id": "prod-A", "quantity": 2, "unit_price": 300.0},
            {"product_id": "prod-B", "quantity": 1, "unit_price": 200.0},
        ]

        result = lifecycle.place_order("user-001", items, payment_method="COD", address_id="addr-050")

        assert result.success is True
        assert result.subtotal == 800.0
        assert result.total_amount == 850.0
        order = _stored(result.order_id)
        assert order.shipping == 50.0
        assert order.tax == 0.0
        assert sorted((item.product_id, item.total) for item in order.items) == [("prod-A", 600.0), ("prod-B", 200.0)]

    def test_missing_method_defaults_to_cod(self, lifecycle, cart_items):
        result = lifecycle.place_order("user-001", cart_items)
        assert _stored(result.order_id).payment_method == PaymentMethod.COD.value

    def test_cod_limit_is_enforced_before_anything_is_saved(self, lifecycle, collaborators):
        items = [{"product_id": "prod-009", "unit_price": 950.0, "quantity": 1}]
        with pytest.raises(ValidationError):
            lifecycle.place_order("user-001", items, payment_method="COD")

        assert current_domain.repository_for(Order).find_for_user("user-001").total == 0
        assert collaborators.inventory.calls == []

    def test_cod_at_exactly_the_limit(self, lifecycle):
        items = [{"product_id": "prod-009", "unit_price": 900.0, "quantity": 1}]
        assert lifecycle.place_order("user-001", items, payment_method="COD").total_amount == 1000.0

    def test_inventory_failure_does_not_fail_the_order(self, lifecycle, collaborators, cart_items):
        collaborators.inventory.fail_for("prod-001")
        result = lifecycle.place_order("user-001", cart_items)
        assert result.success is True
        assert collaborators.inventory.stock == {"prod-002": -1}

    def test_cart_and_notification_failures_are_swallowed(self, lifecycle, collaborators, cart_items):
        collaborators.cart.should_fail = True
        collaborators.notifier.should_fail = True
        assert lifecycle.place_order("user-001", cart_items).success is True


class TestPlaceWalletOrder:
    def test_paid_from_wallet(self, lifecycle, collaborators, cart_items):
        collaborators.wallet.balances["user-001"] = 1000.0

        result = lifecycle.place_order("user-001", cart_items, payment_method="WALLET")

        assert result.success is True
        assert result.message == "Order placed successfully (Wallet)"
        assert result.status == OrderStatus.CONFIRMED.value
        assert result.payment_status == PaymentStatus.PAID.value
        assert collaborators.wallet.balances["user-001"] == 150.0

        order = _stored(result.order_id)
        assert order.paid_amount == 850.0
        assert order.payment_method == PaymentMethod.WALLET.value

    def test_paid_order_takes_stock_and_clears_cart(self, lifecycle, collaborators, cart_items):
        collaborators.wallet.balances["user-001"] = 1000.0
        lifecycle.place_order("user-001", cart_items, payment_method="wallet")
        assert len(collaborators.inventory.calls) == 2
        assert collaborators.cart.cleared == ["user-001"]

    def test_insufficient_balance_keeps_a_failed_order(self, lifecycle, collaborators, cart_items):
        collaborators.wallet.balances["user-001"] = 100.0

        result = lifecycle.place_order("user-001", cart_items, payment_method="WALLET")

        assert result.success is False
        assert result.message == "Insufficient amount to buy this product"
        assert result.status == OrderStatus.PAYMENT_FAILED.value
        assert result.payment_status == PaymentStatus.FAILED.value

        order = _stored(result.order_id)
        assert order.payment_failure_reason == "Insufficient amount to buy this product"
        assert collaborators.wallet.balances["user-001"] == 100.0

    def test_failed_charge_has_no_side_effects(self, lifecycle, collaborators, cart_items):
        lifecycle.place_order("user-001", cart_items, payment_method="WALLET")
        assert collaborators.inventory.calls == []
        assert collaborators.cart.cleared == []
        assert collaborators.notifier.sent == []

    def test_wallet_outage_is_a_failed_payment(self, lifecycle, collaborators, cart_items):
        collaborators.wallet.balances["user-001"] = 1000.0
        collaborators.wallet.configure(should_fail=True)

        result = lifecycle.place_order("user-001", cart_items, payment_method="WALLET")

        assert result.success is False
        assert result.status == OrderStatus.PAYMENT_FAILED.value

    def test_no_cod_limit_for_wallet(self, lifecycle, collaborators):
        collaborators.wallet.balances["user-001"] = 5000.0
        items = [{"product_id": "prod-009", "unit_price": 2000.0, "quantity": 1}]
        assert lifecycle.place_order("user-001", items, payment_method="WALLET").success is True


class TestPlaceOnlineOrder:
    def test_waits_for_payment(self, lifecycle, collaborators, cart_items):
        result = lifecycle.place_order("user-001", cart_items, payment_method="ONLINE")

        assert result.success is True
        assert result.message == "Order placed successfully"
        assert result.status == OrderStatus.PENDING.value
        assert collaborators.inventory.calls == []
        assert collaborators.cart.cleared == []

    def test_gateway_names_are_online_payments(self, lifecycle, cart_items):
        result = lifecycle.place_order("user-001", cart_items, payment_method="razorpay")
        assert _stored(result.order_id).payment_method == PaymentMethod.ONLINE.value


class TestPricingAtPlacement:
    def test_offers_are_applied(self, lifecycle, collaborators, cart_items):
        collaborators.offers.discounts["prod-001"] = 0.2
        result = lifecycle.place_order("user-001", cart_items, payment_method="ONLINE")
        assert result.subtotal == 650.0
        hub = next(item for item in result.items if item.product_id == "prod-001")
        assert hub.total == 400.0
        assert hub.unit_price == 250.0

    def test_coupon_discount(self, lifecycle, cart_items):
        result = lifecycle.place_order("user-001", cart_items, coupon_discount=50.0)
        assert result.total_amount == 800.0

    def test_delivery_charge_from_address(self, lifecycle, collaborators, cart_items):
        collaborators.addresses.add(Address(id="addr-001", pincode="682001", city="Kochi", state="Kerala"))
        collaborators.delivery.pin_charges["682001"] = 0.0

        result = lifecycle.place_order("user-001", cart_items, address_id="addr-001")

        assert result.total_amount == 750.0
        assert _stored(result.order_id).address_id == "addr-001"

    def test_address_outage_charges_default_delivery(self, lifecycle, collaborators, cart_items):
        collaborators.addresses.should_fail = True
        result = lifecycle.place_order("user-001", cart_items, address_id="addr-001")
        assert result.total_amount == 850.0


class TestPlacementValidation:
    @pytest.mark.parametrize("user_id", [None, "", "  "])
    def test_user_is_required(self, lifecycle, cart_items, user_id):
        with pytest.raises(ValidationError) as exc:
            lifecycle.place_order(user_id, cart_items)
        assert exc.value.messages["user_id"] == ["Missing userId"]

    def test_items_are_required(self, lifecycle):
        with pytest.raises(ValidationError) as exc:
            lifecycle.place_order("user-001", [])
        assert "items" in exc.value.messages

    @pytest.mark.parametrize("product_id", [None, "", "  "])
    def test_every_item_needs_a_product(self, lifecycle, collaborators, product_id):
        items = [
            {"product_id": "prod-001", "quantity": 1, "unit_price": 100.0},
            {"product_id": product_id, "quantity": 1, "unit_price": 100.0},
        ]
        with pytest.raises(ValidationError) as exc:
            lifecycle.place_order("user-001", items)
        assert exc.value.messages["items"] == ["Every item needs a productId"]
        assert collaborators.inventory.calls == []

    def test_item_without_product_key(self, lifecycle):
        with pytest.raises(ValidationError):
            lifecycle.place_order("user-001", [{"quantity": 1, "unit_price": 100.0}])
