"""Order lifecycle orchestration.

Every change to an order is one command processed synchronously in its own
unit of work. Calls to inventory, wallet, cart, address and notification
services happen between those commands, outside any transaction, each inside
its own ``BestEffort`` boundary. A downstream failure is logged and never
rolls back an order change that has already been committed.

For cash-on-delivery and wallet orders the order of effects is fixed:
payment, stock, paid state, cart clear, notification.
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from orders.clients import Collaborators, get_collaborators
from orders.config import FulfillmentSettings, get_settings
from orders.invoice.composer import compose
from orders.invoice.renderer import render_pdf
from orders.order.administration import ChangeOrderStatus
from orders.order.cancellation import CancelOrder, CancelOrderItem
from orders.order.order import CancellationActor, Order, OrderStatus, PaymentMethod
from orders.order.payment import (
    AcceptCashOnDelivery,
    RecordPayment,
    RecordPaymentFailure,
    RecordPaymentStatus,
)
from orders.order.placement import PlaceOrder
from orders.order.replacement import RequestReplacement, WithdrawReplacementRequest
from orders.order.responses import OrderPage, ResponseProjector
from orders.order.returns import ApproveReturn, RequestReturn, WithdrawReturnRequest
from orders.pricing.calculator import FlatRateTax, PricingCalculator
from orders.services.best_effort import BestEffort
from orders.services.payment_bridge import PaymentBridge
from orders.services.stock import StockCoordinator

logger = structlog.get_logger(__name__)

INSUFFICIENT_FUNDS = "Insufficient amount to buy this product"


class OrderLifecycle:
    def __init__(
        self,
        collaborators: Collaborators | None = None,
        settings: FulfillmentSettings | None = None,
    ) -> None:
        self.collaborators = collaborators or get_collaborators()
        self.settings = settings or get_settings()

        self.calculator = PricingCalculator(
            offers=self.collaborators.offers,
            delivery=self.collaborators.delivery,
            tax_policy=FlatRateTax(self.settings.tax_rate),
            cod_limit=self.settings.cod_limit,
            default_delivery_charge=self.settings.default_delivery_charge,
        )
        self.stock = StockCoordinator(self.collaborators.inventory)
        self.payments = PaymentBridge(self.collaborators.wallet)
        self.projector = ResponseProjector(self.collaborators.catalog, self.settings.endpoints.catalog_url)

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @staticmethod
    def _repo():
        return current_domain.repository_for(Order)

    @staticmethod
    def _process(command):
        return current_domain.process(command, asynchronous=False)

    def _load(self, order_id):
        return self._repo().get(order_id)

    def _resolve_address(self, address_id):
        if address_id is None or str(address_id).strip() == "":
            return None
        with BestEffort("address_lookup", address_id=str(address_id)):
            return self.collaborators.addresses.get_by_id(address_id)
        return None

    def _clear_cart(self, order):
        with BestEffort("cart_clear", order_id=str(order.id), user_id=str(order.user_id)):
            self.collaborators.cart.clear(order.user_id)

    def _notify_confirmation(self, order):
        with BestEffort("order_confirmation", order_id=str(order.id)):
            self.collaborators.notifier.send_order_confirmation(order)

    def _notify_payment_failed(self, order):
        with BestEffort("payment_failed_notification", order_id=str(order.id)):
            self.collaborators.notifier.send_payment_failed_notification(order)

    def _refund_if_paid(self, order, reason, source):
        if not order.is_paid():
            return False
        return self.payments.refund(order, self.payments.refund_amount_for(order), reason, source)

    # -------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------
    def place_order(self, user_id, items, payment_method=None, address_id=None, user_email=None, coupon_discount=0.0):
        """Price, persist and settle a checkout request.

        Args:
            user_id: The customer placing the order (required).
            items: List of dicts with product_id, quantity, unit_price and
                   optionally product_title, product_image.
            payment_method: ``COD`` (default), ``WALLET`` or an online gateway.
            address_id: Shipping address id in the user service.
            user_email: Address for notifications.
            coupon_discount: Absolute discount of an already-validated coupon.

        Returns:
            PlaceOrderResponse. ``success`` is False only when a wallet charge
            was declined; the order is kept in PAYMENT_FAILED.
        """
        if user_id is None or str(user_id).strip() == "":
            raise ValidationError({"user_id": ["Missing userId"]})
        if not items:
            raise ValidationError({"items": ["Order must contain at least one item"]})
        if any(not str(item.get("product_id") or "").strip() for item in items):
            raise ValidationError({"items": ["Every item needs a productId"]})

        method = PaymentMethod.normalize(payment_method)
        address = self._resolve_address(address_id)
        pricing = self.calculator.price(items, address, coupon_discount, method)

        items_data = [
            {
                "product_id": str(item["product_id"]),
                "product_title": item.get("product_title"),
                "product_image": item.get("product_image"),
                "unit_price": line.unit_price,
                "quantity": line.quantity,
                "total": line.total,
            }
            for item, line in zip(items, pricing.lines, strict=True)
        ]

        order_id = self._process(
            PlaceOrder(
                user_id=user_id,
                user_email=user_email,
                address_id=address_id,
                items=json.dumps(items_data),
                subtotal=pricing.subtotal,
                tax=pricing.tax,
                shipping=pricing.shipping,
                total_amount=pricing.total,
                payment_method=method.value,
            )
        )
        order = self._load(order_id)
        logger.info(
            "order_placed",
            order_id=order_id,
            order_number=order.order_number,
            payment_method=method.value,
            total_amount=order.total_amount,
        )

        if method == PaymentMethod.COD:
            return self._settle_cash_on_delivery(order)
        if method == PaymentMethod.WALLET:
            return self._settle_wallet(order)

        self._notify_confirmation(order)
        return self.projector.place_result(order, True, "Order placed successfully")

    def _settle_cash_on_delivery(self, order):
        self.stock.decrement_all(order)
        self._process(AcceptCashOnDelivery(order_id=str(order.id)))
        order = self._load(order.id)
        self._clear_cart(order)
        self._notify_confirmation(order)
        return self.projector.place_result(order, True, "Order placed successfully (COD)")

    def _settle_wallet(self, order):
        outcome = self.payments.charge(order.user_id, str(order.id), order.total_amount)
        if not outcome.success:
            logger.warning("wallet_payment_failed", order_id=str(order.id), reason=outcome.failure_reason)
            self._process(RecordPaymentFailure(order_id=str(order.id), reason=INSUFFICIENT_FUNDS))
            order = self._load(order.id)
            return self.projector.place_result(order, False, INSUFFICIENT_FUNDS)

        self.stock.decrement_all(order)
        self._process(
            RecordPayment(
                order_id=str(order.id),
                payment_method=PaymentMethod.WALLET.value,
                amount=order.total_amount,
            )
        )
        order = self._load(order.id)
        self._clear_cart(order)
        self._notify_confirmation(order)
        return self.projector.place_result(order, True, "Order placed successfully (Wallet)")

    # -------------------------------------------------------------------
    # Payment callbacks
    # -------------------------------------------------------------------
    def mark_order_paid(self, order_id, payment_reference=None, payment_method=None, amount=None) -> bool:
        """Confirm an online payment. Returns False when the order does not exist."""
        try:
            order = self._load(order_id)
        except ObjectNotFoundError:
            logger.warning("mark_paid_unknown_order", order_id=str(order_id))
            return False

        self.stock.decrement_all(order)
        self._process(
            RecordPayment(
                order_id=str(order.id),
                payment_reference=payment_reference,
                payment_method=payment_method,
                amount=amount,
            )
        )
        order = self._load(order.id)
        self._clear_cart(order)
        self._notify_confirmation(order)
        return True

    def mark_order_payment_failed(self, order_id, reason=None) -> bool:
        self._process(RecordPaymentFailure(order_id=str(order_id), reason=reason))
        self._notify_payment_failed(self._load(order_id))
        return True

    def update_payment_status(self, order_id, payment_status):
        """Apply a bare status from a payment gateway (``SUCCESS`` means ``PAID``)."""
        self._process(RecordPaymentStatus(order_id=str(order_id), payment_status=payment_status))
        return self.projector.to_response(self._load(order_id))

    def get_payable_amount(self, order_id):
        try:
            return self._load(order_id).total_amount
        except ObjectNotFoundError:
            return None

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def _cancel(self, order_id, reason, actor):
        self._process(CancelOrder(order_id=str(order_id), reason=reason, cancelled_by=actor.value))
        order = self._load(order_id)
        self.stock.increment_all(order)
        self._refund_if_paid(order, "Order cancellation", "ORDER_CANCELLED")
        return self.projector.place_result(self._load(order_id), True, "Order cancelled successfully")

    def cancel_order(self, order_id, reason=None):
        """Customer cancellation, allowed only while PENDING or CONFIRMED."""
        return self._cancel(order_id, reason, CancellationActor.CUSTOMER)

    def cancel_order_by_admin(self, order_id, reason=None):
        return self._cancel(order_id, reason, CancellationActor.ADMIN)

    def cancel_order_item(self, order_id, item_id, reason=None):
        changed = self._process(CancelOrderItem(order_id=str(order_id), item_id=str(item_id), reason=reason))
        order = self._load(order_id)
        if not changed:
            return self.projector.place_result(order, True, "Order item already cancelled")

        item = order.find_item(item_id)
        self.stock.increment(item.product_id, item.quantity, order_id=str(order.id))

        if order.status != OrderStatus.CANCELLED.value:
            return self.projector.place_result(order, True, "Order item cancelled")

        self._refund_if_paid(order, "Order cancellation", "ORDER_CANCELLED")
        return self.projector.place_result(self._load(order_id), True, "Order cancelled (all items cancelled)")

    # -------------------------------------------------------------------
    # Returns & Replacements
    # -------------------------------------------------------------------
    def request_return(self, order_id, reason=None):
        self._process(RequestReturn(order_id=str(order_id), reason=reason))
        return self.projector.place_result(self._load(order_id), True, "Return request submitted")

    def cancel_return_request(self, order_id):
        self._process(WithdrawReturnRequest(order_id=str(order_id)))
        return self.projector.place_result(self._load(order_id), True, "Return request cancelled")

    def return_order_by_admin(self, order_id, reason=None):
        self._process(ApproveReturn(order_id=str(order_id), reason=reason or "Return approved by admin"))
        order = self._load(order_id)
        self.stock.increment_all(order)
        self._refund_if_paid(order, "Order return refund", "RETURN_APPROVED")
        return self.projector.place_result(self._load(order_id), True, "Return approved and refunded to wallet")

    def request_replacement(self, order_id, reason=None):
        self._process(RequestReplacement(order_id=str(order_id), reason=reason))
        return self.projector.place_result(self._load(order_id), True, "Replacement request submitted")

    def cancel_replacement_request(self, order_id):
        self._process(WithdrawReplacementRequest(order_id=str(order_id)))
        return self.projector.place_result(self._load(order_id), True, "Replacement request cancelled")

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def update_status_admin(self, order_id, status, note=None):
        """Set any status. Moving into RETURNED goes through return approval."""
        target = OrderStatus.parse(status)
        order = self._load(order_id)

        if target == OrderStatus.RETURNED and OrderStatus(order.status) in (
            OrderStatus.RETURN_REQUESTED,
            OrderStatus.DELIVERED,
        ):
            logger.info("admin_return_approval", order_id=str(order_id), note=note)
            return self.return_order_by_admin(order_id, note)

        self._process(ChangeOrderStatus(order_id=str(order_id), status=target.value, note=note))
        logger.info("admin_status_change", order_id=str(order_id), status=target.value, note=note)
        return self.projector.place_result(self._load(order_id), True, "Order status updated successfully")

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_order(self, order_id):
        return self.projector.to_response(self._load(order_id))

    def get_order_by_identifier(self, identifier):
        """Look an order up by internal id, falling back to its order number."""
        try:
            return self.get_order(identifier)
        except ObjectNotFoundError:
            order = self._repo().find_by_order_number(str(identifier))
        if order is None:
            raise ObjectNotFoundError(f"Order {identifier} not found")
        return self.projector.to_response(order)

    def _page(self, results, page, size):
        return OrderPage(
            items=[self.projector.to_response(order) for order in results.items],
            total=results.total,
            page=page,
            size=size,
        )

    def list_orders_for_user(self, user_id, page=0, size=20):
        results = self._repo().find_for_user(user_id, offset=page * size, limit=size)
        return self._page(results, page, size)

    def list_for_admin(self, page=0, size=20, status=None, query=None):
        if status:
            status = OrderStatus.parse(status).value
        results = self._repo().search(status=status, number_fragment=query, offset=page * size, limit=size)
        return self._page(results, page, size)

    # -------------------------------------------------------------------
    # Invoices
    # -------------------------------------------------------------------
    def compose_invoice(self, order_id):
        order = self._load(order_id)
        address = self._resolve_address(order.address_id)
        return compose(
            order,
            address,
            shop_name=self.settings.shop_name,
            shop_lines=self.settings.shop_lines,
            currency=self.settings.currency,
        )

    def invoice_for(self, order_id):
        """Return ``(filename, pdf_bytes)`` for an order's invoice."""
        document = self.compose_invoice(order_id)
        return document.filename, render_pdf(document)
