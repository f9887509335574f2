"""Order aggregate (CQRS) — the core of the orders domain.

An Order is created at checkout with a snapshot of every line item and its
price. It is never deleted: cancellation, returns and replacements are status
transitions, and cancelled lines stay on the order with a ``cancelled`` flag.

State Machine:
    PENDING → CONFIRMED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
    PENDING/CONFIRMED → CANCELLED (customer), any but CANCELLED/DELIVERED (admin)
    PENDING → PAYMENT_FAILED (wallet charge declined)
    DELIVERED → RETURN_REQUESTED → RETURNED (or back to DELIVERED)
    DELIVERED → REPLACEMENT_REQUESTED (or back to DELIVERED)

Shipping progress, PAID, PACKED and REPLACED are only ever set by an
administrator through ``change_status``.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from orders.domain import orders
from orders.order.events import (
    CodOrderAccepted,
    OrderCancelled,
    OrderItemCancelled,
    OrderPaid,
    OrderPaymentFailed,
    OrderPlaced,
    OrderRefunded,
    OrderReturned,
    OrderStatusChanged,
    ReplacementRequested,
    ReplacementRequestWithdrawn,
    ReturnRequested,
    ReturnRequestWithdrawn,
)
from orders.pricing.recomputation import recompute_after_cancellation


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    PACKED = "PACKED"
    SHIPPED = "SHIPPED"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    RETURN_REQUESTED = "RETURN_REQUESTED"
    REPLACEMENT_REQUESTED = "REPLACEMENT_REQUESTED"
    REPLACED = "REPLACED"

    @classmethod
    def parse(cls, raw):
        """Parse an admin-supplied status string, case-insensitively."""
        if raw is None or not str(raw).strip():
            raise ValidationError({"status": ["status required"]})
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise ValidationError({"status": [f"invalid status: {raw}"]}) from None


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    @classmethod
    def normalize(cls, raw):
        """Map a gateway status onto ours. ``SUCCESS`` is stored as ``PAID``."""
        value = str(raw or "").strip().upper()
        if value == "SUCCESS":
            value = cls.PAID.value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError({"payment_status": [f"invalid payment status: {raw}"]}) from None


class PaymentMethod(Enum):
    COD = "COD"
    WALLET = "WALLET"
    ONLINE = "ONLINE"

    @classmethod
    def normalize(cls, raw):
        """Missing methods default to COD; unknown ones are online gateways."""
        if raw is None or not str(raw).strip():
            return cls.COD
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            return cls.ONLINE


class CancellationActor(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SYSTEM = "SYSTEM"


_CUSTOMER_CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED}
_ADMIN_UNCANCELLABLE = {OrderStatus.CANCELLED, OrderStatus.DELIVERED}
_ADMIN_RETURNABLE = {OrderStatus.RETURN_REQUESTED, OrderStatus.DELIVERED}
_CLOSED = {OrderStatus.CANCELLED, OrderStatus.RETURNED}

PAYMENT_METHOD_LABELS = {
    PaymentMethod.COD.value: "Cash on Delivery",
    PaymentMethod.WALLET.value: "Wallet Payment",
    PaymentMethod.ONLINE.value: "Online Payment",
}


def _new_order_number():
    return f"ORD-{uuid4().hex[:12].upper()}"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@orders.entity(part_of="Order")
class OrderItem:
    """A line of an order with the product details captured at checkout.

    ``total`` is the line price after offers. When it is missing or zero the
    line is worth ``unit_price * quantity``.
    """

    product_id = Identifier(required=True)
    product_title = String(max_length=255)
    product_image = String(max_length=1000)
    unit_price = Float(default=0.0, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    total = Float(default=0.0, min_value=0.0)
    cancelled = Boolean(default=False)
    cancel_reason = String(max_length=500)

    def line_total(self):
        if self.total and self.total > 0:
            return self.total
        return round((self.unit_price or 0.0) * (self.quantity or 0), 2)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@orders.aggregate
class Order:
    order_number = String(required=True, max_length=32, unique=True)
    user_id = Identifier(required=True)
    user_email = String(max_length=255)
    address_id = Identifier()
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    paid_amount = Float(default=0.0, min_value=0.0)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_reference = String(max_length=255)
    payment_failure_reason = String(max_length=500)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    cancel_reason = String(max_length=500)  # also holds return/replacement reasons
    admin_note = String(max_length=1000)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()

    @invariant.post
    def money_must_not_be_negative(self):
        for name in ("subtotal", "tax", "shipping", "total_amount", "paid_amount"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError({name: ["Amount cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, items_data, pricing, payment_method, user_email=None, address_id=None):
        """Create a new PENDING order from priced checkout data.

        Args:
            user_id: The customer placing the order.
            items_data: List of dicts with product_id, product_title,
                        product_image, unit_price, quantity, total.
            pricing: Dict with subtotal, tax, shipping, total_amount.
            payment_method: A ``PaymentMethod`` value.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=_new_order_number(),
            user_id=user_id,
            user_email=user_email,
            address_id=address_id,
            items=[OrderItem(**item_data) for item_data in items_data],
            subtotal=round(pricing.get("subtotal", 0.0), 2),
            tax=round(pricing.get("tax", 0.0), 2),
            shipping=round(pricing.get("shipping", 0.0), 2),
            total_amount=round(pricing.get("total_amount", 0.0), 2),
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                payment_method=payment_method,
                subtotal=order.subtotal,
                tax=order.tax,
                shipping=order.shipping,
                total_amount=order.total_amount,
                item_count=len(items_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _assert_status_in(self, allowed, message):
        if OrderStatus(self.status) not in allowed:
            raise ValidationError({"status": [message]})

    def _touch(self):
        now = datetime.now(UTC)
        self.updated_at = now
        return now

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError(f"Order item {item_id} not found")
        return item

    def active_items(self):
        return [item for item in self.items if not item.cancelled]

    def refundable_amount(self):
        """Paid amount when recorded, else the order total."""
        if self.paid_amount and self.paid_amount > 0:
            return self.paid_amount
        return self.total_amount or 0.0

    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def accept_cash_on_delivery(self):
        """Record the amount to be collected on delivery. Payment stays PENDING."""
        now = self._touch()
        self.payment_status = PaymentStatus.PENDING.value
        self.paid_amount = self.total_amount
        self.paid_at = now

        self.raise_(
            CodOrderAccepted(
                order_id=str(self.id),
                amount_due=self.total_amount,
                accepted_at=now,
            )
        )

    def record_payment(self, payment_reference=None, payment_method=None, amount=None):
        """Record a captured payment and confirm the order."""
        now = self._touch()
        method = PaymentMethod.normalize(payment_method or self.payment_method).value
        paid = self.total_amount if amount is None else round(amount, 2)

        self.payment_status = PaymentStatus.PAID.value
        self.payment_reference = payment_reference
        self.payment_method = method
        self.paid_amount = paid
        self.paid_at = now
        self.payment_failure_reason = None
        self.status = OrderStatus.CONFIRMED.value

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_reference=payment_reference,
                payment_method=method,
                amount=paid,
                paid_at=now,
            )
        )

    def record_payment_failure(self, reason):
        now = self._touch()
        self.payment_status = PaymentStatus.FAILED.value
        self.payment_failure_reason = reason
        self.status = OrderStatus.PAYMENT_FAILED.value

        self.raise_(
            OrderPaymentFailed(
                order_id=str(self.id),
                reason=reason,
                failed_at=now,
            )
        )

    def record_payment_status(self, payment_status):
        """Apply a bare payment status reported by a gateway callback."""
        status = PaymentStatus.normalize(payment_status)
        if status == PaymentStatus.PAID:
            self.record_payment(self.payment_reference, self.payment_method, self.total_amount)
            return
        if status == PaymentStatus.FAILED:
            self.record_payment_failure(self.payment_failure_reason)
            return

        self._touch()
        self.payment_status = status.value

    def record_refund(self, amount, source=None):
        now = self._touch()
        self.payment_status = PaymentStatus.REFUNDED.value

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                amount=round(amount, 2),
                source=source,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, reason, cancelled_by=CancellationActor.CUSTOMER.value):
        """Cancel the whole order.

        Customers may cancel only PENDING or CONFIRMED orders. Administrators
        may cancel anything that is not already CANCELLED or DELIVERED.
        """
        current = OrderStatus(self.status)
        if cancelled_by == CancellationActor.ADMIN.value:
            if current in _ADMIN_UNCANCELLABLE:
                raise ValidationError({"status": [f"Cannot cancel order in {current.value} state"]})
        elif current not in _CUSTOMER_CANCELLABLE:
            raise ValidationError({"status": ["Only pending or confirmed orders can be cancelled"]})

        now = self._touch()
        self.status = OrderStatus.CANCELLED.value
        self.cancel_reason = reason

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def cancel_item(self, item_id, reason=None):
        """Cancel one line and recompute the totals.

        Returns False when the line was already cancelled (nothing changes).
        Cancelling the last active line cancels the whole order.
        """
        item = self.find_item(item_id)
        if item.cancelled:
            return False
        self._assert_status_in(
            set(OrderStatus) - _CLOSED,
            f"Cannot cancel items of an order in {self.status} state",
        )

        item.cancelled = True
        item.cancel_reason = reason

        new_subtotal, new_total = recompute_after_cancellation(
            [i.line_total() for i in self.active_items()],
            self.subtotal,
            self.tax,
            self.shipping,
            self.total_amount,
        )
        self.subtotal = new_subtotal
        self.total_amount = new_total
        now = self._touch()

        self.raise_(
            OrderItemCancelled(
                order_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
                reason=reason,
                new_subtotal=new_subtotal,
                new_total=new_total,
                cancelled_at=now,
            )
        )

        if not self.active_items():
            self.status = OrderStatus.CANCELLED.value
            self.cancel_reason = reason
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    reason=reason,
                    cancelled_by=CancellationActor.SYSTEM.value,
                    cancelled_at=now,
                )
            )
        return True

    # -------------------------------------------------------------------
    # Returns & Replacements
    # -------------------------------------------------------------------
    def request_return(self, reason):
        self._assert_status_in({OrderStatus.DELIVERED}, "Only delivered orders can be returned")
        now = self._touch()
        self.status = OrderStatus.RETURN_REQUESTED.value
        self.cancel_reason = reason

        self.raise_(ReturnRequested(order_id=str(self.id), reason=reason, requested_at=now))

    def withdraw_return_request(self):
        self._assert_status_in({OrderStatus.RETURN_REQUESTED}, "No pending return request for this order")
        now = self._touch()
        self.status = OrderStatus.DELIVERED.value

        self.raise_(ReturnRequestWithdrawn(order_id=str(self.id), withdrawn_at=now))

    def mark_returned(self, reason):
        self._assert_status_in(_ADMIN_RETURNABLE, "Return can be processed only after request")
        now = self._touch()
        self.status = OrderStatus.RETURNED.value
        self.cancel_reason = reason

        self.raise_(OrderReturned(order_id=str(self.id), reason=reason, returned_at=now))

    def request_replacement(self, reason):
        self._assert_status_in({OrderStatus.DELIVERED}, "Only delivered orders can be replaced")
        now = self._touch()
        self.status = OrderStatus.REPLACEMENT_REQUESTED.value
        self.cancel_reason = reason

        self.raise_(ReplacementRequested(order_id=str(self.id), reason=reason, requested_at=now))

    def withdraw_replacement_request(self):
        self._assert_status_in(
            {OrderStatus.REPLACEMENT_REQUESTED},
            "No pending replacement request for this order",
        )
        now = self._touch()
        self.status = OrderStatus.DELIVERED.value

        self.raise_(ReplacementRequestWithdrawn(order_id=str(self.id), withdrawn_at=now))

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def change_status(self, new_status, note=None):
        """Set the status directly, without transition checks."""
        previous = self.status
        now = self._touch()
        self.status = new_status.value
        if note and note.strip():
            self.admin_note = note

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=new_status.value,
                note=note,
                changed_at=now,
            )
        )
