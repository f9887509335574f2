"""Domain events for the Order aggregate.

Events are immutable facts recorded alongside every state change. They form
the audit trail of an order; nothing in this service reacts to them yet.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from orders.domain import orders


@orders.event(part_of="Order")
class OrderPlaced:
    """A checkout request was priced and persisted as a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True)
    subtotal = Float(required=True)
    tax = Float()
    shipping = Float()
    total_amount = Float(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@orders.event(part_of="Order")
class CodOrderAccepted:
    """A cash-on-delivery order was accepted; the amount is collected on delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    amount_due = Float(required=True)
    accepted_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_reference = String()
    payment_method = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderPaymentFailed:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    failed_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderRefunded:
    """The paid amount was credited back to the customer's wallet."""

    __version__ = 1

    order_id = Identifier(required=True)
    amount = Float(required=True)
    source = String()
    refunded_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    cancelled_by = String(required=True)
    cancelled_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderItemCancelled:
    """A single line was cancelled and the order totals were recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    reason = String()
    new_subtotal = Float(required=True)
    new_total = Float(required=True)
    cancelled_at = DateTime(required=True)


@orders.event(part_of="Order")
class ReturnRequested:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    requested_at = DateTime(required=True)


@orders.event(part_of="Order")
class ReturnRequestWithdrawn:
    __version__ = 1

    order_id = Identifier(required=True)
    withdrawn_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderReturned:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    returned_at = DateTime(required=True)


@orders.event(part_of="Order")
class ReplacementRequested:
    __version__ = 1

    order_id = Identifier(required=True)
    reason = String()
    requested_at = DateTime(required=True)


@orders.event(part_of="Order")
class ReplacementRequestWithdrawn:
    __version__ = 1

    order_id = Identifier(required=True)
    withdrawn_at = DateTime(required=True)


@orders.event(part_of="Order")
class OrderStatusChanged:
    """An administrator set the order status directly."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_at = DateTime(required=True)
