"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from orders.domain import orders
from orders.order.order import Order


@orders.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    user_email = String(max_length=255)
    address_id = Identifier()
    items = Text(required=True)  # JSON: list of priced item dicts
    subtotal = Float(required=True)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    total_amount = Float(required=True)
    payment_method = String(required=True, max_length=20)


@orders.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items

        pricing = {
            "subtotal": command.subtotal,
            "tax": command.tax or 0.0,
            "shipping": command.shipping or 0.0,
            "total_amount": command.total_amount,
        }

        order = Order.place(
            user_id=command.user_id,
            items_data=items_data,
            pricing=pricing,
            payment_method=command.payment_method,
            user_email=command.user_email,
            address_id=command.address_id,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
