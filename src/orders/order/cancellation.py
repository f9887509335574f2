"""Order and order-item cancellation — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orders.domain import orders
from orders.order.order import CancellationActor, Order


@orders.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = String(
        choices=CancellationActor,
        default=CancellationActor.CUSTOMER.value,
    )


@orders.command(part_of="Order")
class CancelOrderItem:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    reason = String(max_length=500)


@orders.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(
            reason=command.reason,
            cancelled_by=command.cancelled_by,
        )
        repo.add(order)

    @handle(CancelOrderItem)
    def cancel_order_item(self, command):
        """Returns False when the item had already been cancelled."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        changed = order.cancel_item(command.item_id, reason=command.reason)
        if changed:
            repo.add(order)
        return changed
