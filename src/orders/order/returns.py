"""Order returns — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orders.domain import orders
from orders.order.order import Order


@orders.command(part_of="Order")
class RequestReturn:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@orders.command(part_of="Order")
class WithdrawReturnRequest:
    order_id = Identifier(required=True)


@orders.command(part_of="Order")
class ApproveReturn:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@orders.command_handler(part_of=Order)
class ReturnHandler:
    @handle(RequestReturn)
    def request_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.request_return(command.reason)
        repo.add(order)

    @handle(WithdrawReturnRequest)
    def withdraw_return_request(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.withdraw_return_request()
        repo.add(order)

    @handle(ApproveReturn)
    def approve_return(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_returned(command.reason)
        repo.add(order)
