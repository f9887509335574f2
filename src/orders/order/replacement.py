"""Replacement requests — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from orders.domain import orders
from orders.order.order import Order


@orders.command(part_of="Order")
class RequestReplacement:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@orders.command(part_of="Order")
class WithdrawReplacementRequest:
    order_id = Identifier(required=True)


@orders.command_handler(part_of=Order)
class ReplacementHandler:
    @handle(RequestReplacement)
    def request_replacement(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.request_replacement(command.reason)
        repo.add(order)

    @handle(WithdrawReplacementRequest)
    def withdraw_replacement_request(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.withdraw_replacement_request()
        repo.add(order)
