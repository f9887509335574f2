"""Payment outcomes — commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from orders.domain import orders
from orders.order.order import Order


@orders.command(part_of="Order")
class AcceptCashOnDelivery:
    order_id = Identifier(required=True)


@orders.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    payment_reference = String(max_length=255)
    payment_method = String(max_length=20)
    amount = Float()  # Optional, defaults to total_amount


@orders.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@orders.command(part_of="Order")
class RecordPaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)


@orders.command(part_of="Order")
class RecordRefund:
    order_id = Identifier(required=True)
    amount = Float(required=True)
    source = String(max_length=50)


@orders.command_handler(part_of=Order)
class PaymentHandler:
    @handle(AcceptCashOnDelivery)
    def accept_cash_on_delivery(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.accept_cash_on_delivery()
        repo.add(order)

    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment(
            payment_reference=command.payment_reference,
            payment_method=command.payment_method,
            amount=command.amount,
        )
        repo.add(order)

    @handle(RecordPaymentFailure)
    def record_payment_failure(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_failure(command.reason)
        repo.add(order)

    @handle(RecordPaymentStatus)
    def record_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_payment_status(command.payment_status)
        repo.add(order)

    @handle(RecordRefund)
    def record_refund(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_refund(command.amount, source=command.source)
        repo.add(order)
