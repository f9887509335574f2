"""Wallet charges and refunds for orders.

Both calls are synchronous and single-attempt. A failed charge is reported to
the caller as a declined outcome; a failed refund is logged and leaves the
order's payment status untouched.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from orders.clients.port import WalletPort
from orders.order.payment import RecordRefund
from orders.services.best_effort import BestEffort

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChargeOutcome:
    success: bool
    balance: float | None = None
    failure_reason: str | None = None


class PaymentBridge:
    def __init__(self, wallet: WalletPort) -> None:
        self.wallet = wallet

    def charge(self, user_id, order_id, amount) -> ChargeOutcome:
        result = None
        with BestEffort("wallet_charge", user_id=str(user_id), order_id=str(order_id), amount=amount) as attempt:
            result = self.wallet.pay(user_id, order_id, amount)

        if attempt.failed:
            return ChargeOutcome(success=False, failure_reason=str(attempt.error))
        if result is None or not result.success:
            logger.info(
                "wallet_charge_declined",
                user_id=str(user_id),
                order_id=str(order_id),
                amount=amount,
                message=result.message if result else None,
            )
            return ChargeOutcome(
                success=False,
                balance=result.balance if result else None,
                failure_reason=result.message if result else None,
            )
        return ChargeOutcome(success=True, balance=result.balance)

    def refund(self, order, amount, reason=None, source=None) -> bool:
        """Credit ``amount`` back to the customer's wallet and mark the order REFUNDED.

        Skipped (returns False, not an error) when there is nothing to refund
        or nobody to refund it to.
        """
        if amount is None or amount <= 0 or not order.user_id:
            logger.info("wallet_refund_skipped", order_id=str(order.id), amount=amount)
            return False

        reason = reason or f"Refund for order {order.order_number}"
        with BestEffort("wallet_refund", order_id=str(order.id), amount=amount, source=source) as attempt:
            self.wallet.credit(order.user_id, str(order.id), amount, reason, source)
        if attempt.failed:
            return False

        current_domain.process(
            RecordRefund(order_id=str(order.id), amount=amount, source=source),
            asynchronous=False,
        )
        logger.info("wallet_refund_issued", order_id=str(order.id), amount=amount, source=source)
        return True

    @staticmethod
    def refund_amount_for(order) -> float:
        return order.refundable_amount()
