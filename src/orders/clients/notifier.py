"""Notification adapter used when no mail transport is configured.

Order notifications are written to the log instead of being delivered.
"""

import structlog

from orders.clients.port import NotificationPort

logger = structlog.get_logger(__name__)


class LoggingNotifier(NotificationPort):
    def send_order_confirmation(self, order) -> None:
        logger.info(
            "order_confirmation_skipped",
            order_id=str(order.id),
            order_number=order.order_number,
            recipient=order.user_email,
        )

    def send_payment_failed_notification(self, order) -> None:
        logger.info(
            "payment_failed_notification_skipped",
            order_id=str(order.id),
            order_number=order.order_number,
            recipient=order.user_email,
            reason=order.payment_failure_reason,
        )
