"""Inventory adjustments for placed, paid, cancelled and returned orders.

Every product is adjusted inside its own failure boundary, so one product's
inventory error never blocks adjusting the others.
"""

from orders.clients.port import InventoryPort
from orders.services.best_effort import BestEffort


class StockCoordinator:
    def __init__(self, inventory: InventoryPort) -> None:
        self.inventory = inventory

    def decrement(self, product_id, quantity, **context) -> bool:
        with BestEffort("stock_decrement", product_id=str(product_id), quantity=quantity, **context) as attempt:
            self.inventory.decrement(product_id, quantity)
        return not attempt.failed

    def increment(self, product_id, quantity, **context) -> bool:
        with BestEffort("stock_increment", product_id=str(product_id), quantity=quantity, **context) as attempt:
            self.inventory.increment(product_id, quantity)
        return not attempt.failed

    def decrement_all(self, order) -> list[str]:
        """Take stock for every active line. Returns the product ids that failed."""
        return [
            str(item.product_id)
            for item in order.active_items()
            if not self.decrement(item.product_id, item.quantity, order_id=str(order.id))
        ]

    def increment_all(self, order) -> list[str]:
        """Put back stock for every active line. Returns the product ids that failed.

        Lines cancelled individually were restocked at the time and are skipped.
        """
        return [
            str(item.product_id)
            for item in order.active_items()
            if not self.increment(item.product_id, item.quantity, order_id=str(order.id))
        ]
