"""Failure boundary for calls to services the order engine does not own.

Inventory, wallet, cart, address, catalog and notification calls must never
abort an order operation or roll back state that has already been committed.
Each such call runs inside its own ``BestEffort`` block: an exception is logged
with the operation name and context, then suppressed.

    with BestEffort("stock_decrement", order_id=order.id, product_id=pid) as attempt:
        inventory.decrement(pid, qty)
    if attempt.failed:
        ...
"""

import structlog

logger = structlog.get_logger(__name__)


class BestEffort:
    """Context manager that logs and swallows ``Exception`` subclasses."""

    def __init__(self, operation: str, level: str = "warning", **context) -> None:
        self.operation = operation
        self.level = level
        self.context = context
        self.error: Exception | None = None

    def __enter__(self) -> "BestEffort":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            return False
        if not isinstance(exc, Exception):
            return False

        self.error = exc
        getattr(logger, self.level)(
            "best_effort_call_failed",
            operation=self.operation,
            error=str(exc),
            error_type=type(exc).__name__,
            **self.context,
        )
        return True

    @property
    def failed(self) -> bool:
        return self.error is not None
