"""Orders bounded context — order placement, payment, cancellation, returns and invoicing.

Owns the Order aggregate and its lifecycle. Inventory, wallet, offers, delivery
charges, addresses, carts, catalog and notifications belong to other services and
are reached through the ports in ``orders.clients``.
"""

import structlog
from protean.domain import Domain

orders = Domain(name="orders")

logger = structlog.get_logger(__name__)
