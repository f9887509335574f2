"""Orders API package."""

from orders.api.routes import admin_router, delivery_router, order_router

__all__ = ["order_router", "admin_router", "delivery_router"]
