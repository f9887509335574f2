"""Outward views of an Order.

Line items missing a title, image or price are filled in from the catalog on
the way out. Catalog failures never fail the response; the stored (possibly
incomplete) fields are returned instead.
"""

from datetime import datetime
from urllib.parse import quote

from pydantic import BaseModel, Field

from orders.clients.port import CatalogPort
from orders.services.best_effort import BestEffort


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_title: str | None = None
    product_image: str | None = None
    unit_price: float = 0.0
    quantity: int = 0
    total: float = 0.0
    cancelled: bool = False
    cancel_reason: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    user_email: str | None = None
    address_id: str | None = None
    status: str
    payment_method: str | None = None
    payment_status: str | None = None
    payment_reference: str | None = None
    payment_failure_reason: str | None = None
    cancel_reason: str | None = None
    admin_note: str | None = None
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    total_amount: float = 0.0
    paid_amount: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    paid_at: datetime | None = None
    total_items: int = 0
    items: list[OrderItemResponse] = Field(default_factory=list)


class PlaceOrderResponse(BaseModel):
    """Result of a lifecycle operation: success flag, message and the order summary."""

    success: bool
    message: str
    order_id: str
    order_number: str
    status: str
    payment_status: str | None = None
    subtotal: float = 0.0
    total_amount: float = 0.0
    created_at: datetime | None = None
    total_items: int = 0
    items: list[OrderItemResponse] = Field(default_factory=list)


class OrderPage(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    size: int


# ---------------------------------------------------------------------------
# Projector
# ---------------------------------------------------------------------------
class ResponseProjector:
    def __init__(self, catalog: CatalogPort, catalog_base_url: str) -> None:
        self.catalog = catalog
        self.catalog_base_url = catalog_base_url.rstrip("/")

    def image_url(self, image_name: str | None) -> str | None:
        """Absolute URL for a stored image name. Absolute URLs pass through."""
        if not image_name or not image_name.strip():
            return None
        if image_name.startswith(("http://", "https://")):
            return image_name
        return f"{self.catalog_base_url}/public/products/images/{quote(image_name)}"

    def item_response(self, item) -> OrderItemResponse:
        title = item.product_title
        image = item.product_image
        unit_price = item.unit_price or 0.0
        quantity = item.quantity or 0
        total = item.total or 0.0

        need_price = unit_price <= 0
        need_image = not image or not image.strip()
        need_title = not title or not title.strip()

        if need_price or need_image or need_title:
            with BestEffort("catalog_enrichment", level="debug", product_id=str(item.product_id)):
                product = self.catalog.get_by_id(item.product_id)
                if product is not None:
                    if need_price and product.price is not None:
                        unit_price = product.price
                        total = round(product.price * quantity, 2)
                    if need_image and product.image_names:
                        image = product.image_names[0]
                    if need_title and product.title:
                        title = product.title

        if total <= 0:
            total = round(unit_price * quantity, 2)

        return OrderItemResponse(
            id=str(item.id),
            product_id=str(item.product_id),
            product_title=title,
            product_image=self.image_url(image),
            unit_price=unit_price,
            quantity=quantity,
            total=total,
            cancelled=bool(item.cancelled),
            cancel_reason=item.cancel_reason,
        )

    @staticmethod
    def _fallback(stored, items):
        """Stored amount, or the sum of active line totals when nothing is stored."""
        if stored and stored > 0:
            return stored
        return round(sum(i.total for i in items if not i.cancelled), 2)

    def to_response(self, order) -> OrderResponse:
        items = [self.item_response(item) for item in order.items]
        return OrderResponse(
            id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            user_email=order.user_email,
            address_id=str(order.address_id) if order.address_id is not None else None,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_reference=order.payment_reference,
            payment_failure_reason=order.payment_failure_reason,
            cancel_reason=order.cancel_reason,
            admin_note=order.admin_note,
            subtotal=self._fallback(order.subtotal, items),
            tax=order.tax or 0.0,
            shipping=order.shipping or 0.0,
            total_amount=self._fallback(order.total_amount, items),
            paid_amount=order.paid_amount or 0.0,
            created_at=order.created_at,
            updated_at=order.updated_at,
            paid_at=order.paid_at,
            total_items=len(items),
            items=items,
        )

    def place_result(self, order, success: bool, message: str) -> PlaceOrderResponse:
        items = [self.item_response(item) for item in order.items]
        return PlaceOrderResponse(
            success=success,
            message=message,
            order_id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            payment_status=order.payment_status,
            subtotal=order.subtotal or 0.0,
            total_amount=self._fallback(order.total_amount, items),
            created_at=order.created_at,
            total_items=len(items),
            items=items,
        )
