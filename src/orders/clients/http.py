"""HTTP adapters for the collaborator ports.

Every adapter receives the ``ServiceEndpoints`` it needs at construction time
and uses the configured per-call timeout. HTTP errors and timeouts surface as
``requests`` exceptions; callers decide whether a failure is fatal.
"""

from urllib.parse import quote

import requests
import structlog

from orders.clients.port import (
    Address,
    AddressPort,
    BestOffer,
    CartPort,
    CatalogPort,
    InventoryPort,
    OfferPort,
    ProductSnapshot,
    WalletCharge,
    WalletPort,
)
from orders.config import ServiceEndpoints

logger = structlog.get_logger(__name__)


def _float_or_none(value):
    if value is None or value == "":
        return None
    return float(value)


class HttpInventory(InventoryPort):
    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.inventory_url
        self.timeout = endpoints.timeout_seconds

    def _adjust(self, action: str, product_id: str, quantity: int) -> None:
        url = f"{self.base_url}/api/master/inventory/{quote(str(product_id))}/{action}"
        logger.info("inventory_call", action=action, product_id=str(product_id), quantity=quantity)
        response = requests.post(url, params={"qty": quantity}, timeout=self.timeout)
        response.raise_for_status()

    def increment(self, product_id: str, quantity: int) -> None:
        self._adjust("increment", product_id, quantity)

    def decrement(self, product_id: str, quantity: int) -> None:
        self._adjust("decrement", product_id, quantity)


class HttpWallet(WalletPort):
    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.wallet_url
        self.timeout = endpoints.timeout_seconds

    def pay(self, user_id: str, order_id: str, amount: float) -> WalletCharge:
        response = requests.post(
            f"{self.base_url}/api/wallet/pay",
            json={"userId": user_id, "orderId": order_id, "amount": amount},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json() or {}
        return WalletCharge(
            success=bool(body.get("success")),
            balance=_float_or_none(body.get("remainingBalance")),
            message=body.get("message"),
        )

    def credit(self, user_id: str, order_id: str, amount: float, reason: str, source: str) -> float | None:
        response = requests.post(
            f"{self.base_url}/api/wallet/credit",
            json={
                "userId": user_id,
                "orderId": order_id,
                "amount": amount,
                "reason": reason,
                "source": source,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        if not response.content:
            return None
        return _float_or_none((response.json() or {}).get("balance"))


class HttpOffers(OfferPort):
    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.offers_url
        self.timeout = endpoints.timeout_seconds

    def best_price(self, product_id: str, category_id: str | None, line_price: float) -> BestOffer:
        response = requests.post(
            f"{self.base_url}/api/offers/best-price",
            json={"productId": product_id, "categoryId": category_id, "originalPrice": line_price},
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json() or {}
        return BestOffer(
            final_price=_float_or_none(body.get("finalPrice")),
            discount_amount=_float_or_none(body.get("discountAmount")) or 0.0,
        )


class HttpAddressBook(AddressPort):
    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.users_url
        self.timeout = endpoints.timeout_seconds

    def get_by_id(self, address_id: str) -> Address | None:
        response = requests.get(f"{self.base_url}/api/addresses/{quote(str(address_id))}", timeout=self.timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        body = response.json() or {}
        return Address(
            id=str(body.get("id", address_id)),
            label=body.get("label"),
            line1=body.get("addressLine1"),
            line2=body.get("addressLine2"),
            city=body.get("city"),
            state=body.get("state"),
            pincode=body.get("pincode"),
            country=body.get("country"),
            contact_name=body.get("contactName"),
            contact_phone=body.get("contactPhone"),
        )


class HttpCart(CartPort):
    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.cart_url
        self.timeout = endpoints.timeout_seconds

    def clear(self, user_id: str) -> None:
        response = requests.delete(
            f"{self.base_url}/{quote(str(user_id))}/clear",
            params={"orderComplete": "true"},
            timeout=self.timeout,
        )
        response.raise_for_status()


class HttpCatalog(CatalogPort):
    """Looks a product up on the public endpoint first, then the admin one."""

    def __init__(self, endpoints: ServiceEndpoints) -> None:
        self.base_url = endpoints.catalog_url
        self.timeout = endpoints.timeout_seconds

    def _fetch(self, url: str) -> dict | None:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.debug("catalog_fetch_failed", url=url, error=str(exc))
            return None
        return response.json() or None

    def get_by_id(self, product_id: str) -> ProductSnapshot | None:
        pid = quote(str(product_id))
        body = self._fetch(f"{self.base_url}/public/products/{pid}") or self._fetch(
            f"{self.base_url}/api/admin/products/{pid}"
        )
        if body is None:
            return None

        if body.get("imageName"):
            images = (str(body["imageName"]),)
        else:
            images = tuple(str(name) for name in body.get("imageNames") or ())

        return ProductSnapshot(
            product_id=str(product_id),
            title=body.get("title"),
            price=_float_or_none(body.get("price")),
            image_names=images,
        )
