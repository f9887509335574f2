"""Configurable fake collaborators for development and testing.

Every fake records the calls it receives in ``calls`` and can be told to fail,
so tests can exercise the best-effort paths without any network access.
"""

from orders.clients.port import (
    Address,
    AddressPort,
    BestOffer,
    CartPort,
    CatalogPort,
    InventoryPort,
    NotificationPort,
    OfferPort,
    ProductSnapshot,
    WalletCharge,
    WalletPort,
)


class CollaboratorUnavailable(Exception):
    """Raised by a fake that has been configured to fail."""


class FakeInventory(InventoryPort):
    def __init__(self) -> None:
        self.stock: dict[str, int] = {}
        self.failing_products: set[str] = set()
        self.calls: list[dict] = []

    def fail_for(self, *product_ids: str) -> None:
        self.failing_products.update(str(pid) for pid in product_ids)

    def _adjust(self, method: str, product_id: str, quantity: int) -> None:
        self.calls.append({"method": method, "product_id": str(product_id), "quantity": quantity})
        if str(product_id) in self.failing_products:
            raise CollaboratorUnavailable(f"Inventory unavailable for product {product_id}")

        delta = quantity if method == "increment" else -quantity
        self.stock[str(product_id)] = self.stock.get(str(product_id), 0) + delta

    def increment(self, product_id: str, quantity: int) -> None:
        self._adjust("increment", product_id, quantity)

    def decrement(self, product_id: str, quantity: int) -> None:
        self._adjust("decrement", product_id, quantity)


class FakeWallet(WalletPort):
    """In-memory wallet. Unknown users start with a zero balance."""

    def __init__(self) -> None:
        self.balances: dict[str, float] = {}
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def configure(self, should_fail: bool) -> None:
        self.should_fail = should_fail

    def pay(self, user_id: str, order_id: str, amount: float) -> WalletCharge:
        self.calls.append({"method": "pay", "user_id": str(user_id), "order_id": str(order_id), "amount": amount})
        if self.should_fail:
            raise CollaboratorUnavailable("Wallet service unavailable")

        balance = self.balances.get(str(user_id), 0.0)
        if balance < amount:
            return WalletCharge(success=False, balance=balance, message="Insufficient wallet balance")

        self.balances[str(user_id)] = round(balance - amount, 2)
        return WalletCharge(success=True, balance=self.balances[str(user_id)], message="Payment successful")

    def credit(self, user_id: str, order_id: str, amount: float, reason: str, source: str) -> float | None:
        self.calls.append(
            {
                "method": "credit",
                "user_id": str(user_id),
                "order_id": str(order_id),
                "amount": amount,
                "reason": reason,
                "source": source,
            }
        )
        if self.should_fail:
            raise CollaboratorUnavailable("Wallet service unavailable")

        self.balances[str(user_id)] = round(self.balances.get(str(user_id), 0.0) + amount, 2)
        return self.balances[str(user_id)]

    def credits(self) -> list[dict]:
        return [call for call in self.calls if call["method"] == "credit"]


class FakeOffers(OfferPort):
    """Offers keyed by product id, expressed as a fraction taken off the line price."""

    def __init__(self) -> None:
        self.discounts: dict[str, float] = {}
        self.should_fail: bool = False
        self.calls: list[dict] = []

    def best_price(self, product_id: str, category_id: str | None, line_price: float) -> BestOffer:
        self.calls.append({"product_id": str(product_id), "category_id": category_id, "line_price": line_price})
        if self.should_fail:
            raise CollaboratorUnavailable("Offer service unavailable")

        fraction = self.discounts.get(str(product_id), 0.0)
        discount = round(line_price * fraction, 2)
        return BestOffer(final_price=round(line_price - discount, 2), discount_amount=discount)


class FakeAddressBook(AddressPort):
    def __init__(self) -> None:
        self.addresses: dict[str, Address] = {}
        self.should_fail: bool = False

    def add(self, address: Address) -> None:
        self.addresses[str(address.id)] = address

    def get_by_id(self, address_id: str) -> Address | None:
        if self.should_fail:
            raise CollaboratorUnavailable("User service unavailable")
        return self.addresses.get(str(address_id))


class FakeCart(CartPort):
    def __init__(self) -> None:
        self.cleared: list[str] = []
        self.should_fail: bool = False

    def clear(self, user_id: str) -> None:
        if self.should_fail:
            raise CollaboratorUnavailable("Cart service unavailable")
        self.cleared.append(str(user_id))


class FakeCatalog(CatalogPort):
    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}
        self.should_fail: bool = False
        self.calls: list[str] = []

    def add(self, product: ProductSnapshot) -> None:
        self.products[str(product.product_id)] = product

    def get_by_id(self, product_id: str) -> ProductSnapshot | None:
        self.calls.append(str(product_id))
        if self.should_fail:
            raise CollaboratorUnavailable("Catalog service unavailable")
        return self.products.get(str(product_id))


class FakeNotifier(NotificationPort):
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.should_fail: bool = False

    def _record(self, kind: str, order) -> None:
        if self.should_fail:
            raise CollaboratorUnavailable("Mail transport unavailable")
        self.sent.append({"kind": kind, "order_id": str(order.id), "recipient": order.user_email})

    def send_order_confirmation(self, order) -> None:
        self._record("order_confirmation", order)

    def send_payment_failed_notification(self, order) -> None:
        self._record("payment_failed", order)
