"""Ports for the services the order engine depends on but does not own.

Each port has a fake adapter (development and tests) and an HTTP adapter
(production). Application code only ever talks to these interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Address:
    """A customer address as returned by the user service."""

    id: str | None = None
    label: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    country: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None

    def summary_line(self) -> str:
        """``city, state, country`` with blank parts left out."""
        parts = [p.strip() for p in (self.city, self.state, self.country) if p and p.strip()]
        return ", ".join(parts)


@dataclass(frozen=True)
class WalletCharge:
    success: bool
    balance: float | None = None
    message: str | None = None


@dataclass(frozen=True)
class BestOffer:
    final_price: float | None = None
    discount_amount: float = 0.0


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: str
    title: str | None = None
    price: float | None = None
    image_names: tuple[str, ...] = ()


class InventoryPort(ABC):
    @abstractmethod
    def increment(self, product_id: str, quantity: int) -> None: ...

    @abstractmethod
    def decrement(self, product_id: str, quantity: int) -> None: ...


class WalletPort(ABC):
    @abstractmethod
    def pay(self, user_id: str, order_id: str, amount: float) -> WalletCharge:
        """Debit the customer's wallet for an order."""
        ...

    @abstractmethod
    def credit(self, user_id: str, order_id: str, amount: float, reason: str, source: str) -> float | None:
        """Credit the customer's wallet and return the new balance when known."""
        ...


class OfferPort(ABC):
    @abstractmethod
    def best_price(self, product_id: str, category_id: str | None, line_price: float) -> BestOffer:
        """Return the best offer price for a whole line (unit price x quantity)."""
        ...


class DeliveryChargePort(ABC):
    @abstractmethod
    def charge_for(self, address: Address | None) -> float:
        """Delivery charge for an address; ``None`` gets the default charge."""
        ...


class AddressPort(ABC):
    @abstractmethod
    def get_by_id(self, address_id: str) -> Address | None: ...


class CartPort(ABC):
    @abstractmethod
    def clear(self, user_id: str) -> None: ...


class CatalogPort(ABC):
    @abstractmethod
    def get_by_id(self, product_id: str) -> ProductSnapshot | None: ...


class NotificationPort(ABC):
    @abstractmethod
    def send_order_confirmation(self, order) -> None: ...

    @abstractmethod
    def send_payment_failed_notification(self, order) -> None: ...
