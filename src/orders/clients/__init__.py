"""Collaborator registry.

Provides get_collaborators() / set_collaborators() to swap implementations:
- fakes for development and testing (the default)
- HTTP adapters in production (``COLLABORATORS=http``)
"""

from dataclasses import dataclass

from orders.clients.fakes import (
    FakeAddressBook,
    FakeCart,
    FakeCatalog,
    FakeInventory,
    FakeNotifier,
    FakeOffers,
    FakeWallet,
)
from orders.clients.http import HttpAddressBook, HttpCart, HttpCatalog, HttpInventory, HttpOffers, HttpWallet
from orders.clients.notifier import LoggingNotifier
from orders.clients.port import (
    AddressPort,
    CartPort,
    CatalogPort,
    DeliveryChargePort,
    InventoryPort,
    NotificationPort,
    OfferPort,
    WalletPort,
)
from orders.config import FulfillmentSettings, get_settings
from orders.pricing.delivery import ZoneDeliveryCharges


@dataclass
class Collaborators:
    inventory: InventoryPort
    wallet: WalletPort
    offers: OfferPort
    delivery: DeliveryChargePort
    addresses: AddressPort
    cart: CartPort
    catalog: CatalogPort
    notifier: NotificationPort


def fake_collaborators(settings: FulfillmentSettings | None = None) -> Collaborators:
    settings = settings or get_settings()
    return Collaborators(
        inventory=FakeInventory(),
        wallet=FakeWallet(),
        offers=FakeOffers(),
        delivery=ZoneDeliveryCharges(default_charge=settings.default_delivery_charge),
        addresses=FakeAddressBook(),
        cart=FakeCart(),
        catalog=FakeCatalog(),
        notifier=FakeNotifier(),
    )


def http_collaborators(settings: FulfillmentSettings | None = None) -> Collaborators:
    settings = settings or get_settings()
    endpoints = settings.endpoints
    return Collaborators(
        inventory=HttpInventory(endpoints),
        wallet=HttpWallet(endpoints),
        offers=HttpOffers(endpoints),
        delivery=ZoneDeliveryCharges(default_charge=settings.default_delivery_charge),
        addresses=HttpAddressBook(endpoints),
        cart=HttpCart(endpoints),
        catalog=HttpCatalog(endpoints),
        notifier=LoggingNotifier(),
    )


_current_collaborators: Collaborators | None = None


def get_collaborators() -> Collaborators:
    """Return the active collaborators, built from settings on first use."""
    global _current_collaborators
    if _current_collaborators is None:
        settings = get_settings()
        if settings.collaborators == "http":
            _current_collaborators = http_collaborators(settings)
        else:
            _current_collaborators = fake_collaborators(settings)
    return _current_collaborators


def set_collaborators(collaborators: Collaborators) -> None:
    """Override the active collaborators (useful for tests)."""
    global _current_collaborators
    _current_collaborators = collaborators


def reset_collaborators() -> None:
    """Reset to default collaborators."""
    global _current_collaborators
    _current_collaborators = None
