"""Runtime settings for order fulfillment.

Collaborator base URLs and money policies are read once from ``ORDERS_*``
environment variables and handed to each HTTP adapter at construction time.
Protean's own configuration (providers, brokers, event store) is untouched and
stays on its in-memory defaults unless a ``domain.toml`` is supplied.
"""

import os
from dataclasses import dataclass, field, replace


def _url(name: str, default: str) -> str:
    return os.getenv(name, default).strip().rstrip("/")


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class ServiceEndpoints:
    """Base URLs of the services the order engine talks to."""

    inventory_url: str = "http://localhost:8086"
    wallet_url: str = "http://localhost:8095"
    offers_url: str = "http://localhost:8086"
    users_url: str = "http://localhost:8083"
    cart_url: str = "http://localhost:8091/api/cart"
    catalog_url: str = "http://localhost:8086"
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class FulfillmentSettings:
    cod_limit: float = 1000.0
    tax_rate: float = 0.0
    default_delivery_charge: float = 100.0
    currency: str = "AED"
    shop_name: str = "Hyperchip Electronics Store"
    shop_lines: tuple[str, ...] = (
        "Online Electronics Store",
        "Email: support@hyperchip.com",
        "Website: www.hyperchip.com",
    )
    collaborators: str = "fake"  # "fake" or "http"
    endpoints: ServiceEndpoints = field(default_factory=ServiceEndpoints)


def load_settings() -> FulfillmentSettings:
    """Build settings from the environment, falling back to defaults."""
    defaults = ServiceEndpoints()
    endpoints = ServiceEndpoints(
        inventory_url=_url("ORDERS_INVENTORY_URL", defaults.inventory_url),
        wallet_url=_url("ORDERS_WALLET_URL", defaults.wallet_url),
        offers_url=_url("ORDERS_OFFERS_URL", defaults.offers_url),
        users_url=_url("ORDERS_USERS_URL", defaults.users_url),
        cart_url=_url("ORDERS_CART_URL", defaults.cart_url),
        catalog_url=_url("ORDERS_CATALOG_URL", defaults.catalog_url),
        timeout_seconds=_float("ORDERS_HTTP_TIMEOUT", defaults.timeout_seconds),
    )
    base = FulfillmentSettings()
    return FulfillmentSettings(
        cod_limit=_float("ORDERS_COD_LIMIT", base.cod_limit),
        tax_rate=_float("ORDERS_TAX_RATE", base.tax_rate),
        default_delivery_charge=_float("ORDERS_DEFAULT_DELIVERY_CHARGE", base.default_delivery_charge),
        currency=os.getenv("ORDERS_CURRENCY", base.currency),
        shop_name=os.getenv("ORDERS_SHOP_NAME", base.shop_name),
        collaborators=os.getenv("COLLABORATORS", base.collaborators).lower(),
        endpoints=endpoints,
    )


_current_settings: FulfillmentSettings | None = None


def get_settings() -> FulfillmentSettings:
    """Return the active settings, loading them from the environment on first use."""
    global _current_settings
    if _current_settings is None:
        _current_settings = load_settings()
    return _current_settings


def override_settings(**changes) -> FulfillmentSettings:
    """Replace individual settings (useful for tests)."""
    global _current_settings
    _current_settings = replace(get_settings(), **changes)
    return _current_settings


def reset_settings() -> None:
    global _current_settings
    _current_settings = None
