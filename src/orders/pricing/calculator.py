"""Order pricing: offers, tax, delivery, coupon and the cash-on-delivery limit.

    total = subtotal - coupon_discount + tax + shipping   (never below zero)

The subtotal is the sum of line prices after the best available offer. Offer
and delivery lookups fail open: a broken offer service charges the undiscounted
line price, a broken delivery service charges the configured default.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from orders.clients.port import Address, DeliveryChargePort, OfferPort
from orders.order.order import PaymentMethod
from orders.services.best_effort import BestEffort


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    unit_price: float
    quantity: int
    line_price: float  # unit_price * quantity, before offers
    total: float  # after offers


@dataclass(frozen=True)
class PricingResult:
    subtotal: float
    tax: float
    shipping: float
    coupon_discount: float
    total: float
    lines: tuple[PricedLine, ...] = ()


class FlatRateTax:
    """Tax as a fixed fraction of the subtotal. A rate of 0 charges no tax."""

    def __init__(self, rate: float = 0.0) -> None:
        self.rate = rate

    def tax_for(self, subtotal: float) -> float:
        return round(subtotal * self.rate, 2)


class PricingCalculator:
    def __init__(
        self,
        offers: OfferPort,
        delivery: DeliveryChargePort,
        tax_policy: FlatRateTax | None = None,
        cod_limit: float = 1000.0,
        default_delivery_charge: float = 100.0,
    ) -> None:
        self.offers = offers
        self.delivery = delivery
        self.tax_policy = tax_policy or FlatRateTax()
        self.cod_limit = cod_limit
        self.default_delivery_charge = default_delivery_charge

    def price_line(self, product_id, unit_price, quantity) -> PricedLine:
        line_price = round((unit_price or 0.0) * (quantity or 0), 2)
        final_price = line_price

        with BestEffort("offer_lookup", product_id=str(product_id), line_price=line_price):
            offer = self.offers.best_price(product_id, None, line_price)
            if offer is not None and offer.final_price is not None:
                final_price = round(max(offer.final_price, 0.0), 2)

        return PricedLine(
            product_id=str(product_id),
            unit_price=unit_price or 0.0,
            quantity=quantity or 0,
            line_price=line_price,
            total=final_price,
        )

    def shipping_for(self, address: Address | None) -> float:
        with BestEffort("delivery_charge", address_id=address.id if address else None):
            return round(self.delivery.charge_for(address), 2)
        return self.default_delivery_charge

    def price(self, items, shipping_address, coupon_discount=0.0, payment_method=None) -> PricingResult:
        """Price a candidate order.

        Args:
            items: Iterable of dicts with product_id, unit_price, quantity.
            shipping_address: Resolved ``Address`` or None.
            coupon_discount: Absolute discount from an applied coupon.
            payment_method: Raw or normalized payment method.

        Raises:
            ValidationError: When a cash-on-delivery order is above the limit.
        """
        lines = tuple(self.price_line(i["product_id"], i.get("unit_price"), i.get("quantity")) for i in items)
        subtotal = round(sum(line.total for line in lines), 2)
        tax = self.tax_policy.tax_for(subtotal)
        shipping = self.shipping_for(shipping_address)
        discount = max(coupon_discount or 0.0, 0.0)

        total = round(max(subtotal - discount + tax + shipping, 0.0), 2)

        if PaymentMethod.normalize(payment_method) == PaymentMethod.COD and total > self.cod_limit:
            raise ValidationError(
                {
                    "payment_method": [
                        f"Cash on Delivery is only available for orders up to {self.cod_limit:g}. "
                        "Please choose another payment method."
                    ]
                }
            )

        return PricingResult(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            coupon_discount=discount,
            total=total,
            lines=lines,
        )
