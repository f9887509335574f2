"""Delivery charges from zone rules.

Rules are checked most specific first: an exact PIN code, then the longest
matching PIN prefix, then a state + district (or city) pair. Anything that
matches nothing, including a missing address, pays the default charge.
"""

from orders.clients.port import Address, DeliveryChargePort


def _normalize(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class ZoneDeliveryCharges(DeliveryChargePort):
    def __init__(self, pin_charges=None, prefix_charges=None, district_charges=None, default_charge=100.0):
        self.pin_charges = {str(k).strip(): v for k, v in (pin_charges or {}).items()}
        self.prefix_charges = {str(k).strip(): v for k, v in (prefix_charges or {}).items()}
        self.district_charges = {
            (state.strip().lower(), district.strip().lower()): charge
            for (state, district), charge in (district_charges or {}).items()
        }
        self.default_charge = default_charge

    def _pin_rule(self, pin):
        if pin in self.pin_charges:
            return self.pin_charges[pin]

        for prefix in sorted(self.prefix_charges, key=len, reverse=True):
            if pin.startswith(prefix):
                charge = self.prefix_charges[prefix]
                return charge if charge is not None else self.default_charge
        return None

    def charge_for(self, address: Address | None) -> float:
        if address is None:
            return self.default_charge

        pin = _normalize(address.pincode)
        if pin is not None:
            charge = self._pin_rule(pin)
            if charge is not None:
                return charge

        state = _normalize(address.state)
        district = _normalize(address.city)
        if state and district:
            charge = self.district_charges.get((state.lower(), district.lower()))
            if charge is not None:
                return charge

        return self.default_charge
