"""Totals recomputation after part of an order is cancelled."""


def recompute_after_cancellation(remaining_line_totals, old_subtotal, tax, shipping, old_total):
    """Return ``(new_subtotal, new_total)`` once some items have been cancelled.

    The coupon discount already baked into ``old_total`` is carried over as a
    fixed amount (``old_subtotal + tax + shipping - old_total``) rather than
    being re-derived against the smaller subtotal.
    """
    tax = tax or 0.0
    shipping = shipping or 0.0
    new_subtotal = round(sum(remaining_line_totals), 2)

    coupon_delta = max((old_subtotal or 0.0) + tax + shipping - (old_total or 0.0), 0.0)
    new_total = max(new_subtotal + tax + shipping - coupon_delta, 0.0)

    return new_subtotal, round(new_total, 2)
