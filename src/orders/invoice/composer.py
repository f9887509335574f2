"""Invoice composition.

``compose`` turns an order snapshot into an ``InvoiceDocument``: a plain,
immutable description of every line of text the invoice carries. The same
order always composes to an equal document. Rendering to PDF is a separate
step (see ``orders.invoice.renderer``).

    discount    = (subtotal + tax + shipping) - grand_total   (0 below one cent)
    balance_due = max(grand_total - paid, 0)
"""

from dataclasses import dataclass

from orders.clients.port import Address
from orders.order.order import PAYMENT_METHOD_LABELS, PaymentStatus

DISCOUNT_EPSILON = 0.01
DATE_FORMAT = "%Y-%m-%d %H:%M"
FOOTER = (
    "Thank you for shopping with us!",
    "This invoice is generated electronically and does not require a signature.",
)


@dataclass(frozen=True)
class InvoiceLine:
    number: int
    title: str
    quantity: int
    unit_price: float
    line_total: float


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax: float
    shipping: float
    discount: float
    grand_total: float
    paid: float
    balance_due: float


@dataclass(frozen=True)
class InvoiceDocument:
    order_id: str
    order_number: str
    shop_name: str
    shop_lines: tuple[str, ...]
    bill_to: tuple[str, ...]
    order_date: str
    payment_method: str
    payment_status: str
    order_status: str | None
    currency: str
    lines: tuple[InvoiceLine, ...]
    totals: InvoiceTotals
    footer: tuple[str, ...] = FOOTER

    @property
    def filename(self) -> str:
        return f"invoice-{self.order_id}.pdf"

    def meta_rows(self) -> list[str]:
        rows = [
            f"Order No: {self.order_number}",
            f"Order Date: {self.order_date}",
            f"Payment Method: {self.payment_method}",
            f"Payment Status: {self.payment_status}",
        ]
        if self.order_status:
            rows.append(f"Order Status: {self.order_status}")
        return rows

    def summary_rows(self) -> list[tuple[str, str]]:
        """Label/value pairs for the totals box, in display order."""
        c = self.currency
        t = self.totals
        rows = [
            ("Subtotal", f"{c} {t.subtotal:.2f}"),
            ("Tax", f"{c} {t.tax:.2f}"),
            ("Shipping", f"{c} {t.shipping:.2f}"),
        ]
        if t.discount > 0:
            rows.append(("Discount", f"- {c} {t.discount:.2f}"))
        rows.append(("Total", f"{c} {t.grand_total:.2f}"))
        if t.paid > 0:
            rows.append(("Paid", f"{c} {t.paid:.2f}"))
            rows.append(("Balance Due", f"{c} {t.balance_due:.2f}"))
        return rows


def compute_totals(order) -> InvoiceTotals:
    subtotal = order.subtotal or 0.0
    tax = order.tax or 0.0
    shipping = order.shipping or 0.0
    paid = order.paid_amount or 0.0

    grand_total = order.total_amount or 0.0
    if grand_total <= 0:
        grand_total = round(sum(item.line_total() for item in order.active_items()), 2)

    discount = round(subtotal + tax + shipping - grand_total, 2)
    if discount < DISCOUNT_EPSILON:
        discount = 0.0

    return InvoiceTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        grand_total=grand_total,
        paid=paid,
        balance_due=round(max(grand_total - paid, 0.0), 2),
    )


def _bill_to(order, address: Address | None) -> tuple[str, ...]:
    customer = f"Customer: {order.user_email or 'N/A'}"
    if address is None:
        return (customer, "Address: (not available)")

    summary = address.summary_line()
    return (customer, summary or "Address: (details not available)")


def compose(order, address: Address | None = None, shop_name="", shop_lines=(), currency="AED") -> InvoiceDocument:
    method = order.payment_method or "N/A"
    lines = tuple(
        InvoiceLine(
            number=index,
            title=item.product_title or f"Product {item.product_id}",
            quantity=item.quantity or 0,
            unit_price=item.unit_price or 0.0,
            line_total=item.line_total(),
        )
        for index, item in enumerate(order.active_items(), start=1)
    )

    return InvoiceDocument(
        order_id=str(order.id),
        order_number=order.order_number,
        shop_name=shop_name,
        shop_lines=tuple(shop_lines),
        bill_to=_bill_to(order, address),
        order_date=order.created_at.strftime(DATE_FORMAT) if order.created_at else "",
        payment_method=PAYMENT_METHOD_LABELS.get(method.upper(), method),
        payment_status=order.payment_status or PaymentStatus.PENDING.value,
        order_status=order.status,
        currency=currency,
        lines=lines,
        totals=compute_totals(order),
    )
