"""PDF rendering of an ``InvoiceDocument`` with reportlab.

The canvas is created with ``invariant=1`` so the same document renders to the
same bytes (no creation timestamp or random document id).
"""

from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from orders.invoice.composer import InvoiceDocument

MARGIN = 36
LINE = 14
BOTTOM = MARGIN + 2 * LINE

# x positions of the item table columns: No, Item, Qty, Unit Price, Line Total
_COLUMNS = (MARGIN, MARGIN + 40, 330, 430, A4[0] - MARGIN)


class _Page:
    """Top-down text cursor over a reportlab canvas with automatic page breaks."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def advance(self, lines: float = 1) -> None:
        self.y -= LINE * lines
        if self.y < BOTTOM:
            self.pdf.showPage()
            self.y = self.height - MARGIN

    def text(self, value: str, size: int = 10, bold: bool = False, x: float = MARGIN) -> None:
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.pdf.drawString(x, self.y, value)
        self.advance(size / 10 if size > 10 else 1)

    def row(self, cells, bold: bool = False) -> None:
        """Item table row: first two cells left-aligned, the rest right-aligned."""
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
        no, title, qty, unit, total = cells
        self.pdf.drawString(_COLUMNS[0], self.y, no)
        self.pdf.drawString(_COLUMNS[1], self.y, title[:48])
        self.pdf.drawRightString(_COLUMNS[2], self.y, qty)
        self.pdf.drawRightString(_COLUMNS[3], self.y, unit)
        self.pdf.drawRightString(_COLUMNS[4], self.y, total)
        self.advance()

    def pair(self, label: str, value: str, bold: bool = False) -> None:
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 10)
        self.pdf.drawString(self.width - MARGIN - 200, self.y, label)
        self.pdf.drawRightString(self.width - MARGIN, self.y, value)
        self.advance()


def render_pdf(document: InvoiceDocument) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    pdf.setTitle(f"Invoice {document.order_number}")
    page = _Page(pdf)

    page.text(document.shop_name, size=18, bold=True)
    for line in document.shop_lines:
        page.text(line)
    page.advance(0.5)
    page.text("INVOICE", size=14, bold=True)
    page.advance(0.5)

    page.text("Bill To / Shipping Address", size=11, bold=True)
    for line in document.bill_to:
        page.text(line)
    page.advance(0.5)
    for index, line in enumerate(document.meta_rows()):
        page.text(line, bold=index == 0)
    page.advance()

    c = document.currency
    page.row(("No", "Item", "Qty", f"Unit Price ({c})", f"Line Total ({c})"), bold=True)
    for line in document.lines:
        page.row(
            (
                str(line.number),
                line.title,
                str(line.quantity),
                f"{line.unit_price:.2f}",
                f"{line.line_total:.2f}",
            )
        )
    page.advance()

    for label, value in document.summary_rows():
        page.pair(label, value, bold=label == "Total")
    page.advance()

    for line in document.footer:
        page.text(line)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
