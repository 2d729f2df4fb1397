"""Invoice PDF rendering."""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from fpdf import FPDF, XPos, YPos

from app.core.exceptions import PDFRenderError
from app.models.domain import Invoice

logger = logging.getLogger(__name__)

# Layout (points, Letter page, top-left origin)
MARGIN = 50
RULE_RIGHT = 550
COL_DESCRIPTION = 50
COL_QTY = 300
COL_PRICE = 350
COL_TOTAL = 450
DESCRIPTION_WIDTH = COL_QTY - COL_DESCRIPTION - 10
ROW_H = 25
LINE_H = 16

FONT_FAMILY = "InvoiceSans"
FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:\\Windows\\Fonts\\arial.ttf",
]
ASCII_CURRENCY_FALLBACK = "Rs."


def find_font_path(configured: Optional[str] = None, candidates: Iterable[str] = FONT_CANDIDATES) -> Optional[str]:
    """Return the first readable TTF font: the configured one, then system candidates."""
    paths: List[str] = [configured] if configured else []
    paths.extend(candidates)
    for path in paths:
        if path and os.path.isfile(path):
            return path
    return None


def _is_latin1(text: str) -> bool:
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


class PDFService:
    """Render invoices to <output_dir>/<invoice_number>.pdf."""

    def __init__(
        self,
        output_dir: str,
        font_path: Optional[str] = None,
        currency_symbol: str = "₹",
    ):
        self.output_dir = Path(output_dir)
        self.font_path = find_font_path(font_path)
        self.currency_symbol = currency_symbol

    def pdf_path_for(self, invoice_number: str) -> Path:
        return self.output_dir / f"{invoice_number}.pdf"

    def render(self, invoice: Invoice) -> str:
        """Render the invoice and return the written file path.

        The document is built in memory first; the file only exists once it
        has been fully written and closed. Any failure raises PDFRenderError.
        """
        path = self.pdf_path_for(invoice.invoice_number)
        try:
            content = self._build(invoice)
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(content)
        except Exception as e:
            logger.error("PDF rendering failed for %s: %s", invoice.invoice_number, e)
            raise PDFRenderError(
                f"Failed to render PDF for invoice {invoice.invoice_number}: {e}",
                details={"invoice_number": invoice.invoice_number},
            ) from e

        logger.info("Rendered invoice PDF %s", path)
        return str(path)

    def _build(self, invoice: Invoice) -> bytes:
        pdf = FPDF(unit="pt", format="Letter")
        pdf.set_margins(MARGIN, MARGIN, MARGIN)
        pdf.set_auto_page_break(auto=True, margin=MARGIN)

        unicode_font = self._register_font(pdf)
        symbol = self.currency_symbol
        if not unicode_font and not _is_latin1(symbol):
            symbol = ASCII_CURRENCY_FALLBACK

        def text(value: str) -> str:
            if unicode_font:
                return value
            return value.encode("latin-1", "replace").decode("latin-1")

        def money(amount: float) -> str:
            return f"{symbol}{amount:.2f}"

        def font(size: int, style: str = "") -> None:
            pdf.set_font(FONT_FAMILY if unicode_font else "Helvetica", style=style, size=size)

        def line(value: str, size: int = 12, style: str = "", align: str = "L") -> None:
            font(size, style)
            pdf.cell(w=0, h=LINE_H if size <= 12 else size + 8, text=text(value), align=align,
                     new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        def table_header() -> None:
            font(12, "B")
            y = pdf.get_y()
            for x, label in (
                (COL_DESCRIPTION, "Description"),
                (COL_QTY, "Qty"),
                (COL_PRICE, "Price"),
                (COL_TOTAL, "Total"),
            ):
                pdf.set_xy(x, y)
                pdf.cell(text=label)
            y += 20
            pdf.line(MARGIN, y, RULE_RIGHT, y)
            pdf.set_xy(MARGIN, y + 10)

        pdf.add_page()

        line("INVOICE", size=20, style="B", align="C")
        pdf.ln(LINE_H)

        line(f"Invoice Number: {invoice.invoice_number}")
        line(f"Date: {invoice.created_at.strftime('%d/%m/%Y')}")
        pdf.ln(LINE_H)

        customer = invoice.customer
        line("Bill To:", style="U")
        line(f"Name: {customer.name}")
        if customer.email:
            line(f"Email: {customer.email}")
        if customer.phone:
            line(f"Phone: {customer.phone}")
        pdf.ln(LINE_H)

        line("Items:", style="U")
        pdf.ln(LINE_H / 2)
        table_header()

        font(12)
        for item in invoice.items:
            if pdf.will_page_break(ROW_H):
                pdf.add_page()
                table_header()
                font(12)
            y = pdf.get_y()
            description = self._fit(pdf, text(item.description), DESCRIPTION_WIDTH)
            pdf.set_xy(COL_DESCRIPTION, y)
            pdf.cell(text=description)
            pdf.set_xy(COL_QTY, y)
            pdf.cell(text=str(item.quantity))
            pdf.set_xy(COL_PRICE, y)
            pdf.cell(text=money(item.price))
            pdf.set_xy(COL_TOTAL, y)
            pdf.cell(text=money(item.line_total))
            pdf.set_xy(MARGIN, y + ROW_H)

        if pdf.will_page_break(50):
            pdf.add_page()
        y = pdf.get_y() + 10
        pdf.line(MARGIN, y, RULE_RIGHT, y)
        pdf.set_xy(MARGIN, y + 20)

        font(14, "B")
        pdf.cell(w=0, h=20, text=f"Total Amount: {money(invoice.total_amount)}", align="R")

        return bytes(pdf.output())

    def _register_font(self, pdf: FPDF) -> bool:
        if not self.font_path:
            return False
        bold_path = self.font_path.replace(".ttf", "-Bold.ttf")
        pdf.add_font(FONT_FAMILY, style="", fname=self.font_path)
        pdf.add_font(FONT_FAMILY, style="B", fname=bold_path if os.path.isfile(bold_path) else self.font_path)
        return True

    @staticmethod
    def _fit(pdf: FPDF, value: str, width: float) -> str:
        if pdf.get_string_width(value) <= width:
            return value
        ellipsis = "..."
        while value and pdf.get_string_width(value + ellipsis) > width:
            value = value[:-1]
        return value + ellipsis
