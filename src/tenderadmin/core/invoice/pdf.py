"""
Pro-forma invoice PDF rendering with reportlab.

Layout is described in millimetres from the top-left corner of an A4
page; ``_MmCanvas`` converts to reportlab's bottom-left point space.
"""

from __future__ import annotations

import io
import random
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from tenderadmin.core.logging import get_logger
from tenderadmin.core.models.entities import Member

from .branding import Branding, branding_for
from .packages import Package, get_package

if TYPE_CHECKING:
    from tenderadmin.core.config.models import InvoiceConfig, PartyConfig

logger = get_logger("invoice.pdf")

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 20

DARK = (45, 55, 72)
PANEL_FILL = (247, 250, 252)
TOTAL_FILL = (237, 242, 247)
MUTED = (102, 102, 102)
BLACK = (0, 0, 0)
ACCENT = (229, 62, 62)

CLIENT_NUMBER_PREFIX = "1000"

_UNSAFE_FILE_CHARS = re.compile(r"[^\w.-]+")


def file_part(text: str) -> str:
    """Make a brand name safe to use inside a file name."""
    return _UNSAFE_FILE_CHARS.sub("_", text).strip("._") or "INVOICE"


def generate_invoice_number() -> str:
    """Random 10-digit invoice number."""
    return str(random.randint(1_000_000_000, 9_999_999_999))


@dataclass
class InvoiceClient:
    id: int
    name: str
    email: str = ""
    company: str | None = None

    @classmethod
    def from_member(cls, member: Member) -> "InvoiceClient":
        return cls(
            id=member.id,
            name=member.name or member.username,
            email=member.email,
            company=member.company,
        )

    @property
    def number(self) -> str:
        return f"{CLIENT_NUMBER_PREFIX}-{self.id}"

    @property
    def label(self) -> str:
        company = f" - {self.company}" if self.company else ""
        return f"{self.name}{company} ({self.email})"


@dataclass
class Invoice:
    number: str
    client: InvoiceClient
    package: Package
    total: Decimal
    issued: date = field(default_factory=date.today)

    @property
    def branding(self) -> Branding:
        return branding_for(self.client.company)

    @property
    def file_name(self) -> str:
        return f"{file_part(self.branding.name)}-Pro-Fatura-{self.number}.pdf"

    @property
    def total_text(self) -> str:
        return f"{self.total:.0f}"


def build_invoice(
    client: InvoiceClient,
    package_key: str,
    price: Decimal | float | str,
    issued: date | None = None,
    number: str | None = None,
) -> Invoice:
    package = get_package(package_key)
    if package is None:
        raise ValueError(f"Unknown package: {package_key}")
    return Invoice(
        number=number or generate_invoice_number(),
        client=client,
        package=package,
        total=Decimal(str(price)),
        issued=issued or date.today(),
    )


class _MmCanvas:
    """Top-left millimetre drawing helpers over a reportlab canvas."""

    def __init__(self, c: canvas.Canvas):
        self.c = c

    @staticmethod
    def _y(y: float) -> float:
        return (PAGE_HEIGHT - y) * mm

    def fill(self, rgb: tuple[int, int, int]) -> None:
        self.c.setFillColorRGB(*(v / 255 for v in rgb))

    def stroke(self, rgb: tuple[int, int, int]) -> None:
        self.c.setStrokeColorRGB(*(v / 255 for v in rgb))

    def text(
        self,
        text: str,
        x: float,
        y: float,
        size: float = 10,
        bold: bool = False,
        color: tuple[int, int, int] = BLACK,
        centred: bool = False,
    ) -> float:
        """Draw text at a baseline and return the next line's baseline."""
        self.c.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.fill(color)
        if centred:
            self.c.drawCentredString(x * mm, self._y(y), text)
        else:
            self.c.drawString(x * mm, self._y(y), text)
        return y + size * 0.35

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: tuple[int, int, int] | None = None,
        border: tuple[int, int, int] | None = DARK,
    ) -> None:
        if fill is not None:
            self.fill(fill)
        if border is not None:
            self.stroke(border)
            self.c.setLineWidth(0.5 * mm)
        self.c.rect(
            x * mm,
            self._y(y + height),
            width * mm,
            height * mm,
            stroke=1 if border is not None else 0,
            fill=1 if fill is not None else 0,
        )

    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self.stroke(DARK)
        self.c.line(x1 * mm, self._y(y1), x2 * mm, self._y(y2))


def _party_column(page: _MmCanvas, party: "PartyConfig", x: float, top: float) -> None:
    y = page.text(party.title, x + 2, top + 5, size=9, bold=True)
    for line in party.lines:
        y = page.text(line, x + 2, y, size=8)


def render_invoice(invoice: Invoice, config: "InvoiceConfig") -> bytes:
    """Render the invoice as PDF bytes."""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(f"Pro-Fatura {invoice.number}")
    page = _MmCanvas(c)
    branding = invoice.branding
    y = MARGIN

    # Header: branded square and name
    page.rect(MARGIN, y, 15, 15, fill=branding.background_rgb, border=None)
    page.text(branding.icon, MARGIN + 7.5, y + 10, size=20, bold=True, color=branding.color_rgb, centred=True)
    page.text(branding.name, MARGIN + 20, y + 10, size=24, bold=True, color=DARK)
    y += 25

    # Title and invoice details
    page.text("PRO-FATURË", MARGIN, y, size=18, bold=True, color=DARK)
    right_x = PAGE_WIDTH - MARGIN - 50
    page.text(f"Gjeneruar: {invoice.issued.strftime('%d/%m/%Y')}", right_x, y, size=10, color=DARK)
    page.text(f"Pro-Fatura: {invoice.number}", right_x, y + 5, size=10, color=DARK)
    page.text(f"Nr. i klientit: {invoice.client.number}", right_x, y + 10, size=10, color=DARK)
    y += 30

    # Buyer / seller / bank columns
    col_width = (PAGE_WIDTH - 2 * MARGIN) / 3
    for index, party in enumerate((config.buyer, config.seller, config.bank)):
        x = MARGIN + index * col_width
        page.rect(x, y, col_width, 40, fill=PANEL_FILL)
        _party_column(page, party, x, y)
    y += 50

    # Line items
    table_width = PAGE_WIDTH - 2 * MARGIN
    header_height = 8
    table_height = 20
    page.rect(MARGIN, y, table_width, header_height, fill=PANEL_FILL)
    page.text("Nr. Përshkrimi", MARGIN + 2, y + 5, size=9, bold=True)
    page.text("Çmimi", MARGIN + 100, y + 5, size=9, bold=True)
    page.text("Sasia", MARGIN + 130, y + 5, size=9, bold=True)
    page.text("Shuma", MARGIN + 160, y + 5, size=9, bold=True)

    row_y = y + header_height
    page.rect(MARGIN, row_y, table_width, table_height - header_height)
    page.text(f"1. Abonimi në {config.website} për {invoice.package.duration}", MARGIN + 2, row_y + 5, size=8)
    page.text(invoice.total_text, MARGIN + 100, row_y + 5, size=8)
    page.text("1", MARGIN + 135, row_y + 5, size=8)
    page.text(invoice.total_text, MARGIN + 165, row_y + 5, size=8)
    y += 30

    # Total
    box_width = 60
    box_x = PAGE_WIDTH - MARGIN - box_width
    page.rect(box_x, y, box_width, 10, fill=TOTAL_FILL)
    page.text(f"Gjithsej ({config.currency}): {invoice.total_text}", box_x + 2, y + 6, size=10, bold=True)
    y += 40

    # Payment note
    page.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    y += 10
    page.text(
        "Vërejtje: Në koment të pagesës suaj ju lutemi shënoni këtë përshkrim:",
        MARGIN, y, size=8, color=MUTED,
    )
    y += 10
    page.text(
        f"Pagesë pro-fatura nr. '{invoice.number}' nga klienti nr. '{invoice.client.number}'",
        MARGIN, y, size=9, bold=True,
    )
    y += 20
    page.line(MARGIN, y, PAGE_WIDTH - MARGIN, y)
    y += 10

    # Website footer
    page.text(config.website, MARGIN, y, size=8, bold=True, color=ACCENT)
    page.text(config.tagline, MARGIN + 30, y, size=8, color=MUTED)
    page.text("1", PAGE_WIDTH - MARGIN - 5, y, size=8, color=MUTED)

    c.showPage()
    c.save()
    return buffer.getvalue()


def write_invoice(invoice: Invoice, config: "InvoiceConfig", output_dir: Path | str | None = None) -> Path:
    """Render the invoice and save it under the output directory."""
    directory = Path(output_dir) if output_dir is not None else config.output_dir
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / invoice.file_name
    path.write_bytes(render_invoice(invoice, config))
    logger.info("Wrote invoice %s for client %s to %s", invoice.number, invoice.client.number, path)
    return path
