"""Pro-forma invoice generation."""

from .packages import PACKAGES, Package, get_package
from .branding import BBROS, TENDER, UTENDER, Branding, branding_for
from .pdf import (
    Invoice,
    InvoiceClient,
    build_invoice,
    generate_invoice_number,
    render_invoice,
    write_invoice,
)

__all__ = [
    # Packages
    "PACKAGES",
    "Package",
    "get_package",
    # Branding
    "BBROS",
    "TENDER",
    "UTENDER",
    "Branding",
    "branding_for",
    # PDF
    "Invoice",
    "InvoiceClient",
    "build_invoice",
    "generate_invoice_number",
    "render_invoice",
    "write_invoice",
]
