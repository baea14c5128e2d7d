"""Invoice generation form."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from tenderadmin.core.invoice.packages import get_package
from tenderadmin.core.normalize.parsing import parse_price

from .base import Form, blank


@dataclass
class InvoiceForm(Form):
    client_id: int | None = None
    package: str | None = None
    price: Any = None

    @property
    def amount(self) -> Decimal | None:
        return parse_price(self.price)

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.client_id:
            errors["client_id"] = "Please select a client"
        if blank(self.package) or get_package(self.package) is None:
            errors["package"] = "Please select a package"
        amount = self.amount
        if amount is None or amount <= 0:
            errors["price"] = "Please enter a valid price"
        return errors
