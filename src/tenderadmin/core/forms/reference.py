"""Add/edit form shared by the reference data pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .base import Form, blank


@dataclass
class ReferenceForm(Form):
    label: str
    name: str = ""

    def field_errors(self) -> dict[str, str]:
        if blank(self.name):
            return {"name": f"{self.label} name is required"}
        return {}

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name.strip()}
