"""Subscription packages that can be invoiced."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Package:
    key: str
    label: str
    days: int
    description: str

    @property
    def duration(self) -> str:
        return f"{self.days} days"


PACKAGES: tuple[Package, ...] = (
    Package("1_month", "1 Month Package", 30, "Basic monthly access to tender notifications"),
    Package("3_months", "3 Months Package", 90, "Quarterly access with priority notifications"),
    Package("6_months", "6 Months Package", 180, "Semi-annual access with advanced features"),
    Package("12_months", "12 Months Package", 365, "Annual access with all premium features"),
)


def get_package(key: str | None) -> Package | None:
    for package in PACKAGES:
        if package.key == key:
            return package
    return None
