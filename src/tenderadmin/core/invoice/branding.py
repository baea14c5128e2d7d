"""Invoice header branding chosen from the client's company name."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Branding:
    icon: str
    name: str
    background: str
    color: str = "#ffffff"

    @staticmethod
    def _rgb(value: str) -> tuple[int, int, int]:
        value = value.lstrip("#")
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)

    @property
    def background_rgb(self) -> tuple[int, int, int]:
        return self._rgb(self.background)

    @property
    def color_rgb(self) -> tuple[int, int, int]:
        return self._rgb(self.color)


BBROS = Branding(icon="b", name="BBROS", background="#e53e3e")
UTENDER = Branding(icon="U", name="UTENDER", background="#3182ce")
TENDER = Branding(icon="T", name="TENDER", background="#38a169")
OTHER_BACKGROUND = "#6b7280"


def branding_for(company: str | None) -> Branding:
    """Pick the header branding for a client company."""
    if not company:
        return BBROS

    lowered = company.lower()
    if "bbros" in lowered or "b-bros" in lowered:
        return BBROS
    if "utender" in lowered or "u-tender" in lowered:
        return UTENDER
    if "tender" in lowered or "prokurim" in lowered:
        return TENDER
    return Branding(icon=company[0].upper(), name=company.upper(), background=OTHER_BACKGROUND)
