"""CLI command modules."""

from . import auth, email, invoice, reference, subscribers, tenders

__all__ = [
    "auth",
    "email",
    "invoice",
    "reference",
    "subscribers",
    "tenders",
]
