"""Password reset form and generator."""

from __future__ import annotations

import secrets
from dataclasses import dataclass

from .base import Form, blank

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%&*"
CHARSET = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

PASSWORD_LENGTH = 12


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    """Random password with at least one character of each class."""
    if length < 4:
        raise ValueError("length must be at least 4")
    chars = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars += [secrets.choice(CHARSET) for _ in range(length - 4)]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


@dataclass
class PasswordResetForm(Form):
    user_id: int | None = None
    password: str = ""

    def generate(self) -> str:
        self.password = generate_password()
        return self.password

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.user_id:
            errors["user_id"] = "Please select a user first"
        if blank(self.password):
            errors["password"] = "Please generate a password first"
        return errors
