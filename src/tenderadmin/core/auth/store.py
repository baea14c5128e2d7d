"""
Persistent client state.

A small JSON file plays the role of browser local storage: a flat
string-keyed map holding the bearer token and the serialized user.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from tenderadmin.core.logging import get_logger

logger = get_logger("auth.store")

TOKEN_KEY = "token"
USER_KEY = "user"


class CredentialStore:
    """String key/value store persisted as a JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".session-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        if self.path.exists():
            self._write({})

    def keys(self) -> list[str]:
        return list(self._read().keys())


class MemoryStore(CredentialStore):
    """In-process store with the same interface, used for tests and scripts."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.path = Path("<memory>")
        self._data: dict[str, str] = dict(initial or {})

    def _read(self) -> dict[str, str]:
        return dict(self._data)

    def _write(self, data: dict[str, Any]) -> None:
        self._data = dict(data)

    def clear(self) -> None:
        self._data = {}
