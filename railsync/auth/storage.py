"""Durable slot for the bearer credential (the browser's localStorage equivalent)."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Protocol

from railsync.auth.config import ClientConfig

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


@dataclass
class MemoryStorage:
    """Process-local storage; lost on exit."""

    items: Dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class FileStorage:
    """
    JSON-file backed storage that survives restarts.

    A missing or corrupt file reads as empty; writes replace the file atomically.
    """

    path: str

    def __post_init__(self) -> None:
        self.path = os.path.abspath(os.path.expanduser(self.path))

    def _load(self) -> Dict[str, str]:
        p = Path(self.path)
        if not p.exists():
            return {}
        try:
            data = json.loads(p.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self, items: Dict[str, str]) -> None:
        p = Path(self.path)
        p.parent.mkdir(parents=True, exist_ok=True)
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(json.dumps(items, sort_keys=True), encoding="utf-8")
        os.replace(tmp, p)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)


class CredentialCarrier:
    """Holds the bearer credential. No validation, no side effects beyond the slot."""

    def __init__(self, storage: KeyValueStorage, *, key: str = TOKEN_KEY) -> None:
        self._storage = storage
        self._key = key

    def get(self) -> Optional[str]:
        return self._storage.get_item(self._key) or None

    def set(self, token: str) -> None:
        self._storage.set_item(self._key, token)

    def clear(self) -> None:
        self._storage.remove_item(self._key)


def carrier_from_config(cfg: ClientConfig) -> CredentialCarrier:
    if cfg.token_file:
        return CredentialCarrier(FileStorage(cfg.token_file))
    return CredentialCarrier(MemoryStorage())
