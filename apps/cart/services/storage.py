"""
Durable key-value slots the cart store persists its state into.

A slot holds one JSON document: ``{"items": [...], "is_open": bool}``.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)


class MemorySlot:
    """Process-local slot; stores the serialized text so callers never share state."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = json.dumps(initial) if initial is not None else None

    def load(self) -> Optional[dict]:
        if self._data is None:
            return None
        return json.loads(self._data)

    def save(self, state: dict):
        self._data = json.dumps(state)

    def clear(self):
        self._data = None


class FileSlot:
    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable cart file %s", self.path, exc_info=True)
            return None

    def save(self, state: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + '.tmp')
        tmp.write_text(json.dumps(state), encoding='utf-8')
        tmp.replace(self.path)

    def clear(self):
        if self.path.exists():
            self.path.unlink()


class CacheSlot:
    """Slot backed by the Django cache, keyed per storefront session."""

    def __init__(self, key: Optional[str] = None, backend=None):
        self.key = key or settings.CART_STORAGE_KEY
        self.backend = backend or cache

    def load(self) -> Optional[dict]:
        return self.backend.get(self.key)

    def save(self, state: dict):
        self.backend.set(self.key, state, timeout=None)

    def clear(self):
        self.backend.delete(self.key)
