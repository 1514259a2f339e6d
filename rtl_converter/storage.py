"""
Credential Storage

Persistent key-value storage for the translation API key.
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Dict, Optional

logger = logging.getLogger(__name__)

STORAGE_KEY = "rtl-converter-gemini-key"
DEFAULT_STORAGE_PATH = os.path.join("~", ".config", "rtl-converter", "storage.json")


class KeyStore(ABC):
    """Abstract base class for persistent string storage."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        pass


class MemoryKeyStore(KeyStore):
    """Non-persistent store, for embedding and tests."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})

    async def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    async def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileKeyStore(KeyStore):
    """Store backed by a small JSON file."""

    def __init__(self, path: str = DEFAULT_STORAGE_PATH):
        self.path = os.path.expanduser(path)

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, values: Dict[str, str]) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        # The file holds an API key; create it owner-only
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(values, f, indent=2)
        os.chmod(self.path, 0o600)

    async def get(self, key: str) -> Optional[str]:
        values = await asyncio.to_thread(self._read)
        return values.get(key)

    async def set(self, key: str, value: str) -> None:
        values = await asyncio.to_thread(self._read)
        values[key] = value
        await asyncio.to_thread(self._write, values)
        logger.info(f"Saved '{key}' to {self.path}")
