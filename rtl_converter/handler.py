"""
UI Message Handling

Dispatches inbound UI messages (``save-key``, ``scan``, ``convert``) to the
pipeline.
"""

import logging
from typing import Any, Dict, Optional

from .document import DocumentHost
from .pipeline import RTLConversionPipeline
from .storage import STORAGE_KEY, KeyStore

logger = logging.getLogger(__name__)


class MessageHandler:
    """Bridges a UI session to the conversion pipeline."""

    def __init__(
        self,
        host: DocumentHost,
        pipeline: RTLConversionPipeline,
        key_store: KeyStore,
    ):
        self.host = host
        self.pipeline = pipeline
        self.key_store = key_store

    async def start(self) -> Optional[str]:
        """Send a previously saved API key to the UI, if there is one."""
        try:
            key = await self.key_store.get(STORAGE_KEY)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read saved key: {e}")
            return None
        if key:
            self.pipeline.channel.post({"type": "key-loaded", "key": key})
        return key

    async def handle(self, msg: Dict[str, Any]) -> Any:
        kind = msg.get("type")

        if kind == "save-key":
            key = msg.get("key")
            if not key:
                logger.warning("Ignoring save-key message without a key")
                return None
            await self.key_store.set(STORAGE_KEY, key)
            self.host.notify("API key saved!")
            return None

        if kind == "scan":
            return self.pipeline.scan(self.host)

        if kind == "convert":
            font_family = msg.get("fontFamily")
            if not font_family:
                logger.warning("Ignoring convert message without a fontFamily")
                return None
            return await self.pipeline.convert(
                self.host,
                api_key=msg.get("apiKey", ""),
                target_language=msg.get("targetLang", "ar"),
                font_family=font_family,
                texts=msg.get("texts", []),
            )

        logger.warning(f"Ignoring unknown UI message type: {kind!r}")
        return None
