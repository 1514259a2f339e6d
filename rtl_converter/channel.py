"""
UI Message Channel

One-directional stream of messages from the converter to the UI:
``scan-result``, ``progress``, ``log``, ``done``, ``error`` and
``key-loaded``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from .models import LogType

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    LogType.INFO: logging.INFO,
    LogType.SUCCESS: logging.INFO,
    LogType.ERROR: logging.WARNING,
}


class MessageChannel(ABC):
    """Abstract base class for the UI channel."""

    @abstractmethod
    def post(self, message: Dict[str, Any]) -> None:
        """Deliver one message to the UI."""
        pass

    def progress(self, percent: int, message: str) -> None:
        self.post({"type": "progress", "percent": percent, "message": message})

    def log(self, message: str, log_type: LogType = LogType.INFO) -> None:
        self.post({"type": "log", "message": message, "logType": log_type.value})

    def error(self, message: str) -> None:
        self.post({"type": "error", "message": message})

    def done(self, translated: int, mirrored: int) -> None:
        self.post({"type": "done", "translated": translated, "mirrored": mirrored})


class LoggingChannel(MessageChannel):
    """Channel that writes every message to the Python log."""

    def post(self, message: Dict[str, Any]) -> None:
        kind = message.get("type")
        if kind == "log":
            level = _LOG_LEVELS.get(LogType(message.get("logType", "info")), logging.INFO)
            logger.log(level, message["message"])
        elif kind == "progress":
            logger.info(f"[{message['percent']:3d}%] {message['message']}")
        elif kind == "error":
            logger.error(message["message"])
        elif kind == "done":
            logger.info(f"Done: translated {message['translated']}, mirrored {message['mirrored']}")
        else:
            logger.debug(f"UI message: {kind}")


class RecordingChannel(LoggingChannel):
    """Channel that keeps every message, e.g. for a UI bridge or tests."""

    def __init__(self):
        self.messages: List[Dict[str, Any]] = []

    def post(self, message: Dict[str, Any]) -> None:
        self.messages.append(message)
        super().post(message)

    def of_type(self, kind: str) -> List[Dict[str, Any]]:
        return [m for m in self.messages if m.get("type") == kind]
