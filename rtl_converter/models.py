"""
Data Models for the RTL Converter

This module defines the data structures used throughout the pipeline.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Union, Any
from enum import Enum


class NodeType(Enum):
    """Host document node types relevant to the conversion."""
    PAGE = "PAGE"
    TEXT = "TEXT"
    FRAME = "FRAME"
    COMPONENT = "COMPONENT"
    INSTANCE = "INSTANCE"  # Opaque reusable component, never mutated
    SECTION = "SECTION"
    GROUP = "GROUP"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NodeType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class LayoutMode(Enum):
    """Auto-layout flow direction of a container."""
    NONE = "NONE"
    HORIZONTAL = "HORIZONTAL"
    VERTICAL = "VERTICAL"
    OTHER = "OTHER"  # A newer layout kind, left untouched


class CounterAxisAlign(Enum):
    MIN = "MIN"
    CENTER = "CENTER"
    MAX = "MAX"
    BASELINE = "BASELINE"


class TextAlign(Enum):
    LEFT = "LEFT"
    CENTER = "CENTER"
    RIGHT = "RIGHT"
    JUSTIFIED = "JUSTIFIED"


class TextAutoResize(Enum):
    NONE = "NONE"
    HEIGHT = "HEIGHT"
    WIDTH_AND_HEIGHT = "WIDTH_AND_HEIGHT"
    TRUNCATE = "TRUNCATE"


class LogType(Enum):
    """Severity tag carried by UI log messages."""
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FontName:
    """A font family + style pair, as the host identifies fonts."""
    family: str
    style: str = "Regular"

    def to_dict(self) -> Dict[str, str]:
        return {"family": self.family, "style": self.style}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FontName":
        return cls(family=data["family"], style=data.get("style") or "Regular")


@dataclass(frozen=True)
class SingleFont:
    """The whole text node uses one font."""
    font: FontName


@dataclass(frozen=True)
class MixedFont:
    """
    The text node uses several fonts across character ranges.

    ``range_font(start, end)`` returns the font of that range, or None when
    the range itself is mixed.
    """
    range_font: Callable[[int, int], Optional[FontName]]

    def distinct_fonts(self, length: int) -> Iterator[FontName]:
        """Yield every distinct font used, in first-seen order."""
        seen = set()
        for i in range(length):
            font = self.range_font(i, i + 1)
            if font is not None and font not in seen:
                seen.add(font)
                yield font


FontSpec = Union[SingleFont, MixedFont]


@dataclass
class ScanResult:
    """Summary of the current page, sent to the UI before conversion."""
    page_name: str
    frame_count: int
    total_texts: int
    unique_texts: List[str] = field(default_factory=list)
    layout_count: int = 0

    def to_message(self) -> Dict[str, Any]:
        return {
            "type": "scan-result",
            "pageName": self.page_name,
            "frameCount": self.frame_count,
            "totalTexts": self.total_texts,
            "uniqueTexts": len(self.unique_texts),
            "layoutCount": self.layout_count,
            "texts": list(self.unique_texts),
        }


@dataclass
class ConversionResult:
    """Contains the aggregated counts of one conversion run."""
    success: bool = False
    translations_received: int = 0
    translated: int = 0
    aligned: int = 0
    mirrored_layouts: int = 0
    mirrored_fixed: int = 0
    fonts_loaded: int = 0
    processing_time_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def mirrored(self) -> int:
        return self.mirrored_layouts + self.mirrored_fixed

    def get_summary(self) -> Dict[str, Any]:
        """Generate a summary of the conversion result."""
        return {
            "success": self.success,
            "translations_received": self.translations_received,
            "translated": self.translated,
            "aligned": self.aligned,
            "mirrored_layouts": self.mirrored_layouts,
            "mirrored_fixed": self.mirrored_fixed,
            "fonts_loaded": self.fonts_loaded,
            "processing_time_seconds": round(self.processing_time_seconds, 2),
            "error": self.error,
        }
