"""
RTL Converter

Converts a design page from left-to-right to right-to-left: translates its
text through Gemini, re-applies it with a target font and right alignment,
and mirrors auto-layout and fixed-position geometry.
"""

__version__ = "2.0.0"

from .document import DocumentHost, DocumentNode, InMemoryDocumentHost
from .translator import GeminiBackend, Translator
from .mirror import mirror_fixed_positions, mirror_horizontal_layouts
from .pipeline import RTLConversionPipeline
from .handler import MessageHandler

__all__ = [
    "DocumentHost",
    "DocumentNode",
    "InMemoryDocumentHost",
    "GeminiBackend",
    "Translator",
    "mirror_fixed_positions",
    "mirror_horizontal_layouts",
    "RTLConversionPipeline",
    "MessageHandler",
]
