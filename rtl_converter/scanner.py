"""
Page Scanning

Collects the text content and layout statistics of a page before
conversion.
"""

import logging
import re
from typing import Iterable, List

from .document import DocumentNode
from .models import LayoutMode, NodeType, ScanResult

logger = logging.getLogger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")

_TOP_LEVEL_FRAME_TYPES = {NodeType.FRAME, NodeType.SECTION, NodeType.COMPONENT}
_LAYOUT_TYPES = {NodeType.FRAME, NodeType.COMPONENT}


def normalize_whitespace(text: str) -> str:
    """Collapse internal whitespace runs to single spaces and trim."""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def is_text_node(node: DocumentNode) -> bool:
    return node.type == NodeType.TEXT


def unique_texts(texts: Iterable[str]) -> List[str]:
    """Trimmed, non-empty, deduplicated strings in first-seen order."""
    seen = set()
    result = []
    for text in texts:
        text = (text or "").strip()
        if text and text not in seen:
            seen.add(text)
            result.append(text)
    return result


def scan_page(page: DocumentNode) -> ScanResult:
    """Count frames, texts and flow layouts on a page."""
    all_texts = []
    for node in page.find_all(is_text_node):
        text = node.characters.strip()
        if text:
            all_texts.append(text)

    layouts = page.find_all(
        lambda n: n.type in _LAYOUT_TYPES and n.layout_mode != LayoutMode.NONE
    )
    frame_count = sum(1 for child in page.children or [] if child.type in _TOP_LEVEL_FRAME_TYPES)

    result = ScanResult(
        page_name=page.name,
        frame_count=frame_count,
        total_texts=len(all_texts),
        unique_texts=unique_texts(all_texts),
        layout_count=len(layouts),
    )
    logger.info(
        f"Scanned '{page.name}': {frame_count} frames, {result.total_texts} texts "
        f"({len(result.unique_texts)} unique), {result.layout_count} auto layouts"
    )
    return result
