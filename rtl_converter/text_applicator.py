"""
Text Application

Writes translated strings back into the document's text nodes, switches
them to the target font and right-aligns them.
"""

import logging
from typing import Dict, Optional

from .document import DEFAULT_FONT, DocumentHost, DocumentNode
from .fonts import select_target_font
from .models import FontName, SingleFont, TextAlign, TextAutoResize
from .scanner import is_text_node, normalize_whitespace

logger = logging.getLogger(__name__)


def lookup_translation(text: str, translations: Dict[str, str]) -> Optional[str]:
    """Exact trimmed lookup first, then the whitespace-collapsed form."""
    original = text.strip()
    target = translations.get(original)
    if not target:
        target = translations.get(normalize_whitespace(original))
    return target or None


async def load_node_fonts(host: DocumentHost, node: DocumentNode) -> None:
    """
    Load every font used by a text node.

    Must run before the node's content changes: once the characters are
    replaced the per-range fonts can no longer be queried.
    """
    spec = node.font_name
    if isinstance(spec, SingleFont):
        await host.load_font(spec.font)
        return
    for font in spec.distinct_fonts(len(node.characters)):
        await host.load_font(font)


async def apply_translations(
    host: DocumentHost,
    page: DocumentNode,
    translations: Dict[str, str],
    available_fonts: Dict[str, FontName],
    fallback_font: FontName = DEFAULT_FONT,
) -> int:
    """
    Replace translated text nodes on ``page``.

    Returns:
        Number of nodes whose content was replaced
    """
    translated = 0

    for node in page.find_all(is_text_node):
        original = node.characters.strip()
        target = lookup_translation(original, translations)
        if not target or target == original:
            continue

        try:
            await load_node_fonts(host, node)

            spec = node.font_name
            original_font = spec.font if isinstance(spec, SingleFont) else fallback_font
            original_resize = node.text_auto_resize

            node.characters = target

            target_font = select_target_font(original_font.style, available_fonts)
            if target_font is not None:
                node.font_name = target_font

            node.text_align_horizontal = TextAlign.RIGHT

            # Fixed boxes would clip text of a different length
            if original_resize == TextAutoResize.NONE:
                node.text_auto_resize = TextAutoResize.HEIGHT

            translated += 1
        except Exception as e:
            logger.warning(f"Failed: \"{original}\": {e}")

    logger.info(f"Applied {translated} translations")
    return translated


async def right_align_all_text(host: DocumentHost, page: DocumentNode) -> int:
    """Right-align every text node. Returns the number aligned."""
    count = 0
    for node in page.find_all(is_text_node):
        try:
            await load_node_fonts(host, node)
            node.text_align_horizontal = TextAlign.RIGHT
            count += 1
        except Exception as e:
            logger.warning(f"Could not align \"{node.characters.strip()}\": {e}")
    return count
