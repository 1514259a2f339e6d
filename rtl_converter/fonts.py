"""
Font Resolution

Loads the style variants of the target font family and maps an original
font style onto the closest loaded variant.
"""

import logging
from typing import Dict, List, Optional

from .document import DocumentHost, FontLoadError
from .models import FontName

logger = logging.getLogger(__name__)

DEFAULT_STYLES = ["Regular", "Bold", "Medium", "SemiBold", "Light"]

# (substring of the original style, target style), checked in order
WEIGHT_PRIORITY = [
    ("Bold", "Bold"),
    ("SemiBold", "SemiBold"),
    ("Semi Bold", "SemiBold"),
    ("Medium", "Medium"),
    ("Light", "Light"),
]


class FontUnavailableError(Exception):
    """No style of the target font family could be loaded."""

    def __init__(self, family: str):
        super().__init__(f"Could not load {family}. Please install it first.")
        self.family = family


async def load_target_fonts(
    host: DocumentHost,
    family: str,
    styles: Optional[List[str]] = None,
) -> Dict[str, FontName]:
    """
    Load every available style of ``family``.

    Styles that fail to load are left out of the result.
    """
    loaded: Dict[str, FontName] = {}
    for style in styles or DEFAULT_STYLES:
        font = FontName(family, style)
        try:
            await host.load_font(font)
        except FontLoadError as e:
            logger.debug(f"Skipping style: {e}")
            continue
        loaded[style] = font

    logger.info(f"Loaded {len(loaded)} styles of {family}: {', '.join(loaded) or 'none'}")
    return loaded


def select_target_font(
    original_style: Optional[str],
    available: Dict[str, FontName],
) -> Optional[FontName]:
    """
    Pick the loaded target font closest to an original style.

    Weight keywords are matched by substring in priority order
    Bold > SemiBold > "Semi Bold" > Medium > Light. Without a match the
    Regular variant is used, then any loaded variant, then None.
    """
    style = original_style or "Regular"
    for keyword, target_style in WEIGHT_PRIORITY:
        if keyword in style and target_style in available:
            return available[target_style]

    if "Regular" in available:
        return available["Regular"]
    if available:
        return next(iter(available.values()))
    return None
