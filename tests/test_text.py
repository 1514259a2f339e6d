"""
Unit tests for font resolution and text application.

Run with: pytest tests/ -v
"""

import asyncio

import pytest

from rtl_converter.document import DocumentNode, InMemoryDocumentHost
from rtl_converter.fonts import DEFAULT_STYLES, load_target_fonts, select_target_font
from rtl_converter.models import FontName, MixedFont, NodeType, SingleFont, TextAlign, TextAutoResize
from rtl_converter.text_applicator import (
    apply_translations,
    lookup_translation,
    right_align_all_text,
)

INTER_REGULAR = FontName("Inter", "Regular")
INTER_BOLD = FontName("Inter", "Bold")


def fonts(*styles, family="Rubik"):
    return {style: FontName(family, style) for style in styles}


def text(characters, font=INTER_REGULAR, resize=None, **kwargs):
    return DocumentNode(
        NodeType.TEXT, characters=characters, font=font,
        text_align_horizontal=TextAlign.LEFT, text_auto_resize=resize, **kwargs
    )


def page(*children):
    return DocumentNode(NodeType.PAGE, name="Page 1", children=list(children))


class TestFontSelection:
    """Tests for mapping an original style onto a loaded target style."""

    def test_semibold_prefers_bold_when_semibold_missing(self):
        """'SemiBold' contains 'Bold', and Bold comes first in priority."""
        available = fonts("Regular", "Bold")
        assert select_target_font("SemiBold", available) == available["Bold"]

    def test_semibold_selected_when_available(self):
        available = fonts("Regular", "SemiBold")
        assert select_target_font("SemiBold", available) == available["SemiBold"]

    def test_semi_bold_spelling(self):
        available = fonts("Regular", "SemiBold")
        assert select_target_font("Semi Bold", available) == available["SemiBold"]

    def test_priority_order(self):
        """Bold > SemiBold > Medium > Light, checked by substring."""
        available = fonts("Regular", "Bold", "SemiBold", "Medium", "Light")
        assert select_target_font("Bold", available).style == "Bold"
        assert select_target_font("ExtraBold", available).style == "Bold"
        assert select_target_font("Medium", available).style == "Medium"
        assert select_target_font("Light Italic", available).style == "Light"
        assert select_target_font("ExtraLight", available).style == "Light"
        assert select_target_font("Italic", available).style == "Regular"

    def test_regular_only_when_weights_missing(self):
        """Regular is used only if the matching weights are all absent."""
        available = fonts("Regular", "Light")
        assert select_target_font("Bold", available).style == "Regular"
        assert select_target_font("Medium", available).style == "Regular"
        assert select_target_font("Light", available).style == "Light"

    def test_missing_style_treated_as_regular(self):
        available = fonts("Regular", "Bold")
        assert select_target_font(None, available).style == "Regular"
        assert select_target_font("", available).style == "Regular"

    def test_any_style_when_regular_missing(self):
        available = fonts("Medium")
        assert select_target_font("Regular", available).style == "Medium"

    def test_none_when_nothing_loaded(self):
        assert select_target_font("Bold", {}) is None


class TestFontLoading:
    """Tests for loading target font variants."""

    def test_missing_styles_absent(self):
        host = InMemoryDocumentHost(
            page(), available_fonts=[FontName("Rubik", "Regular"), FontName("Rubik", "Bold")]
        )

        loaded = asyncio.run(load_target_fonts(host, "Rubik"))

        assert set(loaded) == {"Regular", "Bold"}
        assert loaded["Bold"] == FontName("Rubik", "Bold")

    def test_installed_family_loads_every_style(self):
        host = InMemoryDocumentHost(page(), available_fonts=["Rubik"])

        loaded = asyncio.run(load_target_fonts(host, "Rubik"))

        assert list(loaded) == DEFAULT_STYLES

    def test_unknown_family_loads_nothing(self):
        host = InMemoryDocumentHost(page(), available_fonts=["Rubik"])

        assert asyncio.run(load_target_fonts(host, "Vazirmatn")) == {}


class TestTranslationLookup:
    """Tests for the two-tier lookup."""

    def test_exact_match(self):
        assert lookup_translation("  Save ", {"Save": "حفظ"}) == "حفظ"

    def test_whitespace_normalized_match(self):
        assert lookup_translation("Sign in\n   now", {"Sign in now": "سجّل"}) == "سجّل"

    def test_no_fuzzy_matching(self):
        assert lookup_translation("save", {"Save": "حفظ"}) is None
        assert lookup_translation("Save!", {"Save": "حفظ"}) is None


class TestApplyTranslations:
    """Tests for writing translations into text nodes."""

    def test_node_updated(self):
        """Test content, font, alignment and auto-resize changes."""
        node = text("Welcome back", font=INTER_BOLD, resize=TextAutoResize.NONE)
        root = page(node)
        host = InMemoryDocumentHost(root)
        available = fonts("Regular", "Bold")

        count = asyncio.run(apply_translations(host, root, {"Welcome back": "مرحبًا بعودتك"}, available))

        assert count == 1
        assert node.characters == "مرحبًا بعودتك"
        assert node.font_name == SingleFont(FontName("Rubik", "Bold"))
        assert node.text_align_horizontal == TextAlign.RIGHT
        assert node.text_auto_resize == TextAutoResize.HEIGHT
        assert INTER_BOLD in host.loaded_fonts

    def test_auto_width_kept(self):
        node = text("Save", resize=TextAutoResize.WIDTH_AND_HEIGHT)
        root = page(node)

        asyncio.run(apply_translations(InMemoryDocumentHost(root), root, {"Save": "حفظ"}, fonts("Regular")))

        assert node.text_auto_resize == TextAutoResize.WIDTH_AND_HEIGHT

    def test_untranslated_and_identical_nodes_skipped(self):
        same = text("Google")
        missing = text("Untranslated")
        root = page(same, missing)

        count = asyncio.run(apply_translations(
            InMemoryDocumentHost(root), root, {"Google": "Google"}, fonts("Regular")
        ))

        assert count == 0
        assert same.font_name == SingleFont(INTER_REGULAR)
        assert missing.text_align_horizontal == TextAlign.LEFT

    def test_mixed_fonts_all_loaded(self):
        """Every font of a mixed node is loaded before the content changes."""
        node = DocumentNode(
            NodeType.TEXT,
            characters="Hello world",
            font_runs=[(6, INTER_REGULAR), (5, INTER_BOLD)],
        )
        root = page(node)
        host = InMemoryDocumentHost(root)
        assert isinstance(node.font_name, MixedFont)

        count = asyncio.run(apply_translations(host, root, {"Hello world": "مرحبا بالعالم"}, fonts("Regular", "Bold")))

        assert count == 1
        assert host.loaded_fonts == {INTER_REGULAR, INTER_BOLD}
        # Mixed nodes are treated as Regular
        assert node.font_name == SingleFont(FontName("Rubik", "Regular"))

    def test_node_failure_does_not_stop_others(self):
        """A node whose font cannot load is skipped, the rest continue."""
        broken = text("Broken", font=FontName("Missing Sans", "Regular"))
        fine = text("Fine")
        root = page(broken, fine)
        host = InMemoryDocumentHost(root, available_fonts=["Inter", "Rubik"])

        count = asyncio.run(apply_translations(
            host, root, {"Broken": "مكسور", "Fine": "جيد"}, fonts("Regular")
        ))

        assert count == 1
        assert broken.characters == "Broken"
        assert fine.characters == "جيد"

    def test_nested_text_nodes_found(self):
        node = text("Profile")
        root = page(DocumentNode(NodeType.FRAME, children=[DocumentNode(NodeType.FRAME, children=[node])]))

        count = asyncio.run(apply_translations(InMemoryDocumentHost(root), root, {"Profile": "الملف"}, fonts("Regular")))

        assert count == 1


class TestRightAlign:

    def test_all_text_right_aligned(self):
        nodes = [text("One"), text("Two"), text("Three", font=FontName("Missing Sans", "Regular"))]
        root = page(*nodes)
        host = InMemoryDocumentHost(root, available_fonts=["Inter"])

        count = asyncio.run(right_align_all_text(host, root))

        assert count == 2
        assert nodes[0].text_align_horizontal == TextAlign.RIGHT
        assert nodes[1].text_align_horizontal == TextAlign.RIGHT
        assert nodes[2].text_align_horizontal == TextAlign.LEFT


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
