"""
Host Document Module

The conversion never owns the document tree. It works through a narrow
capability interface: a ``DocumentHost`` that exposes the current page,
asynchronous font loading and user notifications, and ``DocumentNode``
handles whose attributes and child order may be mutated in place.

An in-memory host backed by Figma-style JSON is provided for the command
line and for tests.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from .models import (
    CounterAxisAlign,
    FontName,
    FontSpec,
    LayoutMode,
    MixedFont,
    NodeType,
    SingleFont,
    TextAlign,
    TextAutoResize,
)

logger = logging.getLogger(__name__)

DEFAULT_FONT = FontName("Inter", "Regular")

# Keys managed by DocumentNode; everything else is carried through untouched
_MANAGED_KEYS = {
    "type", "name", "children", "layoutMode", "counterAxisAlignItems",
    "x", "width", "characters", "fontName", "fontRuns",
    "textAlignHorizontal", "textAutoResize",
}


def _parse_enum(enum_cls, data: Dict[str, Any], key: str, unknown=None):
    """
    Read an enum-valued property.

    Returns (value, recognized). Values this version does not know map to
    ``unknown`` and the raw property is carried through in ``extra``.
    """
    raw = data.get(key)
    if not raw:
        return None, True
    try:
        return enum_cls(raw), True
    except ValueError:
        logger.debug(f"Unrecognized {key} value {raw!r} on {data.get('name', '')!r}")
        return unknown, False


class FontLoadError(Exception):
    """Raised when the host cannot load a font family/style."""

    def __init__(self, font: FontName):
        super().__init__(f"Font not available: {font.family} {font.style}")
        self.font = font


class DocumentNode:
    """
    Handle to one node of the host document tree.

    Container nodes have a ``children`` list (possibly empty); leaf nodes
    have ``children = None``.
    """

    def __init__(
        self,
        node_type: Union[NodeType, str],
        name: str = "",
        children: Optional[List["DocumentNode"]] = None,
        layout_mode: Optional[LayoutMode] = None,
        counter_axis_align_items: Optional[CounterAxisAlign] = None,
        x: float = 0.0,
        width: float = 0.0,
        characters: str = "",
        font: Optional[FontName] = None,
        font_runs: Optional[List[Tuple[int, FontName]]] = None,
        text_align_horizontal: Optional[TextAlign] = None,
        text_auto_resize: Optional[TextAutoResize] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        if isinstance(node_type, NodeType):
            self.type = node_type
            self._raw_type = node_type.value
        else:
            self.type = NodeType.parse(node_type)
            self._raw_type = node_type
        self.name = name
        self.parent: Optional["DocumentNode"] = None
        self.children: Optional[List["DocumentNode"]] = None
        if children is not None:
            self.children = []
            for child in children:
                self.append_child(child)
        self._layout_mode = layout_mode
        self.counter_axis_align_items = counter_axis_align_items
        self.x = float(x)
        self.width = float(width)
        self._characters = characters
        if font_runs:
            self._font_runs = list(font_runs)
        else:
            self._font_runs = [(len(characters), font or DEFAULT_FONT)]
        self.text_align_horizontal = text_align_horizontal
        self.text_auto_resize = text_auto_resize
        self.extra = dict(extra or {})

    def __repr__(self) -> str:
        return f"DocumentNode({self._raw_type}, name={self.name!r})"

    # -- tree ---------------------------------------------------------------

    @property
    def has_children(self) -> bool:
        return self.children is not None

    def append_child(self, child: "DocumentNode") -> None:
        """Move ``child`` to the end of this node's children."""
        if self.children is None:
            raise TypeError(f"{self!r} cannot have children")
        if child.parent is not None and child.parent.children is not None:
            child.parent.children.remove(child)
        self.children.append(child)
        child.parent = self

    def walk(self) -> Iterable["DocumentNode"]:
        """Yield all descendants depth-first, excluding this node."""
        for child in self.children or []:
            yield child
            yield from child.walk()

    def find_all(self, predicate: Callable[["DocumentNode"], bool]) -> List["DocumentNode"]:
        return [node for node in self.walk() if predicate(node)]

    # -- layout -------------------------------------------------------------

    @property
    def layout_mode(self) -> LayoutMode:
        return self._layout_mode or LayoutMode.NONE

    @layout_mode.setter
    def layout_mode(self, value: LayoutMode) -> None:
        self._layout_mode = value

    # -- text ---------------------------------------------------------------

    @property
    def characters(self) -> str:
        return self._characters

    @characters.setter
    def characters(self, value: str) -> None:
        # New content takes the style of the first character
        first_font = self._font_runs[0][1] if self._font_runs else DEFAULT_FONT
        self._characters = value
        self._font_runs = [(len(value), first_font)]

    @property
    def font_name(self) -> FontSpec:
        fonts = {font for _, font in self._font_runs}
        if len(fonts) <= 1:
            return SingleFont(self._font_runs[0][1] if self._font_runs else DEFAULT_FONT)
        return MixedFont(self.get_range_font_name)

    @font_name.setter
    def font_name(self, value: FontName) -> None:
        self._font_runs = [(len(self._characters), value)]

    def get_range_font_name(self, start: int, end: int) -> Optional[FontName]:
        """Return the font used across [start, end), or None if it is mixed."""
        fonts = set()
        offset = 0
        for length, font in self._font_runs:
            run_end = offset + length
            if offset < end and run_end > start:
                fonts.add(font)
            offset = run_end
        if len(fonts) == 1:
            return fonts.pop()
        return None

    # -- serialization ------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentNode":
        font = FontName.from_dict(data["fontName"]) if isinstance(data.get("fontName"), dict) else None
        font_runs = None
        if data.get("fontRuns"):
            font_runs = [
                (int(run["length"]), FontName.from_dict(run["fontName"]))
                for run in data["fontRuns"]
            ]
        children = None
        if "children" in data:
            children = [cls.from_dict(child) for child in data["children"]]

        layout_mode, layout_known = _parse_enum(LayoutMode, data, "layoutMode", LayoutMode.OTHER)
        counter_align, counter_known = _parse_enum(CounterAxisAlign, data, "counterAxisAlignItems")
        text_align, align_known = _parse_enum(TextAlign, data, "textAlignHorizontal")
        auto_resize, resize_known = _parse_enum(TextAutoResize, data, "textAutoResize")
        unrecognized = {
            key for key, known in (
                ("layoutMode", layout_known),
                ("counterAxisAlignItems", counter_known),
                ("textAlignHorizontal", align_known),
                ("textAutoResize", resize_known),
            ) if not known
        }

        return cls(
            node_type=data.get("type", "OTHER"),
            name=data.get("name", ""),
            children=children,
            layout_mode=layout_mode,
            counter_axis_align_items=counter_align,
            x=data.get("x", 0.0),
            width=data.get("width", 0.0),
            characters=data.get("characters", ""),
            font=font,
            font_runs=font_runs,
            text_align_horizontal=text_align,
            text_auto_resize=auto_resize,
            extra={
                k: v for k, v in data.items()
                if k not in _MANAGED_KEYS or k in unrecognized
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self._raw_type}
        if self.name:
            data["name"] = self.name
        data.update(self.extra)
        if self.type != NodeType.PAGE:
            data["x"] = self.x
            data["width"] = self.width
        if self._layout_mode not in (None, LayoutMode.OTHER):
            data["layoutMode"] = self._layout_mode.value
        if self.counter_axis_align_items is not None:
            data["counterAxisAlignItems"] = self.counter_axis_align_items.value
        if self.type == NodeType.TEXT:
            data["characters"] = self._characters
            spec = self.font_name
            if isinstance(spec, SingleFont):
                data["fontName"] = spec.font.to_dict()
            else:
                data["fontRuns"] = [
                    {"length": length, "fontName": font.to_dict()}
                    for length, font in self._font_runs
                ]
            if self.text_align_horizontal is not None:
                data["textAlignHorizontal"] = self.text_align_horizontal.value
            if self.text_auto_resize is not None:
                data["textAutoResize"] = self.text_auto_resize.value
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


class DocumentHost(ABC):
    """Abstract base class for the host application owning the document."""

    @property
    @abstractmethod
    def current_page(self) -> DocumentNode:
        """The page being converted."""
        pass

    @abstractmethod
    async def load_font(self, font: FontName) -> None:
        """Load a font so text using it can be edited. Raises FontLoadError."""
        pass

    @abstractmethod
    def notify(self, message: str, error: bool = False, timeout: Optional[int] = None) -> None:
        """Show a user-facing notification."""
        pass


class InMemoryDocumentHost(DocumentHost):
    """
    Host backed by an in-memory node tree.

    ``available_fonts`` restricts which fonts can be loaded. Entries are
    either ``FontName`` instances or plain family names (every style of that
    family loads). ``None`` means every font loads.
    """

    def __init__(
        self,
        page: DocumentNode,
        available_fonts: Optional[Iterable[Union[str, FontName]]] = None,
    ):
        self._page = page
        self._families: Optional[Set[str]] = None
        self._fonts: Optional[Set[FontName]] = None
        if available_fonts is not None:
            self._families = {f for f in available_fonts if isinstance(f, str)}
            self._fonts = {f for f in available_fonts if isinstance(f, FontName)}
        self.loaded_fonts: Set[FontName] = set()
        self.notifications: List[Tuple[str, bool]] = []

    @property
    def current_page(self) -> DocumentNode:
        return self._page

    def is_available(self, font: FontName) -> bool:
        if self._families is None:
            return True
        return font.family in self._families or font in self._fonts

    async def load_font(self, font: FontName) -> None:
        if not self.is_available(font):
            raise FontLoadError(font)
        self.loaded_fonts.add(font)

    def notify(self, message: str, error: bool = False, timeout: Optional[int] = None) -> None:
        self.notifications.append((message, error))
        if error:
            logger.error(message)
        else:
            logger.info(message)


def load_document(path: str) -> DocumentNode:
    """Load a page tree from a Figma-style JSON export."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    # Accept either a bare page or a {"document": page} wrapper
    if "document" in data and isinstance(data["document"], dict):
        data = data["document"]
    return DocumentNode.from_dict(data)


def save_document(page: DocumentNode, path: str) -> None:
    """Write a page tree back as JSON."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(page.to_dict(), f, ensure_ascii=False, indent=2)
