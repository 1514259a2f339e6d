"""
Layout Mirroring

Two passes that flip a page's geometry for right-to-left reading:

* flow mirroring reverses the children of horizontal auto-layout
  containers and anchors vertical ones to the right;
* fixed-position mirroring reflects the x offset of every direct child of
  a container without auto layout across that container's width.

Neither pass is safe to repeat. Running flow mirroring twice restores the
original child order, and running fixed-position mirroring twice moves
children back to where they started. Instance subtrees are never touched.
"""

import logging

from .document import DocumentNode
from .models import CounterAxisAlign, LayoutMode, NodeType

logger = logging.getLogger(__name__)

POSITION_TOLERANCE = 0.5


def _is_walkable(node: DocumentNode) -> bool:
    return node.has_children and node.type != NodeType.INSTANCE


def mirror_horizontal_layouts(root: DocumentNode) -> int:
    """
    Reverse horizontal auto layouts and right-anchor vertical ones.

    Returns:
        Number of containers whose child order was reversed
    """
    mirrored = 0

    def walk(node: DocumentNode) -> None:
        nonlocal mirrored
        if not _is_walkable(node):
            return

        if node.layout_mode == LayoutMode.HORIZONTAL:
            children = list(node.children)
            if len(children) > 1:
                for child in reversed(children):
                    node.append_child(child)
                mirrored += 1

        elif node.layout_mode == LayoutMode.VERTICAL:
            if node.counter_axis_align_items == CounterAxisAlign.MIN:
                node.counter_axis_align_items = CounterAxisAlign.MAX

        for child in list(node.children):
            walk(child)

    for child in list(root.children or []):
        walk(child)

    logger.info(f"Reversed {mirrored} horizontal layouts")
    return mirrored


def mirror_fixed_positions(root: DocumentNode, tolerance: float = POSITION_TOLERANCE) -> int:
    """
    Reflect children of fixed-position containers across the parent width.

    Each container is mirrored against its own current width before its
    descendants are visited, so nested containers compose outermost first.
    Auto-layout containers are descended into as well, since they may hold
    fixed-position containers further down.

    Returns:
        Number of children whose x offset changed
    """
    mirrored = 0

    def walk(node: DocumentNode) -> None:
        nonlocal mirrored
        if not _is_walkable(node):
            return

        if node.layout_mode == LayoutMode.NONE:
            parent_width = node.width
            if parent_width > 0:
                for child in node.children:
                    new_x = parent_width - child.x - child.width
                    if abs(new_x - child.x) > tolerance:
                        child.x = new_x
                        mirrored += 1

        for child in list(node.children):
            walk(child)

    for child in list(root.children or []):
        walk(child)

    logger.info(f"Mirrored {mirrored} fixed elements")
    return mirrored
