"""Tool modes and the pointer dispatch table.

What a button press starts depends on the active tool, the button and
what lies under the pointer. ``GESTURE_TABLE`` spells that out in full.
"""

from enum import Enum, IntEnum
from typing import Dict, Tuple


class ToolMode(Enum):
    """Editing tools."""
    SELECT = "select"
    VERTEX = "vertex"
    EDGE = "edge"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MouseButton(IntEnum):
    """Pointer buttons, numbered as GDK numbers them."""
    PRIMARY = 1
    MIDDLE = 2
    SECONDARY = 3


class TargetKind(Enum):
    """What lies under the pointer."""
    CANVAS = "canvas"
    VERTEX = "vertex"
    EDGE = "edge"
    EDGE_HANDLE = "edge_handle"


class GestureKind(Enum):
    """Active pointer gesture."""
    IDLE = "idle"
    PANNING = "panning"
    BOX_SELECTING = "box_selecting"
    DRAGGING_VERTEX = "dragging_vertex"
    DRAGGING_EDGE = "dragging_edge"
    DRAGGING_CURVE = "dragging_curve"
    PENDING_VERTEX = "pending_vertex"
    # Not a gesture: the press only selects or opens a menu
    EDGE_CLICK = "edge_click"
    VERTEX_MENU = "vertex_menu"


_P = MouseButton.PRIMARY
_S = MouseButton.SECONDARY
G = GestureKind

GESTURE_TABLE: Dict[Tuple[ToolMode, MouseButton, TargetKind], GestureKind] = {
    # Select
    (ToolMode.SELECT, _P, TargetKind.VERTEX): G.DRAGGING_VERTEX,
    (ToolMode.SELECT, _S, TargetKind.VERTEX): G.DRAGGING_EDGE,
    (ToolMode.SELECT, _P, TargetKind.CANVAS): G.BOX_SELECTING,
    (ToolMode.SELECT, _S, TargetKind.CANVAS): G.PENDING_VERTEX,
    # Vertex
    (ToolMode.VERTEX, _P, TargetKind.VERTEX): G.DRAGGING_VERTEX,
    (ToolMode.VERTEX, _S, TargetKind.VERTEX): G.VERTEX_MENU,
    (ToolMode.VERTEX, _P, TargetKind.CANVAS): G.PENDING_VERTEX,
    (ToolMode.VERTEX, _S, TargetKind.CANVAS): G.PENDING_VERTEX,
    # Edge
    (ToolMode.EDGE, _P, TargetKind.VERTEX): G.DRAGGING_EDGE,
    (ToolMode.EDGE, _S, TargetKind.VERTEX): G.DRAGGING_EDGE,
    (ToolMode.EDGE, _P, TargetKind.CANVAS): G.IDLE,
    (ToolMode.EDGE, _S, TargetKind.CANVAS): G.IDLE,
}

# Edges behave the same under every tool
for _mode in ToolMode:
    GESTURE_TABLE[(_mode, _P, TargetKind.EDGE)] = G.EDGE_CLICK
    GESTURE_TABLE[(_mode, _S, TargetKind.EDGE)] = G.EDGE_CLICK
    GESTURE_TABLE[(_mode, _P, TargetKind.EDGE_HANDLE)] = G.DRAGGING_CURVE
    GESTURE_TABLE[(_mode, _S, TargetKind.EDGE_HANDLE)] = G.EDGE_CLICK


def resolve_gesture(mode: ToolMode, button: int, target: TargetKind,
                    accel: bool = False) -> GestureKind:
    """Gesture started by pressing ``button`` over ``target`` under ``mode``.

    The middle button, or the primary button with the accelerator held,
    always pans.
    """
    if button == MouseButton.MIDDLE:
        return G.PANNING
    if button == MouseButton.PRIMARY and accel:
        return G.PANNING
    try:
        key = (mode, MouseButton(button), target)
    except ValueError:
        return G.IDLE
    return GESTURE_TABLE.get(key, G.IDLE)
