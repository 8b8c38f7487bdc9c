import pytest

from zxplorer.tools import ToolMode, MouseButton, TargetKind, GestureKind, resolve_gesture

P = MouseButton.PRIMARY
S = MouseButton.SECONDARY


@pytest.mark.parametrize("mode, button, target, expected", [
    (ToolMode.SELECT, P, TargetKind.VERTEX, GestureKind.DRAGGING_VERTEX),
    (ToolMode.SELECT, S, TargetKind.VERTEX, GestureKind.DRAGGING_EDGE),
    (ToolMode.SELECT, P, TargetKind.CANVAS, GestureKind.BOX_SELECTING),
    (ToolMode.SELECT, S, TargetKind.CANVAS, GestureKind.PENDING_VERTEX),
    (ToolMode.VERTEX, P, TargetKind.VERTEX, GestureKind.DRAGGING_VERTEX),
    (ToolMode.VERTEX, S, TargetKind.VERTEX, GestureKind.VERTEX_MENU),
    (ToolMode.VERTEX, P, TargetKind.CANVAS, GestureKind.PENDING_VERTEX),
    (ToolMode.VERTEX, S, TargetKind.CANVAS, GestureKind.PENDING_VERTEX),
    (ToolMode.EDGE, P, TargetKind.VERTEX, GestureKind.DRAGGING_EDGE),
    (ToolMode.EDGE, S, TargetKind.VERTEX, GestureKind.DRAGGING_EDGE),
    (ToolMode.EDGE, P, TargetKind.CANVAS, GestureKind.IDLE),
])
def test_gesture_table(mode, button, target, expected):
    assert resolve_gesture(mode, button, target) == expected


@pytest.mark.parametrize("mode", list(ToolMode))
def test_edges_behave_the_same_under_every_tool(mode):
    assert resolve_gesture(mode, P, TargetKind.EDGE) == GestureKind.EDGE_CLICK
    assert resolve_gesture(mode, S, TargetKind.EDGE) == GestureKind.EDGE_CLICK
    assert resolve_gesture(mode, P, TargetKind.EDGE_HANDLE) == GestureKind.DRAGGING_CURVE


@pytest.mark.parametrize("target", list(TargetKind))
def test_middle_button_always_pans(target):
    assert resolve_gesture(ToolMode.EDGE, MouseButton.MIDDLE, target) == GestureKind.PANNING


def test_primary_with_accel_pans():
    assert resolve_gesture(ToolMode.SELECT, P, TargetKind.VERTEX, accel=True) == GestureKind.PANNING
    # Accel only changes the primary button
    assert resolve_gesture(ToolMode.SELECT, S, TargetKind.VERTEX, accel=True) == GestureKind.DRAGGING_EDGE


def test_unknown_button_is_ignored():
    assert resolve_gesture(ToolMode.SELECT, 8, TargetKind.CANVAS) == GestureKind.IDLE


def test_tool_labels():
    assert [m.label for m in ToolMode] == ["Select", "Vertex", "Edge"]
