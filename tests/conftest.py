import pytest

from zxplorer.controller import InteractionController, PointerEvent
from zxplorer.geometry import graph_to_screen
from zxplorer.graph import ZXGraph, VertexType, EdgeType
from zxplorer.settings import EditorSettings


@pytest.fixture
def settings():
    return EditorSettings()


@pytest.fixture
def empty_controller(settings):
    return InteractionController(ZXGraph(), settings)


@pytest.fixture
def line_graph():
    """Boundary - Z - X - Boundary along row 0."""
    g = ZXGraph()
    b0 = g.add_vertex(VertexType.BOUNDARY, 0, 0)
    z = g.add_vertex(VertexType.Z, 1, 0)
    x = g.add_vertex(VertexType.X, 2, 0)
    b1 = g.add_vertex(VertexType.BOUNDARY, 3, 0)
    g.add_edge(b0, z)
    g.add_edge(z, x, EdgeType.HADAMARD)
    g.add_edge(x, b1)
    return g


@pytest.fixture
def controller(line_graph, settings):
    return InteractionController(line_graph, settings)


@pytest.fixture
def messages(controller):
    received = []
    controller.on_message = received.append
    return received


def screen_pos(controller, row, col):
    vp = controller.viewport
    return graph_to_screen(row, col, controller.settings.scale, vp.zoom, vp.pan)


def click(controller, x, y, button=1, shift=False, ctrl=False, n_press=1):
    event = PointerEvent(x, y, button, shift, ctrl, n_press)
    controller.press(event)
    controller.release(event)


def drag(controller, start, end, button=1, shift=False, ctrl=False):
    controller.press(PointerEvent(start[0], start[1], button, shift, ctrl))
    controller.motion((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
    controller.motion(end[0], end[1])
    controller.release(PointerEvent(end[0], end[1], button, shift, ctrl))
