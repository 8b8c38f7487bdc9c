"""Interaction controller for the ZX-diagram editor.

Turns pointer and keyboard events into graph mutations. Holds all session
state (graph, selection, history, clipboard, viewport and the active
gesture) so the canvas only has to forward events and paint what it finds
here.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Callable, Set, Tuple

from zxplorer.graph import (
    ZXGraph, Vertex, EdgeKey, VertexType, EdgeType,
    GraphError, InvalidSnapshot, parse_phase,
)
from zxplorer.geometry import (
    Viewport, DisplayEdge, CurvePath, VERTEX_RADIUS, graph_to_canvas, screen_to_graph,
    snap_point, compute_perpendicular, distance, distance_to_curve, distance_to_self_loop,
    self_loop_circle, layout_parallel_edges, vertex_radius,
)
from zxplorer.geometry import edge_path as build_edge_path
from zxplorer.selection import Selection
from zxplorer.undo import HistoryManager, SnapshotRestoreError
from zxplorer.clipboard import ClipboardManager
from zxplorer.settings import EditorSettings
from zxplorer.tools import ToolMode, MouseButton, TargetKind, GestureKind, resolve_gesture
from zxplorer import simplify as simplification

logger = logging.getLogger(__name__)

# Canvas-space sizes (pixels before zoom)
EDGE_HIT_TOLERANCE = 8.0
HANDLE_RADIUS = 8.0

# Pointer travel (screen pixels) that turns a click into a drag
MOVE_THRESHOLD = 3.0

CURVE_DRAG_FACTOR = 2.0
WHEEL_ZOOM_IN = 1.1
WHEEL_ZOOM_OUT = 0.9
SCROLL_PAN_STEP = 40.0
FIT_MARGIN = 40.0

TYPE_KEYS = {"z": VertexType.Z, "x": VertexType.X, "h": VertexType.H_BOX}
TOOL_KEYS = {"s": ToolMode.SELECT, "v": ToolMode.VERTEX, "w": ToolMode.EDGE}
ARROW_KEYS = {"Left": (-1, 0), "Right": (1, 0), "Up": (0, -1), "Down": (0, 1)}


@dataclass
class PointerEvent:
    """A button press or release in screen coordinates."""
    x: float
    y: float
    button: int = MouseButton.PRIMARY
    shift: bool = False
    ctrl: bool = False
    n_press: int = 1


@dataclass
class Target:
    """What lies under the pointer."""
    kind: TargetKind
    vertex: Optional[Vertex] = None
    edge: Optional[DisplayEdge] = None
    edge_index: Optional[int] = None


@dataclass
class GestureState:
    """The single active pointer gesture and its transient display state."""
    kind: GestureKind = GestureKind.IDLE
    button: int = 0
    start_x: float = 0.0
    start_y: float = 0.0
    last_x: float = 0.0
    last_y: float = 0.0
    moved: bool = False
    toggle: bool = False
    # Dragged vertex, or source of a new edge
    vertex_id: Optional[int] = None
    # Pointer-to-vertex offset at press, graph units
    grab_offset: Tuple[float, float] = (0.0, 0.0)
    # Proposed (row, col) of the dragged vertex
    proposed: Optional[Tuple[float, float]] = None
    # Endpoint of the edge preview, graph units
    preview: Optional[Tuple[float, float]] = None
    edge_index: Optional[int] = None
    pan_start: Tuple[float, float] = (0.0, 0.0)

    @property
    def active(self) -> bool:
        return self.kind != GestureKind.IDLE

    def box_rect(self) -> Optional[Tuple[float, float, float, float]]:
        """Screen-space (x, y, width, height) of the selection box."""
        if self.kind != GestureKind.BOX_SELECTING or not self.moved:
            return None
        x = min(self.start_x, self.last_x)
        y = min(self.start_y, self.last_y)
        return (x, y, abs(self.last_x - self.start_x), abs(self.last_y - self.start_y))


@dataclass
class SessionState:
    """Everything an editing session owns besides the widgets."""
    graph: ZXGraph
    settings: EditorSettings
    viewport: Viewport = field(default_factory=Viewport)
    selection: Selection = field(default_factory=Selection)
    history: HistoryManager = field(default_factory=HistoryManager)
    clipboard: ClipboardManager = field(default_factory=ClipboardManager)
    tool: ToolMode = ToolMode.SELECT
    vertex_type: VertexType = VertexType.Z
    edge_type: EdgeType = EdgeType.SIMPLE
    gesture: GestureState = field(default_factory=GestureState)
    vertices: List[Vertex] = field(default_factory=list)
    edges: List[DisplayEdge] = field(default_factory=list)
    modal_active: bool = False


class InteractionController:
    """Editing session state machine."""

    def __init__(self, graph: Optional[ZXGraph] = None,
                 settings: Optional[EditorSettings] = None):
        settings = settings or EditorSettings()
        self.state = SessionState(
            graph=graph if graph is not None else ZXGraph(),
            settings=settings,
            history=HistoryManager(settings.history_limit, settings.history_limit),
            vertex_type=VertexType(settings.default_vertex_type),
            edge_type=EdgeType(settings.default_edge_type),
        )

        # Callbacks
        self.on_changed: Optional[Callable[[], None]] = None
        self.on_message: Optional[Callable[[str], None]] = None
        self.on_vertex_menu: Optional[Callable[[Vertex, float, float], None]] = None
        self.on_edge_menu: Optional[Callable[[DisplayEdge, float, float], None]] = None
        self.on_phase_edit: Optional[Callable[[Vertex], None]] = None
        self.on_save_requested: Optional[Callable[[], None]] = None
        self.on_help_requested: Optional[Callable[[], None]] = None
        self.on_modal_cancel: Optional[Callable[[], None]] = None
        self.on_setting_changed: Optional[Callable[[str, object], None]] = None

        self.refresh()

    # ==================== State access ====================

    @property
    def graph(self) -> ZXGraph:
        return self.state.graph

    @property
    def settings(self) -> EditorSettings:
        return self.state.settings

    @property
    def selection(self) -> Selection:
        return self.state.selection

    @property
    def history(self) -> HistoryManager:
        return self.state.history

    @property
    def clipboard(self) -> ClipboardManager:
        return self.state.clipboard

    @property
    def viewport(self) -> Viewport:
        return self.state.viewport

    @property
    def gesture(self) -> GestureState:
        return self.state.gesture

    @property
    def tool(self) -> ToolMode:
        return self.state.tool

    @property
    def vertices(self) -> List[Vertex]:
        """Vertices as they should be drawn, including a vertex being dragged."""
        gesture = self.state.gesture
        if gesture.kind != GestureKind.DRAGGING_VERTEX or gesture.proposed is None:
            return self.state.vertices
        row, col = gesture.proposed
        return [Vertex(v.id, v.vertex_type, v.phase, row, col)
                if v.id == gesture.vertex_id else v
                for v in self.state.vertices]

    @property
    def edges(self) -> List[DisplayEdge]:
        return self.state.edges

    @property
    def modal_active(self) -> bool:
        return self.state.modal_active

    @modal_active.setter
    def modal_active(self, value: bool):
        self.state.modal_active = value

    def find_vertex(self, vertex_id: int) -> Optional[Vertex]:
        for vertex in self.state.vertices:
            if vertex.id == vertex_id:
                return vertex
        return None

    # ==================== Refresh ====================

    def refresh(self):
        """Re-derive the displayed vertices and edges from the graph."""
        self.state.vertices = self.graph.vertices()
        self.state.edges = layout_parallel_edges(self.graph.edges())
        self.selection.intersect((v.id for v in self.state.vertices),
                                 (e.key for e in self.state.edges))
        logger.debug(f"Refreshed: {len(self.state.vertices)} vertices, {len(self.state.edges)} edges")

    def _notify_changed(self):
        if self.on_changed:
            self.on_changed()

    def _message(self, text: str):
        logger.info(text)
        if self.on_message:
            self.on_message(text)

    def _save_history(self, description: str):
        self.history.save_state(self.graph.to_json(), description)

    # ==================== Coordinates ====================

    def screen_to_graph(self, x: float, y: float) -> Tuple[float, float]:
        vp = self.viewport
        return screen_to_graph(x, y, self.settings.scale, vp.zoom, vp.pan)

    def screen_to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        vp = self.viewport
        return ((x - vp.pan_x) / vp.zoom, (y - vp.pan_y) / vp.zoom)

    def snapped(self, row: float, col: float) -> Tuple[float, float]:
        return snap_point(row, col, self.settings.grid_size, self.settings.snap_to_grid)

    def vertex_canvas_pos(self, vertex: Vertex) -> Tuple[float, float]:
        return graph_to_canvas(vertex.row, vertex.col, self.settings.scale)

    def canvas_positions(self) -> Dict[int, Tuple[float, float]]:
        """Canvas position of every displayed vertex, by id."""
        return {v.id: self.vertex_canvas_pos(v) for v in self.vertices}

    def edge_path(self, display_edge: DisplayEdge,
                  positions: Optional[Dict[int, Tuple[float, float]]] = None) -> Optional[CurvePath]:
        """Canvas-space path of an edge, or None if an endpoint is missing."""
        if positions is None:
            positions = self.canvas_positions()
        return build_edge_path(display_edge, positions, self.settings.scale)

    def edge_handle_pos(self, display_edge: DisplayEdge,
                        positions: Optional[Dict[int, Tuple[float, float]]] = None
                        ) -> Optional[Tuple[float, float]]:
        """Canvas-space position of the curvature handle shown on a selected edge."""
        if positions is None:
            positions = self.canvas_positions()
        if display_edge.is_self_loop:
            pos = positions.get(display_edge.source)
            if pos is None:
                return None
            cx, cy, radius = self_loop_circle(pos[0], pos[1], display_edge.index)
            return (cx, cy - radius)
        path = build_edge_path(display_edge, positions, self.settings.scale)
        return path.point_at(0.5) if path is not None else None

    # ==================== Hit testing ====================

    def vertex_at(self, x: float, y: float) -> Optional[Vertex]:
        """Top-most vertex under a screen point."""
        cx, cy = self.screen_to_canvas(x, y)
        for vertex in reversed(self.vertices):
            vx, vy = self.vertex_canvas_pos(vertex)
            if distance(cx, cy, vx, vy) <= vertex_radius(vertex) + 2:
                return vertex
        return None

    def edge_at(self, x: float, y: float) -> Optional[DisplayEdge]:
        cx, cy = self.screen_to_canvas(x, y)
        positions = self.canvas_positions()
        best: Optional[DisplayEdge] = None
        best_distance = EDGE_HIT_TOLERANCE
        for display_edge in self.edges:
            if display_edge.is_self_loop:
                pos = positions.get(display_edge.source)
                if pos is None:
                    continue
                d = distance_to_self_loop(cx, cy, pos[0], pos[1], display_edge.index)
            else:
                path = self.edge_path(display_edge, positions)
                if path is None:
                    continue
                d = distance_to_curve(cx, cy, path)
            if d <= best_distance:
                best, best_distance = display_edge, d
        return best

    def handle_at(self, x: float, y: float) -> Optional[int]:
        """Index of the selected edge whose curvature handle is under the pointer."""
        cx, cy = self.screen_to_canvas(x, y)
        positions = self.canvas_positions()
        for index, display_edge in enumerate(self.edges):
            if display_edge.key not in self.selection.edges or display_edge.is_self_loop:
                continue
            pos = self.edge_handle_pos(display_edge, positions)
            if pos is not None and distance(cx, cy, *pos) <= HANDLE_RADIUS:
                return index
        return None

    def target_at(self, x: float, y: float) -> Target:
        index = self.handle_at(x, y)
        if index is not None:
            return Target(TargetKind.EDGE_HANDLE, edge=self.edges[index], edge_index=index)
        vertex = self.vertex_at(x, y)
        if vertex is not None:
            return Target(TargetKind.VERTEX, vertex=vertex)
        display_edge = self.edge_at(x, y)
        if display_edge is not None:
            return Target(TargetKind.EDGE, edge=display_edge)
        return Target(TargetKind.CANVAS)

    def vertex_near(self, row: float, col: float,
                    exclude: Optional[int] = None) -> Optional[Vertex]:
        """Closest vertex within the proximity radius of a graph point."""
        best: Optional[Vertex] = None
        best_distance = self.settings.proximity_radius
        for vertex in self.state.vertices:
            if vertex.id == exclude:
                continue
            d = distance(row, col, vertex.row, vertex.col)
            if d <= best_distance:
                best, best_distance = vertex, d
        return best

    # ==================== Pointer events ====================

    def press(self, event: PointerEvent):
        """Handle a button press."""
        if self.state.modal_active or self.gesture.active:
            return

        target = self.target_at(event.x, event.y)

        if (event.n_press == 2 and event.button == MouseButton.PRIMARY
                and target.kind == TargetKind.VERTEX):
            if not target.vertex.is_boundary and self.on_phase_edit:
                self.on_phase_edit(target.vertex)
            return

        kind = resolve_gesture(self.tool, event.button, target.kind, accel=event.ctrl)
        logger.debug(f"Press {event.button} on {target.kind.value} in {self.tool.value}: {kind.value}")

        if kind == GestureKind.EDGE_CLICK:
            self.selection.click_edge(target.edge.key, toggle=event.shift)
            if event.button == MouseButton.SECONDARY and self.on_edge_menu:
                self.on_edge_menu(target.edge, event.x, event.y)
            self._notify_changed()
            return
        if kind == GestureKind.VERTEX_MENU:
            if not target.vertex.is_boundary and self.on_vertex_menu:
                self.on_vertex_menu(target.vertex, event.x, event.y)
            return
        if kind == GestureKind.IDLE:
            return

        gesture = GestureState(
            kind=kind, button=event.button,
            start_x=event.x, start_y=event.y,
            last_x=event.x, last_y=event.y,
            toggle=event.shift,
            pan_start=self.viewport.pan,
        )
        if target.vertex is not None:
            row, col = self.screen_to_graph(event.x, event.y)
            gesture.vertex_id = target.vertex.id
            gesture.grab_offset = (target.vertex.row - row, target.vertex.col - col)
            if kind == GestureKind.DRAGGING_EDGE:
                gesture.preview = (target.vertex.row, target.vertex.col)
        if kind == GestureKind.DRAGGING_CURVE:
            gesture.edge_index = target.edge_index
        self.state.gesture = gesture

    def motion(self, x: float, y: float) -> bool:
        """Handle pointer motion; returns whether anything needs redrawing."""
        gesture = self.gesture
        if not gesture.active:
            return False

        if not gesture.moved and distance(x, y, gesture.start_x, gesture.start_y) > MOVE_THRESHOLD:
            gesture.moved = True

        if gesture.kind == GestureKind.PANNING:
            self.viewport.pan_x = gesture.pan_start[0] + (x - gesture.start_x)
            self.viewport.pan_y = gesture.pan_start[1] + (y - gesture.start_y)
        elif gesture.kind == GestureKind.DRAGGING_VERTEX:
            if gesture.moved:
                row, col = self.screen_to_graph(x, y)
                gesture.proposed = self.snapped(row + gesture.grab_offset[0],
                                                col + gesture.grab_offset[1])
        elif gesture.kind == GestureKind.DRAGGING_EDGE:
            gesture.preview = self.screen_to_graph(x, y)
        elif gesture.kind == GestureKind.DRAGGING_CURVE:
            self._drag_curve(x - gesture.last_x, y - gesture.last_y)

        gesture.last_x = x
        gesture.last_y = y
        return True

    def _drag_curve(self, dx: float, dy: float):
        index = self.gesture.edge_index
        if index is None or index >= len(self.edges):
            return
        display_edge = self.edges[index]
        source = self.find_vertex(display_edge.key.low)
        target = self.find_vertex(display_edge.key.high)
        if source is None or target is None or display_edge.is_self_loop:
            return
        x1, y1 = self.vertex_canvas_pos(source)
        x2, y2 = self.vertex_canvas_pos(target)
        px, py = compute_perpendicular(x1, y1, x2, y2)
        zoom = self.viewport.zoom
        offset = (dx / zoom * px + dy / zoom * py) / self.settings.scale
        display_edge.curve_distance += offset * CURVE_DRAG_FACTOR

    def release(self, event: PointerEvent):
        """Handle a button release, committing or abandoning the gesture."""
        gesture = self.gesture
        if not gesture.active or event.button != gesture.button:
            return
        self.motion(event.x, event.y)
        self.state.gesture = GestureState()

        kind = gesture.kind
        if kind == GestureKind.BOX_SELECTING:
            self._finish_box(gesture)
        elif kind == GestureKind.DRAGGING_VERTEX:
            self._finish_vertex_drag(gesture)
        elif kind == GestureKind.DRAGGING_EDGE:
            self._finish_edge_drag(gesture, event)
        elif kind == GestureKind.PENDING_VERTEX:
            self._finish_placement(gesture, event)
        self._notify_changed()

    def cancel_gesture(self) -> bool:
        """Abandon the active gesture without mutating the graph."""
        if not self.gesture.active:
            return False
        if self.gesture.kind == GestureKind.PANNING:
            self.viewport.pan_x, self.viewport.pan_y = self.gesture.pan_start
        self.state.gesture = GestureState()
        return True

    def _finish_box(self, gesture: GestureState):
        if not gesture.moved:
            # A plain click on empty canvas
            if not gesture.toggle:
                self.selection.clear()
            return
        r1, c1 = self.screen_to_graph(gesture.start_x, gesture.start_y)
        r2, c2 = self.screen_to_graph(gesture.last_x, gesture.last_y)
        ids = self.vertices_in_rect(r1, c1, r2, c2)
        self.selection.box_select(ids, toggle=gesture.toggle)

    def vertices_in_rect(self, r1: float, c1: float, r2: float, c2: float) -> List[int]:
        """Ids of vertices inside the graph-space rectangle (inclusive)."""
        min_r, max_r = min(r1, r2), max(r1, r2)
        min_c, max_c = min(c1, c2), max(c1, c2)
        return [v.id for v in self.state.vertices
                if min_r <= v.row <= max_r and min_c <= v.col <= max_c]

    def _finish_vertex_drag(self, gesture: GestureState):
        vertex = self.find_vertex(gesture.vertex_id)
        if vertex is None:
            return
        if not gesture.moved or gesture.proposed is None:
            self.selection.click_vertex(vertex.id, toggle=gesture.toggle)
            return
        row, col = gesture.proposed
        if (row, col) == (vertex.row, vertex.col):
            return
        self._save_history("Move vertex")
        try:
            self.graph.set_vertex_position(vertex.id, row, col)
        except GraphError as exc:
            self._message(f"Could not move vertex: {exc}")
        self.refresh()

    def _finish_edge_drag(self, gesture: GestureState, event: PointerEvent):
        source = self.find_vertex(gesture.vertex_id)
        if source is None:
            return
        row, col = self.screen_to_graph(event.x, event.y)
        target = self.vertex_near(row, col, exclude=source.id)

        if target is None and not gesture.moved:
            if event.button == MouseButton.SECONDARY:
                self.add_edge(source.id, source.id)
            else:
                self.selection.click_vertex(source.id, toggle=gesture.toggle)
            return
        if target is not None:
            self.add_edge(source.id, target.id)

    def _finish_placement(self, gesture: GestureState, event: PointerEvent):
        if gesture.moved:
            return
        row, col = self.snapped(*self.screen_to_graph(event.x, event.y))
        if self.vertex_near(row, col) is not None:
            return
        self.add_vertex(row, col)

    # ==================== Scroll and zoom ====================

    def scroll(self, x: float, y: float, dx: float, dy: float, ctrl: bool = False) -> bool:
        """Ctrl+wheel zooms about the pointer, the wheel alone pans."""
        if ctrl:
            if dy == 0:
                return False
            self.zoom_at(WHEEL_ZOOM_IN if dy < 0 else WHEEL_ZOOM_OUT, x, y)
            return True
        self.viewport.pan_x -= dx * SCROLL_PAN_STEP
        self.viewport.pan_y -= dy * SCROLL_PAN_STEP
        return True

    def zoom_at(self, factor: float, x: float, y: float):
        """Zoom by factor keeping the graph point under (x, y) fixed."""
        vp = self.viewport
        old_zoom = vp.zoom
        vp.zoom = max(self.settings.min_zoom, min(self.settings.max_zoom, vp.zoom * factor))
        if vp.zoom != old_zoom:
            vp.pan_x = x - (x - vp.pan_x) * (vp.zoom / old_zoom)
            vp.pan_y = y - (y - vp.pan_y) * (vp.zoom / old_zoom)

    def zoom_in(self):
        """Zoom in about the centre of the view."""
        vp = self.viewport
        self.zoom_at(self.settings.zoom_step, vp.width / 2, vp.height / 2)

    def zoom_out(self):
        vp = self.viewport
        self.zoom_at(1 / self.settings.zoom_step, vp.width / 2, vp.height / 2)

    def toggle_grid(self) -> bool:
        """Show or hide the background grid and report the new preference."""
        self.settings.show_grid = not self.settings.show_grid
        if self.on_setting_changed:
            self.on_setting_changed("show_grid", self.settings.show_grid)
        self._notify_changed()
        return self.settings.show_grid

    def reset_view(self):
        self.viewport.zoom = 1.0
        self.viewport.pan_x = 0.0
        self.viewport.pan_y = 0.0

    def zoom_to_fit(self, width: Optional[float] = None, height: Optional[float] = None):
        """Zoom and pan so every vertex is visible."""
        width = self.viewport.width if width is None else width
        height = self.viewport.height if height is None else height
        bounds = self.graph.bounds()
        if bounds is None or width <= 0 or height <= 0:
            self.reset_view()
            return
        min_row, min_col, max_row, max_col = bounds
        x1, y1 = graph_to_canvas(min_row, min_col, self.settings.scale)
        x2, y2 = graph_to_canvas(max_row, max_col, self.settings.scale)
        map_width = x2 - x1 + 2 * VERTEX_RADIUS
        map_height = y2 - y1 + 2 * VERTEX_RADIUS

        zoom = min((width - 2 * FIT_MARGIN) / map_width,
                   (height - 2 * FIT_MARGIN) / map_height,
                   1.0)
        vp = self.viewport
        vp.zoom = max(self.settings.min_zoom, min(self.settings.max_zoom, zoom))
        vp.pan_x = width / 2 - (x1 + x2) / 2 * vp.zoom
        vp.pan_y = height / 2 - (y1 + y2) / 2 * vp.zoom

    def pan_by(self, dx: float, dy: float):
        self.viewport.pan_x += dx
        self.viewport.pan_y += dy

    # ==================== Keyboard ====================

    def key_press(self, key: str, ctrl: bool = False, shift: bool = False,
                  alt: bool = False) -> bool:
        """Handle a key given by its GDK name; returns whether it was consumed."""
        if self.state.modal_active:
            if key == "Escape":
                if self.on_modal_cancel:
                    self.on_modal_cancel()
                return True
            return False

        if key == "question" and not ctrl:
            if self.on_help_requested:
                self.on_help_requested()
            return True

        if key == "Escape":
            if not self.cancel_gesture():
                self.selection.clear()
            self._notify_changed()
            return True

        lower = key.lower() if len(key) == 1 else key

        if ctrl and not alt:
            return self._ctrl_key(lower, shift)
        if alt:
            return False

        if key in ("Delete", "BackSpace"):
            self.delete_selection()
            return True

        if lower in TOOL_KEYS and not shift:
            self.set_tool(TOOL_KEYS[lower])
            return True

        if lower in TYPE_KEYS:
            if self.selection.vertices:
                self.convert_selection(TYPE_KEYS[lower])
            return True

        if lower == "e":
            self.toggle_edge_types()
            return True

        if lower == "g":
            self.toggle_grid()
            return True

        if key in ARROW_KEYS:
            dx, dy = ARROW_KEYS[key]
            if self.selection.vertices:
                step = self.settings.grid_size * (0.1 if shift else 1.0)
                self.nudge_selection(dx * step, dy * step)
            else:
                # Move the view opposite to the arrow, like scrolling
                self.pan_by(-dx * self.settings.pan_step, -dy * self.settings.pan_step)
                self._notify_changed()
            return True

        return False

    def _ctrl_key(self, key: str, shift: bool) -> bool:
        if key == "z":
            if shift:
                self.redo()
            else:
                self.undo()
            return True
        if key == "y":
            self.redo()
            return True
        if key == "c":
            self.copy()
            return True
        if key == "v":
            self.paste()
            return True
        if key == "a":
            self.select_all()
            return True
        if key == "s" and not shift:
            if self.on_save_requested:
                self.on_save_requested()
            return True
        if key in ("plus", "equal", "KP_Add"):
            self.zoom_in()
            self._notify_changed()
            return True
        if key in ("minus", "KP_Subtract"):
            self.zoom_out()
            self._notify_changed()
            return True
        if key == "0":
            self.reset_view()
            self._notify_changed()
            return True
        return False

    # ==================== Editing operations ====================

    def set_tool(self, mode: ToolMode):
        if self.state.tool == mode:
            return
        self.cancel_gesture()
        self.state.tool = mode
        self._notify_changed()

    def set_vertex_type(self, vertex_type: VertexType):
        """Type used for newly placed vertices."""
        self.state.vertex_type = VertexType(vertex_type)
        self._notify_changed()

    def set_edge_type(self, edge_type: EdgeType):
        """Type used for newly drawn edges."""
        self.state.edge_type = EdgeType(edge_type)
        self._notify_changed()

    def add_vertex(self, row: float, col: float) -> Optional[int]:
        """Place a vertex of the configured type."""
        self._save_history(f"Add {self.state.vertex_type.label}")
        try:
            vertex_id = self.graph.add_vertex(self.state.vertex_type, row, col)
        except GraphError as exc:
            self._message(f"Could not add vertex: {exc}")
            return None
        self.refresh()
        self._notify_changed()
        return vertex_id

    def add_edge(self, source: int, target: int) -> bool:
        """Connect two vertices (or loop one) with the configured edge type."""
        self._save_history(f"Add {self.state.edge_type.label.lower()} edge")
        try:
            self.graph.add_edge(source, target, self.state.edge_type)
        except GraphError as exc:
            self._message(f"Could not add edge: {exc}")
            return False
        self.refresh()
        self._notify_changed()
        return True

    def select_all(self):
        self.selection.select_only_vertices(v.id for v in self.state.vertices)
        self.selection.clear_edges()
        self._notify_changed()

    def delete_selection(self) -> bool:
        """Remove the selected vertices and edges."""
        if self.selection.is_empty:
            return False

        self._save_history("Delete selection")
        for vertex_id in sorted(self.selection.vertices):
            try:
                self.graph.remove_vertex(vertex_id)
            except GraphError as exc:
                logger.warning(f"Could not remove vertex {vertex_id}: {exc}")
        for key in sorted(self.selection.edges):
            if not (self.graph.has_vertex(key.low) and self.graph.has_vertex(key.high)):
                continue
            while self.graph.has_edge(key.low, key.high):
                try:
                    self.graph.remove_edge(key.low, key.high)
                except GraphError as exc:
                    logger.warning(f"Could not remove edge {key}: {exc}")
                    break

        self.selection.clear()
        self.refresh()
        self._notify_changed()
        return True

    def delete_vertex(self, vertex_id: int) -> bool:
        if not self.graph.has_vertex(vertex_id):
            return False
        self._save_history("Delete vertex")
        self.graph.remove_vertex(vertex_id)
        self.refresh()
        self._notify_changed()
        return True

    def delete_edge(self, key: EdgeKey) -> bool:
        """Remove every edge between the key's endpoints."""
        if not self.graph.has_edge(key.low, key.high):
            return False
        self._save_history("Delete edge")
        while self.graph.has_edge(key.low, key.high):
            self.graph.remove_edge(key.low, key.high)
        self.refresh()
        self._notify_changed()
        return True

    def convert_vertex(self, vertex_id: int, vertex_type: VertexType) -> bool:
        """Change one vertex's type; boundary vertices are left alone."""
        vertex = self.find_vertex(vertex_id)
        if vertex is None:
            self._message(f"Vertex {vertex_id} does not exist")
            return False
        if vertex.is_boundary or vertex_type == VertexType.BOUNDARY:
            self._message("Boundary vertices cannot change type")
            return False
        if vertex.vertex_type == vertex_type:
            return False

        self._save_history(f"Convert to {VertexType(vertex_type).label}")
        try:
            self.graph.set_vertex_type(vertex_id, vertex_type)
        except GraphError as exc:
            self._message(f"Could not convert vertex: {exc}")
            return False
        self.refresh()
        self._notify_changed()
        return True

    def convert_selection(self, vertex_type: VertexType) -> int:
        """Convert every selected non-boundary vertex; returns how many changed."""
        targets = []
        for vertex_id in sorted(self.selection.vertices):
            vertex = self.find_vertex(vertex_id)
            if vertex is None or vertex.is_boundary or vertex.vertex_type == vertex_type:
                continue
            targets.append(vertex_id)
        if not targets:
            return 0

        self._save_history(f"Convert to {VertexType(vertex_type).label}")
        converted = 0
        for vertex_id in targets:
            try:
                self.graph.set_vertex_type(vertex_id, vertex_type)
                converted += 1
            except GraphError as exc:
                logger.warning(f"Could not convert vertex {vertex_id}: {exc}")
        self.refresh()
        self._notify_changed()
        return converted

    def set_phase(self, vertex_id: int, text: str) -> bool:
        """Set a vertex phase from user input such as ``"1/2"`` or ``"π/4"``."""
        vertex = self.find_vertex(vertex_id)
        if vertex is None:
            self._message(f"Vertex {vertex_id} does not exist")
            return False
        if vertex.is_boundary:
            self._message("Boundary vertices have no phase")
            return False
        try:
            parse_phase(text)
        except GraphError as exc:
            self._message(str(exc))
            return False

        self._save_history("Set phase")
        try:
            self.graph.set_vertex_phase(vertex_id, text)
        except GraphError as exc:
            self._message(f"Could not set phase: {exc}")
            return False
        self.refresh()
        self._notify_changed()
        return True

    def toggle_edge_types(self, keys: Optional[Set[EdgeKey]] = None) -> int:
        """Flip Simple/Hadamard on the selected edges (or ``keys``)."""
        keys = set(keys) if keys is not None else set(self.selection.edges)
        if not keys:
            return 0

        self._save_history("Toggle edge type")
        toggled = 0
        for key in sorted(keys):
            try:
                current = self.graph.edges_between(key.low, key.high)
                if not current:
                    raise GraphError(f"no edge {key}")
                self.graph.set_edge_type(key.low, key.high, current[0].edge_type.toggled())
                toggled += 1
            except GraphError as exc:
                logger.warning(f"Could not toggle edge {key}: {exc}")
        self.refresh()
        self._notify_changed()
        return toggled

    def nudge_selection(self, drow: float, dcol: float) -> bool:
        """Move the selected vertices by a graph-space offset."""
        if not self.selection.vertices:
            return False
        self._save_history("Move selection")
        for vertex_id in sorted(self.selection.vertices):
            vertex = self.find_vertex(vertex_id)
            if vertex is None:
                continue
            try:
                self.graph.set_vertex_position(vertex_id, vertex.row + drow, vertex.col + dcol)
            except GraphError as exc:
                logger.warning(f"Could not move vertex {vertex_id}: {exc}")
        self.refresh()
        self._notify_changed()
        return True

    # ==================== Clipboard ====================

    def copy(self) -> int:
        count = self.clipboard.copy(self.state.vertices, self.graph.edges(),
                                    self.selection.vertices)
        if count:
            self._message(f"Copied {count} vertices")
        return count

    def paste(self) -> Optional[Set[int]]:
        if self.clipboard.is_empty:
            return None
        self._save_history("Paste")
        new_ids = self.clipboard.paste(self.graph)
        self.refresh()
        self.selection.select_only_vertices(new_ids)
        self.selection.clear_edges()
        self._notify_changed()
        return new_ids

    # ==================== Undo/Redo ====================

    def _restore(self, snapshot: str):
        self.graph.replace_with(ZXGraph.from_json(snapshot))

    def undo(self) -> bool:
        """Undo the last mutation."""
        return self._history_step(self.history.undo, "undo")

    def redo(self) -> bool:
        """Redo the last undone mutation."""
        return self._history_step(self.history.redo, "redo")

    def _history_step(self, step: Callable, name: str) -> bool:
        can = self.history.can_undo if name == "undo" else self.history.can_redo
        if not can:
            return False
        self.cancel_gesture()
        try:
            step(self.graph.to_json(), self._restore)
        except SnapshotRestoreError as exc:
            self._message(str(exc))
            return False
        self.refresh()
        self._notify_changed()
        return True

    # ==================== Documents ====================

    def export_snapshot(self) -> str:
        return self.graph.to_json()

    def load_snapshot(self, data: str) -> bool:
        """Replace the diagram with a serialized one; the old one stays undoable."""
        try:
            graph = ZXGraph.from_json(data)
        except InvalidSnapshot as exc:
            self._message(f"Could not load diagram: {exc}")
            return False
        self.load_graph(graph, "Load diagram")
        return True

    def load_graph(self, graph: ZXGraph, description: str = "Load diagram"):
        self.cancel_gesture()
        self._save_history(description)
        self.graph.replace_with(graph)
        self.selection.clear()
        self.refresh()
        self._notify_changed()

    def new_diagram(self):
        self.load_graph(ZXGraph(), "New diagram")

    def simplify(self, rule: str) -> Optional[simplification.SimplificationResult]:
        """Run a named simplification; only a change is recorded in history."""
        self.cancel_gesture()
        before = self.graph.to_json()
        try:
            result = simplification.simplify(self.graph, rule)
        except GraphError as exc:
            self._message(str(exc))
            return None
        if result.applied:
            self.history.save_state(before, simplification.get_rule(rule).title)
        self.refresh()
        self._message(result.message)
        self._notify_changed()
        return result

    # ==================== Viewport helpers ====================

    def apply_settings(self, settings: EditorSettings):
        """Swap in new preferences, keeping session state."""
        self.state.settings = settings
        self.history.max_undo = settings.history_limit
        self.history.max_redo = settings.history_limit
        self._notify_changed()

    def pointer_graph_pos(self, x: float, y: float) -> Tuple[float, float]:
        """Snapped graph position under a screen point (for status display)."""
        return self.snapped(*self.screen_to_graph(x, y))

    def is_edge_selected(self, display_edge: DisplayEdge) -> bool:
        return display_edge.key in self.selection.edges

    def describe_selection(self) -> str:
        parts = []
        if self.selection.vertices:
            parts.append(f"{len(self.selection.vertices)} vertices")
        if self.selection.edges:
            parts.append(f"{len(self.selection.edges)} edges")
        return ", ".join(parts)
