"""Cairo drawing of ZX-diagrams, shared by the canvas and the exporters."""

import math
from typing import Optional, Dict, Iterable, Sequence, Set, Tuple

import cairo

from zxplorer.graph import Vertex, VertexType, EdgeType, EdgeKey, format_phase
from zxplorer.geometry import (
    DisplayEdge, CurvePath, graph_to_canvas, self_loop_circle, vertex_radius, edge_path,
)

Position = Tuple[float, float]


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """Convert ``#rrggbb`` to a cairo RGB triple."""
    value = value.lstrip("#")
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


class DiagramRenderer:
    """Paints vertices, edges and selection decorations in canvas space."""

    # Colors (fill, stroke) per vertex type
    VERTEX_COLORS = {
        VertexType.Z: (hex_to_rgb("#ccffcc"), hex_to_rgb("#64BC90")),
        VertexType.X: (hex_to_rgb("#ff8888"), hex_to_rgb("#bb0f0f")),
        VertexType.H_BOX: (hex_to_rgb("#ffff00"), hex_to_rgb("#f1c232")),
        VertexType.BOUNDARY: (hex_to_rgb("#000000"), hex_to_rgb("#444444")),
    }

    COLORS = {
        'background': (1.0, 1.0, 1.0),
        'grid': (0.88, 0.88, 0.88),
        'edge': (0.0, 0.0, 0.0),
        'hadamard': hex_to_rgb("#0077ff"),
        'selection': hex_to_rgb("#0022FF"),
        'phase': hex_to_rgb("#006bb3"),
        'preview': (0.4, 0.4, 0.4),
        'box_fill': (0.0, 0.45, 1.0),
    }

    EDGE_WIDTH = 3.0
    HADAMARD_DASH = [8.0, 4.0]
    VERTEX_STROKE_WIDTH = 2.0
    SELECTION_WIDTH = 3.0
    HANDLE_RADIUS = 6.0
    HANDLE_ALPHA = 0.5
    PHASE_FONT_SIZE = 12

    def __init__(self, scale: float = 80.0):
        self.scale = scale

    def positions(self, vertices: Iterable[Vertex]) -> Dict[int, Position]:
        return {v.id: graph_to_canvas(v.row, v.col, self.scale) for v in vertices}

    # ==================== Scene ====================

    def draw_diagram(self, cr, vertices: Sequence[Vertex], edges: Sequence[DisplayEdge],
                     selected_vertices: Optional[Set[int]] = None,
                     selected_edges: Optional[Set[EdgeKey]] = None):
        """Draw edges first so vertices sit on top of them."""
        selected_vertices = selected_vertices or set()
        selected_edges = selected_edges or set()
        positions = self.positions(vertices)

        for display_edge in edges:
            self.draw_edge(cr, display_edge, positions, display_edge.key in selected_edges)

        for vertex in vertices:
            self.draw_vertex(cr, vertex, positions[vertex.id], vertex.id in selected_vertices)

    def draw_grid(self, cr, width: float, height: float, grid_size: float,
                  zoom: float, pan: Position):
        """Grid lines in screen space, aligned with graph grid positions."""
        step = grid_size * self.scale * zoom
        if step < 4:
            return
        origin_x, origin_y = graph_to_canvas(0.0, 0.0, self.scale)
        offset_x = (origin_x * zoom + pan[0]) % step
        offset_y = (origin_y * zoom + pan[1]) % step

        cr.save()
        cr.set_source_rgb(*self.COLORS['grid'])
        cr.set_line_width(1)
        x = offset_x
        while x < width:
            cr.move_to(round(x) + 0.5, 0)
            cr.line_to(round(x) + 0.5, height)
            x += step
        y = offset_y
        while y < height:
            cr.move_to(0, round(y) + 0.5)
            cr.line_to(width, round(y) + 0.5)
            y += step
        cr.stroke()
        cr.restore()

    # ==================== Edges ====================

    def _stroke_style(self, cr, edge_type: EdgeType):
        cr.set_line_width(self.EDGE_WIDTH)
        cr.set_line_cap(cairo.LINE_CAP_ROUND)
        if edge_type == EdgeType.HADAMARD:
            cr.set_source_rgb(*self.COLORS['hadamard'])
            cr.set_dash(self.HADAMARD_DASH)
        else:
            cr.set_source_rgb(*self.COLORS['edge'])
            cr.set_dash([])

    def _trace_path(self, cr, path: CurvePath):
        cr.move_to(*path.start)
        if path.is_straight:
            cr.line_to(*path.end)
        else:
            (c1x, c1y), (c2x, c2y) = path.cubic_controls()
            cr.curve_to(c1x, c1y, c2x, c2y, *path.end)

    def draw_edge(self, cr, display_edge: DisplayEdge, positions: Dict[int, Position],
                  selected: bool = False):
        cr.save()
        if display_edge.is_self_loop:
            pos = positions.get(display_edge.source)
            if pos is None:
                cr.restore()
                return
            cx, cy, radius = self_loop_circle(pos[0], pos[1], display_edge.index)
            # Loops have no curvature to drag
            handle = None
            if selected:
                cr.new_sub_path()
                cr.arc(cx, cy, radius, 0, 2 * math.pi)
                self._stroke_selection(cr)
            self._stroke_style(cr, display_edge.edge.edge_type)
            cr.new_sub_path()
            cr.arc(cx, cy, radius, 0, 2 * math.pi)
            cr.stroke()
        else:
            path = edge_path(display_edge, positions, self.scale)
            if path is None:
                cr.restore()
                return
            handle = path.point_at(0.5)
            if selected:
                self._trace_path(cr, path)
                self._stroke_selection(cr)
            self._stroke_style(cr, display_edge.edge.edge_type)
            self._trace_path(cr, path)
            cr.stroke()
        cr.restore()

        if selected and handle is not None:
            self.draw_handle(cr, *handle)

    def _stroke_selection(self, cr):
        cr.set_dash([])
        cr.set_source_rgba(*self.COLORS['selection'], self.HANDLE_ALPHA)
        cr.set_line_width(self.EDGE_WIDTH + 2 * self.SELECTION_WIDTH)
        cr.stroke()

    def draw_handle(self, cr, x: float, y: float):
        """Curvature handle shown in the middle of a selected edge."""
        cr.save()
        cr.set_source_rgba(*self.COLORS['selection'], self.HANDLE_ALPHA)
        cr.arc(x, y, self.HANDLE_RADIUS, 0, 2 * math.pi)
        cr.fill()
        cr.restore()

    def draw_edge_preview(self, cr, start: Position, end: Position, edge_type: EdgeType):
        cr.save()
        self._stroke_style(cr, edge_type)
        if edge_type == EdgeType.SIMPLE:
            cr.set_source_rgb(*self.COLORS['preview'])
            cr.set_dash([4.0, 4.0])
        cr.move_to(*start)
        cr.line_to(*end)
        cr.stroke()
        cr.restore()

    # ==================== Vertices ====================

    def draw_vertex(self, cr, vertex: Vertex, pos: Position, selected: bool = False):
        x, y = pos
        radius = vertex_radius(vertex)
        fill, stroke = self.VERTEX_COLORS[vertex.vertex_type]

        cr.save()
        cr.set_dash([])
        self._vertex_shape(cr, vertex, x, y, radius)
        cr.set_source_rgb(*fill)
        cr.fill_preserve()
        cr.set_source_rgb(*stroke)
        cr.set_line_width(self.VERTEX_STROKE_WIDTH)
        cr.stroke()

        if selected:
            self._vertex_shape(cr, vertex, x, y, radius + self.SELECTION_WIDTH + 1)
            cr.set_source_rgba(*self.COLORS['selection'], 0.8)
            cr.set_line_width(self.SELECTION_WIDTH)
            cr.stroke()

        label = format_phase(vertex.phase) if not vertex.is_boundary else ""
        if label:
            cr.set_source_rgb(*self.COLORS['phase'])
            cr.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_BOLD)
            cr.set_font_size(self.PHASE_FONT_SIZE)
            cr.move_to(x + radius - 20, y - radius - 5)
            cr.show_text(label)
        cr.restore()

    def _vertex_shape(self, cr, vertex: Vertex, x: float, y: float, radius: float):
        cr.new_path()
        if vertex.vertex_type == VertexType.H_BOX:
            cr.rectangle(x - radius, y - radius, 2 * radius, 2 * radius)
        else:
            cr.arc(x, y, radius, 0, 2 * math.pi)

    # ==================== Overlays ====================

    def draw_selection_box(self, cr, rect: Tuple[float, float, float, float]):
        """Rubber-band rectangle, in screen space."""
        x, y, w, h = rect
        cr.save()
        cr.rectangle(x, y, w, h)
        cr.set_source_rgba(*self.COLORS['box_fill'], 0.1)
        cr.fill_preserve()
        cr.set_source_rgba(*self.COLORS['selection'], 0.8)
        cr.set_line_width(1)
        cr.set_dash([4.0, 2.0])
        cr.stroke()
        cr.restore()
