"""Coordinate transforms and edge geometry for the diagram canvas.

Graph coordinates are (row, col): row runs horizontally, col vertically.
Canvas coordinates are unzoomed pixels; screen coordinates are canvas
coordinates after zoom and pan.
"""

import math
from dataclasses import dataclass
from typing import Optional, List, Dict, Tuple, Sequence

from zxplorer.graph import Vertex, Edge, EdgeKey

# Canvas padding applied before zoom
ROW_ORIGIN = 100.0
COL_ORIGIN = 50.0

# Curvature below this is drawn as a straight line
CURVE_EPSILON = 0.01

# Spacing between parallel edges, in graph units
PARALLEL_EDGE_SPACING = 0.5

# Vertex sizes in canvas pixels
VERTEX_RADIUS = 22.0
BOUNDARY_RADIUS = 8.0

Point = Tuple[float, float]


@dataclass
class Viewport:
    """Pan and zoom applied to the canvas."""
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    # Size of the widget showing the canvas
    width: float = 0.0
    height: float = 0.0

    @property
    def pan(self) -> Point:
        return (self.pan_x, self.pan_y)


# ==================== Transforms ====================

def graph_to_canvas(row: float, col: float, scale: float) -> Point:
    return (row * scale + ROW_ORIGIN, col * scale + COL_ORIGIN)


def canvas_to_graph(x: float, y: float, scale: float) -> Point:
    return ((x - ROW_ORIGIN) / scale, (y - COL_ORIGIN) / scale)


def graph_to_screen(row: float, col: float, scale: float, zoom: float,
                    pan: Point = (0.0, 0.0)) -> Point:
    """Map a graph coordinate to screen pixels."""
    x = (row * scale + ROW_ORIGIN) * zoom + pan[0]
    y = (col * scale + COL_ORIGIN) * zoom + pan[1]
    return (x, y)


def screen_to_graph(x: float, y: float, scale: float, zoom: float,
                    pan: Point = (0.0, 0.0)) -> Point:
    """Inverse of graph_to_screen."""
    if zoom == 0:
        raise ValueError("zoom must be non-zero")
    row = ((x - pan[0]) / zoom - ROW_ORIGIN) / scale
    col = ((y - pan[1]) / zoom - COL_ORIGIN) / scale
    return (row, col)


def snap_to_grid(value: float, grid_size: float, enabled: bool = True) -> float:
    """Round to the nearest multiple of grid_size when snapping is enabled."""
    if not enabled or grid_size <= 0:
        return value
    return round(value / grid_size) * grid_size


def snap_point(row: float, col: float, grid_size: float, enabled: bool = True) -> Point:
    return (snap_to_grid(row, grid_size, enabled), snap_to_grid(col, grid_size, enabled))


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def vertex_radius(vertex: Vertex) -> float:
    return BOUNDARY_RADIUS if vertex.is_boundary else VERTEX_RADIUS


# ==================== Curves ====================

def compute_perpendicular(x1: float, y1: float, x2: float, y2: float) -> Point:
    """Unit normal of the segment, (0, 1) for a zero-length segment."""
    dx = x2 - x1
    dy = y2 - y1
    length = math.sqrt(dx * dx + dy * dy)
    if length == 0:
        return (0.0, 1.0)
    return (-dy / length, dx / length)


@dataclass
class CurvePath:
    """A straight segment or a quadratic Bezier between two points."""
    start: Point
    end: Point
    control: Optional[Point] = None

    @property
    def is_straight(self) -> bool:
        return self.control is None

    def point_at(self, t: float) -> Point:
        (x1, y1), (x2, y2) = self.start, self.end
        if self.control is None:
            return (x1 + (x2 - x1) * t, y1 + (y2 - y1) * t)
        cx, cy = self.control
        u = 1 - t
        return (u * u * x1 + 2 * u * t * cx + t * t * x2,
                u * u * y1 + 2 * u * t * cy + t * t * y2)

    def cubic_controls(self) -> Tuple[Point, Point]:
        """Equivalent cubic Bezier control points (for cairo's curve_to)."""
        (x1, y1), (x2, y2) = self.start, self.end
        if self.control is None:
            return ((x1 + (x2 - x1) / 3, y1 + (y2 - y1) / 3),
                    (x1 + 2 * (x2 - x1) / 3, y1 + 2 * (y2 - y1) / 3))
        cx, cy = self.control
        return ((x1 + 2 * (cx - x1) / 3, y1 + 2 * (cy - y1) / 3),
                (x2 + 2 * (cx - x2) / 3, y2 + 2 * (cy - y2) / 3))

    def svg(self) -> str:
        (x1, y1), (x2, y2) = self.start, self.end
        if self.control is None:
            return f"M {x1},{y1} L {x2},{y2}"
        cx, cy = self.control
        return f"M {x1},{y1} Q {cx},{cy} {x2},{y2}"


def _control_point(x1: float, y1: float, x2: float, y2: float,
                   curve_distance: float, scale: float) -> Point:
    px, py = compute_perpendicular(x1, y1, x2, y2)
    offset = curve_distance * scale
    return ((x1 + x2) / 2 + px * offset, (y1 + y2) / 2 + py * offset)


def create_curved_path(x1: float, y1: float, x2: float, y2: float,
                       curve_distance: float, scale: float) -> CurvePath:
    """Path for an edge bent by curve_distance graph units."""
    if abs(curve_distance) < CURVE_EPSILON:
        return CurvePath((x1, y1), (x2, y2))
    control = _control_point(x1, y1, x2, y2, curve_distance, scale)
    return CurvePath((x1, y1), (x2, y2), control)


def get_point_on_curve(x1: float, y1: float, x2: float, y2: float,
                       curve_distance: float, scale: float, t: float = 0.5) -> Point:
    return create_curved_path(x1, y1, x2, y2, curve_distance, scale).point_at(t)


def distance_to_segment(px: float, py: float, a: Point, b: Point) -> float:
    (ax, ay), (bx, by) = a, b
    dx = bx - ax
    dy = by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(px, py, ax, ay)
    t = max(0.0, min(1.0, ((px - ax) * dx + (py - ay) * dy) / length_sq))
    return distance(px, py, ax + t * dx, ay + t * dy)


def distance_to_curve(px: float, py: float, path: CurvePath, samples: int = 16) -> float:
    """Approximate distance from a point to a path by sampling it as a polyline."""
    if path.is_straight:
        return distance_to_segment(px, py, path.start, path.end)
    points = [path.point_at(i / samples) for i in range(samples + 1)]
    return min(distance_to_segment(px, py, points[i], points[i + 1])
               for i in range(samples))


# ==================== Self-loops ====================

SELF_LOOP_RADIUS = 25.0
SELF_LOOP_RADIUS_STEP = 15.0


def self_loop_circle(x: float, y: float, index: int = 0) -> Tuple[float, float, float]:
    """(cx, cy, radius) of the circle drawn for the index-th loop on a vertex."""
    radius = SELF_LOOP_RADIUS + index * SELF_LOOP_RADIUS_STEP
    angle = math.radians(-45 + index * 30)
    return (x + math.cos(angle) * radius, y + math.sin(angle) * radius, radius)


def distance_to_self_loop(px: float, py: float, x: float, y: float, index: int = 0) -> float:
    cx, cy, radius = self_loop_circle(x, y, index)
    return abs(distance(px, py, cx, cy) - radius)


# ==================== Parallel edges ====================

@dataclass
class DisplayEdge:
    """An engine edge plus its transient display curvature."""
    edge: Edge
    curve_distance: float = 0.0
    # Position among the edges sharing the same endpoints
    index: int = 0

    @property
    def key(self) -> EdgeKey:
        return self.edge.key

    @property
    def source(self) -> int:
        return self.edge.source

    @property
    def target(self) -> int:
        return self.edge.target

    @property
    def is_self_loop(self) -> bool:
        return self.edge.source == self.edge.target


def layout_parallel_edges(edges: Sequence[Edge]) -> List[DisplayEdge]:
    """Fan out edges sharing an endpoint pair symmetrically around the straight line."""
    groups: Dict[EdgeKey, List[int]] = {}
    for i, edge in enumerate(edges):
        groups.setdefault(edge.key, []).append(i)

    result = [DisplayEdge(edge) for edge in edges]
    for indices in groups.values():
        n = len(indices)
        for position, i in enumerate(indices):
            result[i].index = position
            if n > 1 and not result[i].is_self_loop:
                result[i].curve_distance = (position - (n - 1) / 2) * PARALLEL_EDGE_SPACING
    return result


def edge_path(display_edge: DisplayEdge, positions: Dict[int, Point],
              scale: float) -> Optional[CurvePath]:
    """Canvas path of a non-loop edge given canvas positions by vertex id.

    The path always runs from the lower to the higher vertex id so parallel
    edges fan out consistently whatever direction they were drawn in.
    """
    start = positions.get(display_edge.key.low)
    end = positions.get(display_edge.key.high)
    if start is None or end is None:
        return None
    return create_curved_path(start[0], start[1], end[0], end[1],
                              display_edge.curve_distance, scale)
