"""Export functionality for ZX-diagrams."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Sequence, Tuple

import cairo

from zxplorer.graph import ZXGraph, Vertex
from zxplorer.geometry import (
    DisplayEdge, layout_parallel_edges, vertex_radius, self_loop_circle,
)
from zxplorer.render import DiagramRenderer
from zxplorer.settings import get_data_dir

logger = logging.getLogger(__name__)

# Page sizes in points (72 points = 1 inch)
PAGE_SIZES = {
    "A4": (595, 842),
    "Letter": (612, 792),
    "Auto": None,
}


class DiagramExporter:
    """Handles exporting diagrams to image and document formats."""

    PADDING = 30

    def __init__(self, scale: float = 80.0):
        self.renderer = DiagramRenderer(scale)

    def _scene(self, graph: ZXGraph,
               edges: Optional[Sequence[DisplayEdge]]) -> Tuple[List[Vertex], List[DisplayEdge]]:
        vertices = graph.vertices()
        if edges is None:
            edges = layout_parallel_edges(graph.edges())
        return vertices, list(edges)

    def bounds(self, vertices: Sequence[Vertex],
               edges: Sequence[DisplayEdge]) -> Optional[Tuple[float, float, float, float]]:
        """Canvas-space (min_x, min_y, max_x, max_y) covering vertices and self-loops."""
        if not vertices:
            return None
        positions = self.renderer.positions(vertices)
        xs: List[float] = []
        ys: List[float] = []
        for vertex in vertices:
            x, y = positions[vertex.id]
            r = vertex_radius(vertex)
            xs += [x - r, x + r]
            ys += [y - r, y + r]
        for display_edge in edges:
            if display_edge.is_self_loop and display_edge.source in positions:
                cx, cy, radius = self_loop_circle(*positions[display_edge.source],
                                                  display_edge.index)
                xs += [cx - radius, cx + radius]
                ys += [cy - radius, cy + radius]
        return min(xs), min(ys), max(xs), max(ys)

    def export_png(self, graph: ZXGraph, filepath: str,
                   edges: Optional[Sequence[DisplayEdge]] = None,
                   scale: float = 2.0, transparent: bool = False) -> bool:
        """Export the diagram to a PNG image.

        ``edges`` are the display edges from the canvas, so manual curvature
        is kept; without them parallel edges get the default fan-out.
        """
        vertices, edges = self._scene(graph, edges)
        bounds = self.bounds(vertices, edges)
        if bounds is None:
            return False
        min_x, min_y, max_x, max_y = bounds

        width = int((max_x - min_x + self.PADDING * 2) * scale)
        height = int((max_y - min_y + self.PADDING * 2) * scale)

        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        cr = cairo.Context(surface)
        cr.scale(scale, scale)
        cr.translate(-min_x + self.PADDING, -min_y + self.PADDING)

        if not transparent:
            cr.set_source_rgb(*self.renderer.COLORS['background'])
            cr.paint()

        self.renderer.draw_diagram(cr, vertices, edges)
        surface.write_to_png(filepath)
        logger.info(f"Exported PNG {filepath} ({width}x{height})")
        return True

    def export_pdf(self, graph: ZXGraph, filepath: str,
                   edges: Optional[Sequence[DisplayEdge]] = None,
                   page_size: str = "Auto", title: str = "ZX-diagram") -> bool:
        """Export the diagram to PDF, scaled to fit the page."""
        vertices, edges = self._scene(graph, edges)
        bounds = self.bounds(vertices, edges)
        if bounds is None:
            return False
        min_x, min_y, max_x, max_y = bounds

        map_width = max_x - min_x + self.PADDING * 2
        map_height = max_y - min_y + self.PADDING * 2

        page = PAGE_SIZES.get(page_size, PAGE_SIZES["A4"])
        if page is None:
            width, height = map_width, map_height
        else:
            width, height = page

        surface = cairo.PDFSurface(filepath, width, height)
        surface.set_metadata(cairo.PDF_METADATA_TITLE, title)
        surface.set_metadata(cairo.PDF_METADATA_CREATE_DATE, datetime.now().isoformat())
        cr = cairo.Context(surface)

        cr.set_source_rgb(*self.renderer.COLORS['background'])
        cr.paint()

        if page is not None:
            fit = min((width - 40) / map_width, (height - 40) / map_height, 1.0)
            cr.translate(width / 2, height / 2)
            cr.scale(fit, fit)
            cr.translate(-(min_x + max_x) / 2, -(min_y + max_y) / 2)
        else:
            cr.translate(-min_x + self.PADDING, -min_y + self.PADDING)

        self.renderer.draw_diagram(cr, vertices, edges)
        surface.finish()
        logger.info(f"Exported PDF {filepath}")
        return True

    def export_svg(self, graph: ZXGraph, filepath: str,
                   edges: Optional[Sequence[DisplayEdge]] = None) -> bool:
        vertices, edges = self._scene(graph, edges)
        bounds = self.bounds(vertices, edges)
        if bounds is None:
            return False
        min_x, min_y, max_x, max_y = bounds

        width = max_x - min_x + self.PADDING * 2
        height = max_y - min_y + self.PADDING * 2
        surface = cairo.SVGSurface(filepath, width, height)
        cr = cairo.Context(surface)
        cr.translate(-min_x + self.PADDING, -min_y + self.PADDING)
        self.renderer.draw_diagram(cr, vertices, edges)
        surface.finish()
        logger.info(f"Exported SVG {filepath}")
        return True


def get_export_dir() -> Path:
    """Get the default export directory."""
    export_dir = get_data_dir() / "exports"
    export_dir.mkdir(exist_ok=True)
    return export_dir
