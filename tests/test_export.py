import pytest

from zxplorer.export import DiagramExporter
from zxplorer.geometry import layout_parallel_edges
from zxplorer.graph import ZXGraph


@pytest.fixture
def exporter():
    return DiagramExporter()


def test_png(exporter, line_graph, tmp_path):
    path = tmp_path / "diagram.png"
    assert exporter.export_png(line_graph, str(path))
    assert path.read_bytes()[:4] == b"\x89PNG"


def test_png_keeps_canvas_curvature(exporter, line_graph, tmp_path):
    line_graph.add_edge(1, 2)
    edges = layout_parallel_edges(line_graph.edges())
    edges[1].curve_distance = 2.0
    path = tmp_path / "curved.png"
    assert exporter.export_png(line_graph, str(path), edges=edges, transparent=True)
    assert path.stat().st_size > 0


def test_svg(exporter, line_graph, tmp_path):
    line_graph.add_edge(1, 1)
    path = tmp_path / "diagram.svg"
    assert exporter.export_svg(line_graph, str(path))
    assert b"<svg" in path.read_bytes()


@pytest.mark.parametrize("page_size", ["Auto", "A4"])
def test_pdf(exporter, line_graph, tmp_path, page_size):
    path = tmp_path / "diagram.pdf"
    assert exporter.export_pdf(line_graph, str(path), page_size=page_size)
    assert path.read_bytes()[:5] == b"%PDF-"


def test_empty_graph_is_not_exported(exporter, tmp_path):
    path = tmp_path / "empty.png"
    assert not exporter.export_png(ZXGraph(), str(path))
    assert not exporter.export_svg(ZXGraph(), str(tmp_path / "empty.svg"))
    assert not path.exists()


def test_bounds_include_self_loops(exporter, line_graph):
    vertices = line_graph.vertices()
    plain = exporter.bounds(vertices, layout_parallel_edges(line_graph.edges()))
    line_graph.add_edge(3, 3)
    looped = exporter.bounds(vertices, layout_parallel_edges(line_graph.edges()))
    assert looped[2] > plain[2]
    assert looped[1] < plain[1]
