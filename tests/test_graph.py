from fractions import Fraction

import pytest

from zxplorer.examples import example_graph
from zxplorer.graph import (
    ZXGraph, VertexType, EdgeType, EdgeKey, parse_phase, format_phase,
    InvalidPhase, InvalidSnapshot, UnknownEdge, UnknownVertex, UnsupportedOperation,
)


@pytest.fixture
def graph(line_graph):
    return line_graph


class TestVertices:
    def test_ids_are_sequential(self):
        g = ZXGraph()
        assert [g.add_vertex() for _ in range(3)] == [0, 1, 2]

    def test_removal_cascades_to_edges(self, graph):
        graph.add_edge(1, 1)
        graph.remove_vertex(1)
        assert not graph.has_vertex(1)
        assert graph.num_edges() == 1
        assert graph.has_edge(2, 3)

    def test_ids_are_not_reused_after_removal(self, graph):
        graph.remove_vertex(3)
        assert graph.add_vertex() == 4

    def test_unknown_vertex(self, graph):
        with pytest.raises(UnknownVertex):
            graph.vertex(42)
        with pytest.raises(UnknownVertex):
            graph.add_edge(0, 42)

    def test_projections_are_copies(self, graph):
        graph.vertices()[1].row = 99
        assert graph.vertex(1).row == 1.0

    def test_boundary_has_no_phase(self, graph):
        with pytest.raises(UnsupportedOperation):
            graph.set_vertex_phase(0, "1/2")

    def test_converting_to_boundary_drops_phase(self, graph):
        graph.set_vertex_phase(1, "1/4")
        graph.set_vertex_type(1, VertexType.BOUNDARY)
        assert graph.vertex(1).phase == "0"


class TestEdges:
    def test_parallel_edges_and_self_loops_are_kept(self, graph):
        graph.add_edge(2, 1)
        graph.add_edge(1, 1)
        assert len(graph.edges_between(1, 2)) == 2
        assert graph.has_edge(1, 1)
        assert graph.num_edges() == 5

    def test_remove_edge_takes_the_most_recent(self, graph):
        graph.add_edge(2, 1, EdgeType.SIMPLE)
        graph.remove_edge(1, 2)
        (remaining,) = graph.edges_between(1, 2)
        assert remaining.edge_type == EdgeType.HADAMARD

    def test_remove_missing_edge(self, graph):
        with pytest.raises(UnknownEdge):
            graph.remove_edge(0, 3)

    def test_set_edge_type_applies_to_all_parallel_edges(self, graph):
        graph.add_edge(1, 2)
        graph.set_edge_type(2, 1, EdgeType.HADAMARD)
        assert {e.edge_type for e in graph.edges_between(1, 2)} == {EdgeType.HADAMARD}

    def test_edge_key(self):
        key = EdgeKey.of(5, 2)
        assert (key.low, key.high) == (2, 5)
        assert 5 in key and 3 not in key
        assert str(key) == "2-5"
        assert EdgeKey.of(4, 4).is_self_loop

    def test_induced_edges(self, graph):
        assert [e.key for e in graph.induced_edges([1, 2, 3])] == [EdgeKey(1, 2), EdgeKey(2, 3)]


class TestPhases:
    @pytest.mark.parametrize("text, expected", [
        ("0", Fraction(0)),
        ("1/2", Fraction(1, 2)),
        ("3/4", Fraction(3, 4)),
        ("1", Fraction(1)),
        ("-1/2", Fraction(3, 2)),
        ("5/2", Fraction(1, 2)),
        ("0.25", Fraction(1, 4)),
        ("π/2", Fraction(1, 2)),
        ("-π/4", Fraction(7, 4)),
        ("3pi/4", Fraction(3, 4)),
        (" pi ", Fraction(1)),
        ("3*π/4", Fraction(3, 4)),
        ("-π", Fraction(1)),
    ])
    def test_parse(self, text, expected):
        assert parse_phase(text) == expected

    @pytest.mark.parametrize("text", ["", "half", "1/0", "pi/x", "1e999999999", "2E5", "0.5e-3"])
    def test_parse_rejects(self, text):
        with pytest.raises(InvalidPhase):
            parse_phase(text)

    @pytest.mark.parametrize("phase, shown", [
        ("0", ""), ("1", "π"), ("1/2", "π/2"), ("-1/4", "-π/4"), ("3/4", "3π/4"), ("2", "2π"),
    ])
    def test_format(self, phase, shown):
        assert format_phase(phase) == shown

    def test_stored_phase_is_normalised(self, graph):
        graph.set_vertex_phase(1, "-π/2")
        assert graph.vertex(1).phase == "3/2"


class TestSnapshots:
    def test_json_round_trip(self, graph):
        graph.set_vertex_phase(2, "1/4")
        graph.add_edge(1, 1)
        restored = ZXGraph.from_json(graph.to_json())
        assert restored.to_json() == graph.to_json()
        assert restored.add_vertex() == 4

    @pytest.mark.parametrize("data", [
        "not json",
        "[]",
        '{"vertices": [{"id": 0}, {"id": 0}]}',
        '{"vertices": [{"id": 0, "type": 9}]}',
        '{"vertices": [{"id": 0}], "edges": [{"source": 0, "target": 1}]}',
        '{"vertices": [{"id": 0, "phase": "abc"}]}',
    ])
    def test_malformed_snapshots(self, data):
        with pytest.raises(InvalidSnapshot):
            ZXGraph.from_json(data)

    def test_replace_with(self, graph):
        other = ZXGraph()
        other.add_vertex(VertexType.X, 4, 4)
        graph.replace_with(other)
        assert graph.num_vertices() == 1
        assert graph.num_edges() == 0

    def test_pyzx_round_trip_keeps_ids(self, graph):
        graph.set_vertex_phase(1, "1/2")
        g, id_map = graph.to_pyzx()
        assert g.num_vertices() == 4
        assert g.num_edges() == 3

        restored = ZXGraph()
        restored.load_pyzx(g, id_map)
        assert [(v.id, v.vertex_type, v.phase, v.row, v.col) for v in restored.vertices()] == \
            [(v.id, v.vertex_type, v.phase, v.row, v.col) for v in graph.vertices()]
        assert sorted(e.key for e in restored.edges()) == sorted(e.key for e in graph.edges())
        assert restored.edges_between(1, 2)[0].edge_type == EdgeType.HADAMARD

    def test_bounds(self, graph):
        assert graph.bounds() == (0.0, 0.0, 3.0, 0.0)
        assert ZXGraph().bounds() is None


def test_example_graph():
    g = example_graph()
    assert g.num_vertices() == 24
    assert g.num_edges() == 26
    boundaries = [v for v in g.vertices() if v.is_boundary]
    assert len(boundaries) == 8
    assert sum(e.edge_type == EdgeType.HADAMARD for e in g.edges()) == 3
