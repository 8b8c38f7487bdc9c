import logging

import pytest

from zxplorer.clipboard import ClipboardManager
from zxplorer.graph import ZXGraph, VertexType, EdgeType, InvalidPhase


@pytest.fixture
def source():
    g = ZXGraph()
    a = g.add_vertex(VertexType.Z, 1, 1)
    b = g.add_vertex(VertexType.X, 2, 1)
    c = g.add_vertex(VertexType.Z, 3, 1)
    g.set_vertex_phase(a, "1/2")
    g.add_edge(a, b, EdgeType.HADAMARD)
    g.add_edge(b, c)
    return g


def test_copy_takes_induced_subgraph(source):
    clipboard = ClipboardManager()
    assert clipboard.copy(source.vertices(), source.edges(), [0, 1]) == 2
    vertices, edges = clipboard.contents
    assert [v.id for v in vertices] == [0, 1]
    assert len(edges) == 1
    assert edges[0].edge_type == EdgeType.HADAMARD


def test_empty_copy_leaves_clipboard_unchanged(source):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [2])
    assert clipboard.copy(source.vertices(), source.edges(), []) == 0
    assert clipboard.counts() == (1, 0)


def test_paste_empty_clipboard(source):
    assert ClipboardManager().paste(source) is None


def test_repeated_paste_offsets(source):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [0, 1])

    first = clipboard.paste(source)
    second = clipboard.paste(source)
    assert first == {3, 4}
    assert second == {5, 6}
    assert (source.vertex(3).row, source.vertex(3).col) == (1.5, 1.5)
    assert (source.vertex(5).row, source.vertex(5).col) == (2.0, 2.0)
    assert source.has_edge(3, 4)
    assert source.edges_between(5, 6)[0].edge_type == EdgeType.HADAMARD


def test_paste_keeps_phase_and_type(source):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [0])
    (new_id,) = clipboard.paste(source)
    pasted = source.vertex(new_id)
    assert pasted.phase == "1/2"
    assert pasted.vertex_type == VertexType.Z


def test_copy_resets_offset(source):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [2])
    clipboard.paste(source)
    clipboard.copy(source.vertices(), source.edges(), [2])
    (new_id,) = clipboard.paste(source)
    assert source.vertex(new_id).row == 3.5


def test_clipboard_is_detached_from_graph(source):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [0, 1])
    source.clear()
    assert clipboard.paste(source) == {0, 1}
    assert source.num_edges() == 1


def test_paste_skips_a_phase_that_fails(source, monkeypatch, caplog):
    clipboard = ClipboardManager()
    clipboard.copy(source.vertices(), source.edges(), [0, 1, 2])

    def reject(vertex_id, phase):
        raise InvalidPhase(f"Invalid phase '{phase}'")

    monkeypatch.setattr(source, "set_vertex_phase", reject)
    with caplog.at_level(logging.WARNING, logger="zxplorer.clipboard"):
        new_ids = clipboard.paste(source)

    assert new_ids == {3, 4, 5}
    assert source.vertex(3).phase == "0"
    assert source.has_edge(3, 4) and source.has_edge(4, 5)
    assert "Could not set phase on pasted vertex 3" in caplog.text
