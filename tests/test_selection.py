from zxplorer.graph import EdgeKey
from zxplorer.selection import Selection


def test_new_selection_is_empty():
    selection = Selection()
    assert selection.is_empty
    assert len(selection) == 0


def test_click_vertex_replaces_and_clears_edges():
    selection = Selection()
    selection.click_edge(EdgeKey.of(0, 1))
    selection.click_vertex(2)
    assert selection.vertices == {2}
    assert selection.edges == set()


def test_toggle_vertex_keeps_edges():
    selection = Selection()
    selection.click_edge(EdgeKey.of(0, 1))
    selection.click_vertex(2, toggle=True)
    assert selection.vertices == {2}
    assert selection.edges == {EdgeKey(0, 1)}

    selection.click_vertex(2, toggle=True)
    assert selection.vertices == set()


def test_click_edge_replaces_and_clears_vertices():
    selection = Selection()
    selection.select_only_vertices([1, 2])
    selection.click_edge(EdgeKey.of(3, 1))
    assert selection.vertices == set()
    assert selection.edges == {EdgeKey(1, 3)}


def test_toggle_edge_keeps_vertices():
    selection = Selection()
    selection.select_only_vertices([1])
    selection.click_edge(EdgeKey.of(1, 2), toggle=True)
    selection.click_edge(EdgeKey.of(2, 3), toggle=True)
    assert selection.vertices == {1}
    assert len(selection) == 3


def test_box_select_replace_and_toggle():
    selection = Selection()
    selection.click_edge(EdgeKey.of(0, 1))
    selection.box_select([1, 2, 3])
    assert selection.vertices == {1, 2, 3}
    assert selection.edges == set()

    selection.click_edge(EdgeKey.of(0, 1), toggle=True)
    selection.box_select([3, 4], toggle=True)
    assert selection.vertices == {1, 2, 4}
    assert selection.edges == {EdgeKey(0, 1)}


def test_intersect_drops_stale_ids():
    selection = Selection()
    selection.select_only_vertices([0, 1, 5])
    selection.select_only_edges([EdgeKey(0, 1), EdgeKey(1, 5)])
    selection.intersect([0, 1], [EdgeKey(0, 1)])
    assert selection.vertices == {0, 1}
    assert selection.edges == {EdgeKey(0, 1)}


def test_clear():
    selection = Selection()
    selection.select_only_vertices([0])
    selection.select_only_edges([EdgeKey(0, 0)])
    selection.clear()
    assert selection.is_empty
