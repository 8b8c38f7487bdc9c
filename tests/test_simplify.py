import pytest

from zxplorer.controller import InteractionController
from zxplorer.graph import ZXGraph, VertexType
from zxplorer.simplify import simplify, run_rule, get_rule, SimplificationError, RULES


def chain(*types):
    """Vertices in a row joined by simple edges."""
    g = ZXGraph()
    ids = [g.add_vertex(t, i, 0) for i, t in enumerate(types)]
    for a, b in zip(ids, ids[1:]):
        g.add_edge(a, b)
    return g


B, Z, X = VertexType.BOUNDARY, VertexType.Z, VertexType.X


def test_spider_fusion_applies():
    g = chain(B, Z, Z, B)
    result = simplify(g, "spiders")
    assert result.applied
    assert result.message == "Spider Fusion applied"
    assert g.num_vertices() == 3


def test_spider_fusion_without_matches():
    g = chain(B, Z, B)
    before = g.to_json()
    result = simplify(g, "spiders")
    assert not result.applied
    assert result.message == "Spider Fusion: no matches found"
    assert g.to_json() == before


def test_boundaries_keep_their_ids():
    g = chain(B, Z, Z, B)
    assert run_rule(g, "spiders")
    assert g.has_vertex(0) and g.has_vertex(3)
    assert g.vertex(0).is_boundary


def test_full_reduce_reports_counts():
    g = chain(B, Z, X, Z, B)
    result = simplify(g, "full")
    assert result.applied
    assert result.vertex_reduction > 0
    assert result.message.startswith("Full Simplification complete. Vertices: 5 → ")


def test_graph_method_delegates():
    g = chain(B, Z, Z, B)
    assert g.simplify("spiders")
    assert not g.simplify("spiders")


def test_unknown_rule():
    with pytest.raises(SimplificationError):
        get_rule("magic")
    with pytest.raises(SimplificationError):
        simplify(ZXGraph(), "magic")


def test_every_rule_runs_on_an_empty_graph():
    for name in RULES:
        assert not run_rule(ZXGraph(), name)


def test_controller_records_only_applied_rules(settings):
    controller = InteractionController(chain(B, Z, Z, B), settings)
    messages = []
    controller.on_message = messages.append

    controller.simplify("spiders")
    assert controller.history.undo_count == 1
    assert controller.history.undo_description == "Spider Fusion"

    controller.simplify("spiders")
    assert controller.history.undo_count == 1
    assert messages[-1] == "Spider Fusion: no matches found"

    controller.undo()
    assert controller.graph.num_vertices() == 4


def test_controller_reports_unknown_rule(controller, messages):
    assert controller.simplify("magic") is None
    assert messages
    assert controller.history.undo_count == 0


@pytest.mark.parametrize("name", sorted(RULES))
def test_every_rule_runs_on_a_diagram(name):
    g = chain(B, Z, Z, B)
    result = simplify(g, name)
    assert "failed" not in result.message
    assert g.num_vertices() <= 4
