"""Named simplification strategies backed by PyZX."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pyzx import simplify as zx_simplify

from zxplorer.graph import ZXGraph, GraphError

logger = logging.getLogger(__name__)


class SimplificationError(GraphError):
    """PyZX failed while rewriting the diagram."""


@dataclass(frozen=True)
class Rule:
    """A rewrite strategy the editor can run."""
    name: str
    title: str
    apply: Callable
    # Report vertex/edge counts in the result message
    summary: bool = False


@dataclass
class SimplificationResult:
    applied: bool
    message: str
    vertex_reduction: Optional[int] = None
    edge_reduction: Optional[int] = None


RULES: Dict[str, Rule] = {
    "spiders": Rule("spiders", "Spider Fusion",
                    lambda g: zx_simplify.spider_simp(g, quiet=True)),
    "identities": Rule("identities", "Identity Removal",
                       lambda g: zx_simplify.id_simp(g, quiet=True)),
    "lcomp": Rule("lcomp", "Local Complementation",
                  lambda g: zx_simplify.lcomp_simp(g, quiet=True)),
    "pivot": Rule("pivot", "Pivot",
                  lambda g: zx_simplify.pivot_simp(g, quiet=True)),
    "clifford": Rule("clifford", "Clifford Simplification",
                     lambda g: zx_simplify.clifford_simp(g, quiet=True), summary=True),
    "full": Rule("full", "Full Simplification",
                 lambda g: zx_simplify.full_reduce(g, quiet=True), summary=True),
}


def get_rule(name: str) -> Rule:
    try:
        return RULES[name]
    except KeyError:
        raise SimplificationError(f"Unknown simplification '{name}'") from None


def _signature(graph: ZXGraph):
    """Order-independent description of a graph, for change detection."""
    edges = sorted((e.key.low, e.key.high, int(e.edge_type)) for e in graph.edges())
    return graph.to_dict()["vertices"], edges


def run_rule(graph: ZXGraph, name: str) -> bool:
    """Rewrite ``graph`` in place; returns whether anything changed.

    The rule runs on a PyZX copy, so a failing rewrite leaves ``graph``
    untouched.
    """
    rule = get_rule(name)
    before = _signature(graph)
    g, id_map = graph.to_pyzx()
    # Let PyZX merge parallel edges and loops while rewriting
    g.set_auto_simplify(True)
    try:
        rule.apply(g)
        result = graph.copy()
        result.load_pyzx(g, id_map)
    except GraphError:
        raise
    except Exception as exc:
        raise SimplificationError(f"{rule.title} failed: {exc}") from exc

    if _signature(result) == before:
        return False
    graph.replace_with(result)
    return True


def simplify(graph: ZXGraph, name: str) -> SimplificationResult:
    """Run a named rule and describe the outcome for the user."""
    rule = get_rule(name)
    start_vertices = graph.num_vertices()
    start_edges = graph.num_edges()

    applied = run_rule(graph, name)

    end_vertices = graph.num_vertices()
    end_edges = graph.num_edges()
    vertex_reduction = start_vertices - end_vertices
    edge_reduction = start_edges - end_edges
    logger.info(f"{rule.title}: applied={applied}, "
                f"vertices {start_vertices}->{end_vertices}, edges {start_edges}->{end_edges}")

    if not rule.summary:
        message = (f"{rule.title} applied" if applied
                   else f"{rule.title}: no matches found")
        return SimplificationResult(applied, message)

    if applied:
        message = (f"{rule.title} complete. "
                   f"Vertices: {start_vertices} → {end_vertices} (-{vertex_reduction}), "
                   f"Edges: {start_edges} → {end_edges} (-{edge_reduction})")
    else:
        message = "Graph is already fully simplified"
    return SimplificationResult(applied, message, vertex_reduction, edge_reduction)

