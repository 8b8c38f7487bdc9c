"""ZX-diagram graph model for ZXplorer.

``ZXGraph`` is the engine handle the editor works against. It keeps the
diagram as plain vertex and edge records with stable identifiers and hands
the heavy lifting (rewrites, simplification) to PyZX through
``to_pyzx``/``load_pyzx``.
"""

import json
import logging
from dataclasses import dataclass, asdict
from enum import IntEnum
from fractions import Fraction
from typing import Optional, List, Dict, Iterable, Tuple

import pyzx
from pyzx.graph.jsonparser import string_to_phase
from pyzx.utils import VertexType as PyzxVertexType, EdgeType as PyzxEdgeType

logger = logging.getLogger(__name__)


class GraphError(Exception):
    """Base class for graph engine errors."""


class InvalidPhase(GraphError, ValueError):
    """A phase string could not be parsed."""


class UnknownVertex(GraphError, KeyError):
    """A vertex identifier does not exist in the graph."""


class UnknownEdge(GraphError, KeyError):
    """No edge exists between the given endpoints."""


class InvalidSnapshot(GraphError, ValueError):
    """A serialized snapshot is malformed or incompatible."""


class UnsupportedOperation(GraphError):
    """The operation is not allowed for this kind of vertex."""


class VertexType(IntEnum):
    """Vertex kinds in a ZX-diagram."""
    BOUNDARY = 0
    Z = 1
    X = 2
    H_BOX = 3

    @property
    def label(self) -> str:
        return _VERTEX_LABELS[self]


class EdgeType(IntEnum):
    """Edge kinds in a ZX-diagram."""
    SIMPLE = 0
    HADAMARD = 1

    @property
    def label(self) -> str:
        return "Hadamard" if self is EdgeType.HADAMARD else "Simple"

    def toggled(self) -> "EdgeType":
        return EdgeType.SIMPLE if self is EdgeType.HADAMARD else EdgeType.HADAMARD


_VERTEX_LABELS = {
    VertexType.BOUNDARY: "Boundary",
    VertexType.Z: "Z spider",
    VertexType.X: "X spider",
    VertexType.H_BOX: "H-box",
}

_TO_PYZX_VERTEX = {
    VertexType.BOUNDARY: PyzxVertexType.BOUNDARY,
    VertexType.Z: PyzxVertexType.Z,
    VertexType.X: PyzxVertexType.X,
    VertexType.H_BOX: PyzxVertexType.H_BOX,
}
_FROM_PYZX_VERTEX = {int(v): k for k, v in _TO_PYZX_VERTEX.items()}

_TO_PYZX_EDGE = {
    EdgeType.SIMPLE: PyzxEdgeType.SIMPLE,
    EdgeType.HADAMARD: PyzxEdgeType.HADAMARD,
}
_FROM_PYZX_EDGE = {int(v): k for k, v in _TO_PYZX_EDGE.items()}


@dataclass(frozen=True, order=True)
class EdgeKey:
    """Canonical identifier for an undirected edge: (min, max) of its endpoints."""
    low: int
    high: int

    @classmethod
    def of(cls, source: int, target: int) -> "EdgeKey":
        return cls(min(source, target), max(source, target))

    @property
    def is_self_loop(self) -> bool:
        return self.low == self.high

    def __contains__(self, vertex_id: int) -> bool:
        return vertex_id == self.low or vertex_id == self.high

    def __str__(self) -> str:
        return f"{self.low}-{self.high}"


@dataclass
class Vertex:
    """Read-only projection of a graph vertex."""
    id: int
    vertex_type: VertexType = VertexType.Z
    phase: str = "0"
    row: float = 0.0
    col: float = 0.0

    @property
    def is_boundary(self) -> bool:
        return self.vertex_type == VertexType.BOUNDARY


@dataclass
class Edge:
    """Read-only projection of a graph edge."""
    source: int
    target: int
    edge_type: EdgeType = EdgeType.SIMPLE

    @property
    def key(self) -> EdgeKey:
        return EdgeKey.of(self.source, self.target)


# ==================== Phases ====================

def parse_phase(text: str) -> Fraction:
    """Parse a phase given as a rational multiple of pi.

    Accepts ``"1/2"``, ``"3/4"``, ``"-1"``, ``"0.25"`` and the pi-suffixed
    forms shown in the editor (``"π/2"``, ``"3pi/4"``). The result is
    reduced modulo 2. Symbolic phases are not supported.
    """
    if text is None:
        raise InvalidPhase("Phase is empty")
    cleaned = str(text).strip()
    if not cleaned:
        raise InvalidPhase("Phase is empty")
    # Exponents would make Fraction build arbitrarily large integers
    if "e" in cleaned.lower():
        raise InvalidPhase(f"Invalid phase '{text}'")
    if cleaned.replace(" ", "").lower() in ("π", "pi", "+π", "+pi"):
        cleaned = "1"

    try:
        value = string_to_phase(cleaned, pyzx.Graph())
    except (ValueError, OverflowError, ZeroDivisionError) as exc:
        raise InvalidPhase(f"Invalid phase '{text}'") from exc
    if not isinstance(value, Fraction):
        raise InvalidPhase(f"Invalid phase '{text}'")
    return value.limit_denominator(1 << 20) % 2


def phase_to_str(value: Fraction) -> str:
    """Render a phase fraction as the canonical ``"n/d"`` string."""
    return str(Fraction(value) % 2)


def format_phase(phase: str) -> str:
    """Format a stored phase with a pi symbol for display ("" for zero)."""
    if phase == "0":
        return ""
    if phase == "1":
        return "π"
    if "/" in phase:
        numerator, denominator = phase.split("/", 1)
        if numerator == "1":
            return f"π/{denominator}"
        if numerator == "-1":
            return f"-π/{denominator}"
        return f"{numerator}π/{denominator}"
    return f"{phase}π"


# ==================== Graph ====================

class ZXGraph:
    """Mutable ZX-diagram with stable vertex identifiers.

    Parallel edges and self-loops are kept as-is; nothing is fused or
    cancelled until a simplification is requested explicitly.
    """

    def __init__(self):
        self._vertices: Dict[int, Vertex] = {}
        self._edges: List[Edge] = []
        self._next_id = 0

    # ==================== Queries ====================

    def vertices(self) -> List[Vertex]:
        """All vertices, ordered by identifier."""
        return [Vertex(**asdict(v)) for _, v in sorted(self._vertices.items())]

    def edges(self) -> List[Edge]:
        """All edges in creation order."""
        return [Edge(e.source, e.target, e.edge_type) for e in self._edges]

    def vertex(self, vertex_id: int) -> Vertex:
        return Vertex(**asdict(self._get(vertex_id)))

    def has_vertex(self, vertex_id: int) -> bool:
        return vertex_id in self._vertices

    def has_edge(self, source: int, target: int) -> bool:
        key = EdgeKey.of(source, target)
        return any(e.key == key for e in self._edges)

    def edges_between(self, source: int, target: int) -> List[Edge]:
        key = EdgeKey.of(source, target)
        return [Edge(e.source, e.target, e.edge_type) for e in self._edges if e.key == key]

    def num_vertices(self) -> int:
        return len(self._vertices)

    def num_edges(self) -> int:
        return len(self._edges)

    def is_empty(self) -> bool:
        return not self._vertices

    def _get(self, vertex_id: int) -> Vertex:
        try:
            return self._vertices[vertex_id]
        except KeyError:
            raise UnknownVertex(vertex_id) from None

    # ==================== Mutation ====================

    def add_vertex(self, vertex_type: VertexType = VertexType.Z,
                   row: float = 0.0, col: float = 0.0) -> int:
        """Create a vertex and return its new identifier."""
        vertex_id = self._next_id
        self._next_id += 1
        self._vertices[vertex_id] = Vertex(vertex_id, VertexType(vertex_type), "0",
                                           float(row), float(col))
        return vertex_id

    def remove_vertex(self, vertex_id: int):
        """Remove a vertex together with its incident edges."""
        self._get(vertex_id)
        del self._vertices[vertex_id]
        self._edges = [e for e in self._edges if vertex_id not in e.key]

    def add_edge(self, source: int, target: int,
                 edge_type: EdgeType = EdgeType.SIMPLE) -> Edge:
        self._get(source)
        self._get(target)
        edge = Edge(source, target, EdgeType(edge_type))
        self._edges.append(edge)
        return Edge(source, target, edge.edge_type)

    def remove_edge(self, source: int, target: int):
        """Remove one edge between two vertices (the most recently added)."""
        index = self._find_edge(source, target)
        del self._edges[index]

    def set_edge_type(self, source: int, target: int, edge_type: EdgeType):
        """Set the type of every edge between two vertices."""
        key = EdgeKey.of(source, target)
        found = False
        for edge in self._edges:
            if edge.key == key:
                edge.edge_type = EdgeType(edge_type)
                found = True
        if not found:
            raise UnknownEdge(str(key))

    def _find_edge(self, source: int, target: int) -> int:
        key = EdgeKey.of(source, target)
        for index in range(len(self._edges) - 1, -1, -1):
            if self._edges[index].key == key:
                return index
        raise UnknownEdge(str(key))

    def set_vertex_type(self, vertex_id: int, vertex_type: VertexType):
        vertex = self._get(vertex_id)
        vertex.vertex_type = VertexType(vertex_type)
        if vertex.vertex_type == VertexType.BOUNDARY:
            vertex.phase = "0"

    def set_vertex_phase(self, vertex_id: int, phase: str):
        """Set a vertex phase; raises InvalidPhase on malformed input."""
        vertex = self._get(vertex_id)
        if vertex.is_boundary:
            raise UnsupportedOperation("Boundary vertices have no phase")
        vertex.phase = phase_to_str(parse_phase(phase))

    def set_vertex_position(self, vertex_id: int, row: float, col: float):
        vertex = self._get(vertex_id)
        vertex.row = float(row)
        vertex.col = float(col)

    def clear(self):
        self._vertices.clear()
        self._edges.clear()
        self._next_id = 0

    # ==================== Serialization ====================

    def to_dict(self) -> dict:
        return {
            "vertices": [
                {"id": v.id, "type": int(v.vertex_type), "phase": v.phase,
                 "row": v.row, "col": v.col}
                for _, v in sorted(self._vertices.items())
            ],
            "edges": [
                {"source": e.source, "target": e.target, "type": int(e.edge_type)}
                for e in self._edges
            ],
        }

    def to_json(self) -> str:
        """Serialize the whole graph into a snapshot string."""
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, data: str) -> "ZXGraph":
        """Rebuild a graph from a snapshot; raises InvalidSnapshot."""
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, TypeError) as exc:
            raise InvalidSnapshot(f"Snapshot is not valid JSON: {exc}") from exc
        return cls.from_dict(payload)

    @classmethod
    def from_dict(cls, payload: dict) -> "ZXGraph":
        if not isinstance(payload, dict):
            raise InvalidSnapshot("Snapshot must be a JSON object")
        graph = cls()
        try:
            for item in payload.get("vertices", []):
                vertex_id = int(item["id"])
                if vertex_id in graph._vertices:
                    raise InvalidSnapshot(f"Duplicate vertex id {vertex_id}")
                vertex_type = VertexType(int(item.get("type", VertexType.Z)))
                phase = "0"
                if vertex_type != VertexType.BOUNDARY:
                    phase = phase_to_str(parse_phase(str(item.get("phase", "0"))))
                graph._vertices[vertex_id] = Vertex(
                    vertex_id, vertex_type, phase,
                    float(item.get("row", 0.0)), float(item.get("col", 0.0)),
                )
                graph._next_id = max(graph._next_id, vertex_id + 1)
            for item in payload.get("edges", []):
                graph.add_edge(int(item["source"]), int(item["target"]),
                               EdgeType(int(item.get("type", EdgeType.SIMPLE))))
        except InvalidSnapshot:
            raise
        except (GraphError, KeyError, TypeError, ValueError) as exc:
            raise InvalidSnapshot(f"Malformed snapshot: {exc}") from exc
        return graph

    def copy(self) -> "ZXGraph":
        return ZXGraph.from_dict(self.to_dict())

    def replace_with(self, other: "ZXGraph"):
        """Take over the contents of another graph in place."""
        self._vertices = {v.id: v for v in other.vertices()}
        self._edges = other.edges()
        self._next_id = other._next_id

    # ==================== PyZX bridge ====================

    def to_pyzx(self) -> Tuple["pyzx.graph.base.BaseGraph", Dict[int, int]]:
        """Build a PyZX multigraph; returns it with a PyZX-id -> vertex-id map."""
        g = pyzx.Graph(backend="multigraph")
        g.set_auto_simplify(False)
        to_pyzx: Dict[int, int] = {}
        for vertex in self.vertices():
            v = g.add_vertex(_TO_PYZX_VERTEX[vertex.vertex_type],
                             qubit=vertex.col, row=vertex.row)
            if vertex.phase != "0":
                g.set_phase(v, Fraction(vertex.phase))
            to_pyzx[vertex.id] = v
        for edge in self._edges:
            g.add_edge((to_pyzx[edge.source], to_pyzx[edge.target]),
                       _TO_PYZX_EDGE[edge.edge_type])
        return g, {v: k for k, v in to_pyzx.items()}

    def load_pyzx(self, g, id_map: Optional[Dict[int, int]] = None):
        """Replace this graph's contents with a PyZX graph.

        Vertices found in ``id_map`` keep their identifiers, new ones get
        fresh identifiers.
        """
        id_map = dict(id_map or {})
        next_id = max([self._next_id] + [vid + 1 for vid in id_map.values()])
        vertices: Dict[int, Vertex] = {}
        mapping: Dict[int, int] = {}
        for v in sorted(g.vertices()):
            if v in id_map:
                vertex_id = id_map[v]
            else:
                vertex_id = next_id
                next_id += 1
            mapping[v] = vertex_id
            vertex_type = _FROM_PYZX_VERTEX.get(int(g.type(v)))
            if vertex_type is None:
                raise InvalidSnapshot(f"Unsupported PyZX vertex type {g.type(v)}")
            phase = "0"
            if vertex_type != VertexType.BOUNDARY:
                phase = phase_to_str(Fraction(g.phase(v)).limit_denominator(1 << 20))
            vertices[vertex_id] = Vertex(vertex_id, vertex_type, phase,
                                         float(g.row(v)), float(g.qubit(v)))
        edges: List[Edge] = []
        for e in g.edges():
            s, t = g.edge_st(e)
            edge_type = _FROM_PYZX_EDGE.get(int(g.edge_type(e)))
            if edge_type is None:
                raise InvalidSnapshot(f"Unsupported PyZX edge type {g.edge_type(e)}")
            edges.append(Edge(mapping[s], mapping[t], edge_type))
        self._vertices = vertices
        self._edges = edges
        self._next_id = next_id

    def simplify(self, rule: str) -> bool:
        """Apply a named simplification in place; returns whether it changed anything."""
        from zxplorer.simplify import run_rule
        return run_rule(self, rule)

    # ==================== Bulk helpers ====================

    def induced_edges(self, vertex_ids: Iterable[int]) -> List[Edge]:
        """Edges whose endpoints are both in ``vertex_ids``."""
        ids = set(vertex_ids)
        return [Edge(e.source, e.target, e.edge_type)
                for e in self._edges if e.source in ids and e.target in ids]

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(min_row, min_col, max_row, max_col) of all vertices, or None."""
        if not self._vertices:
            return None
        rows = [v.row for v in self._vertices.values()]
        cols = [v.col for v in self._vertices.values()]
        return min(rows), min(cols), max(rows), max(cols)
