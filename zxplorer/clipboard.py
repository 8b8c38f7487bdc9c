"""Copy/paste of diagram fragments."""

import logging
from typing import Optional, List, Iterable, Set, Tuple, Dict

from zxplorer.graph import ZXGraph, Vertex, Edge, GraphError

logger = logging.getLogger(__name__)

PASTE_OFFSET_STEP = 0.5


class ClipboardManager:
    """Holds one detached copy of a selected subgraph.

    Every paste without an intervening copy is shifted a further
    ``PASTE_OFFSET_STEP`` graph units down and right.
    """

    def __init__(self):
        self._vertices: List[Vertex] = []
        self._edges: List[Edge] = []
        self.paste_count = 0

    @property
    def is_empty(self) -> bool:
        return not self._vertices

    @property
    def contents(self) -> Tuple[List[Vertex], List[Edge]]:
        return list(self._vertices), list(self._edges)

    def counts(self) -> Tuple[int, int]:
        return len(self._vertices), len(self._edges)

    def copy(self, vertices: Iterable[Vertex], edges: Iterable[Edge],
             selected_ids: Iterable[int]) -> int:
        """Capture the induced subgraph on ``selected_ids``; returns the vertex count."""
        selected = set(selected_ids)
        if not selected:
            return 0

        self._vertices = [Vertex(v.id, v.vertex_type, v.phase, v.row, v.col)
                          for v in vertices if v.id in selected]
        self._edges = [Edge(e.source, e.target, e.edge_type)
                       for e in edges if e.source in selected and e.target in selected]
        self.paste_count = 0
        logger.debug(f"Copied {len(self._vertices)} vertices, {len(self._edges)} edges")
        return len(self._vertices)

    def paste(self, graph: ZXGraph) -> Optional[Set[int]]:
        """Add the clipboard contents to ``graph``; returns the new vertex ids."""
        if self.is_empty:
            return None

        offset = PASTE_OFFSET_STEP * (self.paste_count + 1)
        id_map: Dict[int, int] = {}

        for vertex in self._vertices:
            new_id = graph.add_vertex(vertex.vertex_type,
                                      vertex.row + offset, vertex.col + offset)
            id_map[vertex.id] = new_id
            if vertex.phase != "0":
                try:
                    graph.set_vertex_phase(new_id, vertex.phase)
                except GraphError as exc:
                    logger.warning(f"Could not set phase on pasted vertex {new_id}: {exc}")

        for edge in self._edges:
            if edge.source in id_map and edge.target in id_map:
                graph.add_edge(id_map[edge.source], id_map[edge.target], edge.edge_type)

        self.paste_count += 1
        logger.info(f"Pasted {len(id_map)} vertices at offset {offset}")
        return set(id_map.values())

    def clear(self):
        self._vertices = []
        self._edges = []
        self.paste_count = 0
