"""Selection state for the diagram editor."""

from typing import Iterable, Set

from zxplorer.graph import EdgeKey


class Selection:
    """Selected vertex ids and edge keys.

    Replacing the selection of one kind clears the other kind; toggling
    (modifier held) leaves the other kind untouched.
    """

    def __init__(self):
        self.vertices: Set[int] = set()
        self.edges: Set[EdgeKey] = set()

    @property
    def is_empty(self) -> bool:
        return not self.vertices and not self.edges

    def __len__(self) -> int:
        return len(self.vertices) + len(self.edges)

    # ==================== Vertices ====================

    def select_only_vertices(self, ids: Iterable[int]):
        self.vertices = set(ids)

    def toggle_vertex(self, vertex_id: int):
        if vertex_id in self.vertices:
            self.vertices.discard(vertex_id)
        else:
            self.vertices.add(vertex_id)

    def clear_vertices(self):
        self.vertices.clear()

    # ==================== Edges ====================

    def select_only_edges(self, keys: Iterable[EdgeKey]):
        self.edges = set(keys)

    def toggle_edge(self, key: EdgeKey):
        if key in self.edges:
            self.edges.discard(key)
        else:
            self.edges.add(key)

    def clear_edges(self):
        self.edges.clear()

    def clear(self):
        self.vertices.clear()
        self.edges.clear()

    # ==================== Gestures ====================

    def click_vertex(self, vertex_id: int, toggle: bool = False):
        """Apply a click on a vertex."""
        if toggle:
            self.toggle_vertex(vertex_id)
        else:
            self.select_only_vertices([vertex_id])
            self.clear_edges()

    def click_edge(self, key: EdgeKey, toggle: bool = False):
        """Apply a click on an edge."""
        if toggle:
            self.toggle_edge(key)
        else:
            self.select_only_edges([key])
            self.clear_vertices()

    def box_select(self, ids: Iterable[int], toggle: bool = False):
        """Apply a box selection covering ``ids``."""
        if toggle:
            for vertex_id in ids:
                self.toggle_vertex(vertex_id)
        else:
            self.select_only_vertices(ids)
            self.clear_edges()

    def intersect(self, vertex_ids: Iterable[int], edge_keys: Iterable[EdgeKey]):
        """Drop identifiers that no longer refer to live entities."""
        self.vertices &= set(vertex_ids)
        self.edges &= set(edge_keys)
