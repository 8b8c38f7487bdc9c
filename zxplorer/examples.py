"""Built-in example diagram."""

from zxplorer.graph import ZXGraph, VertexType, EdgeType

QUBITS = 4

# (index, qubit, type) for the interior spiders, laid out left to right per qubit
_VERTICES = [
    (0, 0, 1), (1, 1, 2), (2, 2, 1), (3, 3, 1),
    (4, 0, 1), (5, 1, 1), (6, 2, 2), (7, 3, 1),
    (8, 0, 1), (9, 1, 2), (10, 2, 1), (11, 3, 1),
    (12, 0, 2), (13, 1, 2), (14, 2, 1), (15, 3, 2),
]

# (index, index, edge type) between interior spiders
_EDGES = [
    (0, 1, 0), (0, 4, 0), (1, 5, 0), (1, 6, 0),
    (2, 6, 0), (3, 7, 0), (4, 8, 0), (5, 9, 1),
    (6, 10, 0), (7, 11, 0), (8, 12, 0), (8, 13, 0),
    (9, 13, 1), (9, 14, 1), (10, 13, 0), (10, 14, 0),
    (11, 14, 0), (11, 15, 0),
]


def example_graph() -> ZXGraph:
    """A 4-qubit circuit-like diagram with inputs, outputs and mixed edge types."""
    g = ZXGraph()
    next_row = [1.0] * QUBITS

    inputs = []
    for q in range(QUBITS):
        inputs.append(g.add_vertex(VertexType.BOUNDARY, next_row[q], q))
        next_row[q] += 1.0

    spiders = []
    for _, qubit, vtype in _VERTICES:
        spiders.append(g.add_vertex(VertexType(vtype), next_row[qubit], qubit))
        next_row[qubit] += 1.0

    outputs = []
    for q in range(QUBITS):
        outputs.append(g.add_vertex(VertexType.BOUNDARY, next_row[q], q))

    for a, b, etype in _EDGES:
        g.add_edge(spiders[a], spiders[b], EdgeType(etype))

    # Wire each input to the first spider on its qubit, and the last spider to the output
    for q in range(QUBITS):
        g.add_edge(inputs[q], spiders[q], EdgeType.SIMPLE)
    for q in range(QUBITS):
        g.add_edge(spiders[len(spiders) - QUBITS + q], outputs[q], EdgeType.SIMPLE)

    return g
