import pytest

from gedsearch.graph import Graph
from gedsearch.ordering import independent_prefix, mapping_order, relabel


def make_graph(vertex_labels, edges, graph_id="g"):
    vertices = list(enumerate(vertex_labels))
    directed = []
    for a, b, label in edges:
        directed.append(((a, b), label))
        directed.append(((b, a), label))
    return Graph(graph_id, vertices, directed)


def covers_all_edges(graph, vertices):
    chosen = set(vertices)
    return all(
        u in chosen or w in chosen
        for u, row in enumerate(graph.adjacency)
        for w, _ in row
    )


QUERY_PATH = make_graph([0, 1, 2, 0], [(0, 1, 0), (1, 2, 1), (2, 3, 0)])
DATA_PATH = make_graph([0, 1, 2, 0, 1], [(0, 1, 0), (1, 2, 1), (2, 3, 0), (3, 4, 1)])
STAR = make_graph([0, 1, 1, 1], [(0, 1, 0), (0, 2, 0), (0, 3, 1)])
TRIANGLE = make_graph([0, 0, 1], [(0, 1, 0), (1, 2, 0), (0, 2, 1)])
EDGELESS = make_graph([0, 1, 2], [])


def test_relabel_preserves_order_and_equality():
    first = [40, 7, 40, 12]
    second = [7, 99, 3]
    new_first, new_second, count = relabel(first, second)
    assert count == len(set(first) | set(second))
    old = first + second
    new = new_first + new_second
    assert all(0 <= label < count for label in new)
    for a, x in zip(old, new):
        for b, y in zip(old, new):
            assert (a < b) == (x < y)
            assert (a == b) == (x == y)


def test_relabel_keeps_compact_labels():
    assert relabel([0, 1, 2], [2, 0]) == ([0, 1, 2], [2, 0], 3)


def test_relabel_empty():
    assert relabel([], []) == ([], [], 0)


@pytest.mark.parametrize("query", [QUERY_PATH, STAR, TRIANGLE, EDGELESS])
def test_mapping_order_is_permutation(query):
    order = mapping_order(query, DATA_PATH)
    assert sorted(order) == list(range(query.n))


def test_mapping_order_starts_with_rarest_vertex():
    query = make_graph([0, 0, 7], [])
    data = make_graph([0, 0, 0, 1], [])
    assert mapping_order(query, data)[0] == 2


def test_mapping_order_grows_connected_prefix():
    order = mapping_order(QUERY_PATH, DATA_PATH)
    detached = [
        vertex
        for i, vertex in enumerate(order)
        if i > 0
        and not {w for w, _ in QUERY_PATH.adjacency[vertex]} & set(order[:i])
    ]
    assert len(order) == 4
    assert detached == []


def test_mapping_order_is_deterministic():
    first = mapping_order(STAR, DATA_PATH)
    second = mapping_order(STAR, DATA_PATH)
    assert first[0] == 0
    assert sorted(first) == [0, 1, 2, 3]
    assert second == first


def test_mapping_order_of_empty_query():
    empty = Graph("e", [], [])
    assert mapping_order(empty, DATA_PATH) == []


@pytest.mark.parametrize(
    "query, order",
    [
        (QUERY_PATH, [0, 1, 2, 3]),
        (QUERY_PATH, [3, 0, 2, 1]),
        (STAR, [1, 2, 3, 0]),
        (TRIANGLE, [2, 1, 0]),
        (STAR, None),
        (QUERY_PATH, None),
    ],
)
def test_independent_prefix_is_shortest_cover(query, order):
    if order is None:
        order = mapping_order(query, DATA_PATH)
    k = independent_prefix(query, order)
    assert 1 <= k <= len(order)
    assert covers_all_edges(query, order[:k])
    assert not covers_all_edges(query, order[: k - 1])


def test_independent_prefix_of_edgeless_query():
    assert independent_prefix(EDGELESS, [2, 0, 1]) == 1


def test_independent_prefix_star_center_first():
    assert independent_prefix(STAR, [0, 3, 1, 2]) == 1