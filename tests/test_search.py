import random
from itertools import permutations

import pytest

from gedsearch.bounds import LowerBound, SearchContext
from gedsearch.graph import Graph
from gedsearch.search import GEDSolver, compute_ged
from gedsearch.utility import INF

METHODS = ["LSa", "BMa", "BMao"]
PARADIGMS = ["astar", "dfs"]


def make_graph(labels, edges, graph_id="g"):
    vertices = list(enumerate(labels))
    directed = []
    for u, v, label in edges:
        directed.append(((u, v), label))
        directed.append(((v, u), label))
    return Graph(graph_id, vertices, directed)


def random_graph(rng, n):
    labels = [rng.randint(0, 1) for _ in range(n)]
    edges = [
        (u, v, rng.randint(0, 1))
        for u in range(n)
        for v in range(u + 1, n)
        if rng.random() < 0.5
    ]
    return make_graph(labels, edges)


def exhaustive_ged(a, b):
    query, data = (a, b) if a.n <= b.n else (b, a)
    context = SearchContext(query, data, LowerBound.LSA, list(range(query.n)), query.n, INF)
    return min(
        context.ged_of_mapping(p) for p in permutations(range(data.n), query.n)
    )


def random_pair(seed):
    rng = random.Random(seed)
    return random_graph(rng, rng.randint(1, 5)), random_graph(rng, rng.randint(1, 5))


@pytest.mark.parametrize("method", METHODS)
@pytest.mark.parametrize("paradigm", PARADIGMS)
def test_identical_graphs_have_zero_distance(method, paradigm):
    g = make_graph([0, 1, 0], [(0, 1, 0), (1, 2, 1)])
    h = make_graph([0, 1, 0], [(0, 1, 0), (1, 2, 1)])
    assert compute_ged(g, h, paradigm, method) == 0


@pytest.mark.parametrize("method", METHODS)
@pytest.mark.parametrize("paradigm", PARADIGMS)
def test_single_missing_edge(method, paradigm):
    path = make_graph([0, 0, 0], [(0, 1, 0), (1, 2, 0)])
    triangle = make_graph([0, 0, 0], [(0, 1, 0), (1, 2, 0), (0, 2, 0)])
    assert compute_ged(triangle, path, paradigm, method) == 1


@pytest.mark.parametrize("seed", range(12))
@pytest.mark.parametrize("method", METHODS)
@pytest.mark.parametrize("paradigm", PARADIGMS)
def test_matches_exhaustive_search(seed, method, paradigm):
    a, b = random_pair(seed)
    assert compute_ged(a, b, paradigm, method) == exhaustive_ged(a, b)


@pytest.mark.parametrize("seed", range(6))
def test_distance_is_symmetric(seed):
    a, b = random_pair(seed)
    assert compute_ged(a, b, "dfs", "LSa") == compute_ged(b, a, "dfs", "LSa")


@pytest.mark.parametrize("seed", range(6))
@pytest.mark.parametrize("method", METHODS)
def test_best_mapping_cost_equals_result(seed, method):
    a, b = random_pair(seed)
    solver = GEDSolver(INF, method)
    solver.load(a, b)
    result = solver.dfs()
    assert solver.ged_of_best_mapping() == result
    assert solver.search_space > 0


def test_mapping_pairs_follow_order_and_are_injective():
    a = make_graph([0, 1, 1, 0], [(0, 1, 0), (1, 2, 0), (2, 3, 1)])
    b = make_graph([1, 0, 1], [(0, 1, 0), (1, 2, 1)])
    solver = GEDSolver(INF, "BMao")
    solver.load(a, b)
    solver.dfs()
    pairs = solver.mapping(3)
    assert [u for u, _ in pairs] == solver.context.order
    images = [v for _, v in pairs]
    assert len(set(images)) == 3
    assert all(0 <= v < 4 for v in images)


def test_mapping_rejects_too_many_vertices():
    g = make_graph([0, 1], [(0, 1, 0)])
    solver = GEDSolver(INF, "LSa")
    solver.load(g, g)
    solver.dfs()
    with pytest.raises(ValueError):
        solver.mapping(3)


@pytest.mark.parametrize("seed", range(8))
@pytest.mark.parametrize("paradigm", PARADIGMS)
def test_threshold_verification(seed, paradigm):
    a, b = random_pair(seed)
    exact = exhaustive_ged(a, b)
    within = compute_ged(a, b, paradigm, "BMao", exact)
    assert exact <= within <= exact
    if exact > 0:
        below = compute_ged(a, b, paradigm, "BMao", exact - 1)
        assert below > exact - 1


@pytest.mark.parametrize("paradigm", PARADIGMS)
def test_generous_threshold_gives_mapping_within_it(paradigm):
    a, b = random_pair(3)
    exact = exhaustive_ged(a, b)
    threshold = exact + 2
    result = compute_ged(a, b, paradigm, "LSa", threshold)
    assert exact <= result <= threshold


def test_larger_query_is_swapped():
    small = make_graph([0], [])
    large = make_graph([0, 1], [(0, 1, 0)])
    solver = GEDSolver(INF, "LSa")
    solver.load(small, large)
    assert solver.swapped is True
    assert solver.context.query.n == 1
    assert solver.astar() == exhaustive_ged(small, large)


def test_unknown_paradigm_raises():
    g = make_graph([0], [])
    with pytest.raises(ValueError):
        compute_ged(g, g, "bfs", "LSa")


def test_unknown_lower_bound_falls_back(capsys):
    solver = GEDSolver(INF, "XYZ")
    assert solver.method is LowerBound.LSA
    assert "XYZ is not available" in capsys.readouterr().out


def test_empty_graph_is_rejected():
    empty = Graph("e", [], [])
    g = make_graph([0], [])
    solver = GEDSolver(INF, "LSa")
    with pytest.raises(ValueError):
        solver.load(g, empty)


def test_search_before_load_raises():
    solver = GEDSolver(INF, "LSa")
    with pytest.raises(RuntimeError):
        solver.dfs()


def test_astar_prints_best_mapping(capsys):
    g = make_graph([0, 1], [(0, 1, 0)])
    solver = GEDSolver(INF, "BMa")
    solver.load(g, g)
    assert solver.astar() == 0
    out = capsys.readouterr().out
    assert "Mapping: " in out
    assert "0 -> " in out