from itertools import permutations

import pytest

from gedsearch.bipartite import bm_extension, bma_extension
from gedsearch.bounds import LowerBound, SearchContext, State
from gedsearch.graph import Graph
from gedsearch.ordering import mapping_order
from gedsearch.utility import INF


def make_graph(graph_id, labels, edges):
    vertices = list(enumerate(labels))
    directed = []
    for u, v, label in edges:
        directed.append(((u, v), label))
        directed.append(((v, u), label))
    return Graph(graph_id, vertices, directed)


def query_graph():
    return make_graph("1", [0, 1, 0], [(0, 1, 0), (1, 2, 1)])


def data_graph():
    return make_graph("2", [0, 1, 1, 0], [(0, 1, 0), (1, 2, 0), (2, 3, 1), (0, 3, 1)])


def make_context(query, data, method=LowerBound.BMAO, threshold=INF):
    order = mapping_order(query, data)
    return SearchContext(query, data, method, order, query.n, threshold)


def exact_ged(context, fixed=None):
    best = None
    for perm in permutations(range(context.data.n), context.query.n):
        if fixed is not None and perm[fixed[0]] != fixed[1]:
            continue
        value = context.ged_of_mapping(perm)
        best = value if best is None else min(best, value)
    return best


def root_state():
    return State(level=0, parent=None, mapped_cost=0)


def test_identical_graphs_give_zero():
    query = query_graph()
    data = make_graph("3", [0, 1, 0], [(0, 1, 0), (1, 2, 1)])
    context = make_context(query, data)
    state = root_state()
    bm_extension(context, state, list(range(data.n)), 0, True, False)
    assert state.lower_bound == 0
    assert context.upper_bound == 0
    assert context.ged_of_mapping(context.best_mapping) == 0


def test_bm_root_bounds_exact_ged():
    context = make_context(query_graph(), data_graph())
    state = root_state()
    bm_extension(context, state, list(range(4)), 0, True, False)
    exact = exact_ged(context)
    assert state.lower_bound <= exact <= context.upper_bound
    assert context.upper_bound == context.ged_of_mapping(context.best_mapping)
    assert context.search_space == 1


def test_bm_siblings_are_ordered_and_distinct():
    context = make_context(query_graph(), data_graph())
    state = root_state()
    bm_extension(context, state, list(range(4)), 0, True, False)
    images = [v for v, _ in state.siblings]
    bounds = [lb for _, lb in state.siblings]
    assert state.image not in images
    assert len(set(images)) == len(images)
    assert bounds == sorted(bounds, reverse=True)
    assert all(lb >= state.lower_bound for lb in bounds)


def test_bm_child_state_bound():
    context = make_context(query_graph(), data_graph())
    root = State(level=0, image=2)
    context.mapped_cost(root)
    child = State(level=1, parent=root, mapped_cost=root.mapped_cost)
    bm_extension(context, child, [0, 1, 3], 0, True, False)
    exact = exact_ged(context, fixed=(context.order[0], 2))
    assert child.lower_bound <= exact
    assert child.image in (0, 1, 3)
    assert context.upper_bound == context.ged_of_mapping(context.best_mapping)


def test_bm_pre_siblings_excluded():
    context = make_context(query_graph(), data_graph())
    state = root_state()
    bm_extension(context, state, [0, 1, 2, 3], 1, True, False)
    assert state.image != 0
    assert 0 not in [v for v, _ in state.siblings]


def test_bm_pruned_by_threshold():
    query = make_graph("1", [0, 0], [(0, 1, 0)])
    data = make_graph("2", [1, 1], [(0, 1, 1)])
    context = make_context(query, data, threshold=0)
    state = root_state()
    bm_extension(context, state, [0, 1], 0, True, False)
    assert state.image is None
    assert state.siblings == []
    assert state.lower_bound > 0


def test_bm_independent_set_is_exact():
    query = make_graph("1", [0, 1], [])
    data = make_graph("2", [1, 0, 1], [(0, 1, 0), (1, 2, 0)])
    context = make_context(query, data)
    state = root_state()
    bm_extension(context, state, [0, 1, 2], 0, True, True)
    assert context.search_space == 0
    assert context.upper_bound == state.lower_bound
    assert context.ged_of_mapping(context.best_mapping) == context.upper_bound
    assert context.upper_bound == exact_ged(context)


def test_bma_root_bounds_exact_ged():
    context = make_context(query_graph(), data_graph(), method=LowerBound.BMA)
    state = root_state()
    bma_extension(context, state, list(range(4)), 0)
    exact = exact_ged(context)
    assert state.lower_bound <= exact <= context.upper_bound
    assert context.upper_bound == context.ged_of_mapping(context.best_mapping)
    assert context.search_space == 1


def test_bma_pruned_by_threshold():
    query = make_graph("1", [0, 0], [(0, 1, 0)])
    data = make_graph("2", [1, 1], [(0, 1, 1)])
    context = make_context(query, data, method=LowerBound.BMA, threshold=0)
    state = root_state()
    bma_extension(context, state, [0, 1], 0)
    assert state.image is None
    assert state.siblings == []