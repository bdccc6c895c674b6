"""Bipartite-matching lower bounds (BM and BMa) for partial GED mappings."""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from .bounds import SearchContext, State
from .hungarian import HungarianSolver
from .utility import INF


def _ancestor_owners(context: SearchContext, state: State) -> dict[int, int]:
    """Data vertex -> query vertex for every state strictly above `state`."""
    if state.parent is None:
        return {}
    return {st.image: context.order[st.level] for st in state.parent}


def _edge_delta(context: SearchContext, u: int, other: int, label: int) -> int:
    """Cost change of a data edge between the images of query vertices u and other."""
    edges = context.query_edges[u]
    if other not in edges:
        return 1
    return -1 if edges[other] == label else 0


def _pruned(context: SearchContext, bound: int) -> bool:
    return bound >= context.upper_bound or bound > context.verify_upper_bound


def _cost_matrix(
    context: SearchContext,
    state: State,
    candidates: Sequence[int],
    pre_siblings: int,
    anchor_aware: bool,
) -> list[list[int]]:
    """Doubled edit costs of assigning the unmapped query vertices (and deletions) to candidates."""
    query, data, order = context.query, context.data, context.order
    qvl, gvl = query.vertex_labels, data.vertex_labels
    level = state.level
    owner = _ancestor_owners(context, state)
    mapped_query = set(order[:level])

    rows: list[list[int]] = []
    for i in range(len(candidates)):
        if level + i >= query.n:
            rows.append(
                [
                    2 + sum(2 if anchor_aware and w in owner else 1 for w, _ in data.adjacency[v])
                    for v in candidates
                ]
            )
            continue

        u = order[level + i]
        anchored = 0
        free_labels: Counter = Counter()
        for w, label in query.adjacency[u]:
            if anchor_aware and w in mapped_query:
                anchored += 1
            else:
                free_labels[label] += 1
        free_total = len(query.adjacency[u]) - anchored

        row: list[int] = []
        for j, v in enumerate(candidates):
            if i == 0 and j < pre_siblings:
                row.append(INF)
                continue
            cost = anchored
            data_labels: Counter = Counter()
            for w, label in data.adjacency[v]:
                if anchor_aware and w in owner:
                    cost += _edge_delta(context, u, owner[w], label)
                else:
                    data_labels[label] += 1
            total = sum(data_labels.values())
            common = sum((data_labels & free_labels).values())
            cost = 2 * cost + max(total, free_total) - common
            if qvl[u] != gvl[v]:
                cost += 2
            row.append(cost)
        rows.append(row)
    return rows


def _record(
    context: SearchContext, state: State, candidates: Sequence[int], matching: Sequence[int]
) -> None:
    """Store the full mapping given by the ancestors of `state` plus the matching."""
    order, level = context.order, state.level
    if state.parent is not None:
        for st in state.parent:
            context.best_mapping[order[st.level]] = st.image
    for i in range(context.query.n - level):
        context.best_mapping[order[level + i]] = candidates[matching[i]]


def _complete_matching(
    context: SearchContext, state: State, candidates: Sequence[int], matching: Sequence[int]
) -> int:
    """Cost of the full mapping the matching induces; updates the state and the upper bound."""
    query, data, order = context.query, context.data, context.order
    level = state.level
    cost = state.mapped_cost
    owner = _ancestor_owners(context, state)
    placed = set(owner)
    mapped_query = set(order[:level])

    for i, column in enumerate(matching):
        v = candidates[column]
        if level + i >= query.n:
            cost += 1 + sum(1 for w, _ in data.adjacency[v] if w in placed)
            placed.add(v)
            continue
        u = order[level + i]
        if query.vertex_labels[u] != data.vertex_labels[v]:
            cost += 1
        cost += sum(1 for w, _ in query.adjacency[u] if w in mapped_query)
        for w, label in data.adjacency[v]:
            if w in owner:
                cost += _edge_delta(context, u, owner[w], label)
        if i == 0:
            state.mapped_cost = cost
        mapped_query.add(u)
        owner[v] = u
        placed.add(v)

    if cost < context.upper_bound:
        context.upper_bound = cost
        _record(context, state, candidates, matching)
    return cost


def _bm(
    context: SearchContext,
    state: State,
    candidates: list[int],
    pre_siblings: int,
    anchor_aware: bool,
    independent: bool,
    with_siblings: bool,
) -> None:
    matrix = _cost_matrix(context, state, candidates, pre_siblings, anchor_aware)
    if not independent:
        context.search_space += 1

    solver = HungarianSolver(matrix)
    state.lower_bound = state.mapped_cost + (solver.solve() + 1) // 2
    if _pruned(context, state.lower_bound):
        state.image = None
        state.siblings = []
        return
    matching = list(solver.row_match)
    state.image = candidates[matching[0]] if candidates else None

    if independent:
        if state.lower_bound < context.upper_bound:
            context.upper_bound = state.lower_bound
            _record(context, state, candidates, matching)
        return

    parent_cost = state.parent.mapped_cost if state.parent is not None else 0
    _complete_matching(context, state, candidates, matching)

    if not with_siblings:
        return

    found: list[tuple[int, int]] = []
    for _ in range(1, len(candidates)):
        bound = parent_cost + (solver.exclude_first_row_match() + 1) // 2
        if _pruned(context, bound):
            break
        found.append((candidates[solver.row_match[0]], bound))
    found.reverse()
    state.siblings = found


def bm_extension(
    context: SearchContext,
    state: State,
    candidates: Sequence[int],
    pre_siblings: int,
    anchor_aware: bool,
    independent: bool,
) -> None:
    """Bound `state` by a minimum-cost matching of the remaining query vertices to `candidates`.

    `state.mapped_cost` must hold the mapped cost of its parent on entry. The best
    image, the lower bound and the remaining siblings (cheapest last) are set on the
    state; a full mapping read off the matching may improve the context's upper bound.
    With `independent`, the remaining query vertices form an independent set, the
    bound is exact and becomes the new upper bound when it improves on it.
    """
    _bm(
        context,
        state,
        list(candidates),
        pre_siblings,
        bool(anchor_aware),
        bool(independent),
        True,
    )


def bma_extension(
    context: SearchContext,
    state: State,
    candidates: Sequence[int],
    pre_siblings: int,
) -> None:
    """Try every candidate image for `state` and bound the rest with an anchor-aware matching.

    The first `pre_siblings` candidates are already explored and are not offered.
    """
    candidates = list(candidates)
    n = len(candidates)
    old_search_space = context.search_space
    children: list[tuple[int, int]] = []
    for i in range(pre_siblings, n):
        image = candidates[i]
        rest = candidates[: n - 1]
        if i < n - 1:
            rest[i] = candidates[n - 1]
        state.image = image
        context.mapped_cost(state)
        child = State(level=state.level + 1, parent=state, mapped_cost=state.mapped_cost)
        _bm(context, child, rest, 0, True, False, False)
        children.append((-child.lower_bound, image))
    context.search_space = old_search_space + 1

    if not children:
        state.image = None
        state.siblings = []
        return

    children.sort()
    best_key, best = children[-1]
    state.image = best
    state.lower_bound = -best_key
    context.mapped_cost(state)
    if _pruned(context, state.lower_bound):
        state.image = None
        state.siblings = []
        return
    state.siblings = [(v, -key) for key, v in children[:-1]]


def _unused(_: Optional[int] = None) -> None:  # pragma: no cover
    return None