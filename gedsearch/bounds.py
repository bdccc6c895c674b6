"""Search states, mapped-cost bookkeeping and the label-set (LSa) lower bound."""

from __future__ import annotations

import enum
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from .graph import Graph


class LowerBound(enum.Enum):
    """Lower-bound estimators for partial mappings."""

    LSA = "LSa"
    BMA = "BMa"
    BMAO = "BMao"


def parse_lower_bound(name: str) -> LowerBound:
    """Look up a lower-bound method by name, falling back to LSa."""
    try:
        return LowerBound(name)
    except ValueError:
        print(f"Lower bound {name} is not available and LSa is used by default!")
        return LowerBound.LSA


@dataclass(eq=False)
class State:
    """A partial mapping: query vertex order[level] goes to data vertex image.

    Iterating a state yields it and then its ancestors up to the root.
    An image of None marks a state with no viable extension.
    """

    level: int = 0
    image: Optional[int] = None
    parent: Optional[State] = None
    pre_sibling: Optional[State] = None
    mapped_cost: int = 0
    lower_bound: int = 0
    dependents: int = 0
    siblings: list[tuple[int, int]] = field(default_factory=list)

    def __iter__(self) -> Iterator[State]:
        state: Optional[State] = self
        while state is not None:
            yield state
            state = state.parent


def _ancestors(state: State) -> Iterator[State]:
    if state.parent is not None:
        yield from state.parent


class SearchContext:
    """Graphs, mapping order and best-known solution shared by a GED search."""

    def __init__(
        self,
        query: Graph,
        data: Graph,
        method: LowerBound,
        order: Sequence[int],
        search_n: int,
        verify_upper_bound: int,
    ) -> None:
        if query.n > data.n:
            raise ValueError("the query graph must not have more vertices than the data graph")
        if sorted(order) != list(range(query.n)):
            raise ValueError("order must be a permutation of the query vertices")
        self.query = query
        self.data = data
        self.method = method
        self.order = list(order)
        self.search_n = search_n
        self.verify_upper_bound = verify_upper_bound
        self.upper_bound = verify_upper_bound + 1
        self.best_mapping: list[Optional[int]] = [None] * query.n
        self.search_space = 0
        self.query_edges: list[dict[int, int]] = [dict(row) for row in query.adjacency]

    def _anchored_edge_delta(self, u: int, other: int, label: int) -> int:
        """Cost change of a data edge whose endpoints are the images of u and other."""
        edges = self.query_edges[u]
        if other not in edges:
            return 1
        return -1 if edges[other] == label else 0

    def _owners(self, state: State) -> dict[int, int]:
        return {st.image: self.order[st.level] for st in _ancestors(state)}

    def mapped_cost(self, state: State) -> int:
        """Set and return the edit cost induced by the mapping ending in `state`."""
        parent = state.parent
        cost = parent.mapped_cost if parent is not None else 0
        owner = self._owners(state)
        mapped_query = set(self.order[: state.level])
        u, v = self.order[state.level], state.image
        if self.query.vertex_labels[u] != self.data.vertex_labels[v]:
            cost += 1
        cost += sum(1 for w, _ in self.query.adjacency[u] if w in mapped_query)
        for w, label in self.data.adjacency[v]:
            if w in owner:
                cost += self._anchored_edge_delta(u, owner[w], label)
        state.mapped_cost = cost
        return cost

    def lsa_extension(self, state: State, candidates: Sequence[int], pre_siblings: int) -> None:
        """Pick the best image for `state` under the LSa bound and queue the rest as siblings.

        The first `pre_siblings` candidates are already explored and are not offered.
        """
        query, data, order = self.query, self.data, self.order
        qvl, gvl = query.vertex_labels, data.vertex_labels
        level = state.level
        u = order[level]
        parent = state.parent
        base_cost = parent.mapped_cost if parent is not None else 0
        state.mapped_cost = base_cost

        mapped_query = set(order[: level + 1])
        pending: defaultdict[int, Counter] = defaultdict(Counter)
        size_x: dict[int, int] = {}
        for x in order[: level + 1]:
            outward = [label for w, label in query.adjacency[x] if w not in mapped_query]
            size_x[x] = len(outward)
            pending[x].subtract(outward)
        u_cross = sum(1 for w, _ in query.adjacency[u] if w in mapped_query)

        vertex_balance: Counter = Counter()
        edge_balance: Counter = Counter()
        u_inner = 0
        for x in order[level + 1 :]:
            vertex_balance[qvl[x]] -= 1
            for w, label in query.adjacency[x]:
                if w not in mapped_query and x < w:
                    edge_balance[label] -= 1
                    u_inner += 1

        owner = self._owners(state)
        size_y: dict[int, int] = {}
        ged_common = 0
        for st in _ancestors(state):
            v = st.image
            x = order[st.level]
            row = pending[x]
            common = size = 0
            for w, label in data.adjacency[v]:
                if w not in owner:
                    if row[label] < 0:
                        common += 1
                    row[label] += 1
                    size += 1
            size_y[v] = size
            ged_common += max(size_x[x], size) - common

        vl_common = el_common = v_total = 0
        for v in candidates:
            if vertex_balance[gvl[v]] < 0:
                vl_common += 1
            vertex_balance[gvl[v]] += 1
            for w, label in data.adjacency[v]:
                if w not in owner and v < w:
                    if edge_balance[label] < 0:
                        el_common += 1
                    edge_balance[label] += 1
                    v_total += 1

        vl_ged = max(query.n, data.n) - level - 1 - vl_common
        u_row = pending[u]
        children: list[tuple[int, int]] = []
        for v in candidates[pre_siblings:]:
            lb = vl_ged + ged_common
            if vertex_balance[gvl[v]] <= 0:
                lb += 1
            cross = u_cross + int(gvl[v] != qvl[u])
            inner = v_total
            common = size = 0
            free_labels = []
            for w, label in data.adjacency[v]:
                if w in owner:
                    x = owner[w]
                    cross += self._anchored_edge_delta(u, x, label)
                    if pending[x][label] < 0:
                        lb += 1
                    if size_y[w] > size_x[x]:
                        lb -= 1
                    continue
                inner -= 1
                if edge_balance[label] <= 0:
                    el_common -= 1
                edge_balance[label] -= 1
                size += 1
                if u_row[label] < 0:
                    common += 1
                u_row[label] += 1
                free_labels.append(label)
            lb += max(size, size_x[u]) - common
            inner = max(inner, u_inner) - el_common
            children.append((-(base_cost + cross + inner + lb), v))
            for label in free_labels:
                if edge_balance[label] < 0:
                    el_common += 1
                edge_balance[label] += 1
                u_row[label] -= 1

        if not children:
            state.image = None
            state.siblings = []
            return

        children.sort()
        best_key, best = children[-1]
        state.image = best
        state.lower_bound = -best_key
        cross = u_cross + int(qvl[u] != gvl[best])
        for w, label in data.adjacency[best]:
            if w in owner:
                cross += self._anchored_edge_delta(u, owner[w], label)
        state.mapped_cost = base_cost + cross

        self.search_space += 1
        if state.lower_bound >= self.upper_bound or state.lower_bound > self.verify_upper_bound:
            state.image = None
            state.siblings = []
            return
        state.siblings = [(v, -key) for key, v in children[:-1]]

    def extend_to_full_mapping(self, parent: State) -> int:
        """Complete a mapping of every query vertex, record it if best, and return its cost.

        Unmapped data vertices are deleted together with their edges.
        """
        if parent.level + 1 != self.query.n:
            raise ValueError("the state does not map every query vertex")
        cost = parent.mapped_cost
        if self.query.n < self.data.n:
            placed = {st.image for st in parent}
            for v in range(self.data.n):
                if v not in placed:
                    cost += sum(1 for w, _ in self.data.adjacency[v] if w in placed)
                    placed.add(v)
            cost += self.data.n - self.query.n
        if cost < self.upper_bound:
            for st in parent:
                self.best_mapping[self.order[st.level]] = st.image
            self.upper_bound = cost
        return cost

    def ged_of_mapping(self, mapping: Sequence[int]) -> int:
        """Edit cost of the mapping that sends query vertex i to data vertex mapping[i]."""
        mapping = list(mapping)
        query, data = self.query, self.data
        if len(mapping) != query.n:
            raise ValueError(f"mapping has {len(mapping)} entries, expected {query.n}")
        if len(set(mapping)) != len(mapping) or any(not 0 <= v < data.n for v in mapping):
            raise ValueError("mapping must send query vertices to distinct data vertices")
        owner = {v: u for u, v in enumerate(mapping)}
        ged = data.n - query.n + query.m // 2
        ged += sum(
            1 for u, v in enumerate(mapping) if query.vertex_labels[u] != data.vertex_labels[v]
        )
        for i, row in enumerate(data.adjacency):
            for v, label in row:
                if v < i:
                    continue
                ged += 1
                if i in owner and v in owner:
                    edges = self.query_edges[owner[i]]
                    if owner[v] in edges:
                        ged -= 2 if edges[owner[v]] == label else 1
        return ged