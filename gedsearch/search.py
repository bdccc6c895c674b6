"""Graph edit distance by best-first (A*) and depth-first branch-and-bound search."""

from __future__ import annotations

from typing import Optional

from .bipartite import bm_extension, bma_extension
from .bounds import LowerBound, SearchContext, State, parse_lower_bound
from .graph import Graph
from .ordering import independent_prefix, mapping_order, relabel
from .utility import INF


def _edge_labels(graph: Graph) -> list[int]:
    return [label for row in graph.adjacency for _, label in row]


def _relabelled(graph: Graph, vertex_labels: list[int], edge_labels: list[int]) -> Graph:
    """A copy of `graph` carrying the given vertex and (directed, stored-order) edge labels."""
    labels = iter(edge_labels)
    edges = [((u, v), next(labels)) for u, row in enumerate(graph.adjacency) for v, _ in row]
    return Graph(graph.id, list(enumerate(vertex_labels)), edges)


def _better(a: State, b: State) -> bool:
    """Whether `a` should be expanded before `b`: smaller bound first, deeper on ties."""
    if a.lower_bound != b.lower_bound:
        return a.lower_bound < b.lower_bound
    return a.level > b.level


class _StateHeap:
    """Binary heap of search states; the array layout matters for trimming its tail."""

    def __init__(self) -> None:
        self._items: list[State] = []

    def __len__(self) -> int:
        return len(self._items)

    def top(self) -> State:
        return self._items[0]

    def push(self, state: State) -> None:
        items = self._items
        items.append(state)
        slot = len(items) - 1
        while slot > 0:
            parent = (slot - 1) // 2
            if _better(state, items[parent]):
                items[slot] = items[parent]
                slot = parent
            else:
                break
        items[slot] = state

    def pop(self) -> State:
        items = self._items
        first = items[0]
        last = items.pop()
        if items:
            self._sift_down(last)
        return first

    def _sift_down(self, state: State) -> None:
        items = self._items
        size = len(items)
        slot = 0
        while 2 * slot + 1 < size:
            child = 2 * slot + 1
            if child + 1 < size and _better(items[child + 1], items[child]):
                child += 1
            if _better(items[child], state):
                items[slot] = items[child]
                slot = child
            else:
                break
        items[slot] = state

    def trim(self, upper_bound: int) -> None:
        """Drop states at the end of the array whose bound cannot beat `upper_bound`."""
        items = self._items
        while items and items[-1].lower_bound >= upper_bound:
            items.pop()


class GEDSolver:
    """Computes (or verifies against a threshold) the edit distance between two graphs."""

    def __init__(self, verify_upper_bound: int = INF, lower_bound: str = "BMao") -> None:
        self.verify_upper_bound = verify_upper_bound
        self.method: LowerBound = parse_lower_bound(lower_bound)
        self.context: Optional[SearchContext] = None
        self.swapped = False
        self.search_n = 0

    def load(self, data: Graph, query: Graph) -> None:
        """Prepare a search between two graphs; the smaller one becomes the query."""
        self.swapped = False
        if query.n > data.n:
            query, data = data, query
            self.swapped = True
        if query.n == 0:
            raise ValueError("graphs must have at least one vertex")
        q_vertex, g_vertex, _ = relabel(query.vertex_labels, data.vertex_labels)
        q_edge, g_edge, _ = relabel(_edge_labels(query), _edge_labels(data))
        query = _relabelled(query, q_vertex, q_edge)
        data = _relabelled(data, g_vertex, g_edge)

        order = mapping_order(query, data)
        prefix = independent_prefix(query, order)
        self.search_n = prefix if self.method is LowerBound.BMAO else query.n
        self.context = SearchContext(
            query, data, self.method, order, self.search_n, self.verify_upper_bound
        )

    @property
    def search_space(self) -> int:
        """Number of search states whose bound has been computed."""
        return self.context.search_space if self.context is not None else 0

    @property
    def upper_bound(self) -> int:
        """Cost of the best mapping found so far (threshold + 1 if none)."""
        return self._require_context().upper_bound

    def _require_context(self) -> SearchContext:
        if self.context is None:
            raise RuntimeError("load() must be called before searching")
        return self.context

    def _searching(self) -> bool:
        context = self._require_context()
        return self.verify_upper_bound == INF or context.upper_bound > self.verify_upper_bound

    def _generate(self, parent: Optional[State], state: State) -> None:
        """Compute the best child of `parent` into `state`, queueing the other children."""
        context = self._require_context()
        state.level = parent.level + 1 if parent is not None else 0
        state.mapped_cost = parent.mapped_cost if parent is not None else 0
        state.parent = parent
        state.pre_sibling = None
        used = {st.image for st in parent} if parent is not None else set()
        candidates = [v for v in range(context.data.n) if v not in used]
        if self.method is LowerBound.LSA:
            context.lsa_extension(state, candidates, 0)
        elif self.method is LowerBound.BMAO:
            bm_extension(context, state, candidates, 0, True, False)
        else:
            bma_extension(context, state, candidates, 0)

    def _next_sibling(self, state: State) -> None:
        """Turn `state` into its cheapest sibling not yet generated, or mark it exhausted."""
        state.pre_sibling = None
        if not state.siblings:
            state.image = None
            return
        state.image, state.lower_bound = state.siblings.pop()
        self._require_context().mapped_cost(state)

    def _extend_to_full(self, parent: State) -> None:
        context = self._require_context()
        if self.method is LowerBound.BMAO:
            full = State(
                level=parent.level + 1,
                parent=parent,
                mapped_cost=parent.mapped_cost,
            )
            used = {st.image for st in parent}
            candidates = [v for v in range(context.data.n) if v not in used]
            bm_extension(context, full, candidates, 0, True, True)
        else:
            context.extend_to_full_mapping(parent)

    def dfs(self) -> int:
        """Depth-first branch and bound; returns the best cost found."""
        context = self._require_context()
        root = State()
        self._generate(None, root)
        stack = [root]
        while stack and self._searching():
            top = stack[-1]
            if top.image is None or top.lower_bound >= context.upper_bound:
                stack.pop()
                if stack and stack[-1].lower_bound < context.upper_bound:
                    self._next_sibling(stack[-1])
                continue
            if top.level + 1 == self.search_n:
                self._extend_to_full(top)
                self._next_sibling(top)
            else:
                child = State()
                self._generate(top, child)
                stack.append(child)
        return context.upper_bound

    def astar(self) -> int:
        """Best-first search over partial mappings; returns the best cost found."""
        context = self._require_context()
        root = State()
        self._generate(None, root)
        heap = _StateHeap()
        if root.image is not None:
            heap.push(root)
        while heap and heap.top().lower_bound < context.upper_bound and self._searching():
            now = heap.pop()

            sibling = State(
                level=now.level,
                parent=now.parent,
                siblings=now.siblings,
                mapped_cost=now.mapped_cost,
            )
            now.siblings = []
            self._next_sibling(sibling)
            if sibling.image is not None and sibling.lower_bound < context.upper_bound:
                heap.push(sibling)

            if now.level + 1 == self.search_n:
                self._extend_to_full(now)
            else:
                child = State()
                self._generate(now, child)
                if child.image is not None and child.lower_bound < context.upper_bound:
                    heap.push(child)

            heap.trim(context.upper_bound)

        self._print_best_mapping()
        return context.upper_bound

    def _print_best_mapping(self) -> None:
        context = self._require_context()
        body = "".join(f"{u} -> {v}, " for u, v in enumerate(context.best_mapping))
        print(f"\nMapping: {body}")

    def ged_of_best_mapping(self) -> int:
        """Recompute the cost of the best mapping; the upper bound if none beat the threshold."""
        context = self._require_context()
        if context.upper_bound > self.verify_upper_bound:
            return context.upper_bound
        return context.ged_of_mapping(context.best_mapping)

    def mapping(self, n: int) -> list[tuple[int, Optional[int]]]:
        """The first `n` query vertices in mapping order, each paired with its best image."""
        context = self._require_context()
        if not 0 <= n <= context.query.n:
            raise ValueError(f"n must lie between 0 and {context.query.n}")
        return [(u, context.best_mapping[u]) for u in context.order[:n]]


def compute_ged(
    data: Graph,
    query: Graph,
    paradigm: str = "astar",
    lower_bound: str = "BMao",
    threshold: Optional[int] = None,
) -> int:
    """Edit distance between two graphs.

    With a non-negative threshold the search stops as soon as a mapping within it is
    found; a result above the threshold means the distance exceeds it.
    """
    if paradigm not in ("astar", "dfs"):
        raise ValueError(f"unknown search paradigm {paradigm!r} (astar | dfs)")
    verify = INF if threshold is None or threshold < 0 else threshold
    solver = GEDSolver(verify, lower_bound)
    solver.load(data, query)
    return solver.astar() if paradigm == "astar" else solver.dfs()