"""Labelled undirected graphs stored as adjacency lists."""

from collections import Counter
from typing import Iterable, Iterator, Sequence, TextIO


class Graph:
    """A vertex- and edge-labelled graph; each undirected edge is stored in both directions."""

    def __init__(
        self,
        graph_id: str,
        vertices: Iterable[tuple[int, int]],
        edges: Iterable[tuple[tuple[int, int], int]],
    ) -> None:
        self.id = graph_id
        ordered = sorted(vertices, key=lambda item: item[0])
        for expected, (vertex_id, _) in enumerate(ordered):
            if vertex_id != expected:
                raise ValueError(
                    f"graph {graph_id}: vertex ids must be 0..n-1, found {vertex_id} at {expected}"
                )
        self.vertex_labels: list[int] = [label for _, label in ordered]
        self.n = len(self.vertex_labels)
        self.adjacency: list[list[tuple[int, int]]] = [[] for _ in range(self.n)]
        count = 0
        for (source, target), label in edges:
            if not (0 <= source < self.n and 0 <= target < self.n):
                raise ValueError(
                    f"graph {graph_id}: edge ({source}, {target}) has an endpoint out of range"
                )
            self.adjacency[source].append((target, label))
            count += 1
        self.m = count

    def neighbors(self, vertex: int) -> list[tuple[int, int]]:
        """The (neighbour, edge label) pairs of a vertex."""
        return self.adjacency[vertex]

    def _undirected_edges(self) -> Iterator[tuple[int, int, int]]:
        for u, row in enumerate(self.adjacency):
            for v, label in row:
                if v > u:
                    yield u, v, label

    def write_graph(
        self,
        fout: TextIO,
        vertex_label_names: Sequence[str],
        edge_label_names: Sequence[str],
        bss: bool,
    ) -> None:
        """Write the graph in the numeric (bss) or the named-label text format."""
        if bss:
            for ch in self.id:
                if not "0" <= ch <= "9":
                    print("!!! Wrong graph id for bss")
            fout.write(f"{self.id}\n")
            fout.write(f"{self.n} {self.m // 2}\n")
            for label in self.vertex_labels:
                fout.write(f"{label}\n")
            for u, v, label in self._undirected_edges():
                fout.write(f"{u} {v} {label}\n")
        else:
            fout.write(f"t # {self.id}\n")
            for u, label in enumerate(self.vertex_labels):
                fout.write(f"v {u} {vertex_label_names[label]}\n")
            for u, v, label in self._undirected_edges():
                fout.write(f"e {u} {v} {edge_label_names[label]}\n")

    def is_connected(self) -> bool:
        """Whether every vertex is reachable from vertex 0."""
        if self.n == 0:
            return True
        seen = {0}
        frontier = [0]
        for u in frontier:
            for v, _ in self.adjacency[u]:
                if v not in seen:
                    seen.add(v)
                    frontier.append(v)
        return len(frontier) == self.n

    def size_based_bound(self, other: "Graph") -> int:
        """Lower bound on GED from vertex and edge counts alone."""
        return abs(self.n - other.n) + abs(self.m - other.m) // 2

    def ged_lower_bound_filter(self, other: "Graph", verify_upper_bound: int) -> int:
        """Lower bound on the GED to another graph, stopping early once it exceeds the threshold."""
        lb = self.size_based_bound(other)
        if lb > verify_upper_bound:
            return lb

        common_vertex_labels = Counter(self.vertex_labels) & Counter(other.vertex_labels)
        lb = max(self.n, other.n) - sum(common_vertex_labels.values())
        if lb > verify_upper_bound:
            return lb

        count_q = Counter(len(row) for row in self.adjacency)
        count_g = Counter(len(row) for row in other.adjacency)
        max_q = max(count_q, default=0)
        max_g = max(count_g, default=0)
        deletions = insertions = 0
        while max_q > 0 and max_g > 0:
            if count_q[max_q] == 0:
                max_q -= 1
                continue
            if count_g[max_g] == 0:
                max_g -= 1
                continue
            matched = min(count_q[max_q], count_g[max_g])
            if max_q > max_g:
                deletions += matched * (max_q - max_g)
            else:
                insertions += matched * (max_g - max_q)
            count_q[max_q] -= matched
            count_g[max_g] -= matched
        for degree in range(max_q, 0, -1):
            deletions += degree * count_q[degree]
        for degree in range(max_g, 0, -1):
            insertions += degree * count_g[degree]
        deletions = (deletions + 1) // 2
        insertions = (insertions + 1) // 2

        half_q = self.m // 2
        half_g = other.m // 2
        edge_lb = deletions + insertions
        edge_lb = max(edge_lb, deletions * 2 + half_g - half_q)
        edge_lb = max(edge_lb, insertions * 2 + half_q - half_g)
        if lb + edge_lb > verify_upper_bound:
            return lb + edge_lb

        q_edge_labels = Counter(label for row in self.adjacency for _, label in row)
        g_edge_labels = Counter(label for row in other.adjacency for _, label in row)
        common = sum((q_edge_labels & g_edge_labels).values()) // 2
        if deletions + half_g - common > edge_lb:
            edge_lb = deletions + half_g - common
        if insertions + half_q - common > edge_lb:
            edge_lb = deletions + half_q - common
        edge_count = max(self.m, other.m) // 2
        if edge_count - common > edge_lb:
            edge_lb = edge_count - common
        return lb + edge_lb