"""Label compaction and the order in which query vertices are mapped."""

from collections import Counter
from typing import Hashable, Sequence

from .graph import Graph
from .utility import EPS


def relabel(
    first: Sequence[Hashable], second: Sequence[Hashable]
) -> tuple[list[int], list[int], int]:
    """Map the labels of both sequences onto 0..k-1, keeping their sorted order.

    Returns the two relabelled sequences and the number k of distinct labels.
    """
    labels = sorted(set(first) | set(second))
    index = {label: position for position, label in enumerate(labels)}
    return [index[label] for label in first], [index[label] for label in second], len(labels)


def _rarity(count: int, total: int) -> float:
    """How uncommon a label is among `total` items; an absent label scores 1."""
    if total == 0:
        return 1.0
    return 1.0 - count / total


class _WeightHeap:
    """Binary max-heap of [weight, vertex] entries that tracks each vertex's slot."""

    def __init__(self, entries: list[list]) -> None:
        self._entries = entries
        self._size = len(entries)
        self._pos = {vertex: slot for slot, (_, vertex) in enumerate(entries)}

    def __len__(self) -> int:
        return self._size

    def __contains__(self, vertex: int) -> bool:
        return self._pos[vertex] < self._size

    def weight(self, vertex: int) -> float:
        return self._entries[self._pos[vertex]][0]

    def update(self, vertex: int, weight: float) -> None:
        slot = self._pos[vertex]
        self._entries[slot][0] = weight
        self._sift_up(slot)

    def pop(self) -> int:
        vertex = self._entries[0][1]
        self._size -= 1
        self._pos[vertex] = self._size
        last = self._entries[self._size]
        self._entries[0] = last
        self._pos[last[1]] = 0
        self._sift_down(0)
        return vertex

    def _sift_down(self, slot: int) -> None:
        entries, pos, size = self._entries, self._pos, self._size
        item = entries[slot]
        while 2 * slot + 1 < size:
            child = 2 * slot + 1
            if child + 1 < size and entries[child + 1][0] > entries[child][0]:
                child += 1
            if entries[child][0] > item[0]:
                entries[slot] = entries[child]
                pos[entries[slot][1]] = slot
                slot = child
            else:
                break
        entries[slot] = item
        pos[item[1]] = slot

    def _sift_up(self, slot: int) -> None:
        entries, pos = self._entries, self._pos
        item = entries[slot]
        while slot > 0:
            parent = (slot - 1) // 2
            if entries[parent][0] < item[0]:
                entries[slot] = entries[parent]
                pos[entries[slot][1]] = slot
                slot = parent
            else:
                break
        entries[slot] = item
        pos[item[1]] = slot


def mapping_order(query: Graph, data: Graph) -> list[int]:
    """Order query vertices so that rare labels and well-connected vertices come first."""
    if query.n == 0:
        return []
    vertex_counts = Counter(data.vertex_labels)
    edge_counts = Counter(label for row in data.adjacency for _, label in row)

    def vertex_rarity(u: int) -> float:
        return _rarity(vertex_counts[query.vertex_labels[u]], data.n)

    def edge_rarity(label: int) -> float:
        return _rarity(edge_counts[label], data.m)

    root, root_weight = 0, 0.0
    for u in range(query.n):
        weight = vertex_rarity(u)
        for _, label in query.adjacency[u]:
            weight += edge_rarity(label)
        if weight > root_weight:
            root, root_weight = u, weight

    entries = [[0.0, u] for u in range(query.n)]
    entries[root][0] = root_weight
    entries[0], entries[root] = entries[root], entries[0]
    heap = _WeightHeap(entries)

    order = []
    while heap:
        u = heap.pop()
        order.append(u)
        for w, label in query.adjacency[u]:
            if w in heap:
                weight = heap.weight(w)
                if weight < EPS:
                    weight += vertex_rarity(w)
                weight += edge_rarity(label)
                heap.update(w, weight)
    return order


def independent_prefix(query: Graph, order: Sequence[int]) -> int:
    """Length of the shortest prefix of `order` that touches every query edge.

    The vertices after that prefix form an independent set.
    """
    position = {u: i for i, u in enumerate(order)}
    covered = 0
    for i, u in enumerate(order):
        covered += 2 * sum(1 for w, _ in query.adjacency[u] if position[w] > i)
        if covered == query.m:
            return i + 1
    return len(order)