"""Minimum-cost perfect matching on a square cost matrix (Kuhn-Munkres)."""

from typing import Sequence

from .utility import INF


class HungarianSolver:
    """Solves an assignment problem and supports re-solving with row 0's match forbidden."""

    def __init__(self, cost: Sequence[Sequence[int]]) -> None:
        self.cost = [list(row) for row in cost]
        self.n = len(self.cost)
        if any(len(row) != self.n for row in self.cost):
            raise ValueError("cost matrix must be square")
        self.row_match = [-1] * self.n
        self.col_match = [-1] * self.n
        self._lx = [0] * self.n
        self._ly = [0] * self.n
        self._solved = False

    def solve(self) -> int:
        """Compute a minimum-cost assignment from scratch and return its total cost."""
        self._initialize()
        self._augment_all()
        self._solved = True
        return self._total()

    def exclude_first_row_match(self) -> int:
        """Forbid the column currently matched to row 0, re-solve, and return the new total."""
        if not self._solved or self.n == 0:
            raise RuntimeError("solve() must be called on a non-empty matrix first")
        column = self.row_match[0]
        self.cost[0][column] = INF
        self.col_match[column] = -1
        self.row_match[0] = -1
        self._augment_all()
        return self._total()

    def _total(self) -> int:
        return sum(row[col] for row, col in zip(self.cost, self.row_match))

    def _initialize(self) -> None:
        n = self.n
        self.row_match = [-1] * n
        self.col_match = [-1] * n
        self._ly = [0] * n
        self._lx = [min([INF, *row]) for row in self.cost]
        for i, row in enumerate(self.cost):
            for j, value in enumerate(row):
                if self.col_match[j] == -1 and value == self._lx[i]:
                    self.row_match[i] = j
                    self.col_match[j] = i
                    break

    def _augment_all(self) -> None:
        for u in range(self.n):
            if self.row_match[u] == -1:
                self._augment_from(u)

    def _augment_from(self, u: int) -> None:
        n = self.n
        cost, lx, ly = self.cost, self._lx, self._ly
        col_match = self.col_match
        vis_x = [False] * n
        vis_y = [False] * n
        prev = [0] * n
        queue = [u]
        vis_x[u] = True
        slack = [cost[u][k] - lx[u] - ly[k] for k in range(n)]
        slack_from = [u] * n

        def relax(x: int) -> None:
            row = cost[x]
            for k in range(n):
                if not vis_y[k]:
                    reduced = row[k] - lx[x] - ly[k]
                    if reduced < slack[k]:
                        slack[k] = reduced
                        slack_from[k] = x

        def visit(x: int, parent: int) -> None:
            vis_x[x] = True
            prev[x] = parent
            queue.append(x)
            relax(x)

        target = None
        x = u
        while True:
            i = 0
            while i < len(queue) and target is None:
                v = queue[i]
                i += 1
                row = cost[v]
                for j in range(n):
                    if vis_y[j] or row[j] != lx[v] + ly[j]:
                        continue
                    if col_match[j] == -1:
                        x, target = v, j
                        break
                    vis_y[j] = True
                    visit(col_match[j], v)
            if target is not None:
                break

            queue.clear()
            delta = min([INF, *(slack[k] for k in range(n) if not vis_y[k])])
            for k in range(n):
                if vis_x[k]:
                    lx[k] += delta
                if vis_y[k]:
                    ly[k] -= delta
                else:
                    slack[k] -= delta

            for k in range(n):
                if vis_y[k] or slack[k] != 0:
                    continue
                if col_match[k] == -1:
                    x, target = slack_from[k], k
                    break
                vis_y[k] = True
                owner = col_match[k]
                if not vis_x[owner]:
                    visit(owner, slack_from[k])
            if target is not None:
                break

        while True:
            previous_col = self.row_match[x]
            self.row_match[x] = target
            col_match[target] = x
            if x == u:
                break
            x = prev[x]
            target = previous_col