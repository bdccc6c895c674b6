"""Command-line driver: load graph databases, then compute or verify edit distances."""

from __future__ import annotations

import argparse
import random
import sys
from typing import Optional, Sequence

from .graph import Graph
from .search import GEDSolver
from .utility import INF, Timer, format_thousands

_USAGE = (
    "Usage: ged -h -d database_file -q query_file -m running_mode -p search_paradigm "
    "-l lower_bound_method -t ged_threshold\n"
    "**** Note that for GED verification, if the returned value is not -1, then it is "
    "only an upper bound of (and may be larger than) the exact GED\n"
)


def _label_id(name: str, labels: dict[str, int]) -> int:
    """Id of a label name, assigning the next free id to a new name."""
    if name not in labels:
        labels[name] = len(labels)
    return labels[name]


def _build_graph(
    graph_id: str,
    vertices: list[tuple[int, int]],
    edges: list[tuple[tuple[int, int], int]],
) -> Graph:
    return Graph(graph_id, sorted(vertices), sorted(edges))


def load_db(path: str, vertex_labels: dict[str, int], edge_labels: dict[str, int]) -> list[Graph]:
    """Read graphs in the "t # id / v id label / e a b label" format.

    Label names are translated to integer ids through the two dictionaries, which
    are extended with every new name seen, so several files can share them.
    """
    graphs: list[Graph] = []
    with open(path, encoding="utf-8") as fin:
        lines = iter(fin)
        line = next(lines, None)
        while line is not None and line.startswith("t"):
            header = line[2:].split()
            graph_id = header[1] if len(header) > 1 else ""
            vertices: list[tuple[int, int]] = []
            edges: list[tuple[tuple[int, int], int]] = []
            line = None
            for raw in lines:
                if raw.startswith("t"):
                    line = raw
                    break
                fields = raw[2:].split()
                if raw.startswith("v"):
                    vertices.append((int(fields[0]), _label_id(fields[1], vertex_labels)))
                elif raw.startswith("e"):
                    a, b = int(fields[0]), int(fields[1])
                    label = _label_id(fields[2], edge_labels)
                    edges.append(((a, b), label))
                    edges.append(((b, a), label))
                elif raw.strip():
                    print("!!! Unrecongnized first letter in a line when loading DB!")
            graphs.append(_build_graph(graph_id, vertices, edges))
    return graphs


def generate_queries(
    db: Sequence[Graph], count: int, rng: Optional[random.Random] = None
) -> list[int]:
    """Pick `count` random database indices to use as queries."""
    if not db:
        raise ValueError("cannot draw queries from an empty database")
    rng = rng if rng is not None else random.Random()
    return [rng.randrange(len(db)) for _ in range(count)]


def write_queries(
    path: str,
    db: Sequence[Graph],
    queries: Sequence[int],
    vertex_labels: dict[str, int],
    edge_labels: dict[str, int],
    bss: bool,
) -> None:
    """Write the chosen database graphs to a file, in order."""
    vertex_names = [""] * len(vertex_labels)
    for name, index in vertex_labels.items():
        vertex_names[index] = name
    edge_names = [""] * len(edge_labels)
    for name, index in edge_labels.items():
        edge_names[index] = name
    with open(path, "w", encoding="utf-8") as fout:
        for index in queries:
            db[index].write_graph(fout, vertex_names, edge_names, bss)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Allowed options", add_help=False)
    parser.add_argument("-h", "--help", action="store_true", help="produce help message")
    parser.add_argument("-d", "--database", help="database file name")
    parser.add_argument("-q", "--query", help="query file name")
    parser.add_argument("-m", "--mode", default="search", help="running mode (search | pair)")
    parser.add_argument("-p", "--paradigm", default="astar", help="search paradigm (astar | dfs)")
    parser.add_argument(
        "-l", "--lower_bound", default="BMao", help="lower bound method (LSa | BMao | BMa)"
    )
    parser.add_argument(
        "-t",
        "--threshold",
        type=int,
        default=-1,
        help="threshold for GED verification; if not provided, then GED computation",
    )
    parser.add_argument("-g", "--ged", action="store_true", help="print_ged")
    return parser


class _Progress:
    """Writes a percentage to stderr whenever it changes."""

    def __init__(self) -> None:
        self._last = 1000

    def update(self, current: int) -> None:
        if current != self._last:
            sys.stderr.write(f"\r[{current}% finished]")
            sys.stderr.flush()
            self._last = current

    @staticmethod
    def finish() -> None:
        sys.stderr.write("\n")


def _solve(data: Graph, query: Graph, args: argparse.Namespace, verify: int) -> tuple[int, int]:
    solver = GEDSolver(verify, args.lower_bound)
    solver.load(data, query)
    result = solver.astar() if args.paradigm == "astar" else solver.dfs()
    return result, solver.search_space


def _run_pairs(
    db: list[Graph], queries: list[Graph], args: argparse.Namespace, verify: int
) -> Optional[tuple[int, int, int]]:
    if len(queries) != len(db):
        print("Query size != db size in the pair mode")
        return None
    search_space = candidates = results = 0
    similar = [0, 0, 0]  # time, count, search space
    dissimilar = [0, 0, 0]
    if args.ged:
        print("*** GEDs ***")
    min_ged, max_ged = 1_000_000_000, 0
    progress = _Progress()
    for i, (query, data) in enumerate(zip(queries, db)):
        progress.update(i * 100 // len(queries))
        if query.ged_lower_bound_filter(data, verify) > verify:
            continue
        candidates += 1
        timer = Timer()
        result, space = _solve(data, query, args, verify)
        search_space += space
        if result <= verify:
            results += 1
        else:
            result = -1
        if args.ged:
            print(f"GED: {result}")
            max_ged = max(max_ged, result)
            min_ged = min(min_ged, result)
        bucket = dissimilar if result == -1 else similar
        bucket[0] += timer.elapsed()
        bucket[1] += 1
        bucket[2] += space
    progress.finish()
    if args.ged:
        print("*** GEDs ***")
        print(f"min_ged: {min_ged}, max_ged: {max_ged}")

    total = similar[1] + dissimilar[1]
    if total:
        average_time = format_thousands((similar[0] + dissimilar[0]) // total)
        average_space = (similar[2] + dissimilar[2]) // total
        print(f"total average time: {average_time}, total average_ss: {average_space}")
    if verify < INF:
        for name, (time_sum, count, space_sum) in (
            ("Dissimilar", dissimilar),
            ("Similar", similar),
        ):
            avg_time = format_thousands(time_sum // count) if count else "0"
            avg_space = space_sum // count if count else 0
            print(
                f"{name} ({count} pairs) average time: {avg_time}, "
                f"{name} average space: {avg_space}"
            )
    return search_space, candidates, results


def _run_search(
    db: list[Graph], queries: list[Graph], args: argparse.Namespace, verify: int
) -> tuple[int, int, int]:
    search_space = candidates = results = 0
    if args.ged:
        print("*** GEDs ***")
    min_ged, max_ged = 1_000_000_000, 0
    progress = _Progress()
    pairs = len(queries) * len(db)
    for i, query in enumerate(queries):
        for j, data in enumerate(db):
            progress.update((i * len(db) + j + 1) * 100 // pairs)
            if query.ged_lower_bound_filter(data, verify) > verify:
                continue
            candidates += 1
            result, space = _solve(data, query, args, verify)
            if args.ged:
                print(f"{' ' if j else ''}GED: {result}")
                max_ged = max(max_ged, result)
                min_ged = min(min_ged, result)
            search_space += space
            if result <= verify:
                results += 1
        if args.ged:
            print()
    progress.finish()
    if args.ged:
        print("*** GEDs ***")
        print(f"min_ged: {min_ged}, max_ged: {max_ged}")
    return search_space, candidates, results


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; returns the process exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    print(_USAGE)
    parser = _parser()
    args = parser.parse_args(argv)
    if args.help or not argv:
        print(parser.format_help())
    if args.database is None or args.query is None:
        print("!!! Database file name or query file name is not provided! Exit !!!")
        return 0

    vertex_labels: dict[str, int] = {}
    edge_labels: dict[str, int] = {}
    try:
        db = load_db(args.database, vertex_labels, edge_labels)
        print(
            f"*** {args.mode} {args.paradigm} {args.lower_bound} {args.threshold}: "
            f"{args.database} {args.query} ***"
        )
        queries = load_db(args.query, vertex_labels, edge_labels)
    except OSError as error:
        print(f"Can not open file: {error.filename}")
        return 1

    verify = INF if args.threshold < 0 else args.threshold

    if args.mode not in ("pair", "search"):
        print("!!! Wrong mode (pair | search) selection!")
        return 0
    if args.paradigm not in ("astar", "dfs"):
        print("!!! Wrong algorithm (astar | dfs) selection!")
        return 0

    timer = Timer()
    if args.mode == "pair":
        outcome = _run_pairs(db, queries, args, verify)
        if outcome is None:
            return 0
    else:
        outcome = _run_search(db, queries, args, verify)
    search_space, candidates, results = outcome
    print(
        f"Total time: {format_thousands(timer.elapsed())} (microseconds), "
        f"total search space: {search_space}\n"
        f" #candidates: {candidates}, #matches: {results}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())