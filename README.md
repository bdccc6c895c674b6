# gedsearch

Exact graph edit distance (GED) between small labelled graphs. The package can
also verify whether the distance lies within a threshold.

Every vertex and every edge of a graph carries a label. Each of these edits
costs 1:

- inserting or deleting a vertex
- relabelling a vertex
- inserting, deleting or relabelling an edge

The search runs either best-first (A*) or depth-first with branch and bound.
One of three lower bounds guides it:

- `LSa`: anchor-aware label sets
- `BMa`: anchor-aware bipartite matching, evaluated for every candidate image
- `BMao`: anchor-aware bipartite matching. Once the remaining query vertices
  form an independent set, the matching gives the exact cost of the rest. This
  is the default.

An unknown lower-bound name prints a notice, and `LSa` is used in its place.

## Installation

```
pip install .
```

## Command line

Graph files use the transaction format. Each graph starts with a line
`t # <id>`, followed by `v <vertex> <label>` and `e <u> <v> <label>` lines:

```
t # 1
v 0 C
v 1 O
e 0 1 double
```

Compare every query graph with every database graph:

```
gedsearch -d database.txt -q queries.txt -m search -p astar -l BMao -g
```

Compare the i-th query graph with the i-th database graph:

```
gedsearch -d database.txt -q queries.txt -m pair -p dfs -l LSa -t 3 -g
```

Options:

- `-d`, `--database`: the database file
- `-q`, `--query`: the query file
- `-m`, `--mode`: `search` (all pairs, the default) or `pair`
- `-p`, `--paradigm`: `astar` (the default) or `dfs`
- `-l`, `--lower_bound`: `LSa`, `BMao` (the default) or `BMa`
- `-t`, `--threshold`: the GED threshold for verification. Without it, the
  exact GED is computed.
- `-g`, `--ged`: print each computed GED
- `-h`, `--help`: print the option summary

If a database or query file is missing, the command stops and prints a message.

Pairs whose cheap lower bound (`Graph.ged_lower_bound_filter`) already exceeds
the threshold are skipped without a search. At the end the command prints:

- the total time, in microseconds
- the search space
- the number of candidate pairs
- the number of matches

In `pair` mode with a threshold, a result above the threshold is printed as
`-1`. In verification mode, any other value is only an upper bound on the exact
GED. The A* search also prints the best mapping it found.

## Library use

```python
from gedsearch.graph import Graph
from gedsearch.search import GEDSolver, compute_ged

# Vertices are (id, label) pairs. Each undirected edge is given in both
# directions as ((u, v), label).
data = Graph("g", [(0, 0), (1, 1)], [((0, 1), 0), ((1, 0), 0)])
query = Graph("q", [(0, 0), (1, 0)], [])

print(compute_ged(data, query, "astar", "BMao", None))

solver = GEDSolver(lower_bound="LSa")
solver.load(data, query)
print(solver.dfs())
print(solver.ged_of_best_mapping())
print(solver.mapping(2))     # (query vertex, data vertex) in mapping order
print(solver.search_space)
```

`compute_ged(data, query, paradigm, lower_bound, threshold)` computes the exact
distance when `threshold` is `None` or negative. With a threshold `t`, the
search stops as soon as it finds a mapping that costs at most `t`. A result
above `t` means the distance exceeds `t`.

`GEDSolver(verify_upper_bound, lower_bound)` defaults to exact computation with
`BMao`. `load` swaps the two graphs if the query has more vertices than the data
graph. It raises `ValueError` for empty graphs.

Other helpers:

- `gedsearch.hungarian.HungarianSolver`: minimum-cost assignment on a square
  cost matrix. It can re-solve with the first row's match forbidden.
- `gedsearch.cli.load_db`, `generate_queries` and `write_queries`: read graph
  files, pick random query indices, and write graphs back out. Output is in the
  named-label format or the numeric (`bss`) format.
- `gedsearch.utility.Timer` and `format_thousands`: timing and number
  formatting used by the command line.

## Limits

The command line does not generate or write query files. To do that, call
`generate_queries` and `write_queries` from Python.

## Tests

```
pip install .[test]
pytest
```