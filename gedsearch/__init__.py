"""Exact graph edit distance computation and verification by A* and depth-first search."""

__version__ = "0.1.0"