"""Shortest-resistance-path search."""

from .path_finder import ShortestResistancePathFinder, path_overlap

__all__ = ["ShortestResistancePathFinder", "path_overlap"]
