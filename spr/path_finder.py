"""Shortest-resistance-path search over a PDN grid.

The search graph is every grid cell plus the target domain's virtual node.
Grid segments connect cardinal neighbours; a directed edge from each bump of
the target domain to its virtual node carries that bump's resistance. Routing
to the virtual node lets one Dijkstra run pick the best of all bumps at once:

    source ── r ── ... ── bump_k ──(R_bump_k)──► virtual(target)

The source's own series resistance is the initial distance, so it is counted
once rather than per hop. Occupied cells (other domains' bumps, other
instances) can only be endpoints; see PDNGrid.is_traversable.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
import random
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from core.config import PathSearchConfig
from core.grid import Bump, Domain, GridPosition, PathSource, PDNGrid, VirtualNode
from core.results import Path, PathStatistics

logger = logging.getLogger(__name__)

SearchNode = Union[GridPosition, VirtualNode]


def path_overlap(a: Path, b: Path) -> float:
    """Shared positions divided by the length of the longer path."""
    longest = max(len(a.positions), len(b.positions))
    if longest == 0:
        return 0.0
    existing = set(b.positions)
    common = sum(1 for p in a.positions if p in existing)
    return common / longest


class ShortestResistancePathFinder:
    """Dijkstra search from an Instance (or Bump) to a Domain's virtual node.

    Example usage:
        finder = ShortestResistancePathFinder(grid)
        path = finder.find_path(grid.instances[0], grid.domains[1])
        alternatives = finder.find_alternative_paths(grid.instances[0], grid.domains[1], k=5)
    """

    def __init__(self, grid: PDNGrid, config: Optional[PathSearchConfig] = None):
        self.grid = grid
        self.config = config or PathSearchConfig()

    def _neighbors(
        self,
        node: GridPosition,
        source: PathSource,
        target: Domain,
        target_bumps: Dict[GridPosition, Bump],
        blocked: Set[GridPosition],
    ) -> Iterator[Tuple[SearchNode, float]]:
        for neighbor, resistance in self.grid.neighbors(node):
            if neighbor in blocked:
                continue
            if not self.grid.is_traversable(neighbor, source, target):
                continue
            yield neighbor, resistance
        bump = target_bumps.get(node)
        if bump is not None:
            yield target.virtual_node, bump.resistance

    def find_path(
        self,
        source: PathSource,
        target: Domain,
        blocked: Optional[Iterable[GridPosition]] = None,
    ) -> Optional[Path]:
        """Find the minimum-resistance path from `source` to any bump of `target`.

        Args:
            source: Instance or Bump the path starts at
            target: Domain to reach
            blocked: Cells that may not be entered for this search

        Returns:
            Path ending at the target bump closest to the route's last cell,
            or None when source and target share a domain, the source cell is
            blocked, or no route reaches the target.
        """
        if isinstance(source, Bump) and source.domain_id == target.id:
            logger.info("Source %s is already in target domain %d", source.id, target.id)
            return None
        if not target.bumps:
            logger.info("Target domain %d has no bumps", target.id)
            return None

        blocked_set: Set[GridPosition] = set(blocked or ())
        start = source.position
        if start in blocked_set:
            return None

        virtual = target.virtual_node
        target_bumps = {b.position: b for b in target.bumps}

        dist: Dict[SearchNode, float] = {start: source.resistance}
        previous: Dict[SearchNode, SearchNode] = {}
        settled: Set[SearchNode] = set()
        counter = itertools.count()
        heap: List[Tuple[float, int, SearchNode]] = [(source.resistance, next(counter), start)]

        while heap:
            d, _, node = heapq.heappop(heap)
            if node in settled:
                continue
            settled.add(node)
            if node == virtual:
                break

            for neighbor, resistance in self._neighbors(node, source, target, target_bumps, blocked_set):
                if neighbor in settled:
                    continue
                alt = d + resistance
                if alt < dist.get(neighbor, math.inf):
                    dist[neighbor] = alt
                    previous[neighbor] = node
                    heapq.heappush(heap, (alt, next(counter), neighbor))

        if virtual not in settled:
            logger.info("No path found from %s to domain %d", source.id, target.id)
            return None

        # Walk predecessors back from the virtual node
        positions: List[GridPosition] = []
        node = previous[virtual]
        while True:
            positions.append(node)
            if node == start:
                break
            node = previous[node]
        positions.reverse()

        # The route always enters the virtual node from a target bump, so that
        # bump is also the closest one to the route end
        terminal = target_bumps[positions[-1]]
        segments = [dist[b] - dist[a] for a, b in zip(positions, positions[1:])]

        path = Path(
            positions=positions,
            total_resistance=dist[virtual],
            source_id=source.id,
            target_domain_id=target.id,
            terminal_bump_id=terminal.id,
            source_resistance=source.resistance,
            segment_resistances=segments,
            terminal_resistance=terminal.resistance,
        )
        logger.debug(
            "Path %s -> domain %d: %d nodes, %.4f Ohm (%d nodes settled)",
            source.id, target.id, path.node_count, path.total_resistance, len(settled),
        )
        return path

    def find_alternative_paths(
        self,
        source: PathSource,
        target: Domain,
        k: int = 5,
        rng: Optional[random.Random] = None,
        attempts: Optional[int] = None,
    ) -> List[Path]:
        """Find up to k sufficiently distinct paths.

        Each re-run blocks up to `max_blocked_per_path` random interior cells of
        every accepted path; a candidate overlapping any accepted path by more
        than `similarity_threshold` is dropped.

        Args:
            source: Instance or Bump the paths start at
            target: Domain to reach
            k: Maximum number of paths to return
            rng: Random source for picking blocked cells
            attempts: Number of re-runs (default k - 1)

        Returns:
            Best path first, then accepted alternates in discovery order.
        """
        if k < 1:
            return []
        rng = rng or random.Random()
        attempts = k - 1 if attempts is None else attempts

        best = self.find_path(source, target)
        if best is None:
            return []
        paths = [best]

        for attempt in range(attempts):
            if len(paths) >= k:
                break
            blocked: Set[GridPosition] = set()
            for accepted in paths:
                interior = accepted.interior
                for _ in range(min(self.config.max_blocked_per_path, len(interior))):
                    blocked.add(rng.choice(interior))

            candidate = self.find_path(source, target, blocked=blocked)
            if candidate is None:
                logger.debug("Attempt %d: blocking %d cells disconnected the target", attempt, len(blocked))
                continue
            if self.is_too_similar(candidate, paths):
                logger.debug("Attempt %d: candidate too similar to an accepted path", attempt)
                continue
            paths.append(candidate)

        return paths

    def is_too_similar(self, candidate: Path, existing: Sequence[Path]) -> bool:
        threshold = self.config.similarity_threshold
        return any(path_overlap(candidate, path) > threshold for path in existing)

    def segment_resistance(self, a: GridPosition, b: GridPosition) -> float:
        return self.grid.segment_resistance(a, b)

    @staticmethod
    def path_statistics(paths: Sequence[Path]) -> Optional[PathStatistics]:
        """Count and min/max/average total resistance; None for no paths."""
        if not paths:
            return None
        resistances = [p.total_resistance for p in paths]
        return PathStatistics(
            path_count=len(paths),
            min_resistance=min(resistances),
            max_resistance=max(resistances),
            avg_resistance=sum(resistances) / len(resistances),
        )
