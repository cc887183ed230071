"""Caller-owned PDN exploration session.

A session holds one generated grid plus the latest derived results (paths,
IR-drop field). Every recomputation replaces the stored result; invalid
selections raise InvalidSelectionError before anything is mutated.

Example usage:
    session = PDNSession(GridConfig.spr_explorer(), seed=7)
    session.generate()
    path = session.find_path("instance-0", 1)
    result = session.simulate_ir_drop("instance-0", 50.0)
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from generate_pdn_grid import generate_pdn_grid
from irdrop.solver import IRDropSolver, SolverStrategy
from spr.path_finder import ShortestResistancePathFinder

from .config import GridConfig, PathSearchConfig, SolverConfig
from .errors import InvalidSelectionError
from .grid import Bump, Domain, Instance, PathSource, PDNGrid
from .results import IRDropResult, Path, PathStatistics

logger = logging.getLogger(__name__)


class PDNSession:
    """Grid, selections and derived results for one interactive tool.

    Attributes:
        grid: Current network (None until generate() is called)
        paths: Last successful path search, best path first
        ir_drop_result: Last IR-drop field
    """

    def __init__(
        self,
        grid_config: Optional[GridConfig] = None,
        solver_config: Optional[SolverConfig] = None,
        search_config: Optional[PathSearchConfig] = None,
        seed: Optional[int] = None,
    ):
        self.grid_config = grid_config or GridConfig()
        self.solver_config = solver_config or SolverConfig()
        self.search_config = search_config or PathSearchConfig()
        self.seed = seed
        self.rng = random.Random(seed)
        self.grid: Optional[PDNGrid] = None
        self.paths: List[Path] = []
        self.ir_drop_result: Optional[IRDropResult] = None

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def generate(self) -> PDNGrid:
        """Generate a new grid and drop every derived result."""
        # Seed each generation from the session RNG so repeated calls differ
        grid_seed = self.rng.randrange(2 ** 32) if self.seed is not None else None
        self.grid = generate_pdn_grid(self.grid_config, seed=grid_seed)
        logger.debug("Session generated %r", self.grid)
        self.clear_paths()
        self.clear_simulation()
        return self.grid

    def _require_grid(self) -> PDNGrid:
        if self.grid is None:
            raise InvalidSelectionError("No network generated; call generate() first")
        return self.grid

    def _resolve_source(self, source_id: Optional[str]) -> PathSource:
        grid = self._require_grid()
        if source_id is None:
            raise InvalidSelectionError("No source selected")
        for lookup in (grid.instance_by_id, grid.bump_by_id):
            try:
                return lookup(source_id)
            except KeyError:
                continue
        raise InvalidSelectionError(f"Unknown source {source_id}")

    def _resolve_instance(self, instance_id: Optional[str]) -> Instance:
        grid = self._require_grid()
        if instance_id is None:
            raise InvalidSelectionError("No source instance selected")
        try:
            return grid.instance_by_id(instance_id)
        except KeyError:
            raise InvalidSelectionError(f"Unknown instance {instance_id}") from None

    def _resolve_target(self, source: PathSource, target_domain_id: Optional[int]) -> Domain:
        grid = self._require_grid()
        if target_domain_id is None:
            raise InvalidSelectionError("No target domain selected")
        try:
            target = grid.domain_by_id(target_domain_id)
        except KeyError:
            raise InvalidSelectionError(f"Unknown domain {target_domain_id}") from None
        if isinstance(source, Bump) and source.domain_id == target.id:
            raise InvalidSelectionError(
                f"Source {source.id} is already in target domain {target.name}"
            )
        return target

    # ------------------------------------------------------------------
    # Shortest-resistance paths
    # ------------------------------------------------------------------

    def find_path(self, source_id: Optional[str], target_domain_id: Optional[int]) -> Optional[Path]:
        """Best path from an instance/bump to a domain.

        Returns None (keeping the previous paths) when no route exists.
        """
        source = self._resolve_source(source_id)
        target = self._resolve_target(source, target_domain_id)
        path = ShortestResistancePathFinder(self.grid, self.search_config).find_path(source, target)
        if path is None:
            logger.info("Keeping %d previous path(s)", len(self.paths))
            return None
        self.paths = [path]
        return path

    def find_alternative_paths(
        self,
        source_id: Optional[str],
        target_domain_id: Optional[int],
        k: int = 5,
    ) -> List[Path]:
        source = self._resolve_source(source_id)
        target = self._resolve_target(source, target_domain_id)
        finder = ShortestResistancePathFinder(self.grid, self.search_config)
        paths = finder.find_alternative_paths(source, target, k=k, rng=self.rng)
        if paths:
            self.paths = paths
        return paths

    def path_statistics(self) -> Optional[PathStatistics]:
        return ShortestResistancePathFinder.path_statistics(self.paths)

    def clear_paths(self) -> None:
        self.paths = []

    # ------------------------------------------------------------------
    # IR drop
    # ------------------------------------------------------------------

    def simulate_ir_drop(
        self,
        source_id: Optional[str],
        current_ma: float,
        strategy: SolverStrategy = SolverStrategy.RELAXATION,
        record_snapshots: bool = False,
    ) -> IRDropResult:
        """IR-drop field for one instance drawing `current_ma`.

        Manhattan uses the unscaled single-source estimate here; current maps
        passed to simulate_multi_source are always superposed.
        """
        instance = self._resolve_instance(source_id)
        if current_ma < 0:
            raise InvalidSelectionError(f"Current must be non-negative, got {current_ma}")
        solver = IRDropSolver(self.grid, self.solver_config)
        if SolverStrategy(strategy) is SolverStrategy.MANHATTAN:
            self.ir_drop_result = solver.estimator().estimate(instance, current_ma)
        else:
            self.ir_drop_result = solver.solve(
                {instance.id: current_ma}, strategy, record_snapshots=record_snapshots
            )
        return self.ir_drop_result

    def simulate_multi_source(
        self,
        currents_ma: Dict[str, float],
        strategy: SolverStrategy = SolverStrategy.MANHATTAN,
    ) -> IRDropResult:
        """IR-drop field for several instances (instance id -> mA)."""
        grid = self._require_grid()
        if not currents_ma:
            raise InvalidSelectionError("No current sources selected")
        known = {i.id for i in grid.instances}
        if not known.intersection(currents_ma):
            raise InvalidSelectionError(f"None of {sorted(currents_ma)} is an instance of this grid")
        solver = IRDropSolver(grid, self.solver_config)
        self.ir_drop_result = solver.solve(currents_ma, strategy)
        return self.ir_drop_result

    def clear_simulation(self) -> None:
        self.ir_drop_result = None
