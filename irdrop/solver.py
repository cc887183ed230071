"""High-level IR-drop solver orchestration.

Provides IRDropSolver which picks one of the three field strategies for a
PDNGrid and a per-instance current map, and a `summarize` helper for display.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from core.config import SolverConfig
from core.grid import PDNGrid
from core.results import IRDropResult

from .manhattan_estimator import ManhattanIRDropEstimator
from .power_grid_model import DirectIRDropSolver
from .relaxation_solver import GaussSeidelIRDropSolver


class SolverStrategy(Enum):
    RELAXATION = "relaxation"
    MANHATTAN = "manhattan"
    DIRECT = "direct"


class IRDropSolver:
    def __init__(self, grid: PDNGrid, config: Optional[SolverConfig] = None):
        self.grid = grid
        self.config = config or SolverConfig()
        self._direct: Optional[DirectIRDropSolver] = None

    def solve(
        self,
        currents_ma: Dict[str, float],
        strategy: SolverStrategy = SolverStrategy.RELAXATION,
        record_snapshots: bool = False,
    ) -> IRDropResult:
        """Solve the field for instance sink currents (instance id -> mA).

        Manhattan always superposes the map, so a single entry gets the same
        scaled estimate as several; unknown ids are warned about and skipped
        like in the other strategies.
        """
        strategy = SolverStrategy(strategy)
        if strategy is SolverStrategy.RELAXATION:
            return GaussSeidelIRDropSolver(self.grid, self.config).solve(
                currents_ma, record_snapshots=record_snapshots
            )
        if strategy is SolverStrategy.MANHATTAN:
            return self.estimator().estimate_multi(currents_ma)
        # Factorization is reused across direct solves on the same grid
        if self._direct is None:
            self._direct = DirectIRDropSolver(self.grid, self.config)
        return self._direct.solve(currents_ma)

    def estimator(self) -> ManhattanIRDropEstimator:
        return ManhattanIRDropEstimator(self.grid, self.config)

    @staticmethod
    def summarize(result: IRDropResult) -> Dict:
        """Return display stats: min voltage, max drop (also in mV), power loss."""
        stats = result.statistics
        return {
            "strategy": result.strategy,
            "min_voltage": stats.min_voltage,
            "max_voltage": stats.max_voltage,
            "max_drop": stats.max_ir_drop,
            "max_drop_mv": stats.max_ir_drop * 1000.0,
            "voltage_spread": stats.voltage_spread,
            "total_power_loss": stats.total_power_loss,
            "total_current": stats.total_current,
            "iterations": result.iterations,
            "converged": result.converged,
        }
