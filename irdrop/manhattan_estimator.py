"""Closed-form IR-drop estimate from Manhattan distance.

Treats every hop as a flat `average_resistance` and lets the drop grow
linearly with distance from the drawing instance. No system is solved, so the
result is instant but ignores the real segment values and the bump locations:

    single:  V[cell] = max(0, vdd - I * R_avg * d(cell, source))
    multi:   V[cell] = max(0, vdd - sum_s I_s * R_avg * d(cell, s) * k)

where k is `superposition_scale`. Use DirectIRDropSolver or
GaussSeidelIRDropSolver for a physically consistent field.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np

from core.config import SolverConfig
from core.grid import GridPosition, PathSource, PDNGrid
from core.results import IRDropResult, VoltageField

from .derived import field_statistics

logger = logging.getLogger(__name__)


class ManhattanIRDropEstimator:
    def __init__(self, grid: PDNGrid, config: Optional[SolverConfig] = None):
        self.grid = grid
        self.config = config or SolverConfig()
        rows, cols = grid.shape
        self._rr, self._cc = np.indices((rows, cols))

    def _distance_from(self, position: GridPosition) -> np.ndarray:
        return np.abs(self._rr - position.row) + np.abs(self._cc - position.col)

    def _result(self, V: np.ndarray, total_current_a: float, metadata: Dict) -> IRDropResult:
        vdd = self.config.vdd
        max_drop = max(0.0, vdd - float(V.min()))
        stats = field_statistics(V, vdd, total_current_a * max_drop, total_current=total_current_a)
        return IRDropResult(
            strategy="manhattan",
            voltage=VoltageField(V, vdd),
            statistics=stats,
            metadata=metadata,
        )

    def estimate(self, source: PathSource, current_ma: float) -> IRDropResult:
        """Voltage field for one source drawing `current_ma`."""
        cfg = self.config
        current_a = float(current_ma) / 1000.0
        drop = current_a * cfg.average_resistance * self._distance_from(source.position)
        V = np.maximum(0.0, cfg.vdd - drop)
        V[source.row, source.col] = cfg.vdd
        return self._result(V, current_a, {"source": source.id, "currents_ma": {source.id: current_ma}})

    def estimate_multi(self, currents_ma: Dict[str, float]) -> IRDropResult:
        """Superpose the drops of several instances (instance id -> mA).

        Raises:
            ValueError: if `currents_ma` is empty
        """
        if not currents_ma:
            raise ValueError("At least one current source is required")
        cfg = self.config
        V = np.full(self.grid.shape, cfg.vdd)
        total_current_a = 0.0
        used: Dict[str, float] = {}

        for instance_id, current_ma in currents_ma.items():
            try:
                instance = self.grid.instance_by_id(instance_id)
            except KeyError:
                logger.warning("Instance %s not found, skipping", instance_id)
                continue
            current_a = float(current_ma) / 1000.0
            drop = current_a * cfg.average_resistance * self._distance_from(instance.position)
            drop = drop * cfg.superposition_scale
            drop[instance.row, instance.col] = 0.0
            V = np.maximum(0.0, V - drop)
            total_current_a += current_a
            used[instance_id] = current_ma

        return self._result(V, total_current_a, {"currents_ma": used})
