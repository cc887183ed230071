"""Data classes for path-search and IR-drop results.

This module contains the records returned by the core:
- Path, PathStatistics: shortest-resistance-path search results
- VoltageField, CurrentDensityField: per-cell solved quantities
- IRDropStatistics, IRDropResult: IR-drop solve results
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from .grid import GridPosition


# ============================================================================
# Path Search Results
# ============================================================================

@dataclass
class Path:
    """Shortest-resistance path from a source to a target domain.

    Attributes:
        positions: Grid cells from the source to the terminal bump
        total_resistance: Source + segment + bump-to-rail resistance (Ohm)
        source_id: Id of the source Instance or Bump
        target_domain_id: Id of the target Domain
        terminal_bump_id: Id of the bump the path ends at
        source_resistance: Series resistance of the source, counted once
        segment_resistances: Resistance of each hop between consecutive positions
        terminal_resistance: Bump-to-virtual-node resistance
    """
    positions: List[GridPosition]
    total_resistance: float
    source_id: str
    target_domain_id: int
    terminal_bump_id: Optional[str] = None
    source_resistance: float = 0.0
    segment_resistances: List[float] = field(default_factory=list)
    terminal_resistance: float = 0.0

    @property
    def node_count(self) -> int:
        return len(self.positions)

    @property
    def segment_count(self) -> int:
        return max(0, len(self.positions) - 1)

    @property
    def interior(self) -> List[GridPosition]:
        """Positions excluding the source and the terminal bump."""
        return self.positions[1:-1]

    def as_dicts(self) -> List[Dict[str, int]]:
        return [{"row": p.row, "col": p.col} for p in self.positions]


@dataclass
class PathStatistics:
    """Summary over a set of paths."""
    path_count: int
    min_resistance: float
    max_resistance: float
    avg_resistance: float


# ============================================================================
# IR-Drop Results
# ============================================================================

@dataclass
class VoltageField:
    """Solved node voltages, one per grid cell.

    Attributes:
        voltages: (rows, cols) array of volts
        vdd: Supply voltage used as reference for IR drop
    """
    voltages: np.ndarray
    vdd: float

    @property
    def shape(self):
        return self.voltages.shape

    @property
    def ir_drop(self) -> np.ndarray:
        return self.vdd - self.voltages

    def at(self, row: int, col: int) -> Optional[float]:
        if 0 <= row < self.voltages.shape[0] and 0 <= col < self.voltages.shape[1]:
            return float(self.voltages[row, col])
        return None

    def to_list(self) -> List[List[float]]:
        return self.voltages.tolist()


@dataclass
class CurrentDensityField:
    """Per-edge currents, stored at the upper/left node of each segment.

    Attributes:
        horizontal: (rows, cols) amps through the node's RIGHT segment
        vertical: (rows, cols) amps through the node's DOWN segment
    """
    horizontal: np.ndarray
    vertical: np.ndarray

    def at(self, row: int, col: int) -> Optional[Dict[str, float]]:
        if 0 <= row < self.horizontal.shape[0] and 0 <= col < self.horizontal.shape[1]:
            return {
                "horizontal": float(self.horizontal[row, col]),
                "vertical": float(self.vertical[row, col]),
            }
        return None


@dataclass
class IRDropStatistics:
    """Scalar summary of an IR-drop field.

    Attributes:
        min_voltage: Lowest node voltage (V)
        max_voltage: Highest node voltage (V)
        max_ir_drop: vdd - min_voltage, floored at 0 (V)
        total_power_loss: Resistive loss over all edges (W)
        voltage_spread: max_voltage - min_voltage (V)
        total_current: Total drawn current (A)
    """
    min_voltage: float
    max_voltage: float
    max_ir_drop: float
    total_power_loss: float
    voltage_spread: float
    total_current: float = 0.0


@dataclass
class IRDropResult:
    """Result of an IR-drop solve or estimate.

    Attributes:
        strategy: Name of the strategy that produced the field
        voltage: Solved voltage field
        statistics: Scalar summary
        current_density: Per-edge currents (None for closed-form estimates)
        power_loss: (rows, cols) watts lost in each node's RIGHT and DOWN
            segments (None for closed-form estimates)
        iterations: Relaxation sweeps performed (0 for non-iterative strategies)
        converged: False when the relaxation hit its iteration cap
        final_change: Max per-node change of the last sweep
        snapshots: Recorded intermediate fields, in sweep order
        metadata: Additional information (source currents, injection model, ...)
    """
    strategy: str
    voltage: VoltageField
    statistics: IRDropStatistics
    current_density: Optional[CurrentDensityField] = None
    power_loss: Optional[np.ndarray] = None
    iterations: int = 0
    converged: bool = True
    final_change: float = 0.0
    snapshots: List[np.ndarray] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
