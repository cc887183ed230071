"""Quantities derived from a solved voltage field.

Every function here takes the (rows, cols) voltage array and the grid's RIGHT
and DOWN resistance arrays. Segments that do not exist (last column / last
row) or have non-positive resistance carry zero current.
"""

from __future__ import annotations

import numpy as np

from core.grid import PDNGrid
from core.results import CurrentDensityField, IRDropStatistics


def _edge_currents(diff: np.ndarray, resistance: np.ndarray) -> np.ndarray:
    current = np.zeros_like(diff)
    valid = np.isfinite(resistance) & (resistance > 0)
    current[valid] = diff[valid] / resistance[valid]
    return current


def current_density(voltages: np.ndarray, grid: PDNGrid) -> CurrentDensityField:
    """Per-node current through its RIGHT (horizontal) and DOWN (vertical) segment.

    Positive values flow from (r, c) towards (r, c+1) / (r+1, c).
    """
    h_diff = np.zeros_like(voltages, dtype=float)
    v_diff = np.zeros_like(voltages, dtype=float)
    h_diff[:, :-1] = voltages[:, :-1] - voltages[:, 1:]
    v_diff[:-1, :] = voltages[:-1, :] - voltages[1:, :]
    return CurrentDensityField(
        horizontal=_edge_currents(h_diff, grid.right_resistance),
        vertical=_edge_currents(v_diff, grid.down_resistance),
    )


def power_loss(density: CurrentDensityField, grid: PDNGrid) -> np.ndarray:
    """I^2 R in each node's RIGHT and DOWN segment (watts)."""
    right = np.nan_to_num(grid.right_resistance, nan=0.0)
    down = np.nan_to_num(grid.down_resistance, nan=0.0)
    return density.horizontal ** 2 * right + density.vertical ** 2 * down


def edge_power_sum(voltages: np.ndarray, grid: PDNGrid) -> float:
    """Sum of (dV)^2 / R over every segment; equals power_loss(...).sum()."""
    total = 0.0
    for u, v, resistance in grid.iter_edges():
        if resistance > 0:
            total += (voltages[u.row, u.col] - voltages[v.row, v.col]) ** 2 / resistance
    return float(total)


def field_statistics(
    voltages: np.ndarray,
    vdd: float,
    total_power_loss: float,
    total_current: float = 0.0,
) -> IRDropStatistics:
    v_min = float(np.min(voltages))
    v_max = float(np.max(voltages))
    return IRDropStatistics(
        min_voltage=v_min,
        max_voltage=v_max,
        max_ir_drop=max(0.0, vdd - v_min),
        total_power_loss=float(total_power_loss),
        voltage_spread=v_max - v_min,
        total_current=float(total_current),
    )
