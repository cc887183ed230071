"""Iterative static IR-drop solver (Gauss-Seidel relaxation).

Bump cells are Dirichlet nodes pinned at vdd; every other cell is relaxed in
row-major order with the conductance-weighted average of its neighbours:

    V[n] = (sum_e g_e * V_e + I_inj[n]) / sum_e g_e,    g_e = 1 / R_e

With `CurrentInjection.NODAL`, I_inj is minus the instance's sink current
(amps), so a drawing instance pulls its node below the weighted average.
`CurrentInjection.BOUNDARY_ONLY` leaves I_inj at zero and the field is set by
the boundary alone.

Sweeps stop when the largest per-node change of a sweep falls below the
configured tolerance, or at the iteration cap (logged, converged=False).
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from core.config import CurrentInjection, SolverConfig
from core.grid import GridPosition, PDNGrid
from core.results import IRDropResult, VoltageField

from .derived import current_density, field_statistics, power_loss

logger = logging.getLogger(__name__)

# Neighbour (row, col, conductance) lists per node
_Stencil = Dict[Tuple[int, int], List[Tuple[int, int, float]]]


def resolve_currents(grid: PDNGrid, currents_ma: Optional[Dict[str, float]]) -> Dict[GridPosition, float]:
    """Map instance ids to their cell, converting mA to A. Unknown ids are skipped."""
    sinks: Dict[GridPosition, float] = {}
    for instance_id, current_ma in (currents_ma or {}).items():
        try:
            instance = grid.instance_by_id(instance_id)
        except KeyError:
            logger.warning("Unknown instance %s in current map, skipping", instance_id)
            continue
        sinks[instance.position] = sinks.get(instance.position, 0.0) + float(current_ma) / 1000.0
    return sinks


class GaussSeidelIRDropSolver:
    """Relaxation solver over a PDNGrid.

    Example usage:
        solver = GaussSeidelIRDropSolver(grid, SolverConfig())
        result = solver.solve({"instance-0": 50.0}, record_snapshots=True)
        print(result.statistics.max_ir_drop, result.iterations)
    """

    def __init__(self, grid: PDNGrid, config: Optional[SolverConfig] = None):
        self.grid = grid
        self.config = config or SolverConfig()
        self._stencil = self._build_stencil()

    def _build_stencil(self) -> _Stencil:
        stencil: _Stencil = {}
        for pos in self.grid.positions():
            entries = []
            for neighbor, resistance in self.grid.neighbors(pos):
                if resistance > 0:
                    entries.append((neighbor.row, neighbor.col, 1.0 / resistance))
            stencil[(pos.row, pos.col)] = entries
        return stencil

    def solve(
        self,
        currents_ma: Optional[Dict[str, float]] = None,
        boundary: Optional[Iterable[GridPosition]] = None,
        record_snapshots: bool = False,
        snapshot_interval: int = 1,
    ) -> IRDropResult:
        """Relax the grid to a steady-state voltage field.

        Args:
            currents_ma: instance id -> sink current in mA
            boundary: Cells pinned at vdd (default: every bump)
            record_snapshots: Keep intermediate fields for playback
            snapshot_interval: Sweeps between recorded fields

        Returns:
            IRDropResult with voltage, current density, power loss and statistics

        Raises:
            ValueError: if snapshot_interval < 1 or a boundary cell lies
                outside the grid
        """
        if snapshot_interval < 1:
            raise ValueError("snapshot_interval must be >= 1")
        cfg = self.config
        rows, cols = self.grid.shape

        fixed = set(boundary) if boundary is not None else self.grid.bump_positions
        outside = sorted(pos for pos in fixed if not self.grid.in_bounds(pos))
        if outside:
            raise ValueError(f"Boundary positions outside the {rows}x{cols} grid: {outside}")
        if not fixed:
            logger.warning("No boundary nodes: field is only defined up to the injected currents")

        sinks = resolve_currents(self.grid, currents_ma)
        injection = np.zeros((rows, cols))
        if cfg.injection is CurrentInjection.NODAL:
            for pos, amps in sinks.items():
                injection[pos.row, pos.col] = -amps

        V = np.zeros((rows, cols))
        for pos in fixed:
            V[pos.row, pos.col] = cfg.vdd
        free = [
            (pos.row, pos.col)
            for pos in self.grid.positions()
            if pos not in fixed and self._stencil[(pos.row, pos.col)]
        ]

        snapshots: List[np.ndarray] = []
        converged = False
        max_change = 0.0
        iterations = 0

        for it in range(cfg.max_iterations):
            max_change = 0.0
            for r, c in free:
                num = injection[r, c]
                den = 0.0
                for nr, nc, g in self._stencil[(r, c)]:
                    num += g * V[nr, nc]
                    den += g
                new_v = num / den
                change = abs(new_v - V[r, c])
                if change > max_change:
                    max_change = change
                V[r, c] = new_v
            iterations = it + 1

            if record_snapshots and iterations % snapshot_interval == 0:
                snapshots.append(V.copy())
            if max_change < cfg.tolerance:
                converged = True
                break

        if not converged:
            logger.warning(
                "Relaxation stopped at max_iterations=%d, last max change %.3e",
                cfg.max_iterations, max_change,
            )
        else:
            logger.debug("Relaxation converged in %d sweeps (max change %.3e)", iterations, max_change)

        if record_snapshots and (not snapshots or iterations % snapshot_interval != 0):
            snapshots.append(V.copy())

        density = current_density(V, self.grid)
        loss = power_loss(density, self.grid)
        stats = field_statistics(V, cfg.vdd, loss.sum(), total_current=sum(sinks.values()))
        return IRDropResult(
            strategy="relaxation",
            voltage=VoltageField(V, cfg.vdd),
            statistics=stats,
            current_density=density,
            power_loss=loss,
            iterations=iterations,
            converged=converged,
            final_change=max_change,
            snapshots=snapshots,
            metadata={
                "currents_ma": dict(currents_ma or {}),
                "injection": cfg.injection.value,
                "boundary": sorted(fixed),
            },
        )
