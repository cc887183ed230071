"""Direct nodal solve of a PDN grid for static IR-drop.

Builds a sparse conductance matrix from `PDNGrid.to_networkx()`.

Terminology:
  - Pads: bump cells, fixed at Vdd (default 1.0V)
  - Loads: instance cells drawing current from the grid (sink)

We construct the nodal equation: G * V = I, where
  G: nodal conductance matrix (symmetric positive definite for connected grids)
  I: net current injection vector (pads removed from unknown set)

Pads are Dirichlet boundary conditions. Schur reduction gives the system on
unknown nodes U:
  (G_UU) * V_U = I_U - G_UP * V_P
where P are pad nodes. G_UU is factorized once and reused across stimuli.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla
import networkx as nx

from core.config import SolverConfig
from core.grid import GridPosition, PDNGrid
from core.results import IRDropResult, VoltageField

from .derived import current_density, field_statistics, power_loss
from .relaxation_solver import resolve_currents

logger = logging.getLogger(__name__)


@dataclass
class ReducedSystem:
    """Holds factorization and mapping for solving nodal voltages.

    Attributes:
        node_order: list of all nodes in matrix order
        unknown_nodes: list of nodes solved for (non-pad)
        pad_nodes: list of pad nodes (Dirichlet)
        G_uu: sparse conductance submatrix for unknowns
        G_up: sparse coupling between unknowns and pads
        lu: factorization object (from spla.factorized) for fast solves
        pad_voltage: float voltage applied at pad nodes
        index_unknown: dict mapping node -> index in unknown ordering
    """

    node_order: List[GridPosition]
    unknown_nodes: List[GridPosition]
    pad_nodes: List[GridPosition]
    G_uu: sp.csr_matrix
    G_up: sp.csr_matrix
    lu: Optional[Callable]
    pad_voltage: float
    index_unknown: Dict[GridPosition, int]


class PowerGridModel:
    """Wraps a PDNGrid and builds the reduced sparse system for IR-drop solving."""

    def __init__(self, grid: PDNGrid, vdd: float = 1.0, pad_nodes: Optional[Sequence[GridPosition]] = None):
        self.grid = grid
        self.G = grid.to_networkx()
        self.pad_nodes = list(pad_nodes) if pad_nodes is not None else sorted(grid.bump_positions)
        if not self.pad_nodes:
            raise ValueError("PowerGridModel needs at least one pad (bump) node")
        self.vdd = float(vdd)
        if not self.connected_to_pads():
            raise ValueError("Every grid node must be connected to a pad node")
        self._reduced = self._build_reduced_system()

    def _build_conductance_matrix(self) -> Tuple[sp.csr_matrix, List[GridPosition]]:
        """Return (G_matrix, node_order).

        Each segment (u,v) with resistance R contributes conductance g=1/R.
        """
        nodes = list(self.G.nodes())
        index = {n: i for i, n in enumerate(nodes)}
        data = []
        rows = []
        cols = []
        diag = np.zeros(len(nodes), dtype=float)
        for u, v, d in self.G.edges(data=True):
            R = float(d.get("resistance", 0.0))
            if R <= 0.0:
                continue
            g = 1.0 / R
            iu = index[u]; iv = index[v]
            rows.append(iu); cols.append(iv); data.append(-g)
            rows.append(iv); cols.append(iu); data.append(-g)
            diag[iu] += g
            diag[iv] += g
        for i in range(len(nodes)):
            rows.append(i); cols.append(i); data.append(diag[i])
        G_mat = sp.csr_matrix((data, (rows, cols)), shape=(len(nodes), len(nodes)))
        return G_mat, nodes

    def _build_reduced_system(self) -> ReducedSystem:
        G_mat, nodes = self._build_conductance_matrix()
        pad_set = set(self.pad_nodes)
        unknown_nodes = [n for n in nodes if n not in pad_set]
        pad_nodes = [n for n in nodes if n in pad_set]
        index = {n: i for i, n in enumerate(nodes)}
        u_idx = [index[n] for n in unknown_nodes]
        p_idx = [index[n] for n in pad_nodes]
        G_uu = G_mat[u_idx][:, u_idx].tocsc()
        G_up = G_mat[u_idx][:, p_idx].tocsr()
        lu = spla.factorized(G_uu) if unknown_nodes else None
        logger.debug("Reduced system: %d unknowns, %d pads", len(unknown_nodes), len(pad_nodes))
        return ReducedSystem(
            node_order=nodes,
            unknown_nodes=unknown_nodes,
            pad_nodes=pad_nodes,
            G_uu=G_uu,
            G_up=G_up,
            lu=lu,
            pad_voltage=self.vdd,
            index_unknown={n: i for i, n in enumerate(unknown_nodes)},
        )

    @property
    def reduced(self) -> ReducedSystem:
        return self._reduced

    def solve_voltages(self, currents_ma: Optional[Dict[str, float]] = None) -> np.ndarray:
        """Solve for nodal voltages given instance sink currents.

        currents_ma: mapping instance id -> current drawn (mA). The nodal
            equation uses net injection, so a sink becomes -I at its node.
        Returns (rows, cols) voltage array.
        """
        return self.solve_batch([currents_ma or {}])[0]

    def solve_batch(self, currents_list: Sequence[Dict[str, float]]) -> List[np.ndarray]:
        """Solve multiple stimuli with the shared factorization."""
        rs = self._reduced
        V_p = np.full(len(rs.pad_nodes), rs.pad_voltage, dtype=float)
        base = -(rs.G_up @ V_p)
        solutions: List[np.ndarray] = []
        for cur_map in currents_list:
            V = np.empty(self.grid.shape)
            for n in rs.pad_nodes:
                V[n.row, n.col] = rs.pad_voltage
            if rs.lu is not None:
                I_u = np.zeros(len(rs.unknown_nodes), dtype=float)
                for pos, amps in resolve_currents(self.grid, cur_map).items():
                    if pos in rs.index_unknown:
                        I_u[rs.index_unknown[pos]] += -amps
                V_u = rs.lu(I_u + base)
                for i, n in enumerate(rs.unknown_nodes):
                    V[n.row, n.col] = V_u[i]
            solutions.append(V)
        return solutions

    def connected_to_pads(self) -> bool:
        """True when every grid node shares a component with some pad."""
        pad_set = set(self.pad_nodes)
        conducting = nx.Graph()
        conducting.add_nodes_from(self.G.nodes())
        conducting.add_edges_from(
            (u, v) for u, v, d in self.G.edges(data=True) if d.get("resistance", 0.0) > 0
        )
        return all(pad_set & comp for comp in nx.connected_components(conducting))


class DirectIRDropSolver:
    """Exact reference solve; same result shape as the relaxation solver.

    Example usage:
        result = DirectIRDropSolver(grid).solve({"instance-0": 50.0})
    """

    def __init__(self, grid: PDNGrid, config: Optional[SolverConfig] = None):
        self.grid = grid
        self.config = config or SolverConfig()
        self.model = PowerGridModel(grid, vdd=self.config.vdd)

    def solve(self, currents_ma: Optional[Dict[str, float]] = None) -> IRDropResult:
        V = self.model.solve_voltages(currents_ma)
        density = current_density(V, self.grid)
        loss = power_loss(density, self.grid)
        total_current = sum(resolve_currents(self.grid, currents_ma).values())
        return IRDropResult(
            strategy="direct",
            voltage=VoltageField(V, self.config.vdd),
            statistics=field_statistics(V, self.config.vdd, loss.sum(), total_current=total_current),
            current_density=density,
            power_loss=loss,
            metadata={"currents_ma": dict(currents_ma or {})},
        )
