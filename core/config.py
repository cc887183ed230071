"""Configuration dataclasses for grid generation, path search and IR-drop solving.

All settings carry the defaults of the interactive tools; override by keyword:

    config = GridConfig(rows=6, cols=6, n_domains=2)
    solver_config = SolverConfig(max_iterations=200)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


DOMAIN_COLORS = ("#FF6B6B", "#FFA500", "#4CAF50")


class CurrentInjection(Enum):
    """How the relaxation solver treats current drawn at instance nodes.

    NODAL: the sink current enters the nodal balance (V = (sum(g*Vn) - I) / sum(g)).
    BOUNDARY_ONLY: no injection term; the field is set by the pinned bumps alone.
    """
    NODAL = "nodal"
    BOUNDARY_ONLY = "boundary_only"


@dataclass(frozen=True)
class GridConfig:
    """Grid generation settings.

    Attributes:
        rows: Number of grid rows
        cols: Number of grid columns
        n_domains: Number of power domains to place
        bumps_per_domain: Fixed bump count per domain; None draws
            uniformly from [min_bumps, max_bumps] for every domain
        min_bumps: Lower bound for random bump count (inclusive)
        max_bumps: Upper bound for random bump count (inclusive)
        n_instances: Number of independent instances
        edge_resistance_range: (low, high) Ohms for grid segments
        bump_resistance_range: (low, high) Ohms for bump contacts
        instance_resistance_range: (low, high) Ohms for instance series resistance
        virtual_node_resistance: Resistance recorded on each domain's virtual
            rail node; display only, not used by path search or the solvers
        placement_attempts: Random draws tried before the row-major scan
        strict_capacity: Raise GridCapacityError instead of skipping elements
            that no longer fit on the grid
    """
    rows: int = 10
    cols: int = 10
    n_domains: int = 3
    bumps_per_domain: Optional[int] = None
    min_bumps: int = 2
    max_bumps: int = 6
    n_instances: int = 7
    edge_resistance_range: Tuple[float, float] = (0.05, 0.20)
    bump_resistance_range: Tuple[float, float] = (0.01, 0.05)
    instance_resistance_range: Tuple[float, float] = (0.3, 2.0)
    virtual_node_resistance: float = 0.001
    placement_attempts: int = 50
    strict_capacity: bool = False

    def __post_init__(self):
        if self.rows < 1 or self.cols < 1:
            raise ValueError(f"Grid must be at least 1x1, got {self.rows}x{self.cols}")
        if self.n_domains < 0 or self.n_instances < 0:
            raise ValueError("Domain and instance counts must be non-negative")
        if self.min_bumps > self.max_bumps:
            raise ValueError(f"min_bumps {self.min_bumps} > max_bumps {self.max_bumps}")
        for name in ("edge_resistance_range", "bump_resistance_range", "instance_resistance_range"):
            low, high = getattr(self, name)
            if low < 0 or high < low:
                raise ValueError(f"{name} must satisfy 0 <= low <= high, got ({low}, {high})")

    @classmethod
    def spr_explorer(cls) -> "GridConfig":
        """10x10 grid, 3 domains with 2-6 bumps each, 7 instances."""
        return cls()

    @classmethod
    def ir_drop_simulator(cls) -> "GridConfig":
        """10x10 grid, a single domain with exactly 4 bumps, 7 instances."""
        return cls(n_domains=1, bumps_per_domain=4)


@dataclass(frozen=True)
class SolverConfig:
    """IR-drop solver settings.

    Attributes:
        vdd: Supply voltage pinned at every bump (V)
        tolerance: Max per-node change in a sweep below which relaxation stops (V)
        max_iterations: Sweep cap for relaxation
        injection: Current injection model for the relaxation solver
        average_resistance: Flat per-hop resistance of the Manhattan estimator (Ohm)
        superposition_scale: Per-source scale factor in multi-source estimation
    """
    vdd: float = 1.0
    tolerance: float = 1e-6
    max_iterations: int = 1000
    injection: CurrentInjection = CurrentInjection.NODAL
    average_resistance: float = 0.1
    superposition_scale: float = 0.5

    def __post_init__(self):
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")


@dataclass(frozen=True)
class PathSearchConfig:
    """Alternative-path search settings.

    Attributes:
        similarity_threshold: Candidate is rejected when its overlap ratio with
            any accepted path exceeds this value
        max_blocked_per_path: Interior cells blocked per accepted path on re-runs
    """
    similarity_threshold: float = 0.7
    max_blocked_per_path: int = 2
