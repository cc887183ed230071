"""IR-drop analysis package for PDN grids.

Exports the relaxation solver, the closed-form Manhattan estimator, the direct
nodal reference solver, the strategy facade and stimulus generation.
"""

from .power_grid_model import PowerGridModel, ReducedSystem, DirectIRDropSolver
from .relaxation_solver import GaussSeidelIRDropSolver
from .manhattan_estimator import ManhattanIRDropEstimator
from .stimulus import StimulusGenerator, StimulusMeta
from .solver import IRDropSolver, SolverStrategy

__all__ = [
    "PowerGridModel",
    "ReducedSystem",
    "DirectIRDropSolver",
    "GaussSeidelIRDropSolver",
    "ManhattanIRDropEstimator",
    "StimulusGenerator",
    "StimulusMeta",
    "IRDropSolver",
    "SolverStrategy",
]
