"""PDN grid core package.

Grid model, configuration, result records and frame sequences shared by the
path search (`spr`) and the IR-drop solvers (`irdrop`). The session and the
plotting helpers live in `core.session` and `core.plot`.
"""

from .config import (
    DOMAIN_COLORS,
    CurrentInjection,
    GridConfig,
    PathSearchConfig,
    SolverConfig,
)
from .errors import GridCapacityError, InvalidSelectionError
from .grid import (
    VIRTUAL_POSITION,
    Bump,
    Direction,
    Domain,
    GridPosition,
    Instance,
    PDNGrid,
    VirtualNode,
)
from .results import (
    CurrentDensityField,
    IRDropResult,
    IRDropStatistics,
    Path,
    PathStatistics,
    VoltageField,
)
from .frames import PathFrame, interpolate_voltage_fields, path_frames

__all__ = [
    # Config
    "DOMAIN_COLORS",
    "CurrentInjection",
    "GridConfig",
    "PathSearchConfig",
    "SolverConfig",
    # Errors
    "GridCapacityError",
    "InvalidSelectionError",
    # Grid
    "VIRTUAL_POSITION",
    "Bump",
    "Direction",
    "Domain",
    "GridPosition",
    "Instance",
    "PDNGrid",
    "VirtualNode",
    # Results
    "CurrentDensityField",
    "IRDropResult",
    "IRDropStatistics",
    "Path",
    "PathStatistics",
    "VoltageField",
    # Frames
    "PathFrame",
    "interpolate_voltage_fields",
    "path_frames",
]
