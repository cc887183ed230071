"""Test fixtures: small hand-built PDN grids with known answers.

Factory functions return fresh grids so tests can mutate occupancy freely.
"""

from typing import Tuple

import numpy as np

from core.grid import Bump, Domain, GridPosition, Instance, PDNGrid


def create_two_by_two_grid(bump_resistance: float = 0.0) -> PDNGrid:
    """2x2 grid, every segment 1 Ohm.

    instance-0 (0 Ohm) at (0,0), domain 0 bump (bump_resistance) at (0,1):

        I ---1--- B
        |         |
        1         1
        |         |
        . ---1--- .
    """
    grid = PDNGrid.uniform(2, 2, 1.0)
    grid.add_domain(Domain(id=0, name="Domain A"))
    grid.add_bump(Bump("bump-0-0", 0, GridPosition(0, 1), bump_resistance))
    grid.add_instance(Instance("instance-0", GridPosition(0, 0), 0.0))
    return grid


def create_corner_bump_grid(resistance: float = 0.1) -> PDNGrid:
    """3x3 uniform grid, one domain with a bump in each corner and
    instance-0 in the centre."""
    grid = PDNGrid.uniform(3, 3, resistance)
    grid.add_domain(Domain(id=0, name="Domain A"))
    for b, (r, c) in enumerate([(0, 0), (0, 2), (2, 0), (2, 2)]):
        grid.add_bump(Bump(f"bump-0-{b}", 0, GridPosition(r, c), 0.01))
    grid.add_instance(Instance("instance-0", GridPosition(1, 1), 0.5))
    return grid


def create_corridor_grid() -> Tuple[PDNGrid, Instance, Domain]:
    """5x5 uniform 0.1 Ohm grid with an instance on the left edge and two
    target bumps on the right edge.

    Domain 1 bumps sit in the middle column as obstacles, leaving gaps at the
    top and bottom rows:

        I . X . T
        . . X . .
        . . . . .      <- (2,2) free
        . . X . .
        . . X . T
    """
    grid = PDNGrid.uniform(5, 5, 0.1)
    grid.add_domain(Domain(id=0, name="Domain A"))
    grid.add_domain(Domain(id=1, name="Domain B", color="#FFA500"))
    target = grid.domain_by_id(0)
    grid.add_bump(Bump("bump-0-0", 0, GridPosition(0, 4), 0.02))
    grid.add_bump(Bump("bump-0-1", 0, GridPosition(4, 4), 0.03))
    for b, r in enumerate([0, 1, 3, 4]):
        grid.add_bump(Bump(f"bump-1-{b}", 1, GridPosition(r, 2), 0.01))
    instance = grid.add_instance(Instance("instance-0", GridPosition(0, 0), 0.4))
    return grid, instance, target


def create_random_resistance_grid(rows: int = 6, cols: int = 6, seed: int = 0) -> PDNGrid:
    """Grid with random segment values, two domains and two instances."""
    rng = np.random.default_rng(seed)
    grid = PDNGrid(rng.uniform(0.05, 0.2, (rows, cols)), rng.uniform(0.05, 0.2, (rows, cols)))
    grid.add_domain(Domain(id=0, name="Domain A"))
    grid.add_domain(Domain(id=1, name="Domain B", color="#FFA500"))
    grid.add_bump(Bump("bump-0-0", 0, GridPosition(0, cols - 1), 0.02))
    grid.add_bump(Bump("bump-0-1", 0, GridPosition(rows - 1, cols - 1), 0.04))
    grid.add_bump(Bump("bump-1-0", 1, GridPosition(rows - 1, 0), 0.03))
    grid.add_instance(Instance("instance-0", GridPosition(0, 0), 0.7))
    grid.add_instance(Instance("instance-1", GridPosition(rows // 2, cols // 2), 1.2))
    return grid
