#!/usr/bin/env python3
"""
Random PDN grid generator for the SPR explorer and the IR-drop simulator.

Layout rules:
1) rows x cols lattice, every RIGHT/DOWN segment drawn uniformly from the edge range
2) n_domains domains, each with bumps_per_domain bumps (or 2-6 at random)
3) n_instances independent instances placed after all bumps
4) Bumps and instances never share a cell
5) Placement: 50 random draws, then a row-major scan, then give up (grid full)
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import Optional

import numpy as np

from core.config import DOMAIN_COLORS, GridConfig
from core.errors import GridCapacityError
from core.grid import Bump, Domain, GridPosition, Instance, PDNGrid, VirtualNode

logger = logging.getLogger(__name__)


def find_available_position(
    grid: PDNGrid,
    rng: random.Random,
    max_attempts: int = 50,
) -> Optional[GridPosition]:
    """Pick a free cell: random draws first, then the first free cell in row-major order.

    Returns None when every cell is occupied.
    """
    for _ in range(max_attempts):
        pos = GridPosition(rng.randrange(grid.rows), rng.randrange(grid.cols))
        if not grid.is_occupied(pos):
            return pos
    for pos in grid.positions():
        if not grid.is_occupied(pos):
            return pos
    return None


def domain_name(index: int) -> str:
    # Domain A, Domain B, ... Domain Z, Domain 26, ...
    return f"Domain {chr(ord('A') + index)}" if index < 26 else f"Domain {index}"


def generate_pdn_grid(
    config: Optional[GridConfig] = None,
    seed: int | None = None,
    plot: bool = False,
) -> PDNGrid:
    """
    Returns:
      PDNGrid with random segment resistances, domains (bumps + virtual node)
      and instances. Elements that do not fit are skipped and counted in
      `grid.skipped_placements` unless `config.strict_capacity` is set.
      With `plot=True` the layout is also drawn and shown with plt.show().
    """
    config = config or GridConfig()
    rng = random.Random(seed)
    np_rng = np.random.default_rng(seed)

    def uniform(bounds) -> float:
        low, high = bounds
        return low + rng.random() * (high - low)

    def place(element_id: str) -> Optional[GridPosition]:
        pos = find_available_position(grid, rng, config.placement_attempts)
        if pos is None:
            if config.strict_capacity:
                raise GridCapacityError(
                    f"No free cell for {element_id} on {grid.rows}x{grid.cols} grid"
                )
            grid.skipped_placements += 1
            logger.warning("Grid full, skipping %s", element_id)
        return pos

    # ---------- Segment resistances ----------
    low, high = config.edge_resistance_range
    shape = (config.rows, config.cols)
    right = np_rng.uniform(low, high, size=shape)
    down = np_rng.uniform(low, high, size=shape)
    grid = PDNGrid(right, down)

    # ---------- Domains and bumps ----------
    for d in range(config.n_domains):
        domain = grid.add_domain(
            Domain(
                id=d,
                name=domain_name(d),
                color=DOMAIN_COLORS[d % len(DOMAIN_COLORS)],
                virtual_node=VirtualNode(domain_id=d, resistance=config.virtual_node_resistance),
            )
        )
        if config.bumps_per_domain is not None:
            n_bumps = config.bumps_per_domain
        else:
            n_bumps = rng.randint(config.min_bumps, config.max_bumps)
        for b in range(n_bumps):
            bump_id = f"bump-{d}-{b}"
            pos = place(bump_id)
            if pos is None:
                continue
            grid.add_bump(Bump(bump_id, domain.id, pos, uniform(config.bump_resistance_range)))

    # ---------- Instances ----------
    for i in range(config.n_instances):
        instance_id = f"instance-{i}"
        pos = place(instance_id)
        if pos is None:
            continue
        grid.add_instance(Instance(instance_id, pos, uniform(config.instance_resistance_range)))

    logger.debug(
        "Generated %r with %d bumps (%d placements skipped)",
        grid, len(grid.bumps), grid.skipped_placements,
    )

    if plot:
        from core.plot import plot_grid_layout

        plot_grid_layout(grid, show=True)

    return grid


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate a random PDN grid")
    parser.add_argument("--rows", type=int, default=10)
    parser.add_argument("--cols", type=int, default=10)
    parser.add_argument("--domains", type=int, default=3)
    parser.add_argument("--bumps", type=int, default=None, help="Bumps per domain (default: random 2-6)")
    parser.add_argument("--instances", type=int, default=7)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--plot", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    grid = generate_pdn_grid(
        GridConfig(
            rows=args.rows,
            cols=args.cols,
            n_domains=args.domains,
            bumps_per_domain=args.bumps,
            n_instances=args.instances,
        ),
        seed=args.seed,
        plot=args.plot,
    )
    print(f"Grid: {grid.rows}x{grid.cols}, {len(grid.domains)} domains, "
          f"{len(grid.bumps)} bumps, {len(grid.instances)} instances")
    for domain in grid.domains:
        print(f"  {domain.name}: " + ", ".join(f"({b.row},{b.col})" for b in domain.bumps))
