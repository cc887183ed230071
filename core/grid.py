"""Resistive PDN grid model.

A rectangular lattice of nodes joined by resistive segments. Each node stores
only its RIGHT and DOWN segment; LEFT and UP are read from the neighbour:

    (r, c) --right[r, c]-- (r, c+1)
      |
    down[r, c]
      |
    (r+1, c)

Cells may be occupied by domain Bumps or by Instances. Occupancy is kept in a
single position -> element map and exposed through `occupant`, `is_occupied`
(used by placement) and `is_traversable` (used by path search), so both sides
apply the same rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Set, Tuple, Union

import networkx as nx
import numpy as np


class GridPosition(NamedTuple):
    """Grid cell coordinate (row, col)."""
    row: int
    col: int

    def manhattan(self, other: "GridPosition") -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)


# Sentinel position of virtual nodes; never a real cell
VIRTUAL_POSITION = GridPosition(-1, -1)


class Direction(Enum):
    RIGHT = (0, 1)
    LEFT = (0, -1)
    DOWN = (1, 0)
    UP = (-1, 0)

    @property
    def d_row(self) -> int:
        return self.value[0]

    @property
    def d_col(self) -> int:
        return self.value[1]

    def step(self, position: GridPosition) -> GridPosition:
        return GridPosition(position.row + self.d_row, position.col + self.d_col)


@dataclass(frozen=True)
class Bump:
    """Low-impedance contact of a domain at a grid cell."""
    id: str
    domain_id: int
    position: GridPosition
    resistance: float

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col


@dataclass(frozen=True)
class VirtualNode:
    """A domain's internal rail collapsed to one node, reachable from every bump.

    `resistance` is descriptive only: path costs end at the terminal bump and
    the field solvers pin bumps at vdd, so neither reads it.
    """
    domain_id: int
    resistance: float = 0.001

    @property
    def id(self) -> str:
        return f"virtual-{self.domain_id}"

    @property
    def position(self) -> GridPosition:
        return VIRTUAL_POSITION


@dataclass
class Domain:
    """Power domain: ordered bumps plus one virtual rail node.

    Attributes:
        id: Domain identifier
        name: Display name
        color: Display color (hex)
        bumps: Bump terminals in placement order
        virtual_node: Rail node; created from `id` when not given
    """
    id: int
    name: str
    color: str = "#FF6B6B"
    bumps: List[Bump] = field(default_factory=list)
    virtual_node: Optional[VirtualNode] = None

    def __post_init__(self):
        if self.virtual_node is None:
            self.virtual_node = VirtualNode(domain_id=self.id)

    @property
    def bump_positions(self) -> Set[GridPosition]:
        return {b.position for b in self.bumps}

    def bump_at(self, position: GridPosition) -> Optional[Bump]:
        for bump in self.bumps:
            if bump.position == position:
                return bump
        return None


@dataclass(frozen=True)
class Instance:
    """Independent current-drawing node with its own series resistance."""
    id: str
    position: GridPosition
    resistance: float

    @property
    def row(self) -> int:
        return self.position.row

    @property
    def col(self) -> int:
        return self.position.col


# Anything a path can start from
PathSource = Union[Instance, Bump]
GridElement = Union[Instance, Bump]


class PDNGrid:
    """Immutable-resistance PDN lattice with domains and instances.

    Args:
        right_resistance: (rows, cols) array; entry [r, c] is the segment between
            (r, c) and (r, c+1). The last column is ignored (stored as NaN).
        down_resistance: (rows, cols) array; entry [r, c] is the segment between
            (r, c) and (r+1, c). The last row is ignored (stored as NaN).

    Raises:
        ValueError: on shape mismatch or negative resistance
    """

    def __init__(self, right_resistance, down_resistance):
        right = np.array(right_resistance, dtype=float)
        down = np.array(down_resistance, dtype=float)
        if right.ndim != 2 or right.shape != down.shape:
            raise ValueError(
                f"Resistance arrays must share a 2-D shape, got {right.shape} and {down.shape}"
            )
        right[:, -1] = np.nan
        down[-1, :] = np.nan
        if np.any(right[~np.isnan(right)] < 0) or np.any(down[~np.isnan(down)] < 0):
            raise ValueError("Edge resistances must be non-negative")
        right.setflags(write=False)
        down.setflags(write=False)

        self.right_resistance = right
        self.down_resistance = down
        self.rows, self.cols = right.shape
        self.domains: List[Domain] = []
        self.instances: List[Instance] = []
        self._occupants: Dict[GridPosition, GridElement] = {}
        # Elements the generator could not place because the grid was full
        self.skipped_placements = 0

    @classmethod
    def uniform(cls, rows: int, cols: int, resistance: float) -> "PDNGrid":
        """Grid where every segment has the same resistance."""
        values = np.full((rows, cols), float(resistance))
        return cls(values, values.copy())

    def __repr__(self) -> str:
        return (
            f"PDNGrid({self.rows}x{self.cols}, domains={len(self.domains)}, "
            f"instances={len(self.instances)})"
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def num_cells(self) -> int:
        return self.rows * self.cols

    def in_bounds(self, position: GridPosition) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.cols

    def positions(self) -> Iterator[GridPosition]:
        """All cells in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield GridPosition(row, col)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def edge_resistance(self, position: GridPosition, direction: Direction) -> Optional[float]:
        """Resistance of the segment leaving `position` towards `direction`.

        Returns None when the segment would leave the grid.
        """
        neighbor = direction.step(position)
        if not self.in_bounds(position) or not self.in_bounds(neighbor):
            return None
        if direction is Direction.RIGHT:
            value = self.right_resistance[position.row, position.col]
        elif direction is Direction.LEFT:
            value = self.right_resistance[neighbor.row, neighbor.col]
        elif direction is Direction.DOWN:
            value = self.down_resistance[position.row, position.col]
        else:
            value = self.down_resistance[neighbor.row, neighbor.col]
        return float(value)

    def neighbors(self, position: GridPosition) -> Iterator[Tuple[GridPosition, float]]:
        """Yield (neighbor, resistance) for every existing segment at `position`."""
        for direction in Direction:
            resistance = self.edge_resistance(position, direction)
            if resistance is not None:
                yield direction.step(position), resistance

    def segment_resistance(self, a: GridPosition, b: GridPosition) -> float:
        """Resistance between two adjacent cells; 0.0 when not adjacent."""
        for direction in Direction:
            if direction.step(a) == b:
                resistance = self.edge_resistance(a, direction)
                return resistance if resistance is not None else 0.0
        return 0.0

    def iter_edges(self) -> Iterator[Tuple[GridPosition, GridPosition, float]]:
        """Yield every segment once as (u, v, resistance), u being the left/upper node."""
        for pos in self.positions():
            for direction in (Direction.RIGHT, Direction.DOWN):
                resistance = self.edge_resistance(pos, direction)
                if resistance is not None:
                    yield pos, direction.step(pos), resistance

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def occupant(self, position: GridPosition) -> Optional[GridElement]:
        return self._occupants.get(position)

    def is_occupied(self, position: GridPosition) -> bool:
        return position in self._occupants

    def occupied_positions(self) -> Set[GridPosition]:
        return set(self._occupants)

    def is_traversable(
        self,
        position: GridPosition,
        source: Optional[PathSource] = None,
        target_domain: Optional[Domain] = None,
    ) -> bool:
        """Whether a path from `source` to `target_domain` may enter `position`.

        Free cells, bumps of the target domain and the source's own cell are
        traversable. Bumps of other domains and other instances are not.
        """
        if not self.in_bounds(position):
            return False
        occupant = self._occupants.get(position)
        if occupant is None:
            return True
        if source is not None and occupant.position == source.position:
            return True
        if (
            target_domain is not None
            and isinstance(occupant, Bump)
            and occupant.domain_id == target_domain.id
        ):
            return True
        return False

    def _claim(self, element: GridElement) -> None:
        position = element.position
        if not self.in_bounds(position):
            raise ValueError(f"{element.id} at {tuple(position)} is outside the {self.rows}x{self.cols} grid")
        if position in self._occupants:
            raise ValueError(
                f"{element.id} at {tuple(position)} overlaps {self._occupants[position].id}"
            )
        self._occupants[position] = element

    def add_domain(self, domain: Domain) -> Domain:
        """Register a domain and claim the cells of any bumps it already has."""
        if any(d.id == domain.id for d in self.domains):
            raise ValueError(f"Domain {domain.id} already exists")
        for bump in domain.bumps:
            self._claim(bump)
        self.domains.append(domain)
        return domain

    def add_bump(self, bump: Bump) -> Bump:
        """Claim a cell for `bump` and append it to its domain."""
        domain = self.domain_by_id(bump.domain_id)
        self._claim(bump)
        domain.bumps.append(bump)
        return bump

    def add_instance(self, instance: Instance) -> Instance:
        if any(i.id == instance.id for i in self.instances):
            raise ValueError(f"Instance {instance.id} already exists")
        self._claim(instance)
        self.instances.append(instance)
        return instance

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def bumps(self) -> List[Bump]:
        return [b for d in self.domains for b in d.bumps]

    @property
    def bump_positions(self) -> Set[GridPosition]:
        return {b.position for b in self.bumps}

    def domain_by_id(self, domain_id: int) -> Domain:
        for domain in self.domains:
            if domain.id == domain_id:
                return domain
        raise KeyError(f"Domain {domain_id} not in grid")

    def instance_by_id(self, instance_id: str) -> Instance:
        for instance in self.instances:
            if instance.id == instance_id:
                return instance
        raise KeyError(f"Instance {instance_id} not in grid")

    def bump_by_id(self, bump_id: str) -> Bump:
        for bump in self.bumps:
            if bump.id == bump_id:
                return bump
        raise KeyError(f"Bump {bump_id} not in grid")

    def to_networkx(self) -> nx.Graph:
        """Export as nx.Graph keyed by GridPosition.

        Node attributes: 'xy' (col, row), 'kind' ('bump', 'instance' or 'grid').
        Edge attributes: 'resistance', 'orientation' ('H' or 'V').
        """
        G = nx.Graph()
        for pos in self.positions():
            occupant = self._occupants.get(pos)
            if isinstance(occupant, Bump):
                kind = "bump"
            elif isinstance(occupant, Instance):
                kind = "instance"
            else:
                kind = "grid"
            G.add_node(pos, xy=(pos.col, pos.row), kind=kind)
        for u, v, resistance in self.iter_edges():
            G.add_edge(u, v, resistance=resistance, orientation="H" if u.row == v.row else "V")
        return G
