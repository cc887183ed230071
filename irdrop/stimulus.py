"""Stimulus generation for multi-source IR-drop scenarios.

Creates per-instance current maps (instance id -> mA) given a total current
and either a fraction or an explicit count of instances to activate. Currents
are split uniformly or with Gaussian weights.

Convention: returned currents are positive numbers representing current DRAWN
from the grid at that instance (sink). Solvers convert to injection sign.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import random
import numpy as np

from core.grid import Instance


@dataclass
class StimulusMeta:
    total_current_ma: float
    selected_ids: List[str]
    distribution: str
    currents_ma: Dict[str, float]


class StimulusGenerator:
    def __init__(self, instances: Sequence[Instance], seed: Optional[int] = None):
        """Stimulus generator.

        Parameters
        ----------
        instances : Sequence[Instance]
            Candidate current-drawing instances.
        seed : int | None
            RNG seed for reproducible selection and weights.
        """
        self.instances = list(instances)
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)

    @staticmethod
    def _filter_area(instances: Sequence[Instance], area: Optional[Tuple[int, int, int, int]]) -> List[Instance]:
        """Keep instances inside (row_min, col_min, row_max, col_max), edges inclusive."""
        if area is None:
            return list(instances)
        row_min, col_min, row_max, col_max = area
        return [
            inst for inst in instances
            if row_min <= inst.row <= row_max and col_min <= inst.col <= col_max
        ]

    def _select(self, percent: Optional[float], count: Optional[int], area) -> List[Instance]:
        candidates = self._filter_area(self.instances, area)
        if not candidates:
            return []
        if count is None and percent is None:
            return candidates
        if count is not None:
            count = max(0, min(count, len(candidates)))
            return self.rng.sample(candidates, count) if count > 0 else []
        p = max(0.0, min(float(percent), 1.0))
        c = int(round(p * len(candidates)))
        if c == 0 and p > 0:
            c = 1
        return self.rng.sample(candidates, c) if c > 0 else []

    def generate(
        self,
        total_current_ma: float,
        count: Optional[int] = None,
        percent: Optional[float] = None,
        distribution: str = "uniform",
        area: Optional[Tuple[int, int, int, int]] = None,
        gaussian_loc: float = 1.0,
        gaussian_scale: float = 1.0,
    ) -> StimulusMeta:
        """Generate one current map.

        total_current_ma: total mA split across the selected instances.
        count / percent: choose instances (count takes precedence); neither
            selects every candidate.
        distribution: 'uniform' or 'gaussian' (|Normal(loc, scale)| weights).
        area: optional inclusive (row_min, col_min, row_max, col_max) filter.
        """
        if total_current_ma < 0:
            raise ValueError("Total current must be non-negative")
        if distribution not in ("uniform", "gaussian"):
            raise ValueError(f"Unknown distribution: {distribution}")

        selected = self._select(percent if count is None else None, count, area)
        if not selected:
            return StimulusMeta(0.0, [], distribution, {})

        if distribution == "gaussian":
            raw = np.abs(self.np_rng.normal(loc=gaussian_loc, scale=gaussian_scale, size=len(selected)))
            s = raw.sum()
            weights = raw / s if s > 0 else np.full(len(selected), 1.0 / len(selected))
        else:
            weights = np.full(len(selected), 1.0 / len(selected))

        currents = {inst.id: float(w * total_current_ma) for inst, w in zip(selected, weights)}
        return StimulusMeta(float(total_current_ma), [inst.id for inst in selected], distribution, currents)
