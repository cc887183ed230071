"""Replayable frame sequences for path and voltage animations.

Frames are plain data; a renderer can step through them at any pace. Path
frames grow the path one hop at a time, voltage frames blend linearly
between two solved fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .grid import GridPosition
from .results import Path


@dataclass
class PathFrame:
    """One step of a path-growing animation.

    Attributes:
        step: Frame index, 0 for the source alone
        positions: Cells revealed so far
        accumulated_resistance: Source resistance plus every hop revealed so far
        segment_resistance: Resistance added by this frame (0 for frame 0)
        reaches_rail: True for the final bump-to-virtual-node hop
    """
    step: int
    positions: List[GridPosition]
    accumulated_resistance: float
    segment_resistance: float = 0.0
    reaches_rail: bool = False

    @property
    def head(self) -> Optional[GridPosition]:
        return self.positions[-1] if self.positions else None


def path_frames(path: Path) -> List[PathFrame]:
    """Frames for `path`: source, one frame per segment, then the rail hop.

    The last frame's accumulated resistance equals `path.total_resistance`.
    """
    if not path.positions:
        return []
    acc = path.source_resistance
    frames = [PathFrame(0, path.positions[:1], acc)]
    for i, seg in enumerate(path.segment_resistances, start=1):
        acc += seg
        frames.append(PathFrame(i, path.positions[: i + 1], acc, seg))
    frames.append(
        PathFrame(
            len(frames),
            list(path.positions),
            path.total_resistance,
            path.terminal_resistance,
            reaches_rail=True,
        )
    )
    return frames


def interpolate_voltage_fields(start: np.ndarray, end: np.ndarray, steps: int = 20) -> List[np.ndarray]:
    """steps + 1 fields blending `start` into `end`; first is `start`, last is `end`.

    Raises:
        ValueError: on shape mismatch or steps < 1
    """
    start = np.asarray(start, dtype=float)
    end = np.asarray(end, dtype=float)
    if start.shape != end.shape:
        raise ValueError(f"Field shapes differ: {start.shape} vs {end.shape}")
    if steps < 1:
        raise ValueError("steps must be >= 1")
    return [start + (end - start) * (k / steps) for k in range(steps + 1)]
