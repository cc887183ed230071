"""Plotting utilities for PDN grids, paths and IR-drop fields.

All figures use (x, y) = (col, row) with the y axis inverted so row 0 is on
top, matching the on-screen grid of the interactive tools. The backend is left
to the caller: functions with show=False only build the figure.
"""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.collections import LineCollection

from .grid import PDNGrid
from .results import IRDropResult, Path

INSTANCE_COLOR = "#2196F3"
PATH_COLORS = ("#E91E63", "#9C27B0", "#00BCD4", "#8BC34A", "#FF9800")


def _edge_segments(grid: PDNGrid):
    segs = []
    vals = []
    for u, v, resistance in grid.iter_edges():
        segs.append([(u.col, u.row), (v.col, v.row)])
        vals.append(resistance)
    return segs, np.array(vals, dtype=float)


def _finish(ax, title: str):
    ax.set_aspect("equal", adjustable="box")
    if not ax.yaxis_inverted():
        ax.invert_yaxis()
    ax.set_title(title)
    ax.set_xlabel("col")
    ax.set_ylabel("row")


def plot_grid_layout(grid: PDNGrid, ax=None, show: bool = True):
    """Draw segments shaded by resistance, bumps as squares in their domain
    color and instances as blue circles.

    Returns (fig, ax).
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 6))
    else:
        fig = ax.figure
    segs, vals = _edge_segments(grid)
    if segs:
        lc = LineCollection(segs, array=vals, cmap="Greys", linewidths=1.5, zorder=1)
        ax.add_collection(lc)
        fig.colorbar(lc, ax=ax, label="Segment resistance (Ohm)", shrink=0.8)
    for domain in grid.domains:
        if not domain.bumps:
            continue
        ax.scatter(
            [b.col for b in domain.bumps], [b.row for b in domain.bumps],
            marker="s", s=120, c=domain.color, edgecolors="k", linewidths=0.8,
            zorder=3, label=domain.name,
        )
    if grid.instances:
        ax.scatter(
            [i.col for i in grid.instances], [i.row for i in grid.instances],
            marker="o", s=90, c=INSTANCE_COLOR, edgecolors="k", linewidths=0.8,
            zorder=3, label="Instances",
        )
    ax.set_xlim(-0.5, grid.cols - 0.5)
    ax.set_ylim(grid.rows - 0.5, -0.5)
    _finish(ax, "PDN Grid Network")
    if grid.domains or grid.instances:
        ax.legend(loc="upper left", bbox_to_anchor=(1.25, 1.0), fontsize="small")
    if show:
        plt.show()
    return fig, ax


def plot_paths(grid: PDNGrid, paths: Sequence[Path], show: bool = True):
    """Grid layout with each path overlaid; the first (best) path is drawn thickest."""
    fig, ax = plot_grid_layout(grid, show=False)
    for i, path in enumerate(paths):
        xs = [p.col for p in path.positions]
        ys = [p.row for p in path.positions]
        ax.plot(
            xs, ys, color=PATH_COLORS[i % len(PATH_COLORS)],
            linewidth=4.0 if i == 0 else 2.0, alpha=0.9 if i == 0 else 0.6, zorder=2,
            label=f"Path {i + 1}: {path.total_resistance:.3f} Ohm",
        )
    if paths:
        ax.legend(loc="upper left", bbox_to_anchor=(1.25, 1.0), fontsize="small")
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_voltage_map(result: IRDropResult, cmap: str = "viridis", vmin: Optional[float] = None,
                     vmax: Optional[float] = None, show: bool = True):
    """Heat map of node voltages.

    Returns (fig, ax).
    """
    V = result.voltage.voltages
    fig, ax = plt.subplots(figsize=(6, 5))
    im = ax.imshow(V, cmap=cmap, vmin=vmin, vmax=vmax, origin="upper")
    ax.set_title(f"Voltage Map ({result.strategy})")
    fig.colorbar(im, ax=ax, label="Voltage (V)")
    ax.set_xlabel("col")
    ax.set_ylabel("row")
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_ir_drop_map(result: IRDropResult, cmap: str = "inferno", show: bool = True):
    """Heat map of IR-drop (vdd - V)."""
    drops = result.voltage.ir_drop
    fig, ax = plt.subplots(figsize=(6, 5))
    im = ax.imshow(drops, cmap=cmap, origin="upper")
    ax.set_title(f"IR-Drop Map ({result.strategy})")
    fig.colorbar(im, ax=ax, label="IR-Drop (V)")
    ax.set_xlabel("col")
    ax.set_ylabel("row")
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


def plot_current_map(
    grid: PDNGrid,
    result: IRDropResult,
    cmap: str = "plasma",
    show: bool = True,
    linewidth_scale: float = 3.0,
    min_current: Optional[float] = None,
):
    """Visualize |I| through every segment, width proportional to magnitude.

    Raises:
        ValueError: if the result carries no current density (closed-form
            estimates) or no segment passes `min_current`
    """
    density = result.current_density
    if density is None:
        raise ValueError(f"{result.strategy} result has no current density to plot")
    segs = []
    vals = []
    for u, v, _ in grid.iter_edges():
        if u.row == v.row:
            I = abs(density.horizontal[u.row, u.col])
        else:
            I = abs(density.vertical[u.row, u.col])
        if min_current is not None and I < min_current:
            continue
        segs.append([(u.col, u.row), (v.col, v.row)])
        vals.append(I)
    if not segs:
        raise ValueError("No edges selected for current plotting (check min_current).")
    vals_arr = np.array(vals, dtype=float)
    vmax = vals_arr.max()
    lw = 0.4 + linewidth_scale * (vals_arr / vmax if vmax > 0 else vals_arr)
    fig, ax = plt.subplots(figsize=(6, 5))
    lc = LineCollection(segs, array=vals_arr, cmap=cmap, linewidths=lw)
    ax.add_collection(lc)
    ax.autoscale()
    _finish(ax, "Current Map")
    fig.colorbar(lc, ax=ax, label="|I| (A)")
    fig.tight_layout()
    if show:
        plt.show()
    return fig, ax


__all__ = ["plot_grid_layout", "plot_paths", "plot_voltage_map", "plot_ir_drop_map", "plot_current_map"]
