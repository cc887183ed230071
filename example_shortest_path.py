"""Shortest Resistance Path Explorer Example

Generates a 3-domain grid, finds the minimum-resistance path from an instance
(or a bump) to a target domain, then searches for distinct alternative paths
and prints their statistics. Frames of the best path are printed as the
step-by-step accumulation an animation would show.
"""

import argparse
import logging

from core.config import GridConfig, PathSearchConfig
from core.frames import path_frames
from core.plot import plot_paths
from core.session import PDNSession


def main():
    parser = argparse.ArgumentParser(
        description="Shortest Resistance Path Demonstration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--rows", type=int, default=10, help="Grid rows")
    parser.add_argument("--cols", type=int, default=10, help="Grid columns")
    parser.add_argument("--domains", type=int, default=3, help="Number of power domains")
    parser.add_argument("--instances", type=int, default=7, help="Number of instances")
    parser.add_argument("--seed", type=int, default=7, help="Seed for grid generation")
    parser.add_argument("--source", type=str, default="instance-0", help="Instance or bump id")
    parser.add_argument("--target", type=int, default=1, help="Target domain id")
    parser.add_argument("--k", type=int, default=5, help="Maximum number of alternative paths")
    parser.add_argument("--similarity", type=float, default=0.7, help="Max overlap ratio between paths")
    parser.add_argument("--plot", action="store_true", help="Save the paths as spr_paths.png")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s: %(message)s')

    session = PDNSession(
        GridConfig(rows=args.rows, cols=args.cols, n_domains=args.domains, n_instances=args.instances),
        search_config=PathSearchConfig(similarity_threshold=args.similarity),
        seed=args.seed,
    )
    grid = session.generate()
    print(f"Grid: {grid.rows}x{grid.cols}, domains={len(grid.domains)}, instances={len(grid.instances)}")
    for domain in grid.domains:
        print(f"  {domain.name} (id {domain.id}): {len(domain.bumps)} bumps")

    path = session.find_path(args.source, args.target)
    if path is None:
        print(f"No path from {args.source} to domain {args.target}")
        return
    print(f"Best path: {path.node_count} nodes, {path.total_resistance:.4f} Ohm via {path.terminal_bump_id}")
    for frame in path_frames(path):
        head = frame.head
        suffix = " -> rail" if frame.reaches_rail else ""
        print(f"  step {frame.step:2d} ({head.row},{head.col}){suffix}: {frame.accumulated_resistance:.4f} Ohm")

    paths = session.find_alternative_paths(args.source, args.target, k=args.k)
    stats = session.path_statistics()
    print(f"Alternative paths: {stats.path_count} found, "
          f"R min={stats.min_resistance:.4f} max={stats.max_resistance:.4f} avg={stats.avg_resistance:.4f} Ohm")
    for i, p in enumerate(paths):
        print(f"  path {i + 1}: {p.node_count} nodes, {p.total_resistance:.4f} Ohm")

    if args.plot:
        fig, _ = plot_paths(grid, paths, show=False)
        fig.savefig("spr_paths.png", dpi=150)
        print("Saved spr_paths.png")


if __name__ == "__main__":
    main()
