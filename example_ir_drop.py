"""Static IR-Drop Simulator Example

Generates a single-domain grid (4 bumps, 7 instances), draws current from one
instance and compares the three field strategies: Gauss-Seidel relaxation,
the closed-form Manhattan estimate and the direct nodal solve. Optionally runs
a multi-source scenario from a generated stimulus and saves the maps.
"""

import argparse
import logging

from core.config import CurrentInjection, GridConfig, SolverConfig
from core.frames import interpolate_voltage_fields
from core.plot import plot_current_map, plot_grid_layout, plot_ir_drop_map, plot_voltage_map
from core.session import PDNSession
from irdrop import IRDropSolver, SolverStrategy, StimulusGenerator


def print_summary(label, result):
    s = IRDropSolver.summarize(result)
    line = (
        f"{label:<12} minV={s['min_voltage']:.4f}V maxDrop={s['max_drop_mv']:.1f}mV "
        f"loss={s['total_power_loss'] * 1000:.3f}mW"
    )
    if result.strategy == "relaxation":
        line += f" sweeps={s['iterations']} converged={s['converged']}"
    print(line)


def main():
    parser = argparse.ArgumentParser(
        description="Static IR-Drop Simulator Demonstration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--rows", type=int, default=10, help="Grid rows")
    parser.add_argument("--cols", type=int, default=10, help="Grid columns")
    parser.add_argument("--seed", type=int, default=7, help="Seed for grid generation")
    parser.add_argument("--instance", type=str, default="instance-0", help="Instance drawing current")
    parser.add_argument("--current_ma", type=float, default=50.0, help="Current drawn (mA)")
    parser.add_argument("--injection", type=str, default="nodal", choices=[m.value for m in CurrentInjection],
                        help="Current injection model of the relaxation solver")
    parser.add_argument("--tolerance", type=float, default=1e-6, help="Relaxation tolerance (V)")
    parser.add_argument("--max_iterations", type=int, default=1000, help="Relaxation sweep cap")
    parser.add_argument("--multi_total_ma", type=float, default=0.0,
                        help="If > 0, also run a multi-source scenario with this total current (mA)")
    parser.add_argument("--multi_percent", type=float, default=0.5, help="Fraction of instances to activate")
    parser.add_argument("--distribution", type=str, default="uniform", choices=["uniform", "gaussian"])
    parser.add_argument("--plot", action="store_true", help="Save field maps as PNG files")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s: %(message)s')

    grid_config = GridConfig(rows=args.rows, cols=args.cols, n_domains=1, bumps_per_domain=4)
    solver_config = SolverConfig(
        tolerance=args.tolerance,
        max_iterations=args.max_iterations,
        injection=CurrentInjection(args.injection),
    )
    session = PDNSession(grid_config, solver_config, seed=args.seed)
    grid = session.generate()
    print(f"Grid: {grid.rows}x{grid.cols}, bumps={len(grid.bumps)}, instances={len(grid.instances)}")

    results = {}
    for strategy in SolverStrategy:
        results[strategy] = session.simulate_ir_drop(args.instance, args.current_ma, strategy)
        print_summary(strategy.value, results[strategy])

    relax = results[SolverStrategy.RELAXATION].voltage.voltages
    direct = results[SolverStrategy.DIRECT].voltage.voltages
    print(f"Relaxation vs direct: max |dV| = {abs(relax - direct).max():.2e} V")

    if args.multi_total_ma > 0:
        stim = StimulusGenerator(grid.instances, seed=args.seed).generate(
            args.multi_total_ma, percent=args.multi_percent, distribution=args.distribution
        )
        print(f"Multi-source: {len(stim.selected_ids)} instances, {stim.total_current_ma:.1f} mA total")
        for strategy in (SolverStrategy.MANHATTAN, SolverStrategy.DIRECT):
            print_summary(f"multi/{strategy.value}", session.simulate_multi_source(stim.currents_ma, strategy))

    if args.plot:
        fig, _ = plot_grid_layout(grid, show=False)
        fig.savefig("ir_drop_grid.png", dpi=150)
        for strategy, result in results.items():
            fig, _ = plot_voltage_map(result, show=False)
            fig.savefig(f"ir_drop_voltage_{strategy.value}.png", dpi=150)
        fig, _ = plot_ir_drop_map(results[SolverStrategy.DIRECT], show=False)
        fig.savefig("ir_drop_map_direct.png", dpi=150)
        fig, _ = plot_current_map(grid, results[SolverStrategy.DIRECT], show=False)
        fig.savefig("ir_drop_current_direct.png", dpi=150)
        transition = interpolate_voltage_fields(
            results[SolverStrategy.MANHATTAN].voltage.voltages, direct
        )
        print(f"Saved maps; {len(transition)} transition frames from estimate to exact field")


if __name__ == "__main__":
    main()
