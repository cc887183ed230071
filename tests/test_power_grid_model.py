"""Tests for the direct nodal solver and the strategy facade."""

import math
import unittest

import numpy as np

from core.config import SolverConfig
from core.grid import Domain, PDNGrid
from irdrop import IRDropSolver, PowerGridModel, SolverStrategy
from tests.fixtures import create_corner_bump_grid, create_random_resistance_grid, create_two_by_two_grid


class TestPowerGridModel(unittest.TestCase):
    def test_no_load_all_pad_voltage(self):
        grid = create_random_resistance_grid()
        model = PowerGridModel(grid, vdd=1.0)
        V = model.solve_voltages({})
        np.testing.assert_allclose(V, 1.0)

    def test_two_by_two_series_drop(self):
        # Instance node sees the 1 Ohm direct segment in parallel with the 3 Ohm detour
        grid = create_two_by_two_grid()
        V = PowerGridModel(grid).solve_voltages({"instance-0": 100.0})
        r_eq = 1.0 * 3.0 / (1.0 + 3.0)
        self.assertTrue(math.isclose(V[0, 0], 1.0 - 0.1 * r_eq, rel_tol=1e-9))
        self.assertEqual(V[0, 1], 1.0)

    def test_batch_min_voltage_monotonic(self):
        grid = create_random_resistance_grid(seed=5)
        model = PowerGridModel(grid)
        fields = model.solve_batch([{"instance-1": c} for c in (10.0, 20.0, 40.0)])
        mins = [f.min() for f in fields]
        self.assertTrue(mins[0] > mins[1] > mins[2])

    def test_linearity(self):
        grid = create_random_resistance_grid(seed=8)
        model = PowerGridModel(grid)
        a = 1.0 - model.solve_voltages({"instance-0": 20.0})
        b = 1.0 - model.solve_voltages({"instance-1": 30.0})
        both = 1.0 - model.solve_voltages({"instance-0": 20.0, "instance-1": 30.0})
        np.testing.assert_allclose(both, a + b, atol=1e-12)

    def test_requires_pad(self):
        grid = PDNGrid.uniform(3, 3, 0.1)
        grid.add_domain(Domain(id=0, name="Domain A"))
        with self.assertRaises(ValueError):
            PowerGridModel(grid)

    def test_custom_vdd(self):
        grid = create_corner_bump_grid()
        model = PowerGridModel(grid, vdd=0.8)
        self.assertAlmostEqual(model.reduced.pad_voltage, 0.8)
        self.assertEqual(len(model.reduced.pad_nodes), 4)
        self.assertEqual(len(model.reduced.unknown_nodes), 5)
        np.testing.assert_allclose(model.solve_voltages(), 0.8)


class TestIRDropSolverFacade(unittest.TestCase):
    def setUp(self):
        self.grid = create_corner_bump_grid()
        self.solver = IRDropSolver(self.grid, SolverConfig())

    def test_strategies(self):
        for strategy in SolverStrategy:
            result = self.solver.solve({"instance-0": 50.0}, strategy)
            self.assertEqual(result.strategy, strategy.value)
            self.assertEqual(result.voltage.shape, (3, 3))

    def test_strategy_by_name(self):
        result = self.solver.solve({"instance-0": 50.0}, "direct")
        self.assertEqual(result.strategy, "direct")
        self.assertIsNotNone(result.current_density)

    def test_manhattan_has_no_density(self):
        result = self.solver.solve({"instance-0": 50.0}, SolverStrategy.MANHATTAN)
        self.assertIsNone(result.current_density)
        self.assertIsNone(result.power_loss)

    def test_manhattan_single_entry_superposed(self):
        result = self.solver.solve({"instance-0": 100.0}, SolverStrategy.MANHATTAN)
        expected = self.solver.estimator().estimate_multi({"instance-0": 100.0})
        np.testing.assert_allclose(result.voltage.voltages, expected.voltage.voltages)
        # 0.1 A * 0.1 Ohm * d=2 * 0.5
        self.assertAlmostEqual(result.voltage.at(0, 0), 0.99)

    def test_unknown_instance_skipped_by_every_strategy(self):
        for strategy in SolverStrategy:
            with self.assertLogs(level="WARNING"):
                result = self.solver.solve({"instance-99": 10.0}, strategy)
            np.testing.assert_allclose(result.voltage.voltages, 1.0, atol=1e-5)

    def test_summarize(self):
        result = self.solver.solve({"instance-0": 50.0}, SolverStrategy.DIRECT)
        summary = IRDropSolver.summarize(result)
        self.assertAlmostEqual(summary["min_voltage"], result.statistics.min_voltage)
        self.assertAlmostEqual(summary["max_drop_mv"], result.statistics.max_ir_drop * 1000.0)
        self.assertAlmostEqual(summary["total_current"], 0.05)
        self.assertTrue(summary["converged"])


if __name__ == "__main__":
    unittest.main()
