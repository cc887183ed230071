"""Tests for the Gauss-Seidel IR-drop solver and the derived fields."""

import unittest

import numpy as np

from core.config import CurrentInjection, SolverConfig
from core.grid import GridPosition
from irdrop import DirectIRDropSolver, GaussSeidelIRDropSolver
from irdrop.derived import edge_power_sum
from tests.fixtures import create_corner_bump_grid, create_random_resistance_grid


class TestCornerBumpGrid(unittest.TestCase):
    def setUp(self):
        self.grid = create_corner_bump_grid()
        self.solver = GaussSeidelIRDropSolver(self.grid)

    def test_bumps_pinned_at_vdd(self):
        result = self.solver.solve({"instance-0": 100.0})
        for bump in self.grid.bumps:
            self.assertEqual(result.voltage.at(bump.row, bump.col), 1.0)

    def test_centre_strictly_inside_with_load(self):
        result = self.solver.solve({"instance-0": 100.0})
        self.assertTrue(result.converged)
        centre = result.voltage.at(1, 1)
        self.assertGreater(centre, 0.0)
        self.assertLess(centre, 1.0)
        # Centre is the lowest node
        self.assertAlmostEqual(result.statistics.min_voltage, centre)
        self.assertAlmostEqual(result.statistics.max_ir_drop, 1.0 - centre)

    def test_field_symmetric(self):
        result = self.solver.solve({"instance-0": 100.0})
        V = result.voltage.voltages
        edges = [V[0, 1], V[1, 0], V[1, 2], V[2, 1]]
        for v in edges:
            self.assertAlmostEqual(v, edges[0], places=5)
        np.testing.assert_allclose(V, V.T, atol=1e-5)
        np.testing.assert_allclose(V, V[::-1, ::-1], atol=1e-5)

    def test_iteration_count_deterministic(self):
        first = self.solver.solve({"instance-0": 100.0})
        second = GaussSeidelIRDropSolver(self.grid).solve({"instance-0": 100.0})
        self.assertEqual(first.iterations, second.iterations)
        np.testing.assert_array_equal(first.voltage.voltages, second.voltage.voltages)

    def test_boundary_only_relaxes_to_vdd(self):
        solver = GaussSeidelIRDropSolver(self.grid, SolverConfig(injection=CurrentInjection.BOUNDARY_ONLY))
        result = solver.solve({"instance-0": 100.0})
        self.assertTrue(result.converged)
        np.testing.assert_allclose(result.voltage.voltages, 1.0, atol=1e-5)
        self.assertEqual(result.metadata["injection"], "boundary_only")

    def test_matches_direct_solver(self):
        relax = GaussSeidelIRDropSolver(self.grid, SolverConfig(tolerance=1e-12, max_iterations=5000))
        result = relax.solve({"instance-0": 100.0})
        exact = DirectIRDropSolver(self.grid).solve({"instance-0": 100.0})
        np.testing.assert_allclose(result.voltage.voltages, exact.voltage.voltages, atol=1e-9)

    def test_current_flows_towards_load(self):
        result = self.solver.solve({"instance-0": 100.0})
        density = result.current_density
        # Row 0: from bump (0,0) into (0,1); column 0: from (0,0) down to (1,0)
        self.assertGreater(density.horizontal[0, 0], 0.0)
        self.assertGreater(density.vertical[0, 0], 0.0)
        # Missing boundary segments carry nothing
        self.assertEqual(density.horizontal[1, 2], 0.0)
        self.assertEqual(density.vertical[2, 1], 0.0)
        self.assertEqual(set(density.at(0, 0)), {"horizontal", "vertical"})
        self.assertIsNone(density.at(5, 5))

    def test_kirchhoff_at_load(self):
        result = GaussSeidelIRDropSolver(
            self.grid, SolverConfig(tolerance=1e-12, max_iterations=5000)
        ).solve({"instance-0": 100.0})
        d = result.current_density
        inflow = d.horizontal[1, 0] + d.vertical[0, 1] - d.horizontal[1, 1] - d.vertical[1, 1]
        self.assertAlmostEqual(inflow, 0.1, places=6)


class TestRelaxationBehaviour(unittest.TestCase):
    def test_non_convergence_warns(self):
        grid = create_random_resistance_grid()
        solver = GaussSeidelIRDropSolver(grid, SolverConfig(max_iterations=2))
        with self.assertLogs("irdrop.relaxation_solver", level="WARNING"):
            result = solver.solve({"instance-0": 50.0})
        self.assertFalse(result.converged)
        self.assertEqual(result.iterations, 2)
        self.assertGreater(result.final_change, 0.0)

    def test_power_conservation(self):
        grid = create_random_resistance_grid(seed=7)
        result = GaussSeidelIRDropSolver(grid).solve({"instance-0": 40.0, "instance-1": 80.0})
        self.assertAlmostEqual(
            result.statistics.total_power_loss, edge_power_sum(result.voltage.voltages, grid), places=12
        )
        self.assertAlmostEqual(result.power_loss.sum(), result.statistics.total_power_loss)

    def test_agrees_with_direct_solver(self):
        grid = create_random_resistance_grid(seed=3)
        currents = {"instance-0": 30.0, "instance-1": 60.0}
        relax = GaussSeidelIRDropSolver(grid, SolverConfig(tolerance=1e-11, max_iterations=20000))
        result = relax.solve(currents)
        self.assertTrue(result.converged)
        exact = DirectIRDropSolver(grid).solve(currents)
        np.testing.assert_allclose(result.voltage.voltages, exact.voltage.voltages, atol=1e-6)

    def test_snapshots(self):
        grid = create_corner_bump_grid()
        result = GaussSeidelIRDropSolver(grid).solve(
            {"instance-0": 100.0}, record_snapshots=True, snapshot_interval=3
        )
        expected = result.iterations // 3 + (1 if result.iterations % 3 else 0)
        self.assertEqual(len(result.snapshots), expected)
        np.testing.assert_array_equal(result.snapshots[-1], result.voltage.voltages)
        self.assertEqual(GaussSeidelIRDropSolver(grid).solve({"instance-0": 1.0}).snapshots, [])

    def test_unknown_instance_skipped(self):
        grid = create_corner_bump_grid()
        solver = GaussSeidelIRDropSolver(grid)
        with self.assertLogs("irdrop.relaxation_solver", level="WARNING"):
            result = solver.solve({"instance-9": 100.0})
        np.testing.assert_allclose(result.voltage.voltages, 1.0, atol=1e-5)

    def test_explicit_boundary(self):
        grid = create_corner_bump_grid()
        result = GaussSeidelIRDropSolver(grid).solve(
            {"instance-0": 10.0}, boundary=[GridPosition(0, 0)]
        )
        self.assertEqual(result.voltage.at(0, 0), 1.0)
        self.assertLess(result.voltage.at(2, 2), 1.0)

    def test_boundary_outside_grid_rejected(self):
        solver = GaussSeidelIRDropSolver(create_corner_bump_grid())
        # (-1, -1) would otherwise pin the bottom-right cell through negative indexing
        for bad in (GridPosition(-1, -1), GridPosition(3, 0), GridPosition(0, 5)):
            with self.assertRaises(ValueError):
                solver.solve({"instance-0": 10.0}, boundary=[GridPosition(0, 0), bad])

    def test_invalid_snapshot_interval(self):
        with self.assertRaises(ValueError):
            GaussSeidelIRDropSolver(create_corner_bump_grid()).solve(record_snapshots=True, snapshot_interval=0)


if __name__ == "__main__":
    unittest.main()
