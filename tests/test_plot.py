"""Smoke tests for the matplotlib renderers."""

import importlib
import unittest
from unittest import mock

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from core import plot as plot_module
from core.plot import plot_current_map, plot_grid_layout, plot_ir_drop_map, plot_paths, plot_voltage_map
from generate_pdn_grid import generate_pdn_grid
from irdrop import IRDropSolver, SolverStrategy
from spr import ShortestResistancePathFinder


class TestPlotting(unittest.TestCase):
    def setUp(self):
        self.grid = generate_pdn_grid(seed=21)

    def tearDown(self):
        plt.close("all")

    def test_grid_layout(self):
        fig, ax = plot_grid_layout(self.grid, show=False)
        self.assertIsNotNone(fig)
        self.assertEqual(ax.get_title(), "PDN Grid Network")
        self.assertTrue(ax.yaxis_inverted())

    def test_show_defaults(self):
        with mock.patch.object(plt, "show") as show:
            plot_grid_layout(self.grid)
            self.assertEqual(show.call_count, 1)
            plot_paths(self.grid, [])
            self.assertEqual(show.call_count, 2)

    def test_generate_with_plot_shows_layout(self):
        backend = matplotlib.get_backend()
        with mock.patch.object(plt, "show") as show:
            grid = generate_pdn_grid(seed=1, plot=True)
        show.assert_called_once_with()
        self.assertEqual(matplotlib.get_backend(), backend)
        ax = plt.gcf().axes[0]
        self.assertEqual(ax.get_title(), "PDN Grid Network")
        # One marker per bump and instance across the scatter layers
        points = sum(len(c.get_offsets()) for c in ax.collections[1:])
        self.assertEqual(points, len(grid.bumps) + len(grid.instances))

    def test_plot_module_keeps_backend(self):
        with mock.patch.object(matplotlib, "use") as use:
            importlib.reload(plot_module)
        use.assert_not_called()

    def test_paths(self):
        finder = ShortestResistancePathFinder(self.grid)
        paths = finder.find_alternative_paths(self.grid.instances[0], self.grid.domains[0], k=3)
        fig, ax = plot_paths(self.grid, paths, show=False)
        self.assertEqual(len(ax.lines), len(paths))

    def test_field_maps(self):
        solver = IRDropSolver(self.grid)
        result = solver.solve({self.grid.instances[0].id: 50.0}, SolverStrategy.DIRECT)
        fig1, _ = plot_voltage_map(result, show=False)
        fig2, _ = plot_ir_drop_map(result, show=False)
        fig3, _ = plot_current_map(self.grid, result, show=False)
        self.assertIsNotNone(fig1)
        self.assertIsNotNone(fig2)
        self.assertIsNotNone(fig3)

    def test_current_map_needs_density(self):
        result = IRDropSolver(self.grid).solve({self.grid.instances[0].id: 50.0}, SolverStrategy.MANHATTAN)
        with self.assertRaises(ValueError):
            plot_current_map(self.grid, result, show=False)


if __name__ == "__main__":
    unittest.main()
