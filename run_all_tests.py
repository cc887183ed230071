#!/usr/bin/env python3
"""Run all unit tests in ./tests."""
import unittest
import sys

# Configure matplotlib before importing test modules
import matplotlib
matplotlib.use('Agg')

loader = unittest.TestLoader()

print("Discovering unit test modules in ./tests directory...")
suite = unittest.TestSuite()

test_modules = [
    'tests.test_grid',
    'tests.test_path_finder',
    'tests.test_relaxation_solver',
    'tests.test_power_grid_model',
    'tests.test_manhattan_estimator',
    'tests.test_stimulus',
    'tests.test_frames',
    'tests.test_session',
    'tests.test_plot',
]

for module in test_modules:
    try:
        suite.addTests(loader.loadTestsFromName(module))
    except Exception as e:
        print(f"Warning: Could not load {module}: {e}")

print(f"\nRunning {suite.countTestCases()} tests...")
print("="*70)

runner = unittest.TextTestRunner(verbosity=1)
result = runner.run(suite)

print("\n" + "="*70)
print("TEST SUMMARY")
print("="*70)
print(f"Tests run: {result.testsRun}")
print(f"Successes: {result.testsRun - len(result.failures) - len(result.errors)}")
print(f"Failures: {len(result.failures)}")
print(f"Errors: {len(result.errors)}")

if result.failures:
    print("\nFAILED TESTS:")
    for test, _ in result.failures:
        print(f"  FAIL {test}")

if result.errors:
    print("\nERRORS:")
    for test, _ in result.errors:
        print(f"  ERROR {test}")

print("="*70)
sys.exit(0 if result.wasSuccessful() else 1)
