"""
Tests for derivative-free optimization.
"""

import pytest
import numpy as np

from scimath import Path, forced, optimize
from scimath.errors import DimensionMismatch, InvalidArgument


def sphere(v):
    return float(np.dot(v, v))


class TestGeneticAlgorithm:
    """Test bounded GA minimisation."""

    @pytest.mark.parametrize("seed", range(10))
    def test_sphere(self, path, seed):
        """Test x^2 + y^2 in [-10, 10]^2 ends with |x|, |y| < 4 for every seed."""
        best = optimize.genetic_algorithm(sphere, [-10, 10, -10, 10], rng=seed)
        assert best.shape == (2,)
        assert np.all(np.abs(best) < 4.0)

    def test_within_bounds(self, path):
        """Test the result respects the box."""
        best = optimize.genetic_algorithm(lambda v: -float(v.sum()), [1, 2, -3, -1, 0, 5],
                                          pop_size=20, generations=30, rng=3)
        assert 1 <= best[0] <= 2
        assert -3 <= best[1] <= -1
        assert 0 <= best[2] <= 5

    def test_seeded_runs_match_across_paths(self):
        """Test both paths return the identical vector for the same seed."""
        bounds = [-5, 5, -5, 5, -5, 5]
        with forced(Path.ACCELERATED):
            fast = optimize.genetic_algorithm(sphere, bounds, pop_size=16, generations=20, rng=99)
        with forced(Path.PORTABLE):
            slow = optimize.genetic_algorithm(sphere, bounds, pop_size=16, generations=20, rng=99)
        np.testing.assert_array_equal(fast, slow)

    def test_generator_is_used(self, path):
        """Test an injected Generator is consumed."""
        gen = np.random.default_rng(5)
        before = gen.bit_generator.state["state"]["state"]
        optimize.genetic_algorithm(sphere, [-1, 1], pop_size=4, generations=2, rng=gen)
        assert gen.bit_generator.state["state"]["state"] != before

    def test_elitism(self, path):
        """Test the returned vector is the best one ever evaluated."""
        calls = []

        def tracked(v):
            value = sphere(v)
            calls.append(value)
            return value

        best = optimize.genetic_algorithm(tracked, [-10, 10, -10, 10], pop_size=10,
                                          generations=5, rng=1)
        assert sphere(best) == pytest.approx(min(calls))

    def test_single_dimension(self, path):
        """Test a one-dimensional search (no crossover point)."""
        best = optimize.genetic_algorithm(lambda v: (v[0] - 2.0) ** 2, [-10, 10], rng=4)
        assert abs(best[0] - 2.0) < 1.0

    def test_zero_generations(self, path):
        """Test the best of the initial population is returned."""
        best = optimize.genetic_algorithm(sphere, [-1, 1, -1, 1], pop_size=5,
                                          generations=0, rng=2)
        assert best.shape == (2,)

    def test_objective_errors_propagate(self, path):
        """Test exceptions from the objective reach the caller."""
        def failing(_v):
            raise RuntimeError("objective failed")

        with pytest.raises(RuntimeError):
            optimize.genetic_algorithm(failing, [-1, 1], generations=1, rng=0)

    @pytest.mark.parametrize("bounds", [[], [1, 2, 3]])
    def test_bad_bounds(self, bounds):
        """Test odd or empty bounds."""
        with pytest.raises(DimensionMismatch):
            optimize.genetic_algorithm(sphere, bounds)

    def test_inverted_bounds(self):
        """Test upper < lower."""
        with pytest.raises(InvalidArgument):
            optimize.genetic_algorithm(sphere, [1, -1])

    @pytest.mark.parametrize("kwargs", [
        {"mutation_rate": 1.5},
        {"crossover_rate": -0.1},
        {"pop_size": 0},
        {"tournament_size": 0},
        {"generations": -1},
    ])
    def test_bad_parameters(self, kwargs):
        """Test out-of-range sizes and rates."""
        with pytest.raises(InvalidArgument):
            optimize.genetic_algorithm(sphere, [-1, 1], **kwargs)


class TestNelderMead:
    """Test the downhill simplex."""

    def test_quadratic_bowl(self):
        """Test convergence to a shifted minimum."""
        best = optimize.nelder_mead(lambda v: (v[0] - 1.0) ** 2 + (v[1] + 2.0) ** 2, [0.0, 0.0])
        np.testing.assert_allclose(best, [1.0, -2.0], atol=1e-3)

    def test_rosenbrock(self):
        """Test a curved valley."""
        def rosenbrock(v):
            return (1.0 - v[0]) ** 2 + 100.0 * (v[1] - v[0] ** 2) ** 2

        best = optimize.nelder_mead(rosenbrock, [-1.2, 1.0], tol=1e-12, max_iterations=5000)
        np.testing.assert_allclose(best, [1.0, 1.0], atol=1e-2)

    def test_zero_iterations(self):
        """Test the best initial vertex is returned."""
        best = optimize.nelder_mead(sphere, [2.0, 0.0], max_iterations=0)
        np.testing.assert_array_equal(best, [2.0, 0.0])

    def test_empty_start(self):
        """Test a zero-dimensional start point."""
        with pytest.raises(DimensionMismatch):
            optimize.nelder_mead(sphere, [])


class TestNumericalGradient:
    """Test central differences."""

    def test_gradient(self):
        """Test d/dx (x^2 + 3y) at (1, 2)."""
        grad = optimize.numerical_gradient(lambda v: v[0] ** 2 + 3.0 * v[1], [1.0, 2.0])
        np.testing.assert_allclose(grad, [2.0, 3.0], atol=1e-6)

    def test_bad_step(self):
        """Test the step must be positive."""
        with pytest.raises(InvalidArgument):
            optimize.numerical_gradient(sphere, [1.0], step=0.0)
