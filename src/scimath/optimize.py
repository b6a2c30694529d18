"""
Derivative-free Optimization.

Objective functions are plain callables ``f(x: np.ndarray) -> float``. They
are invoked synchronously, never retained after the call returns, and any
exception they raise propagates to the caller unchanged.

Implemented Operations:
    - genetic_algorithm: bounded minimisation with an injectable RNG
    - nelder_mead: downhill simplex
    - numerical_gradient: central differences
"""

from __future__ import annotations

from typing import Callable, Union

import numpy as np

from ._dispatch import dispatch
from ._typing import VectorInput, ensure_dimension, ensure_vector
from .errors import DimensionMismatch, InvalidArgument

Objective = Callable[[np.ndarray], float]
RandomSource = Union[None, int, np.random.Generator]


def _generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _split_bounds(bounds: VectorInput):
    flat = ensure_vector(bounds, name="bounds")
    if flat.size == 0 or flat.size % 2:
        raise DimensionMismatch(
            f"bounds must be [min1, max1, min2, max2, ...], got {flat.size} values"
        )
    lower, upper = flat[0::2].copy(), flat[1::2].copy()
    if np.any(upper < lower):
        raise InvalidArgument("Every upper bound must be >= its lower bound")
    return lower, upper


def genetic_algorithm(
    objective: Objective,
    bounds: VectorInput,
    pop_size: int = 50,
    generations: int = 100,
    mutation_rate: float = 0.1,
    *,
    crossover_rate: float = 0.7,
    tournament_size: int = 3,
    rng: RandomSource = None,
) -> np.ndarray:
    """Minimise ``objective`` inside a box with a genetic algorithm.

    Each generation evaluates the population, keeps the best-ever vector in
    slot 0 untouched (elitism), fills the remaining slots by tournament
    selection, applies single-point crossover to consecutive pairs and
    redraws each gene uniformly within its bounds with probability
    ``mutation_rate``.

    Args:
        objective: Function to minimise.
        bounds: Flat ``[min1, max1, min2, max2, ...]``.
        pop_size: Population size.
        generations: Number of generations.
        mutation_rate: Per-gene mutation probability.
        crossover_rate: Probability that a pair exchanges tails.
        tournament_size: Contenders per tournament.
        rng: ``numpy.random.Generator`` or seed; ``None`` draws fresh entropy.

    Returns:
        Best parameter vector found.

    Raises:
        DimensionMismatch: If ``bounds`` has an odd or zero length.
        InvalidArgument: If a size or rate is out of range.

    Examples:
        >>> best = genetic_algorithm(lambda v: float(v @ v), [-10, 10, -10, 10], rng=0)
        >>> bool(np.all(np.abs(best) < 4.0))
        True
    """
    lower, upper = _split_bounds(bounds)
    pop_size = ensure_dimension(pop_size, "pop_size")
    generations = ensure_dimension(generations, "generations", minimum=0)
    tournament_size = ensure_dimension(tournament_size, "tournament_size")
    for name, rate in (("mutation_rate", mutation_rate), ("crossover_rate", crossover_rate)):
        if not 0.0 <= rate <= 1.0:
            raise InvalidArgument(f"{name} must lie in [0, 1], got {rate}")

    best = dispatch(
        "genetic_algorithm", pop_size * lower.size,
        objective, lower, upper, pop_size, generations, float(mutation_rate),
        float(crossover_rate), tournament_size, _generator(rng),
    )
    return np.asarray(best, dtype=np.float64)


def nelder_mead(
    objective: Objective,
    x0: VectorInput,
    tol: float = 1e-8,
    max_iterations: int = 1000,
) -> np.ndarray:
    """Downhill simplex minimisation.

    The initial simplex perturbs each coordinate of ``x0`` by 5% (0.00025
    for zero coordinates). Each iteration reflects the worst vertex through
    the centroid of the others, then expands, contracts or shrinks toward
    the best vertex. Stops when the spread between the best and worst
    objective values falls below ``tol`` or after ``max_iterations``.

    Returns:
        Best vertex found.
    """
    start = ensure_vector(x0, name="x0").copy()
    if start.size == 0:
        raise DimensionMismatch("x0 must have at least one coordinate")
    max_iterations = ensure_dimension(max_iterations, "max_iterations", minimum=0)
    n = start.size

    simplex = [start]
    for i in range(n):
        vertex = start.copy()
        vertex[i] = vertex[i] * 1.05 if vertex[i] != 0.0 else 0.00025
        simplex.append(vertex)
    values = [float(objective(v.copy())) for v in simplex]

    for _ in range(max_iterations):
        order = np.argsort(values, kind="stable")
        simplex = [simplex[i] for i in order]
        values = [values[i] for i in order]
        if abs(values[-1] - values[0]) < tol:
            break

        centroid = np.mean(simplex[:-1], axis=0)
        worst = simplex[-1]

        reflected = centroid + (centroid - worst)
        f_reflected = float(objective(reflected.copy()))
        if f_reflected < values[0]:
            expanded = centroid + 2.0 * (reflected - centroid)
            f_expanded = float(objective(expanded.copy()))
            if f_expanded < f_reflected:
                simplex[-1], values[-1] = expanded, f_expanded
            else:
                simplex[-1], values[-1] = reflected, f_reflected
            continue
        if f_reflected < values[-2]:
            simplex[-1], values[-1] = reflected, f_reflected
            continue

        contracted = centroid + 0.5 * (worst - centroid)
        f_contracted = float(objective(contracted.copy()))
        if f_contracted < values[-1]:
            simplex[-1], values[-1] = contracted, f_contracted
            continue

        best = simplex[0]
        for i in range(1, n + 1):
            simplex[i] = best + 0.5 * (simplex[i] - best)
            values[i] = float(objective(simplex[i].copy()))

    return simplex[int(np.argmin(values))].copy()


def numerical_gradient(objective: Objective, x: VectorInput, step: float = 1e-6) -> np.ndarray:
    """Central-difference gradient ``(f(x + h e_i) - f(x - h e_i)) / 2h``."""
    point = ensure_vector(x, name="x")
    if step <= 0.0:
        raise InvalidArgument(f"step must be positive, got {step}")
    grad = np.empty(point.size)
    for i in range(point.size):
        forward = point.copy()
        backward = point.copy()
        forward[i] += step
        backward[i] -= step
        grad[i] = (float(objective(forward)) - float(objective(backward))) / (2.0 * step)
    return grad


__all__ = [
    "genetic_algorithm",
    "nelder_mead",
    "numerical_gradient",
]
