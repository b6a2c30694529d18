"""Accelerated genetic algorithm.

Random draws follow the same order and shapes as the portable implementation
so seeded runs agree across paths.
"""

from typing import Callable

import numpy as np

from .._dispatch import register_kernel


def _evaluate(objective: Callable, population: np.ndarray) -> np.ndarray:
    return np.array([float(objective(individual.copy())) for individual in population])


@register_kernel("genetic_algorithm")
def genetic_algorithm(objective: Callable, lower: np.ndarray, upper: np.ndarray,
                      pop_size: int, generations: int, mutation_rate: float,
                      crossover_rate: float, tournament_size: int,
                      rng: np.random.Generator) -> np.ndarray:
    dim = lower.size
    span = upper - lower
    offspring = pop_size - 1

    population = lower + rng.random((pop_size, dim)) * span
    best = None
    best_fitness = np.inf

    for _ in range(generations):
        fitness = _evaluate(objective, population)
        idx = int(np.argmin(fitness))
        if fitness[idx] < best_fitness:
            best_fitness = fitness[idx]
            best = population[idx].copy()
        elite = best if best is not None else population[0].copy()

        contenders = rng.integers(0, pop_size, size=(offspring, tournament_size))
        winners = contenders[np.arange(offspring), np.argmin(fitness[contenders], axis=1)]
        next_gen = np.empty_like(population)
        next_gen[0] = elite
        next_gen[1:] = population[winners]

        pairs = offspring // 2
        cross = rng.random(pairs)
        if dim > 1:
            points = rng.integers(1, dim, size=pairs)
            for p in np.flatnonzero(cross < crossover_rate):
                a, b, cut = 1 + 2 * p, 2 + 2 * p, points[p]
                next_gen[[a, b], cut:] = next_gen[[b, a], cut:]

        mutate = rng.random((offspring, dim)) < mutation_rate
        fresh = lower + rng.random((offspring, dim)) * span
        children = next_gen[1:]
        children[mutate] = fresh[mutate]

        population = next_gen

    fitness = _evaluate(objective, population)
    idx = int(np.argmin(fitness))
    if fitness[idx] < best_fitness:
        best = population[idx].copy()
    return best if best is not None else population[0].copy()
