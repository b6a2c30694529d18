"""Portable genetic algorithm.

Random draws are taken from the injected generator in exactly the same order
and shapes as the accelerated implementation, so a seeded run produces the
same answer on either path.
"""

import math
from typing import Callable, List, Sequence

import numpy as np

from .._dispatch import register_portable
from ._common import as_floats


def _evaluate(objective: Callable, population: List[List[float]]) -> List[float]:
    return [float(objective(np.array(individual))) for individual in population]


@register_portable("genetic_algorithm")
def genetic_algorithm(objective: Callable, lower: Sequence[float], upper: Sequence[float],
                      pop_size: int, generations: int, mutation_rate: float,
                      crossover_rate: float, tournament_size: int,
                      rng: np.random.Generator) -> List[float]:
    lo = as_floats(lower)
    hi = as_floats(upper)
    dim = len(lo)
    span = [hi[d] - lo[d] for d in range(dim)]
    offspring = pop_size - 1

    population = [[lo[d] + r[d] * span[d] for d in range(dim)]
                  for r in rng.random((pop_size, dim)).tolist()]
    best = None
    best_fitness = math.inf

    for _ in range(generations):
        fitness = _evaluate(objective, population)
        for i, f in enumerate(fitness):
            if f < best_fitness:
                best_fitness = f
                best = list(population[i])
        elite = best if best is not None else list(population[0])

        # tournament selection into slots 1..pop_size-1
        contenders = rng.integers(0, pop_size, size=(offspring, tournament_size)).tolist()
        next_gen = [list(elite)]
        for row in contenders:
            winner = min(row, key=lambda c: fitness[c])
            next_gen.append(list(population[winner]))

        # single-point crossover on consecutive pairs
        pairs = offspring // 2
        cross = rng.random(pairs).tolist()
        points = rng.integers(1, dim, size=pairs).tolist() if dim > 1 else [0] * pairs
        for p in range(pairs):
            if cross[p] < crossover_rate and dim > 1:
                a, b = next_gen[1 + 2 * p], next_gen[2 + 2 * p]
                cut = points[p]
                a[cut:], b[cut:] = b[cut:], a[cut:]

        # per-gene uniform mutation, elite untouched
        mutate = rng.random((offspring, dim)).tolist()
        fresh = rng.random((offspring, dim)).tolist()
        for i in range(offspring):
            genes = next_gen[i + 1]
            for d in range(dim):
                if mutate[i][d] < mutation_rate:
                    genes[d] = lo[d] + fresh[i][d] * span[d]

        population = next_gen

    fitness = _evaluate(objective, population)
    for i, f in enumerate(fitness):
        if f < best_fitness:
            best_fitness = f
            best = list(population[i])
    return best if best is not None else list(population[0])
