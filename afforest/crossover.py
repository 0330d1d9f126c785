"""
Half-population single-point crossover.

The population is ranked by ascending fitness. Each of the first X//2
iterations pairs rank i with its mirror rank X//2 - i - 1, cuts both at a
random pivot and writes the two children and the two unchanged parents to
four fixed positions of the next generation. Later writes replace earlier
ones at the same position, so some pairs do not survive.
"""

import numpy as np


def rank_population(population: np.ndarray, fitness: np.ndarray) -> np.ndarray:
    """
    Return a copy of the population sorted by ascending fitness.

    Infeasible chromosomes (-inf) come first; ties keep population order.
    """
    order = np.argsort(fitness, kind="stable")
    return population[order].copy()


def single_point_children(
    parent_a: np.ndarray,
    parent_b: np.ndarray,
    pivot: int
) -> tuple[np.ndarray, np.ndarray]:
    """
    Cut both parents at pivot and swap tails.

    Returns:
        (parent_a[:pivot] + parent_b[pivot:], parent_b[:pivot] + parent_a[pivot:])
    """
    child_a = np.concatenate((parent_a[:pivot], parent_b[pivot:]))
    child_b = np.concatenate((parent_b[:pivot], parent_a[pivot:]))
    return child_a, child_b


def half_population_crossover(
    population: np.ndarray,
    fitness: np.ndarray,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Produce the next generation.

    For i in [0, X//2) with j = X//2 - i - 1 and pivot p drawn from
    [1, M - 2], writes in order:
        next[i] = ranked[i][:p] + ranked[j][p:]
        next[X - i - 1] = ranked[j][:p] + ranked[i][p:]
        next[j] = ranked[i]
        next[X//2 + i] = ranked[j]

    Parents are read from a ranked snapshot; no input row is modified.
    Chromosomes shorter than 3 slots have no valid pivot and are returned
    ranked but otherwise unchanged.

    Args:
        population: Boolean matrix (X, M)
        fitness: Fitness of each row
        rng: Random number generator

    Returns:
        New boolean matrix (X, M)
    """
    ranked = rank_population(population, fitness)
    ranked.flags.writeable = False

    num_chromosomes, length = ranked.shape
    next_generation = ranked.copy()
    if length < 3:
        return next_generation

    half = num_chromosomes // 2
    for i in range(half):
        j = half - i - 1
        pivot = int(rng.integers(1, length - 1))
        child_a, child_b = single_point_children(ranked[i], ranked[j], pivot)

        next_generation[i] = child_a
        next_generation[num_chromosomes - i - 1] = child_b
        next_generation[j] = ranked[i]
        next_generation[half + i] = ranked[j]

    return next_generation
