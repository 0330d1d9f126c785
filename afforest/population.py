"""
Chromosome population initialization.

A chromosome is a boolean vector over sampling-set slots. The same random
initialization is used for the first generation and for every restart.
"""

import numpy as np

from .sampling import SamplingSet


def random_chromosome(sampling_set: SamplingSet, rng: np.random.Generator) -> np.ndarray:
    """
    Create one random chromosome.

    Draws k uniformly from [min_count, max_count] and switches on k distinct
    slots chosen uniformly without replacement.

    Args:
        sampling_set: Sampling set defining the chromosome length
        rng: Random number generator

    Returns:
        Boolean array of length len(sampling_set)
    """
    length = len(sampling_set)
    chromosome = np.zeros(length, dtype=bool)
    k = int(rng.integers(sampling_set.min_count, sampling_set.max_count + 1))
    if k > 0:
        chromosome[rng.choice(length, size=k, replace=False)] = True
    return chromosome


def init_population(
    num_chromosomes: int,
    sampling_set: SamplingSet,
    rng: np.random.Generator
) -> np.ndarray:
    """
    Create a fully random population, discarding any previous one.

    Returns:
        Boolean matrix of shape (num_chromosomes, len(sampling_set))
    """
    population = np.zeros((num_chromosomes, len(sampling_set)), dtype=bool)
    for i in range(num_chromosomes):
        population[i] = random_chromosome(sampling_set, rng)
    return population
