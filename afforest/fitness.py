"""
Fitness evaluation.

Fitness is the per-capita score of the included trees scaled by 100, or
-inf when the chromosome breaks the cost or area budget.
"""

import math
from typing import Tuple

import numpy as np

from .data_models import Budgets
from .sampling import SamplingSet
from .scoring import ScoreTable

INFEASIBLE = -math.inf
FITNESS_SCALE = 100.0


def chromosome_totals(
    chromosome: np.ndarray,
    sampling_set: SamplingSet,
    table: ScoreTable
) -> Tuple[float, int, int]:
    """
    Sum score, area and cost over the chromosome's true bits.

    Returns:
        Tuple of (raw score, total area, total cost)
    """
    trees = sampling_set.slots[chromosome]
    return (
        float(table.score[trees].sum()),
        int(table.area[trees].sum()),
        int(table.cost[trees].sum()),
    )


def is_feasible(total_area: int, total_cost: int, budgets: Budgets) -> bool:
    return total_cost <= budgets.cost_limit and total_area <= budgets.area_limit


def evaluate_chromosome(
    chromosome: np.ndarray,
    sampling_set: SamplingSet,
    table: ScoreTable,
    budgets: Budgets
) -> float:
    """
    Evaluate one chromosome.

    Args:
        chromosome: Boolean vector over sampling-set slots
        sampling_set: Sampling set of the run
        table: Per-tree score/area/cost arrays
        budgets: Run budgets

    Returns:
        score / target_population * 100, or -inf if either budget is exceeded
    """
    score, area, cost = chromosome_totals(chromosome, sampling_set, table)
    if not is_feasible(area, cost, budgets):
        return INFEASIBLE
    return score / budgets.target_population * FITNESS_SCALE


def evaluate_population(
    population: np.ndarray,
    sampling_set: SamplingSet,
    table: ScoreTable,
    budgets: Budgets
) -> np.ndarray:
    """Evaluate every chromosome in population order."""
    return np.array(
        [evaluate_chromosome(chromosome, sampling_set, table, budgets) for chromosome in population],
        dtype=float
    )
