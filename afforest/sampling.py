"""
Sampling set construction.

Expands the catalog into a flat list of tree-instance slots, one slot per
instance of a tree that fits within the budgets on its own.
"""

from dataclasses import dataclass

import numpy as np

from .data_models import Budgets
from .errors import SearchConfigurationError
from .scoring import ScoreTable


@dataclass(frozen=True)
class SamplingSet:
    """
    Flat search space.

    Attributes:
        slots: Tree index of each slot (length M)
        counts: Number of slots per tree
        min_count: Smallest per-tree count
        max_count: Largest per-tree count
    """
    slots: np.ndarray
    counts: np.ndarray
    min_count: int
    max_count: int

    def __len__(self) -> int:
        return len(self.slots)


def tree_capacity(cost: int, area: int, budgets: Budgets) -> int:
    """
    Number of instances of one tree that fit in both budgets on their own.

    Raises:
        SearchConfigurationError: If cost or area is not positive
    """
    if cost <= 0 or area <= 0:
        raise SearchConfigurationError(
            f"Tree cost and area must be positive, got cost={cost}, area={area}"
        )
    return min(budgets.cost_limit // cost, budgets.area_limit // area)


def build_sampling_set(table: ScoreTable, budgets: Budgets) -> SamplingSet:
    """
    Build the sampling set for a run.

    Tree i contributes min(cost_limit // cost_i, area_limit // area_i) slots.

    Args:
        table: Per-tree score/area/cost arrays
        budgets: Run budgets

    Returns:
        SamplingSet with slots ordered by tree index

    Raises:
        SearchConfigurationError: If the table is empty, a tree has zero cost
            or area, or no tree fits within the budgets
    """
    if len(table) == 0:
        raise SearchConfigurationError("Cannot build a sampling set from an empty catalog")

    counts = np.zeros(len(table), dtype=np.int64)
    for i in range(len(table)):
        try:
            counts[i] = tree_capacity(int(table.cost[i]), int(table.area[i]), budgets)
        except SearchConfigurationError as e:
            raise SearchConfigurationError(f"Tree {i}: {e}") from e

    slots = np.repeat(np.arange(len(table), dtype=np.int64), counts)
    if len(slots) == 0:
        raise SearchConfigurationError(
            f"No tree fits within area_limit={budgets.area_limit} "
            f"and cost_limit={budgets.cost_limit}"
        )

    slots.flags.writeable = False
    counts.flags.writeable = False

    return SamplingSet(
        slots=slots,
        counts=counts,
        min_count=int(counts.min()),
        max_count=int(counts.max()),
    )
