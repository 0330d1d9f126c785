"""
Result extraction and formatting.

Decodes the best chromosome into per-tree counts and recomputes the
aggregate score, area and cost from those counts.
"""

import json
from typing import Any, Optional

import numpy as np

from .data_models import Budgets, Catalog, PlantingResult
from .errors import NoFeasibleSolutionError
from .sampling import SamplingSet
from .scoring import ScoreTable


def extract_result(
    best_chromosome: Optional[np.ndarray],
    sampling_set: SamplingSet,
    table: ScoreTable,
    catalog: Catalog,
    budgets: Budgets
) -> PlantingResult:
    """
    Decode a chromosome into a planting plan.

    Args:
        best_chromosome: Best chromosome of the run, or None if none was feasible
        sampling_set: Sampling set of the run
        table: Per-tree score/area/cost arrays
        catalog: Tree catalog (for display names and the name index)
        budgets: Run budgets (for the per-capita divisor)

    Returns:
        PlantingResult with trees sorted by common name; score is divided by
        target_population but not scaled by 100

    Raises:
        NoFeasibleSolutionError: If best_chromosome is None
    """
    if best_chromosome is None:
        raise NoFeasibleSolutionError(
            "No planting plan satisfies both the area and the cost budget"
        )

    trees: dict[str, int] = {}
    for tree_idx in sampling_set.slots[best_chromosome]:
        name = catalog.records[tree_idx].common_name
        trees[name] = trees.get(name, 0) + 1

    total_score, used_area, used_cost = 0.0, 0, 0
    for name, count in trees.items():
        idx = catalog.index_of(name)
        total_score += float(table.score[idx]) * count
        used_area += int(table.area[idx]) * count
        used_cost += int(table.cost[idx]) * count

    total_score /= budgets.target_population

    return PlantingResult(
        trees=dict(sorted(trees.items())),
        score=total_score,
        area=used_area,
        cost=used_cost,
    )


def result_to_dict(result: PlantingResult) -> dict[str, Any]:
    """
    Convert a result to a JSON-serializable dictionary.
    """
    return {
        "trees": dict(result.trees),
        "score": result.score,
        "area": result.area,
        "cost": result.cost,
        "metadata": dict(result.metadata),
    }


def format_result(result: PlantingResult) -> str:
    """
    Render a result as a tab-indented JSON count map followed by
    Score/Area/Cost lines.
    """
    tree_map = json.dumps(result.trees, indent="\t", sort_keys=True)
    return (
        f"Trees : {tree_map}\n"
        f"Score : {result.score:f}\n"
        f"Area : {result.area}\n"
        f"Cost : {result.cost}"
    )
