"""
Scoring model.

Derives one desirability score per tree from the selected zone score,
the utility score and the footprint, alongside the area and cost arrays
used by the rest of the search.
"""

from dataclasses import dataclass

import numpy as np

from .data_models import Catalog, PriorityZone

ZONE_WEIGHT = 20.0
UTILITY_WEIGHT = 5.0


@dataclass(frozen=True)
class ScoreTable:
    """Per-tree arrays indexed by catalog position."""
    score: np.ndarray
    area: np.ndarray
    cost: np.ndarray

    def __len__(self) -> int:
        return len(self.score)


def compute_score_table(
    catalog: Catalog,
    zone: PriorityZone,
    zone_weight: float = ZONE_WEIGHT,
    utility_weight: float = UTILITY_WEIGHT
) -> ScoreTable:
    """
    Compute score, area and cost for every tree in the catalog.

    score[i] = (zone_weight * zone_score[i] + utility_weight * utility[i]) * area[i]

    Args:
        catalog: Tree catalog
        zone: Priority zone selecting the zone score field
        zone_weight: Weight of the zone score
        utility_weight: Weight of the utility score

    Returns:
        ScoreTable with read-only arrays
    """
    area = np.array([record.area for record in catalog.records], dtype=np.int64)
    cost = np.array([record.cost for record in catalog.records], dtype=np.int64)
    zone_scores = np.array([record.zone_score(zone) for record in catalog.records], dtype=float)
    utility = np.array([record.utility for record in catalog.records], dtype=float)

    score = (zone_weight * zone_scores + utility_weight * utility) * area

    for arr in (score, area, cost):
        arr.flags.writeable = False

    return ScoreTable(score=score, area=area, cost=cost)
