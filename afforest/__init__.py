"""
Afforestation Planner

Genetic-algorithm search for the mix of tree species to plant on a site
within an area budget and a cost budget, maximizing a zone-weighted
desirability score per capita.

Modules:
- data_models: Core data structures (TreeRecord, Catalog, Budgets, SearchConfig, ...)
- air_quality: AQI to severity level and priority zone lookup
- scoring: Per-tree score/area/cost arrays
- sampling: Sampling set construction from per-tree capacities
- population: Random chromosome initialization and restart
- fitness: Budget-constrained fitness evaluation
- crossover: Half-population single-point crossover
- engine: Evolution loop (TreePlanter)
- results: Best chromosome decoding and formatting
- io_utils: Catalog JSON loading and result/history export
- orchestration: End-to-end planting runs
- cli: YAML run configuration loading and validation
- visualization_utils: Convergence plots
"""

__version__ = "0.1.0"
__author__ = "Smart Afforestation Team"

from .data_models import (
    Budgets,
    Catalog,
    PlantingResult,
    PriorityZone,
    SearchConfig,
    SearchState,
    TreeRecord,
)
from .engine import TreePlanter
from .errors import (
    CatalogError,
    NoFeasibleSolutionError,
    PlannerError,
    SearchConfigurationError,
)

__all__ = [
    "Budgets",
    "Catalog",
    "PlantingResult",
    "PriorityZone",
    "SearchConfig",
    "SearchState",
    "TreeRecord",
    "TreePlanter",
    "CatalogError",
    "NoFeasibleSolutionError",
    "PlannerError",
    "SearchConfigurationError",
]
