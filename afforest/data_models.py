"""
Data models for the afforestation planner.

Core data structures: tree records and the catalog holding them, priority
zones, run budgets, search settings, the mutable search state and the
final planting result.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import numpy as np

from .errors import CatalogError, SearchConfigurationError


class PriorityZone(Enum):
    """Planting priority tiers; each value is (label, index into zone_scores)."""
    ZONE_I = ("Zone I", 0)
    ZONE_II = ("Zone II", 1)
    ZONE_III = ("Zone III", 2)
    ZONE_IV = ("Zone IV", 3)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def field_index(self) -> int:
        return self.value[1]

    @classmethod
    def from_label(cls, label: str) -> "PriorityZone":
        """
        Look up a zone by its display label (e.g. "Zone III").

        Raises:
            ValueError: If label does not name a zone
        """
        for zone in cls:
            if zone.label == label:
                return zone
        raise ValueError(f"Unknown priority zone: {label!r}")


@dataclass(frozen=True)
class TreeRecord:
    """
    One plantable species.

    Attributes:
        plant_species: Botanical name
        common_name: Display name, also the key of the catalog name index
        life_form: Tree, shrub, ...
        zone_scores: Desirability in Zone I, II, III and IV (in that order)
        canopy_diameter: Canopy diameter in metres
        utility: Utility score
        cost: Cost units per planted instance
        area: Footprint in area units per planted instance
    """
    plant_species: str
    common_name: str
    life_form: str
    zone_scores: tuple[float, float, float, float]
    canopy_diameter: int
    utility: float
    cost: int
    area: int

    def zone_score(self, zone: PriorityZone) -> float:
        return self.zone_scores[zone.field_index]


@dataclass(frozen=True)
class Catalog:
    """
    Immutable tree catalog: ordered records plus a common name -> index table.

    The index must cover every record exactly once and agree with the
    position of each record.
    """
    records: tuple[TreeRecord, ...]
    name_index: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        """Validate catalog."""
        if not self.records:
            raise CatalogError("Catalog must contain at least one tree record")

        seen = set()
        duplicates = []
        for record in self.records:
            if record.common_name in seen and record.common_name not in duplicates:
                duplicates.append(record.common_name)
            seen.add(record.common_name)
        if duplicates:
            raise CatalogError(f"Duplicate tree names in catalog: {', '.join(duplicates)}")

        if not self.name_index:
            # Build the index from the records when none is supplied
            object.__setattr__(
                self, "name_index",
                {record.common_name: i for i, record in enumerate(self.records)}
            )

        for name, idx in self.name_index.items():
            if not 0 <= idx < len(self.records):
                raise CatalogError(f"Index {idx} for {name!r} is out of range")
            if self.records[idx].common_name != name:
                raise CatalogError(
                    f"Index mismatch: {name!r} maps to {idx}, "
                    f"but record {idx} is {self.records[idx].common_name!r}"
                )

        missing = [r.common_name for r in self.records if r.common_name not in self.name_index]
        if missing:
            raise CatalogError(f"Tree records missing from name index: {', '.join(missing)}")

        if len(self.name_index) != len(self.records):
            raise CatalogError(
                f"Name index has {len(self.name_index)} entries for {len(self.records)} tree records"
            )

    def __len__(self) -> int:
        return len(self.records)

    def index_of(self, common_name: str) -> int:
        return self.name_index[common_name]


@dataclass(frozen=True)
class Budgets:
    """
    Per-run resource limits.

    target_population is the per-capita divisor of the final score only; it is
    unrelated to the number of chromosomes in the GA population.
    """
    area_limit: int
    cost_limit: int
    target_population: int

    def __post_init__(self):
        for name in ("area_limit", "cost_limit", "target_population"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise SearchConfigurationError(f"'{name}' must be a positive integer, got: {value}")


@dataclass
class SearchConfig:
    """GA search settings."""
    num_chromosomes: int = 20
    max_stagnant_generations: int = 30
    stagnation_threshold: float = 0.5
    zone_weight: float = 20.0
    utility_weight: float = 5.0
    clock_resolution: float = 1.0  # seconds; deadline is polled once per generation
    report_every: int = 1000
    verbose: bool = False
    random_seed: Optional[int] = None

    def validate(self) -> None:
        """
        Check search settings before a run.

        Raises:
            SearchConfigurationError: If any setting is out of range
        """
        if self.num_chromosomes < 2:
            raise SearchConfigurationError(
                f"'num_chromosomes' must be at least 2, got: {self.num_chromosomes}"
            )
        if self.max_stagnant_generations <= 0:
            raise SearchConfigurationError(
                f"'max_stagnant_generations' must be positive, got: {self.max_stagnant_generations}"
            )
        if self.stagnation_threshold < 0:
            raise SearchConfigurationError(
                f"'stagnation_threshold' must be non-negative, got: {self.stagnation_threshold}"
            )
        if self.clock_resolution <= 0:
            raise SearchConfigurationError(
                f"'clock_resolution' must be positive, got: {self.clock_resolution}"
            )
        if self.report_every <= 0:
            raise SearchConfigurationError(
                f"'report_every' must be positive, got: {self.report_every}"
            )


@dataclass
class SearchState:
    """Mutable state owned by the evolution loop."""
    best_chromosome: Optional[np.ndarray] = None
    best_fitness: float = -math.inf
    last_generation_best: float = -math.inf
    stagnation_counter: int = 0
    generation: int = 0
    restarts: int = 0
    history: list[float] = field(default_factory=list)

    @property
    def found_feasible(self) -> bool:
        return self.best_chromosome is not None


@dataclass
class PlantingResult:
    """
    Decoded best solution.

    Attributes:
        trees: Common name -> number of instances to plant
        score: Per-capita score (unscaled)
        area: Total footprint used
        cost: Total cost used
        metadata: Run information (zone, level, generations, restarts, ...)
    """
    trees: dict[str, int]
    score: float
    area: int
    cost: int
    metadata: dict[str, Any] = field(default_factory=dict)

    def total_trees(self) -> int:
        return sum(self.trees.values())
