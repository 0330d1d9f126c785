"""
Evolution loop.

TreePlanter owns the population and search state for one run: it evaluates
every generation, tracks the best chromosome, counts stagnant generations,
restarts the population when the search stalls and otherwise applies
crossover, until the wall-clock budget runs out.
"""

import logging
import math
import time
from typing import Callable, Optional

import numpy as np

from .crossover import half_population_crossover
from .data_models import (
    Budgets, Catalog, PlantingResult, PriorityZone, SearchConfig, SearchState
)
from .errors import SearchConfigurationError
from .fitness import evaluate_population
from .population import init_population
from .results import extract_result
from .sampling import build_sampling_set
from .scoring import compute_score_table

logger = logging.getLogger(__name__)


def relative_change(current: float, previous: float) -> float:
    """
    |current - previous| / current with IEEE semantics.

    A zero denominator gives NaN for a zero or undefined numerator and +inf
    otherwise; -inf on both sides gives NaN.
    """
    diff = abs(current - previous)
    if current == 0:
        return math.nan if diff == 0 or math.isnan(diff) else math.inf
    return diff / current


class TreePlanter:
    """
    Genetic-algorithm planting search for one site.

    Args:
        catalog: Tree catalog
        budgets: Area, cost and target population of the site
        zone: Priority zone selecting the zone score of each tree
        config: Search settings (defaults to SearchConfig())
        rng: Random number generator (defaults to one seeded from config)
        clock: Wall-clock source returning seconds

    Raises:
        SearchConfigurationError: If settings, budgets or catalog make the
            search meaningless
    """

    def __init__(
        self,
        catalog: Catalog,
        budgets: Budgets,
        zone: PriorityZone,
        config: Optional[SearchConfig] = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], float] = time.time
    ):
        self.config = config or SearchConfig()
        self.config.validate()

        self.catalog = catalog
        self.budgets = budgets
        self.zone = zone
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)

        self.table = compute_score_table(
            catalog, zone, self.config.zone_weight, self.config.utility_weight
        )
        self.sampling_set = build_sampling_set(self.table, budgets)

        self.population = init_population(self.config.num_chromosomes, self.sampling_set, self.rng)
        self.fitness = np.full(self.config.num_chromosomes, -math.inf)
        self.state = SearchState()

    def evaluate(self) -> np.ndarray:
        """Evaluate the current population."""
        return evaluate_population(self.population, self.sampling_set, self.table, self.budgets)

    def restart(self) -> None:
        """Re-randomize every chromosome, discarding all previous generations."""
        self.population = init_population(self.config.num_chromosomes, self.sampling_set, self.rng)
        self.state.restarts += 1

    def step(self) -> bool:
        """
        Run one generation.

        Returns:
            True if the population was restarted instead of crossed over
        """
        state = self.state
        self.fitness = self.evaluate()

        # First maximum in population order
        best_idx = int(np.argmax(self.fitness))
        current_best = float(self.fitness[best_idx])

        if current_best > state.best_fitness:
            state.best_fitness = current_best
            state.best_chromosome = self.population[best_idx].copy()

        if self.config.verbose and state.generation % self.config.report_every == 0:
            logger.info("Current Best Score at %d: %.2f", state.generation, state.best_fitness)

        rel_err = relative_change(current_best, state.last_generation_best)
        if math.isnan(rel_err) or rel_err <= self.config.stagnation_threshold:
            state.stagnation_counter += 1

        state.last_generation_best = current_best
        state.history.append(current_best)
        state.generation += 1

        if state.stagnation_counter >= self.config.max_stagnant_generations:
            state.stagnation_counter = 0
            self.restart()
            logger.debug("Restarted population at generation %d", state.generation)
            return True

        self.population = half_population_crossover(self.population, self.fitness, self.rng)
        return False

    def _now(self) -> float:
        resolution = self.config.clock_resolution
        return math.floor(self.clock() / resolution) * resolution

    def run_search(
        self,
        runtime: float,
        should_stop: Optional[Callable[[SearchState], bool]] = None
    ) -> SearchState:
        """
        Evolve until the wall-clock budget is spent.

        The deadline is polled once per generation at clock_resolution
        granularity, so budgets finer than the resolution are not honored
        precisely.

        Args:
            runtime: Budget in seconds
            should_stop: Optional cooperative cancellation check

        Returns:
            Final search state

        Raises:
            SearchConfigurationError: If runtime is not positive
        """
        if not runtime > 0:
            raise SearchConfigurationError(f"Runtime must be positive, got: {runtime}")

        deadline = self._now() + runtime
        while self._now() <= deadline:
            if should_stop is not None and should_stop(self.state):
                logger.debug("Search cancelled at generation %d", self.state.generation)
                break
            self.step()

        logger.debug(
            "Search finished after %d generations (%d restarts), best fitness %s",
            self.state.generation, self.state.restarts, self.state.best_fitness
        )
        return self.state

    def get_results(self) -> PlantingResult:
        """
        Decode the best chromosome found so far into a PlantingResult.

        Raises:
            NoFeasibleSolutionError: If no feasible chromosome was ever found
        """
        result = extract_result(
            self.state.best_chromosome,
            self.sampling_set,
            self.table,
            self.catalog,
            self.budgets,
        )
        result.metadata.update({
            "zone": self.zone.label,
            "generations": self.state.generation,
            "restarts": self.state.restarts,
            "best_fitness": self.state.best_fitness,
            "sampling_set_size": len(self.sampling_set),
        })
        return result
