"""
Orchestration module for the afforestation planner.

Wires AQI classification, the GA search and result export into a single
planting run.
"""

import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import numpy as np

from .air_quality import get_aqi_range
from .data_models import Budgets, Catalog, PlantingResult, SearchConfig, SearchState
from .engine import TreePlanter
from .io_utils import (
    load_catalog,
    save_fitness_history_csv,
    save_result_csv,
    save_result_json,
)
from .results import format_result


def resolve_seed(seed: Optional[int]) -> int:
    """Return seed, or a clock-derived one when seed is None."""
    if seed is None:
        seed = int(time.time() * 1000000) % 2147483647
    return int(seed)


def plan_planting(
    catalog: Catalog,
    aqi: int,
    budgets: Budgets,
    runtime: float,
    config: Optional[SearchConfig] = None,
    should_stop: Optional[Callable[[SearchState], bool]] = None,
    clock: Callable[[], float] = time.time
) -> tuple[TreePlanter, PlantingResult]:
    """
    Run a complete planting search for one site.

    Args:
        catalog: Tree catalog
        aqi: Air quality index of the site
        budgets: Area, cost and target population
        runtime: Search budget in seconds
        config: Search settings
        should_stop: Optional cooperative cancellation check
        clock: Wall-clock source

    Returns:
        Tuple of (planter, result)

    Raises:
        SearchConfigurationError: If the run cannot start
        NoFeasibleSolutionError: If no plan fits both budgets
    """
    config = config or SearchConfig()
    level, zone = get_aqi_range(aqi)

    rng = np.random.default_rng(config.random_seed)
    planter = TreePlanter(catalog, budgets, zone, config=config, rng=rng, clock=clock)
    planter.run_search(runtime, should_stop=should_stop)

    result = planter.get_results()
    result.metadata.update({"aqi": aqi, "level": level})
    return planter, result


def run_planting_mode(run_config: Dict[str, Any]) -> PlantingResult:
    """
    Execute a validated run configuration.

    Algorithm:
        1. Load catalog from run_config['catalog']
        2. Build budgets from run_config['site']
        3. Build SearchConfig from run_config['search'] (seed resolved and printed)
        4. Run the search
        5. Print the result; write JSON/CSV/history (and plot) if output.root is set

    Returns:
        PlantingResult of the run
    """
    print("=" * 70)
    print("AFFORESTATION PLANNING")
    print("=" * 70)

    catalog_config = run_config['catalog']
    print(f"Loading catalog from: {catalog_config['tree_info']}")
    catalog = load_catalog(catalog_config['tree_info'], catalog_config.get('tree_idx'))
    print(f"Tree species: {len(catalog)}")

    site = run_config['site']
    budgets = Budgets(
        area_limit=site['area_limit'],
        cost_limit=site['cost_limit'],
        target_population=site['population'],
    )

    search = dict(run_config.get('search', {}))
    runtime = search.pop('runtime')
    config = SearchConfig(**search)
    config.random_seed = resolve_seed(config.random_seed)
    print(f"Random seed: {config.random_seed}")

    level, zone = get_aqi_range(site['aqi'])
    print(f"AQI {site['aqi']}: {level} -> {zone.label}")
    print(f"Searching for {runtime}s with {config.num_chromosomes} chromosomes...\n")

    planter, result = plan_planting(catalog, site['aqi'], budgets, runtime, config)

    print(format_result(result))
    print(f"\nGenerations: {planter.state.generation} (restarts: {planter.state.restarts})")

    output = run_config.get('output', {})
    if output.get('root'):
        write_outputs(planter, result, output)

    return result


def write_outputs(planter: TreePlanter, result: PlantingResult, output: Dict[str, Any]) -> None:
    """Write result JSON/CSV, fitness history and optional plot under output['root']."""
    root = Path(output['root'])
    name = output.get('name') or f"planting_{int(time.time())}"
    overwrite = output.get('overwrite', False)

    print(f"\nExporting results to: {root}")
    json_path = save_result_json(result, root / f"{name}.json", overwrite=overwrite)
    print(f"  JSON: {json_path}")
    csv_path = save_result_csv(result, planter.catalog, root / f"{name}.csv", overwrite=overwrite)
    print(f"  CSV: {csv_path}")
    history_path = save_fitness_history_csv(
        planter.state.history, root / f"{name}_history.csv", overwrite=overwrite
    )
    print(f"  History: {history_path}")

    if output.get('plot', False):
        from .visualization_utils import plot_fitness_history
        plot_path = plot_fitness_history(planter.state.history, root / f"{name}_plot.png")
        print(f"  Plot: {plot_path}")
