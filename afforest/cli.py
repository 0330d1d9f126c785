"""
Run configuration handling.

Loads and validates YAML run configurations and dispatches them to the
planting workflow.
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict

import yaml

from .data_models import SearchConfig


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


SEARCH_FIELDS = {f.name for f in fields(SearchConfig)}


def load_run_config(config_path: str) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    return config


def _require_positive_int(section: Dict[str, Any], key: str, prefix: str) -> None:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigValidationError(f"'{prefix}.{key}' must be a positive integer, got: {value}")


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate run configuration structure.

    Expected layout:
        catalog: {tree_info: path, tree_idx: path (optional)}
        site: {aqi: int, area_limit: int, cost_limit: int, population: int}
        search: {runtime: seconds, <SearchConfig fields> (optional)}
        output: {root: dir, name: str, overwrite: bool, plot: bool} (optional)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration must be a mapping")

    for section in ['catalog', 'site', 'search']:
        if section not in config:
            raise ConfigValidationError(f"Missing required section: '{section}'")
        if not isinstance(config[section], dict):
            raise ConfigValidationError(f"'{section}' must be a dictionary")

    _validate_catalog(config['catalog'])
    validate_site(config['site'])
    _validate_search(config['search'])

    if 'output' in config and not isinstance(config['output'], dict):
        raise ConfigValidationError("'output' must be a dictionary")


def _validate_catalog(catalog: Dict[str, Any]) -> None:
    if 'tree_info' not in catalog:
        raise ConfigValidationError("Missing required field: 'catalog.tree_info'")

    for key in ['tree_info', 'tree_idx']:
        if key in catalog and not Path(catalog[key]).exists():
            raise ConfigValidationError(f"Catalog file not found: {catalog[key]}")


def validate_site(site: Dict[str, Any]) -> None:
    """
    Validate site parameters (AQI and budgets).

    Raises:
        ConfigValidationError: If a parameter is missing or out of range
    """
    aqi = site.get('aqi')
    if isinstance(aqi, bool) or not isinstance(aqi, int) or aqi < 0:
        raise ConfigValidationError(f"'site.aqi' must be a non-negative integer, got: {aqi}")

    for key in ['area_limit', 'cost_limit', 'population']:
        _require_positive_int(site, key, 'site')


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


def _validate_search(search: Dict[str, Any]) -> None:
    runtime = search.get('runtime')
    if not _is_number(runtime) or runtime <= 0:
        raise ConfigValidationError(f"'search.runtime' must be a positive number, got: {runtime}")

    unknown = set(search) - SEARCH_FIELDS - {'runtime'}
    if unknown:
        raise ConfigValidationError(f"Unknown search settings: {', '.join(sorted(unknown))}")

    for key in ['num_chromosomes', 'max_stagnant_generations', 'report_every']:
        if key in search:
            _require_positive_int(search, key, 'search')

    for key in ['zone_weight', 'utility_weight']:
        if key in search and not _is_number(search[key]):
            raise ConfigValidationError(f"'search.{key}' must be a number, got: {search[key]!r}")

    if 'stagnation_threshold' in search:
        value = search['stagnation_threshold']
        if not _is_number(value) or value < 0:
            raise ConfigValidationError(
                f"'search.stagnation_threshold' must be a non-negative number, got: {value!r}"
            )

    if 'clock_resolution' in search:
        value = search['clock_resolution']
        if not _is_number(value) or value <= 0:
            raise ConfigValidationError(
                f"'search.clock_resolution' must be a positive number, got: {value!r}"
            )

    if 'verbose' in search and not isinstance(search['verbose'], bool):
        raise ConfigValidationError(f"'search.verbose' must be true or false, got: {search['verbose']!r}")

    seed = search.get('random_seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigValidationError(
            f"'search.random_seed' must be a non-negative integer or null, got: {seed!r}"
        )


def run_from_config(config_path: str):
    """
    Load run configuration and execute the planting run.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid
        PlannerError: From the planting run
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    print("Validating configuration...")
    validate_run_config(config)

    from .orchestration import run_planting_mode
    return run_planting_mode(config)
