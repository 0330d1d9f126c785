"""
I/O utilities for the afforestation planner.

Handles catalog JSON parsing, result serialization (JSON and CSV) and
fitness history logging.
"""

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Union

from .data_models import Catalog, PlantingResult, TreeRecord
from .errors import CatalogError
from .results import result_to_dict

TREE_INFO_FIELDS = [
    'plantSpecies', 'commonName', 'lifeForm',
    'zoneI', 'zoneII', 'zoneIII', 'zoneIV',
    'canopyDiameter', 'utility', 'cost', 'area',
]


def _read_json(path: Path, description: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{description} file not found: {path}")

    try:
        with open(path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {description} file {path}: {e}")


def parse_tree_record(data: dict[str, Any]) -> TreeRecord:
    """
    Build a TreeRecord from one tree_info.json entry.

    Entry format:
        {"plantSpecies": "Azadirachta indica", "commonName": "Neem",
         "lifeForm": "Tree", "zoneI": 8, "zoneII": 7, "zoneIII": 6,
         "zoneIV": 5, "canopyDiameter": 10, "utility": 9,
         "cost": 30, "area": 25}

    Raises:
        CatalogError: If a field is missing or has the wrong type
    """
    missing = [key for key in TREE_INFO_FIELDS if key not in data]
    if missing:
        raise CatalogError(f"Tree record missing fields: {', '.join(missing)}")

    try:
        return TreeRecord(
            plant_species=str(data['plantSpecies']),
            common_name=str(data['commonName']),
            life_form=str(data['lifeForm']),
            zone_scores=(
                float(data['zoneI']),
                float(data['zoneII']),
                float(data['zoneIII']),
                float(data['zoneIV']),
            ),
            canopy_diameter=int(data['canopyDiameter']),
            utility=float(data['utility']),
            cost=int(data['cost']),
            area=int(data['area']),
        )
    except (TypeError, ValueError) as e:
        raise CatalogError(f"Invalid tree record {data.get('commonName')!r}: {e}")


def load_tree_info(path: Union[str, Path]) -> list[TreeRecord]:
    """
    Load the list of tree records from tree_info.json.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CatalogError: If the content is not a list of valid records
    """
    path = Path(path)
    data = _read_json(path, "Tree info")

    if not isinstance(data, list):
        raise CatalogError(f"Tree info file must contain a JSON list: {path}")

    return [parse_tree_record(entry) for entry in data]


def load_tree_index(path: Union[str, Path]) -> dict[str, int]:
    """
    Load the common name -> index table from tree_idx.json.

    Raises:
        FileNotFoundError: If the file doesn't exist
        CatalogError: If the content is not a mapping of names to integers
    """
    path = Path(path)
    data = _read_json(path, "Tree index")

    if not isinstance(data, dict):
        raise CatalogError(f"Tree index file must contain a JSON object: {path}")

    index = {}
    for name, idx in data.items():
        if isinstance(idx, bool) or not isinstance(idx, int):
            raise CatalogError(f"Tree index for {name!r} must be an integer, got: {idx!r}")
        index[name] = idx
    return index


def load_catalog(
    tree_info_path: Union[str, Path],
    tree_idx_path: Union[str, Path, None] = None
) -> Catalog:
    """
    Load a validated catalog.

    Args:
        tree_info_path: Path to tree_info.json
        tree_idx_path: Optional path to tree_idx.json (built from records if omitted)

    Returns:
        Catalog
    """
    records = load_tree_info(tree_info_path)
    name_index = load_tree_index(tree_idx_path) if tree_idx_path is not None else {}
    return Catalog(records=tuple(records), name_index=name_index)


def _prepare_output(output_path: Union[str, Path], overwrite: bool) -> Path:
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    return output_path


def save_result_json(
    result: PlantingResult,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a planting result as JSON.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    payload = result_to_dict(result)
    payload["saved_at"] = datetime.now().isoformat()

    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2)

    return output_path


def save_result_csv(
    result: PlantingResult,
    catalog: Catalog,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save the planting plan as CSV, one row per selected tree.

    CSV format:
        common_name,plant_species,count,area,cost
        Neem,Azadirachta indica,3,75,90

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['common_name', 'plant_species', 'count', 'area', 'cost'])

        for name, count in result.trees.items():
            record = catalog.records[catalog.index_of(name)]
            writer.writerow([name, record.plant_species, count, record.area * count, record.cost * count])

    return output_path


def save_fitness_history_csv(
    history: list[float],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save the best fitness of every generation as CSV (generation,best_fitness).

    Infeasible generations are written as -inf.
    """
    output_path = _prepare_output(output_path, overwrite)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['generation', 'best_fitness'])
        for generation, fitness in enumerate(history):
            writer.writerow([generation, fitness])

    return output_path
