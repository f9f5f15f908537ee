"""
Loading and saving of reference tables as JSON, so a revised standard can be
dropped in without touching the calculators.

Document layout (every section optional, missing ones keep the defaults):

    {
      "name": "...",
      "cable_sizes": [1, 1.5, ...],
      "breaker_ratings": [6, 10, ...],
      "base_ampacity": {"copper": {"PVC": {"1.5": 18, ...}}},
      "resistivity": {"copper": 0.0172},
      "cable_installation_factors": {"open": 1.0},
      "fine_temperature_factors": {"30": 1.0},
      "breaker_installation_factors": {"open": 1.0},
      "coarse_temperature_bands": [[30, 1.0], [40, 0.91]],
      "coarse_temperature_default": 0.71
    }
"""

import json
import logging
from dataclasses import replace
from typing import Any, Dict

from standards.iec_tables import ReferenceTables, DEFAULT_TABLES

logger = logging.getLogger(__name__)


def _size_key(key) -> float:
    size = float(key)
    return int(size) if size.is_integer() else size


def _parse_ampacity(raw) -> Dict[str, Dict[str, Dict[float, float]]]:
    table = {}
    for material, by_insulation in raw.items():
        table[material] = {}
        for insulation, by_size in by_insulation.items():
            try:
                table[material][insulation] = {_size_key(k): float(v) for k, v in by_size.items()}
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("base_ampacity: skip %s/%s: %s", material, insulation, e)
    return table


def _parse_factors(raw) -> Dict[str, float]:
    return {str(k): float(v) for k, v in raw.items()}


def _parse_temperature_factors(raw) -> Dict[int, float]:
    return {int(float(k)): float(v) for k, v in raw.items()}


def _parse_bands(raw):
    return tuple((float(t), float(f)) for t, f in raw)


_PARSERS = {
    "name": str,
    "cable_sizes": lambda raw: tuple(_size_key(v) for v in raw),
    "breaker_ratings": lambda raw: tuple(int(v) for v in raw),
    "base_ampacity": _parse_ampacity,
    "resistivity": _parse_factors,
    "cable_installation_factors": _parse_factors,
    "fine_temperature_factors": _parse_temperature_factors,
    "breaker_installation_factors": _parse_factors,
    "coarse_temperature_bands": _parse_bands,
    "coarse_temperature_default": float,
}


def tables_from_dict(data: Dict[str, Any], base: ReferenceTables = DEFAULT_TABLES) -> ReferenceTables:
    """Overrides the sections of `base` found in `data`; malformed sections are skipped."""
    overrides = {}
    for section, parser in _PARSERS.items():
        if section not in data:
            continue
        try:
            value = parser(data[section])
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Reference tables: skip section %s: %s", section, e)
            continue
        if section in ("cable_sizes", "breaker_ratings") and not value:
            logger.warning("Reference tables: section %s is empty, keeping defaults", section)
            continue
        overrides[section] = value

    unknown = set(data) - set(_PARSERS)
    if unknown:
        logger.warning("Reference tables: ignoring unknown sections %s", sorted(unknown))
    return replace(base, **overrides)


def load_tables(path: str, base: ReferenceTables = DEFAULT_TABLES) -> ReferenceTables:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object at top level")
    tables = tables_from_dict(data, base)
    logger.info("Loaded reference tables %r from %s", tables.name, path)
    return tables


def tables_to_dict(tables: ReferenceTables = DEFAULT_TABLES) -> Dict[str, Any]:
    return {
        "name": tables.name,
        "cable_sizes": list(tables.cable_sizes),
        "breaker_ratings": list(tables.breaker_ratings),
        "base_ampacity": {
            material: {
                insulation: {str(size): amps for size, amps in by_size.items()}
                for insulation, by_size in by_insulation.items()
            }
            for material, by_insulation in tables.base_ampacity.items()
        },
        "resistivity": dict(tables.resistivity),
        "cable_installation_factors": dict(tables.cable_installation_factors),
        "fine_temperature_factors": {str(k): v for k, v in tables.fine_temperature_factors.items()},
        "breaker_installation_factors": dict(tables.breaker_installation_factors),
        "coarse_temperature_bands": [list(band) for band in tables.coarse_temperature_bands],
        "coarse_temperature_default": tables.coarse_temperature_default,
    }


def save_tables(path: str, tables: ReferenceTables = DEFAULT_TABLES) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(tables_to_dict(tables), f, indent=2)
