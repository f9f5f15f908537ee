import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# Standard conductor cross-sections (mm2)
STANDARD_CABLE_SIZES = (1, 1.5, 2.5, 4, 6, 10, 16, 25, 35, 50, 70, 95, 120, 150, 185, 240)

# IEC 60898-1 standard breaker ratings (Amps)
STANDARD_BREAKER_RATINGS = (
    6, 10, 16, 20, 25, 32, 40, 50, 63, 80,
    100, 125, 160, 200, 250, 315, 400, 630,
    800, 1000, 1250, 1600, 2000, 2500, 3200, 4000, 5000, 6300,
)

# Simplified IEC 60364-5-52 base ampacity at 30C reference ambient
# Format: {Material: {Insulation: {Size_mm2: Amps}}}
BASE_AMPACITY = {
    "copper": {
        "PVC": {
            1: 15, 1.5: 18, 2.5: 24, 4: 32, 6: 41, 10: 57, 16: 76,
            25: 101, 35: 125, 50: 151, 70: 192, 95: 232, 120: 269,
        },
        "XLPE": {
            1: 18, 1.5: 21, 2.5: 28, 4: 37, 6: 47, 10: 68, 16: 89,
            25: 119, 35: 146, 50: 177, 70: 225, 95: 272, 120: 316,
        },
    },
    "aluminum": {
        "PVC": {
            2.5: 19, 4: 25, 6: 32, 10: 44, 16: 59, 25: 78,
            35: 97, 50: 117, 70: 149, 95: 180, 120: 209,
        },
        "XLPE": {
            2.5: 22, 4: 29, 6: 37, 10: 51, 16: 68, 25: 91,
            35: 112, 50: 136, 70: 173, 95: 209, 120: 243,
        },
    },
}

# Resistivity at 20C (Ohm.mm2/m)
RESISTIVITY = {
    "copper": 0.0172,
    "aluminum": 0.0282,
}

# Fine-banded variant, used by the cable size calculator
CABLE_INSTALLATION_FACTORS = {
    "open": 1.0,      # Free air
    "conduit": 0.8,
    "tray": 0.9,
    "buried": 0.7,    # Direct buried
}

# Keyed by ambient temperature rounded down to a multiple of 5C
FINE_TEMPERATURE_FACTORS = {
    30: 1.0,
    35: 0.94,
    40: 0.87,
    45: 0.79,
    50: 0.71,
    55: 0.61,
    60: 0.5,
}

# Coarse-banded variant, used by the breaker calculator
BREAKER_INSTALLATION_FACTORS = {
    "open": 1.0,
    "conduit": 0.8,
    "underground": 0.7,
    "tray": 0.9,
}

# Format: ((Max_Temp_C, Factor), ...), anything hotter gets COARSE_TEMPERATURE_DEFAULT
COARSE_TEMPERATURE_BANDS = (
    (30, 1.0),
    (40, 0.91),
    (50, 0.82),
)
COARSE_TEMPERATURE_DEFAULT = 0.71


def _key(value) -> str:
    # Enums and raw form strings are both accepted
    return getattr(value, "value", value)


def _freeze(mapping):
    if isinstance(mapping, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in mapping.items()})
    return mapping


@dataclass(frozen=True)
class ReferenceTables:
    """Read-only reference data injected into the calculators."""

    name: str = "IEC 60364-5-52 / IEC 60898-1 (simplified)"
    cable_sizes: Tuple[float, ...] = STANDARD_CABLE_SIZES
    breaker_ratings: Tuple[int, ...] = STANDARD_BREAKER_RATINGS
    base_ampacity: Mapping = field(default_factory=lambda: BASE_AMPACITY)
    resistivity: Mapping = field(default_factory=lambda: RESISTIVITY)
    cable_installation_factors: Mapping = field(default_factory=lambda: CABLE_INSTALLATION_FACTORS)
    fine_temperature_factors: Mapping = field(default_factory=lambda: FINE_TEMPERATURE_FACTORS)
    breaker_installation_factors: Mapping = field(default_factory=lambda: BREAKER_INSTALLATION_FACTORS)
    coarse_temperature_bands: Tuple[Tuple[float, float], ...] = COARSE_TEMPERATURE_BANDS
    coarse_temperature_default: float = COARSE_TEMPERATURE_DEFAULT

    def __post_init__(self):
        object.__setattr__(self, "cable_sizes", tuple(sorted(self.cable_sizes)))
        object.__setattr__(self, "breaker_ratings", tuple(sorted(self.breaker_ratings)))
        object.__setattr__(self, "coarse_temperature_bands",
                           tuple(sorted((float(t), float(f)) for t, f in self.coarse_temperature_bands)))
        for name in ("base_ampacity", "resistivity", "cable_installation_factors",
                     "fine_temperature_factors", "breaker_installation_factors"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    # --- Ladders ---

    def snap_cable_size(self, size: float) -> float:
        """Smallest standard size >= size, clamped to the largest one."""
        for standard in self.cable_sizes:
            if standard >= size:
                return standard
        return self.cable_sizes[-1]

    def next_breaker_rating(self, amps: float):
        """First standard rating >= amps, or None when the ladder runs out."""
        for rating in self.breaker_ratings:
            if rating >= amps:
                return rating
        return None

    # --- Lookups (never raise, unknown keys give conservative defaults) ---

    def find_base_ampacity(self, material, insulation, size: float) -> Optional[float]:
        """Rated current for the size, or None when the tables have no entry."""
        by_size = self.base_ampacity.get(_key(material), {}).get(_key(insulation))
        if by_size is None:
            return None
        for table_size, amps in by_size.items():
            if math.isclose(float(table_size), float(size)):
                return float(amps)
        return None

    def get_base_ampacity(self, material, insulation, size: float) -> float:
        material, insulation = _key(material), _key(insulation)
        if self.base_ampacity.get(material, {}).get(insulation) is None:
            logger.warning("No ampacity table for %s/%s, assuming 0 A", material, insulation)
            return 0.0
        amps = self.find_base_ampacity(material, insulation, size)
        if amps is None:
            logger.warning("No ampacity for %s/%s %s mm2, assuming 0 A", material, insulation, size)
            return 0.0
        return amps

    def get_resistivity(self, material) -> float:
        material = _key(material)
        if material not in self.resistivity:
            logger.warning("Unknown conductor material %r, using copper resistivity", material)
            return float(self.resistivity.get("copper", RESISTIVITY["copper"]))
        return float(self.resistivity[material])

    def get_cable_installation_factor(self, method) -> float:
        return self._factor(self.cable_installation_factors, _key(method), "installation method")

    def get_breaker_installation_factor(self, method) -> float:
        method = _key(method)
        if method == "buried" and method not in self.breaker_installation_factors:
            method = "underground"
        return self._factor(self.breaker_installation_factors, method, "installation method")

    def get_fine_temperature_factor(self, temp_c: float) -> float:
        bucket = int(math.floor(float(temp_c) / 5.0) * 5)
        if bucket in self.fine_temperature_factors:
            return float(self.fine_temperature_factors[bucket])
        if self.fine_temperature_factors and bucket < min(self.fine_temperature_factors):
            # Below reference ambient, no derating
            return 1.0
        return self._factor(self.fine_temperature_factors, bucket, "temperature band")

    def get_coarse_temperature_factor(self, temp_c: float) -> float:
        temp = float(temp_c)
        for max_temp, factor in self.coarse_temperature_bands:
            if temp <= max_temp:
                return factor
        return float(self.coarse_temperature_default)

    @staticmethod
    def _factor(table: Mapping, key, label: str) -> float:
        if key not in table:
            logger.warning("Unknown %s %r, using factor 1.0", label, key)
            return 1.0
        return float(table[key])


DEFAULT_TABLES = ReferenceTables()
