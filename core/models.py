from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

Number = Union[float, int, str, None]

class CircuitType(Enum):
    AC = "ac"
    DC = "dc"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None

class LoadUnit(Enum):
    AMPERE = "A"
    WATT = "W"
    KILOWATT = "kW"
    HORSEPOWER = "HP"

    @classmethod
    def _missing_(cls, value):
        # Form values: "current"/"ampere", "watt", "kw", "hp"
        aliases = {
            "a": cls.AMPERE, "amp": cls.AMPERE, "ampere": cls.AMPERE, "current": cls.AMPERE,
            "w": cls.WATT, "watt": cls.WATT,
            "kw": cls.KILOWATT,
            "hp": cls.HORSEPOWER,
        }
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None

class ConductorMaterial(Enum):
    COPPER = "copper"
    ALUMINUM = "aluminum"

class InsulationType(Enum):
    PVC = "PVC"
    XLPE = "XLPE"

class InstallationMethod(Enum):
    OPEN_AIR = "open"
    CONDUIT = "conduit"
    TRAY = "tray"
    BURIED = "buried"

    @classmethod
    def _missing_(cls, value):
        # Breaker form calls it "underground"
        if isinstance(value, str) and value.strip().lower() == "underground":
            return cls.BURIED
        return None

@dataclass
class LoadInput:
    value: Number  # Amps or power, breaker form also takes "500+1000"
    voltage: Number
    unit: LoadUnit = LoadUnit.AMPERE
    circuit_type: CircuitType = CircuitType.AC
    phases: int = 1  # 1 or 3, ignored for DC
    power_factor: Number = 0.9

@dataclass
class CableSpec:
    material: ConductorMaterial = ConductorMaterial.COPPER
    insulation: InsulationType = InsulationType.PVC
    installation: InstallationMethod = InstallationMethod.CONDUIT
    ambient_temp_c: Number = 30.0
    cross_section_mm2: Number = None  # Breaker check only
    length_m: Number = None  # Breaker check falls back to the assumed run

@dataclass(frozen=True)
class CalculationResult:
    load_current: float
    voltage_drop_volts: float
    voltage_drop_percent: float
    load_voltage: float
    is_valid: bool
    message: str

@dataclass(frozen=True)
class CableSizeResult(CalculationResult):
    cable_size_mm2: float
    search_size_mm2: float
    max_current: float
    search_exhausted: bool = False

CUSTOM_SIZE_REQUIRED = "Custom required"

@dataclass(frozen=True)
class BreakerSizeResult(CalculationResult):
    total_input: float
    total_watts: float
    min_breaker_rating: float
    recommended_breaker: Optional[int]
    cable_capacity: float
    cable_length_m: float

    @property
    def custom_required(self) -> bool:
        return self.recommended_breaker is None

    @property
    def recommended_breaker_label(self) -> str:
        if self.recommended_breaker is None:
            return CUSTOM_SIZE_REQUIRED
        return f"{self.recommended_breaker} A"
