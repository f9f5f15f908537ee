import logging
import math
from abc import ABC, abstractmethod
from typing import Optional
from .config import CalculatorConfig, DEFAULT_CONFIG
from .converters import parse_number
from .errors import ValidationError
from .models import CircuitType, LoadInput, CableSpec, CalculationResult

logger = logging.getLogger(__name__)

class SizingCalculator(ABC):
    """Common plumbing for the calculators: injected reference tables, limits and input checks."""

    def __init__(self, tables, config: Optional[CalculatorConfig] = None):
        self.tables = tables
        self.config = config or DEFAULT_CONFIG

    @abstractmethod
    def calculate(self, load: LoadInput, spec: CableSpec) -> CalculationResult:
        """Runs one calculation. Raises ValidationError on bad input, never mutates its arguments."""
        pass

    # --- Input checks ---

    @staticmethod
    def read_choice(enum_cls, value, field: str):
        """Accepts an enum member or its raw form value ("ac", "kW", ...)."""
        try:
            return enum_cls(value)
        except ValueError:
            raise ValidationError(f"Invalid {field}: {value!r}", field)

    @staticmethod
    def lookup_choice(enum_cls, value):
        """Like read_choice, but unknown values pass through to the fail-soft table lookups."""
        try:
            return enum_cls(value)
        except ValueError:
            logger.warning("Unknown %s %r, table lookups will use defaults", enum_cls.__name__, value)
            return getattr(value, "value", value)

    def read_voltage(self, load: LoadInput, max_voltage: Optional[float] = None) -> float:
        voltage = parse_number(load.voltage, "voltage")
        if voltage <= 0:
            raise ValidationError("Voltage must be greater than 0 V", "voltage")
        if max_voltage is not None and voltage > max_voltage:
            raise ValidationError(f"Voltage must not exceed {max_voltage:g} V", "voltage")
        return voltage

    def read_power_factor(self, load: LoadInput, circuit_type: CircuitType) -> float:
        if circuit_type == CircuitType.DC:
            return 1.0
        pf = parse_number(load.power_factor, "power_factor")
        if not 0 < pf <= 1:
            raise ValidationError("Power factor must be in (0, 1]", "power_factor")
        return pf

    def read_phases(self, load: LoadInput, circuit_type: CircuitType) -> int:
        if circuit_type == CircuitType.DC:
            return 1
        try:
            phases = int(load.phases)
        except (TypeError, ValueError):
            raise ValidationError(f"Phase count is not a number: {load.phases!r}", "phases")
        if phases not in (1, 3):
            raise ValidationError("Phase count must be 1 or 3", "phases")
        return phases

    def read_ambient_temp(self, spec: CableSpec) -> float:
        temp = parse_number(spec.ambient_temp_c, "ambient_temp_c")
        low, high = self.config.min_ambient_temp_c, self.config.max_ambient_temp_c
        if not low <= temp <= high:
            raise ValidationError(f"Ambient temperature must be between {low:g} and {high:g} C", "ambient_temp_c")
        return temp

    # --- Shared electrical formulas ---

    @staticmethod
    def voltage_drop(current: float, resistance: float, circuit_type: CircuitType, phases: int) -> float:
        # Go and return conductors for DC and single phase, sqrt(3) for balanced three phase
        if circuit_type == CircuitType.AC and phases == 3:
            return math.sqrt(3) * current * resistance
        return 2 * current * resistance

    def drop_within_limit(self, drop_percent: float) -> bool:
        return drop_percent <= self.config.voltage_drop_limit_percent
