import math
from typing import Tuple, Optional
from .errors import ValidationError
from .models import CircuitType, LoadUnit

HP_TO_WATTS = 746.0

def parse_number(value, field: str) -> float:
    """
    Reads a numeric form value. Empty values raise ValidationError
    ("missing required field"), anything float() rejects raises "not a number".
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required field: {field}", field)
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Field '{field}' is not a number: {value!r}", field)
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"Field '{field}' is not a finite number", field)
    return number

def parse_sum_expression(value, field: str = "load") -> float:
    """
    Sums a '+' separated list of loads, e.g. "500+1000" -> 1500.0.
    Terms that are not numbers count as 0.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required field: {field}", field)
    if not isinstance(value, str):
        return parse_number(value, field)

    total = 0.0
    for term in value.split("+"):
        try:
            total += parse_number(term, field)
        except ValidationError:
            continue
    return total

def phase_factor(circuit_type: CircuitType, phases: int) -> float:
    if circuit_type == CircuitType.AC and phases == 3:
        return math.sqrt(3)
    return 1.0

def convert_power_unit(val: float, unit: LoadUnit, voltage: float, circuit_type: CircuitType,
                       phases: int, pf: float) -> Tuple[float, Optional[float]]:
    """
    Converts input value to (Watts, Amps_Override).
    Returns (calculated_watts, override_amps)
    """
    # 1. Power Units
    if unit == LoadUnit.WATT: return (val, None)
    if unit == LoadUnit.KILOWATT: return (val * 1000.0, None)
    if unit == LoadUnit.HORSEPOWER: return (val * HP_TO_WATTS, None)

    # 2. Current Units
    if unit == LoadUnit.AMPERE:
        if circuit_type == CircuitType.DC:
            return (val * voltage, val)
        watts = val * voltage * phase_factor(circuit_type, phases) * pf
        return (watts, val)

    raise ValidationError(f"Unsupported load unit: {unit}", "unit")

def calculate_load_current(watts: float, override_amps: Optional[float], voltage: float,
                           circuit_type: CircuitType, phases: int, pf: float) -> float:
    # Current entered directly wins over the derived value
    if override_amps is not None:
        return override_amps
    if circuit_type == CircuitType.DC:
        return watts / voltage
    return watts / (voltage * phase_factor(circuit_type, phases) * pf)

def convert_length_unit(val: float, unit: str) -> float:
    """Returns length in meters."""
    unit = unit.strip().lower()
    if unit in ["m", "meter", "meters", "metre", "metres"]: return val
    if unit in ["ft", "foot", "feet"]: return val * 0.3048
    if unit in ["yd", "yard", "yards"]: return val * 0.9144
    raise ValidationError(f"Unknown length unit: {unit!r}", "length_m")
