import logging
from typing import Optional
from core.calculator import SizingCalculator
from core.config import CalculatorConfig
from core.converters import parse_number, parse_sum_expression, convert_power_unit, calculate_load_current
from core.errors import ValidationError
from core.models import (
    CircuitType, LoadUnit, ConductorMaterial, InsulationType, InstallationMethod,
    LoadInput, CableSpec, CableSizeResult, BreakerSizeResult,
)
from standards.iec_tables import ReferenceTables, DEFAULT_TABLES

logger = logging.getLogger(__name__)


class CableSizeCalculator(SizingCalculator):
    """
    Minimum standard cross-section meeting the voltage drop limit and the
    ampacity margin (IEC 60364-5-52 simplified, fine-banded corrections).
    """

    def __init__(self, tables: Optional[ReferenceTables] = None, config: Optional[CalculatorConfig] = None):
        super().__init__(tables or DEFAULT_TABLES, config)

    def derating(self, spec: CableSpec, ambient_temp: float) -> float:
        f_method = self.tables.get_cable_installation_factor(spec.installation)
        f_temp = self.tables.get_fine_temperature_factor(ambient_temp)
        return f_method * f_temp

    def calculate(self, load: LoadInput, spec: CableSpec) -> CableSizeResult:
        cfg = self.config

        # Presence first, in form order
        voltage = self.read_voltage(load)
        length = parse_number(spec.length_m, "length_m")
        value = parse_number(load.value, "load")
        if length <= 0:
            raise ValidationError("Cable length must be greater than 0 m", "length_m")
        if value < 0:
            raise ValidationError("Load must not be negative", "load")

        circuit_type = self.read_choice(CircuitType, load.circuit_type, "circuit_type")
        unit = self.read_choice(LoadUnit, load.unit, "unit")
        if unit == LoadUnit.HORSEPOWER:
            raise ValidationError("Cable sizing takes current, W or kW loads", "unit")
        phases = self.read_phases(load, circuit_type)
        pf = self.read_power_factor(load, circuit_type)
        ambient = self.read_ambient_temp(spec)
        spec = CableSpec(
            material=self.lookup_choice(ConductorMaterial, spec.material),
            insulation=self.lookup_choice(InsulationType, spec.insulation),
            installation=self.lookup_choice(InstallationMethod, spec.installation),
            ambient_temp_c=ambient,
            length_m=length,
        )

        watts, amps = convert_power_unit(value, unit, voltage, circuit_type, phases, pf)
        current = calculate_load_current(watts, amps, voltage, circuit_type, phases, pf)
        required_amps = current * cfg.ampacity_margin

        resistivity = self.tables.get_resistivity(spec.material)
        temp_factor = 1 + cfg.resistance_temp_coefficient * (ambient - cfg.resistivity_reference_temp_c)

        def drop_at(size: float) -> float:
            resistance = (resistivity * length * temp_factor) / size
            return self.voltage_drop(current, resistance, circuit_type, phases)

        derating = self.derating(spec, ambient)
        unrated = set()

        def capacity_at(size: float) -> float:
            # Intermediate search sizes use the ampacity of the standard size they round up to
            size_key = self.tables.snap_cable_size(size)
            base = self.tables.find_base_ampacity(spec.material, spec.insulation, size_key)
            if base is None:
                unrated.add(size_key)
                return 0.0
            return base * derating

        def accepted(drop_percent: float, capacity: float) -> bool:
            return self.drop_within_limit(drop_percent) and capacity > 0 and capacity >= required_amps

        logger.debug("Cable search: I=%.3f A, V=%.1f V, L=%.1f m, %s", current, voltage, length, spec)

        # Incremental search, index based so the float step never accumulates
        found_size = None
        steps = int(round((cfg.search_stop_mm2 - cfg.search_start_mm2) / cfg.search_step_mm2))
        for i in range(steps + 1):
            size = cfg.search_start_mm2 + i * cfg.search_step_mm2
            drop_percent = drop_at(size) / voltage * 100.0
            if accepted(drop_percent, capacity_at(size)):
                found_size = size
                break

        search_exhausted = found_size is None
        if search_exhausted:
            logger.warning("No cable up to %g mm2 satisfies %.2f A at %.1f V over %.1f m",
                           cfg.search_stop_mm2, current, voltage, length)
            found_size = cfg.search_stop_mm2

        recommended = self.tables.snap_cable_size(found_size)

        final_drop = drop_at(recommended)
        final_drop_percent = final_drop / voltage * 100.0
        final_max_current = capacity_at(recommended)
        is_valid = accepted(final_drop_percent, final_max_current)
        if unrated:
            logger.warning("No ampacity for %s/%s at %s mm2, treated as 0 A",
                           spec.material, spec.insulation, ", ".join(f"{s:g}" for s in sorted(unrated)))

        if is_valid:
            message = (f"Valid design (Drop: {final_drop_percent:.2f}%, "
                       f"Current capacity: {final_max_current:.2f}A)")
        else:
            message = (f"Warning: Voltage drop ({final_drop_percent:.2f}%) exceeds "
                       f"{cfg.voltage_drop_limit_percent:g}% or cable undersized")

        return CableSizeResult(
            load_current=current,
            voltage_drop_volts=final_drop,
            voltage_drop_percent=final_drop_percent,
            load_voltage=voltage - final_drop,
            is_valid=is_valid,
            message=message,
            cable_size_mm2=recommended,
            search_size_mm2=found_size,
            max_current=final_max_current,
            search_exhausted=search_exhausted,
        )


class BreakerSizeCalculator(SizingCalculator):
    """
    Breaker rating for a (possibly summed) load plus an adequacy check of the
    chosen cable (IEC 60898-1 ratings, coarse-banded corrections).
    """

    def __init__(self, tables: Optional[ReferenceTables] = None, config: Optional[CalculatorConfig] = None):
        super().__init__(tables or DEFAULT_TABLES, config)

    def cable_capacity(self, cross_section: float, spec: CableSpec, ambient_temp: float) -> float:
        base = self.tables.get_base_ampacity(spec.material, spec.insulation, cross_section)
        f_method = self.tables.get_breaker_installation_factor(spec.installation)
        f_temp = self.tables.get_coarse_temperature_factor(ambient_temp)
        return base * f_method * f_temp

    def calculate(self, load: LoadInput, spec: CableSpec) -> BreakerSizeResult:
        cfg = self.config

        total_input = parse_sum_expression(load.value, "load")
        if total_input < 0:
            raise ValidationError("Load must not be negative", "load")
        voltage = self.read_voltage(load, max_voltage=cfg.max_voltage)
        cross_section = parse_number(spec.cross_section_mm2, "cross_section_mm2")
        if not 0 < cross_section <= cfg.max_cross_section_mm2:
            raise ValidationError(f"Cable cross-section must be in (0, {cfg.max_cross_section_mm2:g}] mm2",
                                  "cross_section_mm2")

        circuit_type = self.read_choice(CircuitType, load.circuit_type, "circuit_type")
        unit = self.read_choice(LoadUnit, load.unit, "unit")
        phases = self.read_phases(load, circuit_type)
        pf = self.read_power_factor(load, circuit_type)
        ambient = self.read_ambient_temp(spec)
        if spec.length_m is None or spec.length_m == "":
            length = cfg.assumed_cable_length_m
        else:
            length = parse_number(spec.length_m, "length_m")
            if length <= 0:
                raise ValidationError("Cable length must be greater than 0 m", "length_m")
        spec = CableSpec(
            material=self.lookup_choice(ConductorMaterial, spec.material),
            insulation=self.lookup_choice(InsulationType, spec.insulation),
            installation=self.lookup_choice(InstallationMethod, spec.installation),
            ambient_temp_c=ambient,
            cross_section_mm2=cross_section,
            length_m=length,
        )

        total_watts, amps = convert_power_unit(total_input, unit, voltage, circuit_type, phases, pf)
        current = calculate_load_current(total_watts, amps, voltage, circuit_type, phases, pf)

        # 125% of continuous load
        min_breaker = current * cfg.breaker_margin
        recommended = self.tables.next_breaker_rating(min_breaker)
        if recommended is None:
            logger.warning("Load needs %.1f A, above the largest standard breaker (%s A)",
                           min_breaker, self.tables.breaker_ratings[-1])

        capacity = self.cable_capacity(cross_section, spec, ambient)

        resistivity = self.tables.get_resistivity(spec.material)
        resistance = (resistivity * length) / cross_section
        drop = self.voltage_drop(current, resistance, circuit_type, phases)
        drop_percent = drop / voltage * 100.0

        cable_ok = capacity > 0 and capacity >= min_breaker
        if not cable_ok:
            message = f"Cable ({capacity:.1f}A) too small for load (needs >={min_breaker:.1f}A)"
        elif not self.drop_within_limit(drop_percent):
            message = f"Voltage drop ({drop_percent:.1f}%) exceeds {cfg.voltage_drop_limit_percent:g}% limit"
        else:
            message = f"Valid design (Cable: {capacity:.1f}A, Drop: {drop_percent:.1f}%)"

        return BreakerSizeResult(
            load_current=current,
            voltage_drop_volts=drop,
            voltage_drop_percent=drop_percent,
            load_voltage=voltage - drop,
            is_valid=cable_ok and self.drop_within_limit(drop_percent),
            message=message,
            total_input=total_input,
            total_watts=total_watts,
            min_breaker_rating=min_breaker,
            recommended_breaker=recommended,
            cable_capacity=capacity,
            cable_length_m=length,
        )


def compute_cable_size(load: LoadInput, spec: CableSpec, tables: Optional[ReferenceTables] = None,
                       config: Optional[CalculatorConfig] = None) -> CableSizeResult:
    return CableSizeCalculator(tables, config).calculate(load, spec)


def compute_breaker_size(load: LoadInput, spec: CableSpec, tables: Optional[ReferenceTables] = None,
                         config: Optional[CalculatorConfig] = None) -> BreakerSizeResult:
    return BreakerSizeCalculator(tables, config).calculate(load, spec)
