"""Design limits and search settings shared by the sizing calculators."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CalculatorConfig:
    """Engineering limits applied by both calculators."""

    voltage_drop_limit_percent: float = 5.0
    ampacity_margin: float = 1.25      # Cable must carry 125% of load current
    breaker_margin: float = 1.25       # Breaker >= 125% of continuous load

    # Incremental cable search (mm2)
    search_start_mm2: float = 1.0
    search_step_mm2: float = 0.5
    search_stop_mm2: float = 240.0

    # Breaker check has no length input on the form
    assumed_cable_length_m: float = 10.0

    resistance_temp_coefficient: float = 0.004
    resistivity_reference_temp_c: float = 20.0

    min_ambient_temp_c: float = -20.0
    max_ambient_temp_c: float = 60.0
    max_voltage: float = 1000.0
    max_cross_section_mm2: float = 1000.0


DEFAULT_CONFIG = CalculatorConfig()
