import unittest
from dataclasses import replace
from core.config import CalculatorConfig
from core.errors import ValidationError
from core.models import (
    LoadInput, CableSpec, CircuitType, LoadUnit,
    ConductorMaterial, InsulationType, InstallationMethod,
)
from standards.iec import CableSizeCalculator, BreakerSizeCalculator, compute_cable_size, compute_breaker_size
from standards.iec_tables import DEFAULT_TABLES


def cable_case(value="10", voltage="230", length="20", **spec_kwargs):
    load = LoadInput(value=value, voltage=voltage, unit=spec_kwargs.pop("unit", LoadUnit.AMPERE),
                     circuit_type=spec_kwargs.pop("circuit_type", CircuitType.AC),
                     phases=spec_kwargs.pop("phases", 1),
                     power_factor=spec_kwargs.pop("power_factor", 0.9))
    spec = CableSpec(length_m=length, **spec_kwargs)
    return load, spec


def breaker_case(value="500+1000", voltage="230", cross="1.5", **spec_kwargs):
    load = LoadInput(value=value, voltage=voltage, unit=spec_kwargs.pop("unit", LoadUnit.WATT),
                     circuit_type=spec_kwargs.pop("circuit_type", CircuitType.AC),
                     phases=spec_kwargs.pop("phases", 1),
                     power_factor=spec_kwargs.pop("power_factor", 0.95))
    spec_kwargs.setdefault("installation", InstallationMethod.OPEN_AIR)
    spec = CableSpec(cross_section_mm2=cross, **spec_kwargs)
    return load, spec


class TestCableSize(unittest.TestCase):
    def test_single_phase_conduit(self):
        # 10A, 230V, 20m, Cu/PVC in conduit at 30C
        # 1 mm2: 15A * 0.8 = 12A < 12.5A required -> next step
        # 1.5 mm2: 18A * 0.8 = 14.4A, drop = 2 * 10 * (0.0172 * 20 * 1.04 / 1.5) = 4.77V (2.07%)
        load, spec = cable_case(installation=InstallationMethod.CONDUIT)
        res = compute_cable_size(load, spec)

        self.assertEqual(res.cable_size_mm2, 1.5)
        self.assertIn(res.cable_size_mm2, DEFAULT_TABLES.cable_sizes)
        self.assertAlmostEqual(res.load_current, 10.0)
        self.assertAlmostEqual(res.max_current, 14.4)
        self.assertGreaterEqual(res.max_current, 12.5)
        self.assertAlmostEqual(res.voltage_drop_percent, 2.074, places=2)
        self.assertAlmostEqual(res.load_voltage, 225.23, places=2)
        self.assertTrue(res.is_valid)
        self.assertFalse(res.search_exhausted)
        self.assertIn("Valid design", res.message)

    def test_three_phase_power_input(self):
        # 10kW, 400V 3Ph, PF 0.9 -> I = 10000 / (400 * 1.732 * 0.9) = 16.04 A, needs 20.05 A
        # Cu/XLPE on tray: 1.5 mm2 -> 21 * 0.9 = 18.9 A (too small), 2.0 rounds up to 2.5 -> 25.2 A
        load, spec = cable_case(value="10", voltage="400", length="50", unit=LoadUnit.KILOWATT, phases=3,
                                insulation=InsulationType.XLPE, installation=InstallationMethod.TRAY)
        res = compute_cable_size(load, spec)

        self.assertAlmostEqual(res.load_current, 16.0375, places=3)
        self.assertEqual(res.search_size_mm2, 2.0)
        self.assertEqual(res.cable_size_mm2, 2.5)
        self.assertAlmostEqual(res.max_current, 25.2)
        # sqrt(3) * 16.04 * (0.0172 * 50 * 1.04 / 2.5) = 9.94 V
        self.assertAlmostEqual(res.voltage_drop_volts, 9.938, places=2)
        self.assertTrue(res.is_valid)

    def test_dc_sized_by_voltage_drop(self):
        # 24V DC, 10A over 10m: drop <= 1.2V needs S >= 2.98 mm2 -> search stops at 3.0 -> 4 mm2
        load, spec = cable_case(value="10", voltage="24", length="10", circuit_type=CircuitType.DC,
                                installation=InstallationMethod.OPEN_AIR)
        res = compute_cable_size(load, spec)

        self.assertEqual(res.search_size_mm2, 3.0)
        self.assertEqual(res.cable_size_mm2, 4)
        self.assertAlmostEqual(res.voltage_drop_volts, 0.8944, places=4)
        self.assertTrue(res.is_valid)

    def test_dc_ignores_phase_and_power_factor(self):
        a = compute_cable_size(*cable_case(value="240", voltage="24", length="10", unit=LoadUnit.WATT,
                                           circuit_type=CircuitType.DC, phases=3, power_factor="0.5"))
        b = compute_cable_size(*cable_case(value="240", voltage="24", length="10", unit=LoadUnit.WATT,
                                           circuit_type=CircuitType.DC, phases=1, power_factor="1"))
        self.assertAlmostEqual(a.load_current, 10.0)
        self.assertEqual(a, b)

    def test_hot_ambient_needs_bigger_cable(self):
        # 45C -> factor 0.79: 1.5 mm2 gives 18 * 0.8 * 0.79 = 11.4 A < 12.5 A
        res_30 = compute_cable_size(*cable_case(ambient_temp_c=30))
        res_45 = compute_cable_size(*cable_case(ambient_temp_c=45))
        self.assertEqual(res_30.cable_size_mm2, 1.5)
        self.assertEqual(res_45.cable_size_mm2, 2.5)
        self.assertAlmostEqual(res_45.max_current, 24 * 0.8 * 0.79)

    def test_cold_ambient_is_not_derated(self):
        res = compute_cable_size(*cable_case(ambient_temp_c=10))
        self.assertAlmostEqual(res.max_current, 14.4)

    def test_aluminum_skips_sizes_without_rating(self):
        # No aluminum rating below 2.5 mm2
        load, spec = cable_case(value="1", material=ConductorMaterial.ALUMINUM)
        with self.assertLogs("standards.iec", level="WARNING") as logs:
            res = compute_cable_size(load, spec)
        self.assertEqual(res.cable_size_mm2, 2.5)
        self.assertTrue(res.is_valid)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("1, 1.5 mm2", logs.output[0])

    def test_zero_load_never_picks_an_unrated_size(self):
        res = compute_cable_size(*cable_case(value="0", material=ConductorMaterial.ALUMINUM))
        self.assertEqual(res.cable_size_mm2, 2.5)
        self.assertGreater(res.max_current, 0)
        self.assertTrue(res.is_valid)

    def test_search_exhausted_clamps_to_largest_size(self):
        load, spec = cable_case(value="300", length="10")
        with self.assertLogs("standards", level="WARNING") as logs:
            res = compute_cable_size(load, spec)
        # One line for the exhausted search, one for the unrated 150-240 mm2 sizes
        self.assertEqual(len(logs.records), 2)
        self.assertTrue(res.search_exhausted)
        self.assertEqual(res.cable_size_mm2, 240)
        self.assertFalse(res.is_valid)
        self.assertIn("Warning", res.message)

    def test_exactly_at_drop_limit_is_valid(self):
        # Resistivity 1/16 Ohm.mm2/m, 8m at 20C: R(1 mm2) = 0.5 Ohm, 2 * 5A * 0.5 = 5V of 100V
        tables = replace(DEFAULT_TABLES, resistivity={"copper": 0.0625})
        load, spec = cable_case(value="5", voltage="100", length="8", circuit_type=CircuitType.DC,
                                ambient_temp_c=20, installation=InstallationMethod.OPEN_AIR)
        res = CableSizeCalculator(tables).calculate(load, spec)
        self.assertEqual(res.voltage_drop_percent, 5.0)
        self.assertEqual(res.cable_size_mm2, 1)
        self.assertTrue(res.is_valid)

    def test_tighter_drop_limit_needs_bigger_cable(self):
        # 1% of 230V = 2.3V: needs S >= 3.11 mm2, search stops at 3.5 -> 4 mm2
        cfg = CalculatorConfig(voltage_drop_limit_percent=1.0)
        res = CableSizeCalculator(config=cfg).calculate(*cable_case())
        self.assertEqual(res.cable_size_mm2, 4)
        self.assertLessEqual(res.voltage_drop_percent, 1.0)
        self.assertIn("exceeds 1%", compute_cable_size(*cable_case(value="100", length="200"), config=cfg).message)

    def test_size_never_decreases_with_load(self):
        calc = CableSizeCalculator()
        sizes = []
        for amps in range(0, 260, 5):
            res = calc.calculate(*cable_case(value=str(amps), voltage="400", length="35", phases=3))
            self.assertIn(res.cable_size_mm2, DEFAULT_TABLES.cable_sizes)
            sizes.append(res.cable_size_mm2)
        self.assertEqual(sizes, sorted(sizes))

    def test_same_input_same_result(self):
        load, spec = cable_case(value="32", voltage="400", length="80", phases=3)
        calc = CableSizeCalculator()
        self.assertEqual(calc.calculate(load, spec), calc.calculate(load, spec))
        # Inputs are left untouched
        self.assertEqual(spec.length_m, "80")
        self.assertEqual(load.value, "32")

    def test_raw_form_values(self):
        load = LoadInput(value="10", voltage="230", unit="current", circuit_type="ac", phases="1",
                         power_factor="0.9")
        spec = CableSpec(material="copper", insulation="PVC", installation="conduit",
                         ambient_temp_c="30", length_m="20")
        self.assertEqual(compute_cable_size(load, spec), compute_cable_size(*cable_case()))

    def test_unknown_material_fails_soft(self):
        load, spec = cable_case(material="gold")
        with self.assertLogs(level="WARNING") as logs:
            res = compute_cable_size(load, spec)
        self.assertFalse(res.is_valid)
        self.assertEqual(res.max_current, 0.0)
        self.assertLessEqual(len(logs.records), 4)

    def test_missing_fields(self):
        for kwargs in ({"voltage": ""}, {"length": None}, {"value": "  "}):
            with self.subTest(**kwargs):
                with self.assertRaises(ValidationError) as ctx:
                    compute_cable_size(*cable_case(**kwargs))
                self.assertIn("Missing required field", str(ctx.exception))

    def test_invalid_fields(self):
        cases = [
            ({"voltage": "abc"}, "voltage"),
            ({"voltage": "0"}, "voltage"),
            ({"length": "-5"}, "length_m"),
            ({"value": "-1"}, "load"),
            ({"power_factor": "0"}, "power_factor"),
            ({"power_factor": "1.2"}, "power_factor"),
            ({"phases": 2}, "phases"),
            ({"ambient_temp_c": 75}, "ambient_temp_c"),
            ({"unit": LoadUnit.HORSEPOWER}, "unit"),
            ({"circuit_type": "three-phase"}, "circuit_type"),
        ]
        for kwargs, field in cases:
            with self.subTest(field=field, **{k: str(v) for k, v in kwargs.items()}):
                with self.assertRaises(ValidationError) as ctx:
                    compute_cable_size(*cable_case(**kwargs))
                self.assertEqual(ctx.exception.field, field)

    def test_validation_error_is_value_error(self):
        with self.assertRaises(ValueError):
            compute_cable_size(*cable_case(voltage=""))


class TestBreakerSize(unittest.TestCase):
    def test_summed_loads(self):
        # 500 + 1000 W at 230V, PF 0.95 -> I = 1500 / 218.5 = 6.86 A, min breaker 8.58 A -> 10 A
        load, spec = breaker_case()
        res = compute_breaker_size(load, spec)

        self.assertEqual(res.total_input, 1500)
        self.assertAlmostEqual(res.total_watts, 1500)
        self.assertAlmostEqual(res.load_current, 6.865, places=3)
        self.assertAlmostEqual(res.min_breaker_rating, 8.581, places=3)
        self.assertEqual(res.recommended_breaker, 10)
        self.assertEqual(res.recommended_breaker_label, "10 A")

    def test_cable_check_with_assumed_length(self):
        # Cu/PVC 1.5 mm2 in open air at 30C -> exactly 18 A
        res = compute_breaker_size(*breaker_case())
        self.assertEqual(res.cable_capacity, 18)
        self.assertEqual(res.cable_length_m, 10.0)
        # 2 * 6.865 * (0.0172 * 10 / 1.5) = 1.574 V
        self.assertAlmostEqual(res.voltage_drop_percent, 0.684, places=2)
        self.assertTrue(res.is_valid)
        self.assertIn("Valid design", res.message)

    def test_explicit_length(self):
        short = compute_breaker_size(*breaker_case())
        longer = compute_breaker_size(*breaker_case(length_m="20"))
        self.assertEqual(longer.cable_length_m, 20.0)
        self.assertAlmostEqual(longer.voltage_drop_volts, 2 * short.voltage_drop_volts)

    def test_cable_too_small(self):
        # 10 kW at 230V, PF 1 -> 43.5 A, needs 54.3 A; 2.5 mm2 carries 24 A
        res = compute_breaker_size(*breaker_case(value="10", unit=LoadUnit.KILOWATT, power_factor="1", cross="2.5"))
        self.assertEqual(res.recommended_breaker, 63)
        self.assertEqual(res.cable_capacity, 24)
        self.assertFalse(res.is_valid)
        self.assertIn("too small", res.message)

    def test_drop_exceeds_limit(self):
        res = compute_breaker_size(*breaker_case(length_m=200))
        self.assertGreater(res.voltage_drop_percent, 5)
        self.assertFalse(res.is_valid)
        self.assertIn("exceeds 5% limit", res.message)

    def test_custom_size_required(self):
        # 5 MW at 400V 3Ph -> 7217 A, needs 9021 A, above the 6300 A ladder top
        res = compute_breaker_size(*breaker_case(value="5000", voltage="400", unit=LoadUnit.KILOWATT,
                                                 phases=3, power_factor="1", cross="120"))
        self.assertIsNone(res.recommended_breaker)
        self.assertTrue(res.custom_required)
        self.assertEqual(res.recommended_breaker_label, "Custom required")

    def test_horsepower(self):
        res = compute_breaker_size(*breaker_case(value="2", unit=LoadUnit.HORSEPOWER))
        self.assertAlmostEqual(res.total_watts, 1492)

    def test_current_input_back_computes_power(self):
        res = compute_breaker_size(*breaker_case(value="10", voltage="400", unit=LoadUnit.AMPERE,
                                                 phases=3, power_factor="0.9", cross="2.5"))
        self.assertAlmostEqual(res.load_current, 10)
        self.assertAlmostEqual(res.total_watts, 10 * 400 * 3 ** 0.5 * 0.9)
        self.assertEqual(res.recommended_breaker, 16)

        dc = compute_breaker_size(*breaker_case(value="10", voltage="24", unit="ampere", circuit_type="dc"))
        self.assertAlmostEqual(dc.total_watts, 240)

    def test_non_numeric_terms_count_as_zero(self):
        res = compute_breaker_size(*breaker_case(value="500+abc+250"))
        self.assertEqual(res.total_input, 750)

    def test_decimal_comma_terms(self):
        res = compute_breaker_size(*breaker_case(value="1,5+2", unit=LoadUnit.KILOWATT))
        self.assertEqual(res.total_input, 3.5)
        self.assertEqual(res.total_watts, 3500)

    def test_coarse_corrections(self):
        self.assertAlmostEqual(compute_breaker_size(*breaker_case(ambient_temp_c=35)).cable_capacity, 18 * 0.91)
        self.assertAlmostEqual(compute_breaker_size(*breaker_case(ambient_temp_c=60)).cable_capacity, 18 * 0.71)
        self.assertAlmostEqual(
            compute_breaker_size(*breaker_case(installation=InstallationMethod.CONDUIT)).cable_capacity, 14.4)
        self.assertAlmostEqual(compute_breaker_size(*breaker_case(installation="underground")).cable_capacity, 12.6)

    def test_whole_number_cross_sections(self):
        res = compute_breaker_size(*breaker_case(cross="4"))
        self.assertEqual(res.cable_capacity, 32)

    def test_non_standard_cross_section_fails_soft(self):
        with self.assertLogs("standards.iec_tables", level="WARNING"):
            res = compute_breaker_size(*breaker_case(cross="3"))
        self.assertEqual(res.cable_capacity, 0)
        self.assertFalse(res.is_valid)

    def test_zero_load_on_unrated_cable_is_not_valid(self):
        with self.assertLogs("standards.iec_tables", level="WARNING"):
            res = compute_breaker_size(*breaker_case(value="0", cross="3"))
        self.assertFalse(res.is_valid)
        self.assertIn("too small", res.message)

    def test_breaker_never_decreases_with_load(self):
        calc = BreakerSizeCalculator()
        ratings = []
        for watts in range(100, 60000, 700):
            res = calc.calculate(*breaker_case(value=str(watts), cross="16"))
            ratings.append(res.recommended_breaker)
        self.assertEqual(ratings, sorted(ratings))

    def test_same_input_same_result(self):
        load, spec = breaker_case(value="1000+2000+750")
        self.assertEqual(compute_breaker_size(load, spec), compute_breaker_size(load, spec))

    def test_injected_ladder(self):
        tables = replace(DEFAULT_TABLES, breaker_ratings=(10, 20))
        res = BreakerSizeCalculator(tables).calculate(*breaker_case(value="3000", power_factor="1", cross="10"))
        # 13.04 A * 1.25 = 16.3 A
        self.assertEqual(res.recommended_breaker, 20)

    def test_injected_config(self):
        cfg = CalculatorConfig(voltage_drop_limit_percent=0.5, assumed_cable_length_m=25.0)
        res = BreakerSizeCalculator(config=cfg).calculate(*breaker_case())
        self.assertEqual(res.cable_length_m, 25.0)
        # 2.5 * 0.684% = 1.71% > 0.5%
        self.assertFalse(res.is_valid)
        self.assertIn("exceeds 0.5% limit", res.message)

    def test_missing_fields(self):
        for kwargs in ({"value": ""}, {"voltage": None}, {"cross": ""}):
            with self.subTest(**{k: repr(v) for k, v in kwargs.items()}):
                with self.assertRaises(ValidationError):
                    compute_breaker_size(*breaker_case(**kwargs))

    def test_out_of_range_fields(self):
        cases = [
            ({"voltage": "1200"}, "voltage"),
            ({"cross": "0"}, "cross_section_mm2"),
            ({"cross": "1500"}, "cross_section_mm2"),
            ({"power_factor": "1.01"}, "power_factor"),
            ({"ambient_temp_c": -25}, "ambient_temp_c"),
            ({"length_m": "0"}, "length_m"),
            ({"value": "-100"}, "load"),
        ]
        for kwargs, field in cases:
            with self.subTest(field=field):
                with self.assertRaises(ValidationError) as ctx:
                    compute_breaker_size(*breaker_case(**kwargs))
                self.assertEqual(ctx.exception.field, field)


if __name__ == '__main__':
    unittest.main()
