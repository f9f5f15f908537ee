import sys
import re
import logging
import datetime
from core.models import (
    LoadInput, CableSpec, CircuitType, LoadUnit,
    ConductorMaterial, InsulationType, InstallationMethod,
)
from core.converters import parse_number, convert_length_unit
from core.errors import ValidationError
from core.report import save_workbook
from standards.iec import CableSizeCalculator, BreakerSizeCalculator
from standards.iec_tables import DEFAULT_TABLES
from standards.materials import format_material_info
from standards.table_loader import load_tables


def configure_logging(level: int = logging.WARNING) -> None:
    """Console logging for the CLI, engines only speak up on fail-soft lookups."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def choose(prompt: str, options, default):
    """Numbered menu over (label, value) pairs."""
    print(prompt)
    for i, (label, _) in enumerate(options, start=1):
        print(f"  ({i}) {label}")
    choice = input(f"Select [{[v for _, v in options].index(default) + 1}]: ").strip()
    if choice.isdigit() and 1 <= int(choice) <= len(options):
        return options[int(choice) - 1][1]
    return default


def get_circuit_inputs(default_pf: str = "0.9"):
    circuit_type = choose("Current type:", [("AC", CircuitType.AC), ("DC", CircuitType.DC)], CircuitType.AC)
    phases = 1
    pf = default_pf
    if circuit_type == CircuitType.AC:
        phases = choose("Phase:", [("Single phase", 1), ("Three phase", 3)], 1)
        pf = input(f"Power factor [{default_pf}]: ").strip() or default_pf
    voltage = input("Voltage (V): ").strip()
    return circuit_type, phases, pf, voltage


def get_cable_material_inputs(default_installation: InstallationMethod):
    material = choose("Conductor material:",
                      [("Copper", ConductorMaterial.COPPER), ("Aluminum", ConductorMaterial.ALUMINUM)],
                      ConductorMaterial.COPPER)
    insulation = choose("Insulation:", [("PVC", InsulationType.PVC), ("XLPE", InsulationType.XLPE)],
                        InsulationType.PVC)
    installation = choose("Installation method:", [
        ("Open air", InstallationMethod.OPEN_AIR),
        ("In conduit", InstallationMethod.CONDUIT),
        ("Cable tray", InstallationMethod.TRAY),
        ("Buried underground", InstallationMethod.BURIED),
    ], default_installation)
    temp = input("Ambient temperature (°C) [30]: ").strip() or "30"
    return material, insulation, installation, temp


def parse_length(text: str) -> str:
    # Accepts "50", "50 m", "100 ft"
    match = re.match(r"([0-9.,]+)\s*([a-zA-Z]+)$", text)
    if match:
        value = parse_number(match.group(1), "length_m")
        return str(convert_length_unit(value, match.group(2)))
    return text


def get_cable_inputs():
    print("\n--- Cable Size Calculator ---")
    circuit_type, phases, pf, voltage = get_circuit_inputs()
    length = parse_length(input("Cable length (e.g. 20 m, 60 ft): ").strip())
    unit = choose("Load type:", [
        ("Current (A)", LoadUnit.AMPERE), ("Power (W)", LoadUnit.WATT), ("Power (kW)", LoadUnit.KILOWATT),
    ], LoadUnit.AMPERE)
    value = input("Load value: ").strip()
    material, insulation, installation, temp = get_cable_material_inputs(InstallationMethod.CONDUIT)

    load = LoadInput(value=value, voltage=voltage, unit=unit, circuit_type=circuit_type,
                     phases=phases, power_factor=pf)
    spec = CableSpec(material=material, insulation=insulation, installation=installation,
                     ambient_temp_c=temp, length_m=length)
    return load, spec


def get_breaker_inputs():
    print("\n--- Circuit Breaker Sizing Calculator ---")
    unit = choose("Input type:", [
        ("Power (W)", LoadUnit.WATT), ("Power (kW)", LoadUnit.KILOWATT),
        ("Horsepower (HP)", LoadUnit.HORSEPOWER), ("Current (A)", LoadUnit.AMPERE),
    ], LoadUnit.WATT)
    value = input("Load value (several loads as 500+1000+250): ").strip()
    circuit_type, phases, pf, voltage = get_circuit_inputs("0.95")
    cross = input("Cable cross-section (mm²): ").strip()
    length = input("Cable length in m [10]: ").strip()
    material, insulation, installation, temp = get_cable_material_inputs(InstallationMethod.OPEN_AIR)

    load = LoadInput(value=value, voltage=voltage, unit=unit, circuit_type=circuit_type,
                     phases=phases, power_factor=pf)
    spec = CableSpec(material=material, insulation=insulation, installation=installation,
                     ambient_temp_c=temp, cross_section_mm2=cross, length_m=length or None)
    return load, spec


def print_cable_result(res):
    print("-" * 70)
    print(f"Recommended size:   {res.cable_size_mm2} mm²")
    print(f"Load current:       {res.load_current:.2f} A")
    print(f"Voltage drop:       {res.voltage_drop_percent:.2f} % ({res.voltage_drop_volts:.2f} V)")
    print(f"Load voltage:       {res.load_voltage:.2f} V")
    print(f"Current capacity:   {res.max_current:.2f} A")
    if res.search_exhausted:
        print("No standard size within range satisfies both limits.")
    print(("[OK] " if res.is_valid else "[!] ") + res.message)
    print("-" * 70)


def print_breaker_result(res):
    print("-" * 70)
    print(f"Total input:        {res.total_input:g} ({res.total_watts:.1f} W)")
    print(f"Load current:       {res.load_current:.2f} A")
    print(f"Min breaker size:   {res.min_breaker_rating:.2f} A")
    print(f"Recommended:        {res.recommended_breaker_label}")
    print(f"Cable capacity:     {res.cable_capacity:.1f} A")
    print(f"Voltage drop:       {res.voltage_drop_percent:.2f} % over {res.cable_length_m:g} m")
    print(("[OK] " if res.is_valid else "[!] ") + res.message)
    print("-" * 70)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(logging.DEBUG if "-v" in argv else logging.WARNING)

    tables = DEFAULT_TABLES
    if "--tables" in argv:
        position = argv.index("--tables") + 1
        if position >= len(argv):
            print("--tables needs a path to a JSON tables file.")
            return 2
        try:
            tables = load_tables(argv[position])
        except (OSError, ValueError) as e:
            print(f"Could not load reference tables from {argv[position]}: {e}")
            return 2

    cable_calc = CableSizeCalculator(tables)
    breaker_calc = BreakerSizeCalculator(tables)
    cable_results, breaker_results = [], []

    print("==========================================================")
    print(" CABLE & BREAKER SIZING (IEC 60364-5-52 / IEC 60898-1)")
    print("==========================================================")
    print(f"Reference tables: {tables.name}")

    while True:
        print("\n(1) Cable size  (2) Circuit breaker  (3) Material info  (Enter) Finish")
        option = input("Option: ").strip()
        if not option:
            break

        try:
            if option == "1":
                load, spec = get_cable_inputs()
                res = cable_calc.calculate(load, spec)
                cable_results.append(res)
                print_cable_result(res)
            elif option == "2":
                load, spec = get_breaker_inputs()
                res = breaker_calc.calculate(load, spec)
                breaker_results.append(res)
                print_breaker_result(res)
            elif option == "3":
                name = input("Material (copper, aluminum, PVC, XLPE): ").strip()
                print(format_material_info(name))
        except ValidationError as e:
            print(f"Input error: {e}. Try again.")
        except KeyError as e:
            print(e.args[0])

    if not cable_results and not breaker_results:
        print("No calculations made.")
        return

    ask = input("\nExport report to Excel? (y/n): ").lower()
    if ask == "y":
        filename = f"Sizing_Report_{datetime.datetime.now().strftime('%Y%m%d_%H%M%S')}.xlsx"
        save_workbook(filename, cable_results, breaker_results, tables)
        print(f"\n[INFO] Excel generated: {filename}")


if __name__ == "__main__":
    sys.exit(main())
