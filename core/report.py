import datetime
import io
from typing import Iterable, List, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from .models import CableSizeResult, BreakerSizeResult

CABLE_COLUMNS = [
    "Size (mm²)", "Load Current (A)", "Max Current (A)", "Drop (V)", "Drop (%)",
    "Load Voltage (V)", "Valid", "Message",
]

BREAKER_COLUMNS = [
    "Total Input", "Total Power (W)", "Load Current (A)", "Min Breaker (A)", "Breaker",
    "Cable Capacity (A)", "Length (m)", "Drop (%)", "Valid", "Message",
]

HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")
HEADER_FONT = Font(bold=True)


def cable_row(res: CableSizeResult) -> list:
    return [
        res.cable_size_mm2,
        round(res.load_current, 2),
        round(res.max_current, 2),
        round(res.voltage_drop_volts, 2),
        round(res.voltage_drop_percent, 2),
        round(res.load_voltage, 2),
        "YES" if res.is_valid else "NO",
        res.message,
    ]


def breaker_row(res: BreakerSizeResult) -> list:
    return [
        res.total_input,
        round(res.total_watts, 1),
        round(res.load_current, 2),
        round(res.min_breaker_rating, 2),
        res.recommended_breaker_label,
        round(res.cable_capacity, 1),
        res.cable_length_m,
        round(res.voltage_drop_percent, 2),
        "YES" if res.is_valid else "NO",
        res.message,
    ]


def cable_results_frame(results: Iterable[CableSizeResult]) -> pd.DataFrame:
    return pd.DataFrame([cable_row(r) for r in results], columns=CABLE_COLUMNS)


def breaker_results_frame(results: Iterable[BreakerSizeResult]) -> pd.DataFrame:
    return pd.DataFrame([breaker_row(r) for r in results], columns=BREAKER_COLUMNS)


def ampacity_frame(tables) -> pd.DataFrame:
    """Base ampacity as one row per size, one column per material/insulation pair."""
    columns = {}
    for material, by_insulation in tables.base_ampacity.items():
        for insulation, by_size in by_insulation.items():
            columns[f"{material} {insulation}"] = {float(s): a for s, a in by_size.items()}
    df = pd.DataFrame(columns, index=[float(s) for s in tables.cable_sizes])
    df.index.name = "Size (mm²)"
    return df


def _append_table(ws, headers: Sequence[str], rows: List[list]):
    ws.append(list(headers))
    for cell in ws[ws.max_row]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    for row in rows:
        ws.append(row)
    for col in ws.columns:
        ws.column_dimensions[col[0].column_letter].width = 18


def build_workbook(cable_results: Sequence[CableSizeResult] = (),
                   breaker_results: Sequence[BreakerSizeResult] = (),
                   tables=None) -> Workbook:
    wb = Workbook()

    # --- Sheet 1: Cable sizing ---
    ws1 = wb.active
    ws1.title = "Cable Sizing"
    ws1.append(["Date:", datetime.datetime.now().strftime("%Y-%m-%d %H:%M")])
    ws1.append([])
    _append_table(ws1, CABLE_COLUMNS, [cable_row(r) for r in cable_results])

    # --- Sheet 2: Breaker sizing ---
    ws2 = wb.create_sheet("Breaker Sizing")
    _append_table(ws2, BREAKER_COLUMNS, [breaker_row(r) for r in breaker_results])

    if tables is not None:
        # --- Sheet 3: Reference ampacity ---
        ws3 = wb.create_sheet("Ref Ampacity")
        ws3.append([tables.name])
        amp = ampacity_frame(tables)
        rows = [[float(size)] + [None if pd.isna(v) else v for v in values]
                for size, values in zip(amp.index, amp.values.tolist())]
        _append_table(ws3, [amp.index.name] + list(amp.columns), rows)

        # --- Sheet 4: Standard breakers ---
        ws4 = wb.create_sheet("Ref Breakers")
        _append_table(ws4, ["Rating (A)"], [[r] for r in tables.breaker_ratings])

    return wb


def save_workbook(path: str, cable_results=(), breaker_results=(), tables=None) -> str:
    wb = build_workbook(cable_results, breaker_results, tables)
    wb.save(path)
    return path


def to_excel_bytes(cable_results: Sequence[CableSizeResult] = (),
                   breaker_results: Sequence[BreakerSizeResult] = (),
                   tables=None) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        if cable_results:
            cable_results_frame(cable_results).to_excel(writer, index=False, sheet_name="Cable Sizing")
        if breaker_results:
            breaker_results_frame(breaker_results).to_excel(writer, index=False, sheet_name="Breaker Sizing")
        if tables is not None:
            ampacity_frame(tables).to_excel(writer, sheet_name="Ref Ampacity")
        if not (cable_results or breaker_results or tables is not None):
            pd.DataFrame(columns=CABLE_COLUMNS).to_excel(writer, index=False, sheet_name="Cable Sizing")
    return output.getvalue()
