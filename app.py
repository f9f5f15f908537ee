import streamlit as st
import pandas as pd
from core.models import (
    LoadInput, CableSpec, CircuitType, LoadUnit,
    ConductorMaterial, InsulationType, InstallationMethod,
)
from core.errors import ValidationError
from core.report import cable_results_frame, breaker_results_frame, ampacity_frame, to_excel_bytes
from standards.iec import CableSizeCalculator, BreakerSizeCalculator
from standards.iec_tables import DEFAULT_TABLES
from standards.materials import MATERIALS, get_material_info

# --- Page Config ---
st.set_page_config(
    page_title="Cable & Breaker Sizing (IEC)",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded"
)

# --- Custom CSS ---
st.markdown("""
<style>
    .main-header { font-family: 'Inter', sans-serif; color: #1E3A8A; font-weight: 700; }
    .stDataFrame { border-radius: 10px; overflow: hidden; }
</style>
""", unsafe_allow_html=True)

# --- Session State Init ---
# Each submit replaces the stored result, a validation error clears it
if "cable_result" not in st.session_state:
    st.session_state.cable_result = None
if "breaker_result" not in st.session_state:
    st.session_state.breaker_result = None

MATERIAL_OPTIONS = {"Copper": ConductorMaterial.COPPER, "Aluminum": ConductorMaterial.ALUMINUM}
INSULATION_OPTIONS = {"PVC": InsulationType.PVC, "XLPE": InsulationType.XLPE}
INSTALLATION_OPTIONS = {
    "Open Air": InstallationMethod.OPEN_AIR,
    "In Conduit": InstallationMethod.CONDUIT,
    "Cable Tray": InstallationMethod.TRAY,
    "Buried Underground": InstallationMethod.BURIED,
}

cable_calc = CableSizeCalculator(DEFAULT_TABLES)
breaker_calc = BreakerSizeCalculator(DEFAULT_TABLES)


def render_material_info(key):
    info = get_material_info(key)
    st.markdown(f"#### {info['name']}")
    st.write(info["description"])
    c_adv, c_dis = st.columns(2)
    c_adv.markdown("**Advantages**\n" + "\n".join(f"- {a}" for a in info["advantages"]))
    c_dis.markdown("**Disadvantages**\n" + "\n".join(f"- {d}" for d in info["disadvantages"]))
    st.markdown(f"**Typical Applications:** {info['applications']}")
    if "conductivity" in info:
        st.info(f"Conductivity: {info['conductivity']}")


def show_status(result):
    if result.is_valid:
        st.success(f"✅ {result.message}")
    else:
        st.warning(f"⚠️ {result.message}")


# --- Sidebar ---
with st.sidebar:
    st.title("Reference")
    st.caption(DEFAULT_TABLES.name)
    for key in MATERIALS:
        with st.expander(MATERIALS[key]["name"]):
            render_material_info(key)
    st.markdown("---")
    st.caption("Always verify with local electrical codes and manufacturer specifications.")

# --- Main Area ---
st.markdown("<h1 class='main-header'>⚡ Cable & Breaker Sizing Calculators</h1>", unsafe_allow_html=True)
st.markdown("---")

tab_cable, tab_breaker, tab_tables = st.tabs(["Cable Size", "Circuit Breaker", "Reference Tables"])

with tab_cable:
    with st.expander("ℹ️ Cable Sizing Basics"):
        st.write("Proper cable sizing ensures cables can handle the current without excessive "
                 "voltage drop or overheating.")
        st.code("Voltage Drop = 2 × I × R   (DC / single phase)\n"
                "Voltage Drop = √3 × I × R  (three phase)\n"
                "R = ρ × L × (1 + 0.004 × (T - 20)) / S")

    with st.form("cable_form"):
        c1, c2 = st.columns(2)
        current_type = c1.selectbox("Current Type", ["AC", "DC"], key="cable_ct")
        phase = c2.selectbox("Phase", [1, 3], format_func=lambda p: "Single Phase" if p == 1 else "Three Phase",
                             key="cable_phase", disabled=current_type == "DC")
        c3, c4 = st.columns(2)
        voltage = c3.text_input("Voltage (V)", key="cable_voltage")
        length = c4.text_input("Cable Length (m)", key="cable_length")
        c5, c6, c7 = st.columns(3)
        load_type = c5.selectbox("Load Type", ["Current (A)", "Power (W)", "Power (kW)"], key="cable_lt")
        load_value = c6.text_input("Load Value", key="cable_value")
        pf = c7.number_input("Power Factor", 0.01, 1.0, 0.9, 0.01, key="cable_pf", disabled=current_type == "DC")
        c8, c9 = st.columns(2)
        material = c8.selectbox("Conductor Material", list(MATERIAL_OPTIONS), key="cable_mat")
        insulation = c9.selectbox("Insulation Type", list(INSULATION_OPTIONS), key="cable_ins")
        c10, c11 = st.columns(2)
        temp = c10.number_input("Ambient Temperature (°C)", -20.0, 60.0, 30.0, 1.0, key="cable_temp")
        installation = c11.selectbox("Installation Method", list(INSTALLATION_OPTIONS), index=1, key="cable_inst")
        submitted = st.form_submit_button("Calculate", type="primary", use_container_width=True)

    if submitted:
        unit = {"Current (A)": LoadUnit.AMPERE, "Power (W)": LoadUnit.WATT,
                "Power (kW)": LoadUnit.KILOWATT}[load_type]
        load = LoadInput(value=load_value, voltage=voltage, unit=unit,
                         circuit_type=CircuitType(current_type), phases=phase, power_factor=pf)
        spec = CableSpec(material=MATERIAL_OPTIONS[material], insulation=INSULATION_OPTIONS[insulation],
                         installation=INSTALLATION_OPTIONS[installation], ambient_temp_c=temp, length_m=length)
        try:
            st.session_state.cable_result = cable_calc.calculate(load, spec)
        except ValidationError as e:
            st.session_state.cable_result = None
            st.error(f"⚠️ {e}")

    res = st.session_state.cable_result
    if res is not None:
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Recommended Size", f"{res.cable_size_mm2} mm²")
        m2.metric("Voltage Drop", f"{res.voltage_drop_percent:.2f} %")
        m3.metric("Load Voltage", f"{res.load_voltage:.2f} V")
        m4.metric("Current Capacity", f"{res.max_current:.2f} A")
        show_status(res)
        st.dataframe(cable_results_frame([res]), use_container_width=True, hide_index=True)
        st.download_button(
            "📥 Download (Excel)",
            data=to_excel_bytes(cable_results=[res]),
            file_name="cable_size.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

with tab_breaker:
    with st.expander("ℹ️ Circuit Breaker Basics"):
        st.write("Circuit breakers protect circuits from overload or short circuits.")
        st.code("Load Current (Ib) = P / (V × PF × √3 for 3-phase)\n"
                "Breaker Size (In) >= 1.25 × Ib\n"
                "Cable Capacity (Iz) >= In")

    with st.form("breaker_form"):
        b1, b2 = st.columns(2)
        input_type = b1.selectbox("Input Type", ["Power (W)", "Power (kW)", "Horsepower (HP)", "Current (A)"],
                                  key="brk_it")
        input_value = b2.text_input("Load Value", help="Several loads can be summed: 500+1000+250",
                                    key="brk_value")
        b3, b4, b5 = st.columns(3)
        b_voltage = b3.text_input("Voltage (V)", key="brk_voltage")
        b_current_type = b4.selectbox("Current Type", ["AC", "DC"], key="brk_ct")
        b_phase = b5.selectbox("Phase", [1, 3], format_func=lambda p: "Single Phase" if p == 1 else "Three Phase",
                               key="brk_phase", disabled=b_current_type == "DC")
        b6, b7, b8 = st.columns(3)
        b_pf = b6.number_input("Power Factor", 0.01, 1.0, 0.95, 0.01, key="brk_pf",
                               disabled=b_current_type == "DC")
        cross = b7.selectbox("Cable Cross-section (mm²)", [""] + list(DEFAULT_TABLES.cable_sizes), key="brk_cross")
        b_length = b8.number_input("Cable Length (m)", 0.1, 10000.0, 10.0, 1.0, key="brk_length")
        b9, b10, b11, b12 = st.columns(4)
        b_material = b9.selectbox("Cable Material", list(MATERIAL_OPTIONS), key="brk_mat")
        b_insulation = b10.selectbox("Insulation", list(INSULATION_OPTIONS), key="brk_ins")
        b_installation = b11.selectbox("Installation", list(INSTALLATION_OPTIONS), key="brk_inst")
        b_temp = b12.number_input("Ambient Temp (°C)", -20.0, 60.0, 30.0, 1.0, key="brk_temp")
        b_submitted = st.form_submit_button("Calculate", type="primary", use_container_width=True)

    if b_submitted:
        unit = {"Power (W)": LoadUnit.WATT, "Power (kW)": LoadUnit.KILOWATT,
                "Horsepower (HP)": LoadUnit.HORSEPOWER, "Current (A)": LoadUnit.AMPERE}[input_type]
        load = LoadInput(value=input_value, voltage=b_voltage, unit=unit,
                         circuit_type=CircuitType(b_current_type), phases=b_phase, power_factor=b_pf)
        spec = CableSpec(material=MATERIAL_OPTIONS[b_material], insulation=INSULATION_OPTIONS[b_insulation],
                         installation=INSTALLATION_OPTIONS[b_installation], ambient_temp_c=b_temp,
                         cross_section_mm2=cross, length_m=b_length)
        try:
            st.session_state.breaker_result = breaker_calc.calculate(load, spec)
        except ValidationError as e:
            st.session_state.breaker_result = None
            st.error(f"⚠️ {e}")

    res = st.session_state.breaker_result
    if res is not None:
        m1, m2, m3 = st.columns(3)
        m1.metric("Load Current", f"{res.load_current:.2f} A")
        m2.metric("Min Breaker Size", f"{res.min_breaker_rating:.2f} A")
        m3.metric("Recommended Breaker", res.recommended_breaker_label)
        m4, m5, _ = st.columns(3)
        m4.metric("Cable Capacity", f"{res.cable_capacity:.1f} A")
        m5.metric("Voltage Drop", f"{res.voltage_drop_percent:.2f} %")
        show_status(res)
        st.dataframe(breaker_results_frame([res]), use_container_width=True, hide_index=True)
        st.download_button(
            "📥 Download (Excel)",
            data=to_excel_bytes(breaker_results=[res]),
            file_name="breaker_size.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

with tab_tables:
    st.subheader("Base Ampacity (A) at 30°C")
    st.dataframe(ampacity_frame(DEFAULT_TABLES), use_container_width=True)
    t1, t2 = st.columns(2)
    t1.markdown("**Installation factors (cable size)**")
    t1.dataframe(pd.Series(dict(DEFAULT_TABLES.cable_installation_factors), name="Factor"))
    t2.markdown("**Temperature factors (cable size)**")
    t2.dataframe(pd.Series(dict(DEFAULT_TABLES.fine_temperature_factors), name="Factor"))
    st.markdown("**Standard breaker ratings (A)**")
    st.write(", ".join(str(r) for r in DEFAULT_TABLES.breaker_ratings))
    st.download_button(
        "📥 Reference Tables (Excel)",
        data=to_excel_bytes(tables=DEFAULT_TABLES),
        file_name="reference_tables.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
