"""
Landslide Risk Engine - Inspector

Streamlit page that assesses one point and shows the verdict next to
the derivation that produced it.
"""

import streamlit as st
import pandas as pd
import plotly.express as px

from core import EngineConfig, FeatureValidationError, LandslideEngine, ScoringMode
from loaders import UnifiedDataFetcher

# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(
    page_title="Landslide Risk Engine",
    page_icon="⛰️",
    layout="wide",
)

LEVEL_COLORS = {
    "Safe": "#2e86de",
    "Very Low": "#10ac84",
    "Low": "#1dd1a1",
    "Medium": "#feca57",
    "High": "#ff9f43",
    "Extreme": "#ee5253",
}


@st.cache_resource
def get_fetcher() -> UnifiedDataFetcher:
    return UnifiedDataFetcher()


# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR
# ═══════════════════════════════════════════════════════════════════════════
st.sidebar.title("⛰️ Landslide Risk Engine")
lat = st.sidebar.number_input("Latitude", -90.0, 90.0, 27.7172, format="%.4f")
lon = st.sidebar.number_input("Longitude", -180.0, 180.0, 85.3240, format="%.4f")
depth = st.sidebar.slider("Failure depth (m)", 0.5, 10.0, 2.5, 0.5)
mode = st.sidebar.selectbox("Scoring mode", [m.value for m in ScoringMode])

sim_mode = st.sidebar.toggle("Simulation mode")
manual_rain = None
if sim_mode:
    manual_rain = float(st.sidebar.slider("Rainfall (mm)", 0, 500, 0, 10))

if not st.sidebar.button("Assess", type="primary"):
    st.info("Pick a point in the sidebar and press **Assess**.")
    st.stop()

# ═══════════════════════════════════════════════════════════════════════════
# ASSESSMENT
# ═══════════════════════════════════════════════════════════════════════════
with st.spinner("Fetching weather, soil and terrain..."):
    try:
        location = get_fetcher().fetch(lat, lon, failure_depth_m=depth, manual_rain_mm=manual_rain)
    except FeatureValidationError as e:
        st.error(f"Invalid input: {e}")
        st.stop()

config = EngineConfig(scoring_mode=ScoringMode(mode))
assessment = LandslideEngine(config).assess(location.features)
verdict = assessment.verdict

for error in location.fetch_errors:
    st.warning(error)

st.markdown(
    f"## <span style='color:{LEVEL_COLORS[verdict.level.label]}'>{verdict.level.label}</span>"
    f" risk{' (simulated)' if assessment.is_simulated else ''}",
    unsafe_allow_html=True,
)

col1, col2, col3, col4 = st.columns(4)
col1.metric("Probability", f"{verdict.probability:.0%}")
col2.metric("Factor of Safety", f"{verdict.factor_of_safety:.2f}")
col3.metric("Environment", verdict.environment.value)
col4.metric("Soil", verdict.soil_type)

st.markdown(f"> {verdict.reason}")

# ═══════════════════════════════════════════════════════════════════════════
# DERIVATION
# ═══════════════════════════════════════════════════════════════════════════
st.markdown("---")
left, right = st.columns(2)

features = assessment.features
with left:
    st.subheader("Inputs")
    inputs = pd.DataFrame([
        ("Slope (°)", features.slope_deg),
        ("Elevation (m)", features.elevation_m),
        ("Rain now (mm)", features.rain_current_mm),
        ("Rain 7 days (mm)", features.rain_7day_mm),
        ("Temperature (°C)", features.temperature_c),
        ("Humidity (%)", features.humidity_pct),
        ("Clay (%)", features.clay_pct),
        ("Sand (%)", features.sand_pct),
        ("Silt (%)", features.silt_pct),
        ("Bulk density (cg/cm³)", features.bulk_density),
    ], columns=["Signal", "Value"])
    st.dataframe(inputs, hide_index=True, use_container_width=True)
    st.caption(f"Climate: {assessment.climate.zone.value}, "
               f"{assessment.climate.vegetation_density.value} vegetation")

with right:
    st.subheader("Stability")
    if assessment.stability is None:
        st.info(f"{verdict.environment.value}: short-circuit verdict, no slope model run.")
    else:
        params = assessment.geotechnical
        stab = assessment.stability
        st.write(
            f"c = **{params.cohesion_kpa:.2f} kPa**, φ = **{params.friction_angle_deg:.1f}°**, "
            f"γ = **{params.unit_weight_kn_m3:.2f} kN/m³**, saturation **{stab.saturation:.0%}**"
        )
        stresses = pd.DataFrame({
            "term": ["σ", "u", "σ'", "τ resisting", "τ driving"],
            "kPa": [
                stab.normal_stress_kpa,
                stab.pore_pressure_kpa,
                stab.effective_normal_stress_kpa,
                stab.resisting_shear_kpa,
                stab.driving_shear_kpa,
            ],
        })
        fig = px.bar(stresses, x="term", y="kPa", title="Stress terms on the failure plane")
        st.plotly_chart(fig, use_container_width=True)

with st.expander("Reasoning trace"):
    for line in assessment.reasoning_trace:
        st.text(line)

with st.expander("Raw JSON"):
    st.json({**assessment.to_dict(), "sources": location.to_dict()})
