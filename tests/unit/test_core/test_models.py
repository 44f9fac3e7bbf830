import math
import pytest
from core.models import (
    EnvironmentalFeatures, FeatureValidationError, RiskLevel, RiskVerdict,
    Environment, StabilityAssessment,
)


def test_features_defaults():
    """Verify daily extremes default to the current temperature."""
    f = EnvironmentalFeatures(
        latitude=10.0, longitude=20.0, slope_deg=5.0, elevation_m=100.0,
        rain_current_mm=0.0, rain_7day_mm=0.0, temperature_c=12.0,
        humidity_pct=40.0, weather_code=0, clay_pct=20.0, sand_pct=40.0,
        silt_pct=40.0, bulk_density=130.0,
    )
    assert f.temperature_min_c == 12.0
    assert f.temperature_max_c == 12.0
    assert f.failure_depth_m == 2.5
    assert f.is_water_hint is False
    assert f.is_simulated is False


def test_features_are_immutable(make_features):
    f = make_features()
    with pytest.raises(Exception):
        f.slope_deg = 30.0


@pytest.mark.parametrize("overrides", [
    {"latitude": 95.0},
    {"longitude": -181.0},
    {"slope_deg": -1.0},
    {"slope_deg": 91.0},
    {"slope_deg": float("nan")},
    {"rain_7day_mm": -5.0},
    {"rain_current_mm": float("inf")},
    {"humidity_pct": 120.0},
    {"clay_pct": 101.0},
    {"sand_pct": -1.0},
    {"bulk_density": -10.0},
    {"organic_carbon": -0.1},
    {"failure_depth_m": 0.0},
    {"weather_code": True},
    {"weather_code": 3.5},
    {"temperature_c": float("nan")},
])
def test_features_reject_invalid(make_features, overrides):
    """Verify invalid input is rejected before any computation."""
    with pytest.raises(FeatureValidationError):
        make_features(**overrides)


def test_validation_error_is_value_error(make_features):
    with pytest.raises(ValueError):
        make_features(latitude=float("nan"))


def test_fractions_normalize(make_features):
    f = make_features(clay_pct=20.0, sand_pct=20.0, silt_pct=10.0)
    fr = f.fractions()
    assert fr["clay"] == pytest.approx(0.4)
    assert fr["sand"] == pytest.approx(0.4)
    assert fr["silt"] == pytest.approx(0.2)
    assert math.isclose(sum(fr.values()), 1.0)


def test_fractions_without_composition(make_features):
    f = make_features(clay_pct=0.0, sand_pct=0.0, silt_pct=0.0, bulk_density=0.0)
    assert f.fractions() is None


def test_risk_level_ordering():
    levels = list(RiskLevel)
    assert [l.value for l in levels] == sorted(l.value for l in levels)
    assert RiskLevel.VERY_LOW.label == "Very Low"
    assert RiskLevel.EXTREME.label == "Extreme"


def test_verdict_to_dict():
    verdict = RiskVerdict(
        level=RiskLevel.HIGH,
        factor_of_safety=0.91234,
        probability=0.6,
        soil_type="Clay",
        environment=Environment.SOIL_SLOPE,
        reason="Slope failure imminent.",
    )
    d = verdict.to_dict()
    assert d["level"] == "High"
    assert d["environment"] == "Soil Slope"
    assert d["factor_of_safety"] == 0.912


def test_stability_to_dict_rounds():
    stab = StabilityAssessment(1.23456, 2.0, 0.5, 0.73456, 3.0, 1.5, 0.25)
    d = stab.to_dict()
    assert d["normal_stress_kpa"] == 1.2346
    assert d["saturation"] == 0.25
