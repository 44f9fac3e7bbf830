import pytest
from core.models import EnvironmentalFeatures

# A temperate hillside: mean temperature 17°C, max 24°C → Temperate zone
BASE_FEATURES = dict(
    latitude=27.7172,
    longitude=85.3240,
    slope_deg=15.0,
    elevation_m=1400.0,
    rain_current_mm=0.0,
    rain_7day_mm=0.0,
    temperature_c=17.0,
    temperature_min_c=10.0,
    temperature_max_c=24.0,
    humidity_pct=60.0,
    weather_code=3,
    clay_pct=40.0,
    sand_pct=30.0,
    silt_pct=30.0,
    bulk_density=140.0,
    organic_carbon=0.0,
    failure_depth_m=1.0,
)


@pytest.fixture
def make_features():
    """Factory for EnvironmentalFeatures with sensible temperate defaults."""
    def _make(**overrides):
        values = dict(BASE_FEATURES)
        values.update(overrides)
        return EnvironmentalFeatures(**values)
    return _make
