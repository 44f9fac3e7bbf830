import json
import time
import pytest
from unittest.mock import MagicMock

from core.models import FeatureValidationError
from loaders.unified import UnifiedDataFetcher, LocationData, build_features, DEFAULT_WEATHER
from loaders.weather import WeatherResult
from loaders.soil import SoilSample
from loaders.elevation import TopographyResult

WEATHER = WeatherResult(
    latitude=27.7, longitude=85.3, temperature_c=18.0, humidity_pct=75.0,
    rain_current_mm=4.0, rain_7day_mm=60.0, weather_code=61,
    temperature_min_c=12.0, temperature_max_c=23.0, wind_speed_kmh=8.0,
)
SOIL = SoilSample(27.7, 85.3, 28.4, 39.1, 32.5, 132.0, organic_carbon=2.15, ph=6.1)
TOPOGRAPHY = TopographyResult(27.7, 85.3, 1400.0, 32.5, 210.0)


@pytest.fixture
def mock_fetcher():
    """Fetcher with every provider replaced by a mock."""
    fetcher = UnifiedDataFetcher(weather=MagicMock(), soil=MagicMock(), elevation=MagicMock())
    fetcher.weather.get_weather.return_value = WEATHER
    fetcher.soil.get_soil.return_value = SOIL
    fetcher.elevation.get_topography.return_value = TOPOGRAPHY
    return fetcher


def test_fetch_all_sources(mock_fetcher):
    data = mock_fetcher.fetch(27.7, 85.3, failure_depth_m=1.2)

    assert data.data_complete
    assert sorted(data.data_sources) == ["Open-Meteo", "SoilGrids", "weather"]
    f = data.features
    assert f.slope_deg == 32.5
    assert f.elevation_m == 1400.0
    assert f.aspect_deg == 210.0
    assert f.clay_pct == 28.4
    assert f.rain_7day_mm == 60.0
    assert f.temperature_max_c == 23.0
    assert f.failure_depth_m == 1.2
    assert f.soil_measured is True
    assert not data.is_simulated
    mock_fetcher.soil.get_soil.assert_called_once_with(27.7, 85.3, 1.2)


def test_missing_sources_use_defaults(mock_fetcher):
    mock_fetcher.weather.get_weather.return_value = None
    mock_fetcher.soil.get_soil.return_value = None
    mock_fetcher.elevation.get_topography.return_value = None

    data = mock_fetcher.fetch(27.7, 85.3)

    assert not data.data_complete
    assert len(data.fetch_errors) == 3
    f = data.features
    assert f.temperature_c == DEFAULT_WEATHER["temperature_c"]
    assert f.slope_deg == 0.0
    assert f.clay_pct == 27
    assert f.soil_measured is False


def test_provider_exception_is_recorded(mock_fetcher):
    mock_fetcher.elevation.get_topography.side_effect = RuntimeError("boom")

    data = mock_fetcher.fetch(27.7, 85.3)
    assert any("topography: boom" in e for e in data.fetch_errors)
    assert data.features.slope_deg == 0.0


def test_slow_provider_times_out(mock_fetcher, monkeypatch):
    """A provider that outlives the fetch timeout falls back to defaults."""
    monkeypatch.setattr(UnifiedDataFetcher, "FETCH_TIMEOUT_S", 0.05)

    def slow_topography(lat, lon):
        time.sleep(0.5)
        return TOPOGRAPHY

    mock_fetcher.elevation.get_topography.side_effect = slow_topography

    data = mock_fetcher.fetch(27.7, 85.3)
    assert data.fetch_errors == ["topography: timed out, using defaults"]
    assert data.topography is None
    assert data.features.slope_deg == 0.0
    assert data.features.clay_pct == 28.4


def test_manual_rain_override(mock_fetcher):
    data = mock_fetcher.fetch(27.7, 85.3, manual_rain_mm=180.0)

    assert data.is_simulated
    assert data.features.rain_current_mm == 180.0
    assert data.features.rain_7day_mm == 180.0


def test_build_features_water_sample():
    f = build_features(10.0, -30.0, weather=WEATHER, soil=SoilSample.water(10.0, -30.0))
    assert f.is_water_hint
    assert f.composition_total == 0.0


def test_build_features_rejects_bad_values():
    with pytest.raises(FeatureValidationError):
        build_features(27.7, 85.3, weather=WEATHER, soil=SOIL, topography=TOPOGRAPHY, failure_depth_m=0.0)
    with pytest.raises(FeatureValidationError):
        build_features(27.7, 85.3, manual_rain_mm=-5.0)


def test_location_data_to_dict(mock_fetcher):
    d = mock_fetcher.fetch(27.7, 85.3).to_dict()
    json.dumps(d)
    assert d["location"] == {"lat": 27.7, "lng": 85.3}
    assert d["soil"]["clay_pct"] == 28.4
    assert d["fetch_errors"] == []


def test_empty_location_data():
    data = LocationData(latitude=1.0, longitude=2.0)
    assert data.data_complete
    assert data.to_dict()["weather"] is None
