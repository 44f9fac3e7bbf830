import numpy as np
import pytest
import requests
from unittest.mock import MagicMock, patch
from tenacity import wait_none

import loaders.soil
from loaders.soil import SoilGridsLoader, SoilSample, SoilCache
from loaders.soil_raster import SoilRasterProvider


def _layer(name, mean):
    return {"name": name, "depths": [{"label": "0-5cm", "values": {"mean": mean}}]}


SOILGRIDS = {
    "properties": {
        "layers": [
            _layer("bdod", 132),
            _layer("clay", 284),
            _layer("sand", 391),
            _layer("silt", 325),
            _layer("soc", 215),
            _layer("phh2o", 61),
        ]
    }
}

WATER = {
    "properties": {
        "layers": [_layer("bdod", None), _layer("clay", None), _layer("sand", None)]
    }
}


@pytest.fixture
def mock_loader(tmp_path, monkeypatch):
    monkeypatch.setattr(loaders.soil, "_MIN_REQUEST_INTERVAL", 0.0)
    monkeypatch.setattr(SoilGridsLoader._fetch.retry, "wait", wait_none())
    cache_path = str(tmp_path / "test_soil.db")
    with patch('requests.Session') as mock_session:
        loader = SoilGridsLoader(cache_path=cache_path)
        loader.session = mock_session.return_value
        yield loader


def _respond(loader, payload):
    mock_response = MagicMock()
    mock_response.json.return_value = payload
    loader.session.get.return_value = mock_response


def _sandy_raster():
    provider = SoilRasterProvider()
    provider.register("sandy", np.full((4, 4), 0.9), (85.0, 27.0, 86.0, 28.0))
    provider.register("clayey", np.full((4, 4), 0.2), (85.0, 27.0, 86.0, 28.0))
    return provider


def test_get_soil_converts_units(mock_loader):
    """Verify g/kg, dg/kg and pH×10 conversions."""
    _respond(mock_loader, SOILGRIDS)

    sample = mock_loader.get_soil(27.7, 85.3)
    assert sample.clay_pct == pytest.approx(28.4)
    assert sample.sand_pct == pytest.approx(39.1)
    assert sample.silt_pct == pytest.approx(32.5)
    assert sample.bulk_density == 132.0
    assert sample.organic_carbon == pytest.approx(2.15)
    assert sample.ph == pytest.approx(6.1)
    assert sample.measured is True
    assert sample.is_water is False


def test_missing_silt_is_remainder(mock_loader):
    layers = [l for l in SOILGRIDS["properties"]["layers"] if l["name"] != "silt"]
    _respond(mock_loader, {"properties": {"layers": layers}})

    sample = mock_loader.get_soil(27.7, 85.3)
    assert sample.silt_pct == pytest.approx(100 - 28.4 - 39.1)


def test_nulls_mean_water(mock_loader):
    _respond(mock_loader, WATER)

    sample = mock_loader.get_soil(10.0, -30.0)
    assert sample.is_water
    assert sample.clay_pct == sample.sand_pct == sample.silt_pct == 0.0


def test_cache_hit_skips_request(mock_loader):
    _respond(mock_loader, SOILGRIDS)
    first = mock_loader.get_soil(27.7, 85.3)
    second = mock_loader.get_soil(27.7001, 85.3001)

    assert mock_loader.session.get.call_count == 1
    assert second == first


def test_failure_without_raster(mock_loader):
    mock_loader.session.get.side_effect = requests.ConnectionError("offline")
    assert mock_loader.get_soil(27.7, 85.3) is None


def test_failure_falls_back_to_raster(mock_loader):
    mock_loader.raster = _sandy_raster()
    mock_loader.session.get.side_effect = requests.ConnectionError("offline")

    sample = mock_loader.get_soil(27.7, 85.3, depth_m=2.5)
    assert sample.measured is False
    assert sample.data_source == "Raster-sandy"
    assert sample.sand_pct == 85


def test_unloaded_raster_fallback(mock_loader):
    mock_loader.raster = SoilRasterProvider()
    mock_loader.session.get.side_effect = requests.Timeout("slow")
    assert mock_loader.get_soil(27.7, 85.3) is None


def test_malformed_response_falls_back(mock_loader):
    mock_loader.raster = _sandy_raster()
    _respond(mock_loader, {"unexpected": True})

    sample = mock_loader.get_soil(27.7, 85.3)
    assert sample.data_source == "Raster-sandy"


def test_fallback_not_cached(mock_loader):
    mock_loader.raster = _sandy_raster()
    mock_loader.session.get.side_effect = requests.ConnectionError("offline")
    mock_loader.get_soil(27.7, 85.3)
    assert mock_loader.cache.get(27.7, 85.3) is None


def test_cache_roundtrip(tmp_path):
    cache = SoilCache(str(tmp_path / "cache.db"))
    sample = SoilSample(1.0, 2.0, 20.0, 40.0, 40.0, 140.0, organic_carbon=1.5, ph=6.5)
    cache.set(sample)
    assert cache.get(1.0, 2.0) == sample
    assert cache.get(1.1, 2.0) is None
