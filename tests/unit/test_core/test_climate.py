import pytest
from core.climate import classify_climate, classify_features
from core.models import ClimateZoneType, VegetationDensity


def test_polar():
    zone = classify_climate(70.0, -10.0, -15.0, -5.0, 0.0)
    assert zone.zone == ClimateZoneType.POLAR
    assert zone.vegetation_density == VegetationDensity.MINIMAL
    assert zone.permafrost is True


def test_polar_summer_no_permafrost():
    zone = classify_climate(-70.0, 3.0, 0.0, 5.0, 0.0)
    assert zone.zone == ClimateZoneType.POLAR
    assert zone.permafrost is False


def test_subarctic_permafrost_threshold():
    assert classify_climate(63.0, -6.0, -8.0, -4.0, 0.0).permafrost is True
    assert classify_climate(63.0, -4.0, -8.0, -2.0, 0.0).permafrost is False
    assert classify_climate(63.0, -4.0, -8.0, -2.0, 0.0).vegetation_density == VegetationDensity.SPARSE


def test_cold():
    zone = classify_climate(45.0, -3.0, -8.0, 2.0, 10.0)
    assert zone.zone == ClimateZoneType.COLD
    assert zone.permafrost is False


def test_tropical_needs_rain():
    wet = classify_climate(5.0, 28.0, 24.0, 32.0, 80.0)
    dry = classify_climate(5.0, 28.0, 24.0, 32.0, 10.0)
    assert wet.zone == ClimateZoneType.TROPICAL
    assert wet.vegetation_density == VegetationDensity.DENSE
    assert dry.zone == ClimateZoneType.ARID
    assert dry.vegetation_density == VegetationDensity.SPARSE


def test_temperate_and_continental():
    assert classify_climate(40.0, 17.0, 10.0, 24.0, 0.0).zone == ClimateZoneType.TEMPERATE
    continental = classify_climate(40.0, 10.0, 5.0, 15.0, 0.0)
    assert continental.zone == ClimateZoneType.CONTINENTAL
    assert continental.vegetation_density == VegetationDensity.MODERATE


def test_classify_features(make_features):
    zone = classify_features(make_features())
    assert zone.zone == ClimateZoneType.TEMPERATE
    assert zone.to_dict()["vegetation_density"] == "moderate"
