"""
Climate zone classification.

A coarse, explainable proxy from latitude, temperature extremes and
recent rainfall. Vegetation density feeds the root-cohesion bonus.
"""

from core.models import ClimateZone, ClimateZoneType, VegetationDensity


def classify_climate(
    latitude: float,
    temperature_c: float,
    temperature_min_c: float,
    temperature_max_c: float,
    rain_7day_mm: float,
) -> ClimateZone:
    """Classify a point into a climate zone using ordered rules."""
    abs_lat = abs(latitude)

    if abs_lat > 66:
        return ClimateZone(
            zone=ClimateZoneType.POLAR,
            vegetation_density=VegetationDensity.MINIMAL,
            permafrost=temperature_c < 0,
        )

    if abs_lat > 60:
        return ClimateZone(
            zone=ClimateZoneType.SUBARCTIC,
            vegetation_density=VegetationDensity.SPARSE,
            permafrost=temperature_c < -5,
        )

    mean_temp = (temperature_max_c + temperature_min_c) / 2

    if mean_temp < 0:
        return ClimateZone(ClimateZoneType.COLD, VegetationDensity.SPARSE)

    if mean_temp > 18:
        if rain_7day_mm > 50:
            return ClimateZone(ClimateZoneType.TROPICAL, VegetationDensity.DENSE)
        return ClimateZone(ClimateZoneType.ARID, VegetationDensity.SPARSE)

    if temperature_max_c > 22:
        return ClimateZone(ClimateZoneType.TEMPERATE, VegetationDensity.MODERATE)

    return ClimateZone(ClimateZoneType.CONTINENTAL, VegetationDensity.MODERATE)


def classify_features(features) -> ClimateZone:
    """Classify the climate for an EnvironmentalFeatures bundle."""
    return classify_climate(
        features.latitude,
        features.temperature_c,
        features.temperature_min_c,
        features.temperature_max_c,
        features.rain_7day_mm,
    )
