"""
Susceptibility index - empirical weighted-overlay scoring.

Alternative to the factor-of-safety tiers, selected with
ScoringMode.SUSCEPTIBILITY_INDEX:

    SI = w_slope·Slope + w_rain·Rain + w_soil·Soil + w_veg·Veg + w_fos·Stability

Every factor is normalized to [0, 1]; weights come from EngineConfig and
sum to 1.
"""

from typing import Dict, Tuple

from core.models import RiskLevel, SoilTexture, VegetationDensity
from core.risk import level_for_probability

MAX_SLOPE_DEG = 45.0
MAX_RAIN_7DAY_MM = 200.0
MAX_RAIN_CURRENT_MM = 50.0

# Relative susceptibility of each texture to shallow failure
SOIL_FACTORS = {
    SoilTexture.SILT: 0.9,
    SoilTexture.SILT_LOAM: 0.8,
    SoilTexture.LOAMY_SAND: 0.75,
    SoilTexture.SAND: 0.7,
    SoilTexture.SANDY_LOAM: 0.7,
    SoilTexture.LOAM: 0.6,
    SoilTexture.SILTY_CLAY_LOAM: 0.6,
    SoilTexture.CLAY_LOAM: 0.5,
    SoilTexture.SANDY_CLAY_LOAM: 0.5,
    SoilTexture.SILTY_CLAY: 0.55,
    SoilTexture.CLAY: 0.45,
    SoilTexture.SANDY_CLAY: 0.4,
    SoilTexture.UNKNOWN: 0.5,
}

VEGETATION_FACTORS = {
    VegetationDensity.MINIMAL: 1.0,
    VegetationDensity.SPARSE: 0.7,
    VegetationDensity.MODERATE: 0.4,
    VegetationDensity.DENSE: 0.2,
}


def factor_scores(
    slope_deg: float,
    rain_current_mm: float,
    rain_7day_mm: float,
    texture: SoilTexture,
    vegetation: VegetationDensity,
    fos: float,
) -> Dict[str, float]:
    """Normalized [0, 1] factor values keyed like the overlay weights."""
    rain = max(rain_7day_mm / MAX_RAIN_7DAY_MM, rain_current_mm / MAX_RAIN_CURRENT_MM)
    return {
        "slope": min(max(slope_deg / MAX_SLOPE_DEG, 0.0), 1.0),
        "rainfall": min(max(rain, 0.0), 1.0),
        "soil": SOIL_FACTORS.get(texture, 0.5),
        "vegetation": VEGETATION_FACTORS.get(vegetation, 0.5),
        "stability": min(1.0, 1.0 / max(fos, 0.01)),
    }


def susceptibility_index(factors: Dict[str, float], weights: Dict[str, float]) -> float:
    index = sum(weights[name] * factors.get(name, 0.0) for name in weights)
    return min(max(index, 0.0), 1.0)


def score_susceptibility(
    slope_deg: float,
    rain_current_mm: float,
    rain_7day_mm: float,
    texture: SoilTexture,
    vegetation: VegetationDensity,
    fos: float,
    weights: Dict[str, float],
    flat_slope_deg: float = 5.0,
    max_probability: float = 0.99,
) -> Tuple[float, float, RiskLevel]:
    """Return (index, probability, level) under the overlay scheme."""
    factors = factor_scores(slope_deg, rain_current_mm, rain_7day_mm, texture, vegetation, fos)
    index = susceptibility_index(factors, weights)
    if slope_deg < flat_slope_deg:
        return index, 0.0, RiskLevel.VERY_LOW
    probability = min(index, max_probability)
    return index, probability, level_for_probability(probability)
