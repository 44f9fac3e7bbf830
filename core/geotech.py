"""
Geotechnical parameter estimation.

Derives cohesion, friction angle and unit weight from soil composition,
organic content, bulk density, vegetation and antecedent rainfall.

Weights (per unit fraction):
    cohesion  = 40·clay + 11·silt + 1·sand   (kPa)
    friction  = 36·sand + 30·silt + 19·clay  (degrees)
"""

import logging
import math
from typing import Optional, Tuple

from core.models import GeotechnicalParameters, SoilTexture, VegetationDensity

log = logging.getLogger(__name__)

COHESION_WEIGHTS = {"clay": 40.0, "silt": 11.0, "sand": 1.0}
FRICTION_WEIGHTS = {"sand": 36.0, "silt": 30.0, "clay": 19.0}

ORGANIC_BONUS_PER_PCT = 2.0
ORGANIC_BONUS_CAP_KPA = 10.0

# Saturation strips up to 40% of cohesion from pure clay
CLAY_SATURATION_LOSS = 0.4
SATURATION_RAIN_MM = 100.0

ROOT_COHESION_KPA = {
    VegetationDensity.DENSE: 15.0,
    VegetationDensity.MODERATE: 8.0,
    VegetationDensity.SPARSE: 3.0,
    VegetationDensity.MINIMAL: 0.0,
}

DEFAULT_FRICTION_DEG = 28.0
DEFAULT_BULK_DENSITY = 140.0
GRAVITY = 9.81

# Used when the computed cohesion is not a finite number
DEFAULT_COHESION_KPA = {
    SoilTexture.CLAY: 25.0,
    SoilTexture.SANDY_CLAY: 20.0,
    SoilTexture.SILTY_CLAY: 22.0,
    SoilTexture.CLAY_LOAM: 18.0,
    SoilTexture.SILTY_CLAY_LOAM: 16.0,
    SoilTexture.SANDY_CLAY_LOAM: 14.0,
    SoilTexture.LOAM: 12.0,
    SoilTexture.SILT_LOAM: 10.0,
    SoilTexture.SILT: 8.0,
    SoilTexture.SAND: 0.5,
    SoilTexture.LOAMY_SAND: 2.0,
    SoilTexture.SANDY_LOAM: 5.0,
    SoilTexture.UNKNOWN: 10.0,
}


def antecedent_saturation(rain_7day_mm: float) -> float:
    """Fraction of saturation from 7-day rainfall, capped at 1."""
    return min(max(rain_7day_mm, 0.0) / SATURATION_RAIN_MM, 1.0)


def base_cohesion(f_clay: float, f_sand: float, f_silt: float, organic_carbon: float = 0.0) -> float:
    """Dry cohesion from composition plus the capped organic-carbon bonus."""
    cohesion = (
        f_clay * COHESION_WEIGHTS["clay"]
        + f_silt * COHESION_WEIGHTS["silt"]
        + f_sand * COHESION_WEIGHTS["sand"]
    )
    bonus = min(max(organic_carbon, 0.0) * ORGANIC_BONUS_PER_PCT, ORGANIC_BONUS_CAP_KPA)
    return cohesion + bonus


def friction_angle(
    f_clay: float,
    f_sand: float,
    f_silt: float,
    bulk_density: float,
    bounds: Tuple[float, float] = (12.0, 45.0),
) -> float:
    """Friction angle from composition, nudged up by dense packing and clamped."""
    phi = (
        f_sand * FRICTION_WEIGHTS["sand"]
        + f_silt * FRICTION_WEIGHTS["silt"]
        + f_clay * FRICTION_WEIGHTS["clay"]
    )
    # Up to +3° for densely packed soils (above 1.2 g/cm³)
    density_bonus = min(max((bulk_density / 100.0 - 1.2) * 5.0, 0.0), 3.0)
    phi += density_bonus
    low, high = bounds
    return min(max(phi, low), high)


def root_cohesion(vegetation: VegetationDensity, failure_depth_m: float, depth_limit_m: float = 1.5) -> float:
    """Root reinforcement, only for failure planes roots can reach."""
    if failure_depth_m > depth_limit_m:
        return 0.0
    return ROOT_COHESION_KPA.get(vegetation, 0.0)


def unit_weight(bulk_density: float) -> float:
    """Convert bulk density (cg/cm³) to a unit weight in kN/m³."""
    gamma = bulk_density / 100.0 * GRAVITY
    if not math.isfinite(gamma) or gamma <= 0:
        log.debug(f"Bulk density {bulk_density} unusable, using default {DEFAULT_BULK_DENSITY}")
        gamma = DEFAULT_BULK_DENSITY / 100.0 * GRAVITY
    return gamma


def estimate_parameters(
    clay_pct: float,
    sand_pct: float,
    silt_pct: float,
    bulk_density: float,
    organic_carbon: float = 0.0,
    rain_7day_mm: float = 0.0,
    vegetation: VegetationDensity = VegetationDensity.MINIMAL,
    failure_depth_m: float = 2.5,
    texture: Optional[SoilTexture] = None,
    friction_bounds: Tuple[float, float] = (12.0, 45.0),
    root_depth_limit_m: float = 1.5,
) -> GeotechnicalParameters:
    """
    Estimate cohesion, friction angle and unit weight for a soil.

    Moisture degrades cohesion in proportion to clay content, so wet
    sands keep almost all of theirs while wet clays lose up to 40%.
    Every output is finite: non-finite intermediates are replaced by
    the friction default and a texture-dependent cohesion default.
    """
    total = clay_pct + sand_pct + silt_pct
    if math.isfinite(total) and total > 0:
        f_clay, f_sand, f_silt = clay_pct / total, sand_pct / total, silt_pct / total
    else:
        f_clay = f_sand = f_silt = float("nan")

    saturation = antecedent_saturation(rain_7day_mm) if math.isfinite(rain_7day_mm) else 0.0

    base = base_cohesion(f_clay, f_sand, f_silt, organic_carbon)
    cohesion = base * (1 - saturation * f_clay * CLAY_SATURATION_LOSS)
    if not math.isfinite(cohesion):
        cohesion = DEFAULT_COHESION_KPA[texture or SoilTexture.UNKNOWN]
        base = cohesion
        log.warning(f"Non-finite cohesion, using {cohesion} kPa default for {texture}")

    roots = root_cohesion(vegetation, failure_depth_m, root_depth_limit_m)
    cohesion = max(cohesion + roots, 0.0)

    phi = friction_angle(f_clay, f_sand, f_silt, bulk_density, friction_bounds)
    if not math.isfinite(phi):
        phi = DEFAULT_FRICTION_DEG
        log.warning(f"Non-finite friction angle, using {phi}° default")

    return GeotechnicalParameters(
        cohesion_kpa=cohesion,
        friction_angle_deg=phi,
        unit_weight_kn_m3=unit_weight(bulk_density),
        base_cohesion_kpa=base,
        root_cohesion_kpa=roots,
        saturation=saturation,
    )
