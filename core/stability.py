"""
Infinite-slope Mohr-Coulomb stability.

    σ   = γ·z·cos²β
    τd  = γ·z·sinβ·cosβ
    σ'  = max(0, σ - u)
    τr  = c + σ'·tanφ
    FoS = τr / (τd + ε)
"""

import math
from typing import Tuple

from core.config import EngineConfig
from core.geotech import estimate_parameters
from core.models import (
    EnvironmentalFeatures,
    GeotechnicalParameters,
    SoilTexture,
    StabilityAssessment,
    VegetationDensity,
)
from core.texture import classify_texture

# Pore-pressure model
HUMIDITY_WEIGHT = 0.15
SATURATION_RAIN_MM = 150.0
PORE_PRESSURE_RATIO = 0.6
CLAY_RETENTION = 0.5
MAX_PORE_RATIO = 0.9


def pore_saturation(humidity_pct: float, rain_7day_mm: float) -> float:
    """Antecedent saturation: humidity baseline plus 7-day rainfall, in [0, 1]."""
    saturation = HUMIDITY_WEIGHT * humidity_pct / 100.0 + rain_7day_mm / SATURATION_RAIN_MM
    return min(max(saturation, 0.0), 1.0)


def pore_pressure(normal_stress: float, saturation: float, f_clay: float) -> float:
    """Pore pressure on the failure plane, never above 90% of the normal stress."""
    u = normal_stress * saturation * PORE_PRESSURE_RATIO * (1 + CLAY_RETENTION * f_clay)
    return min(max(u, 0.0), MAX_PORE_RATIO * normal_stress)


def compute_stability(
    slope_deg: float,
    failure_depth_m: float,
    unit_weight_kn_m3: float,
    cohesion_kpa: float,
    friction_angle_deg: float,
    humidity_pct: float = 0.0,
    rain_7day_mm: float = 0.0,
    f_clay: float = 0.0,
    flat_slope_deg: float = 5.0,
    flat_ground_fos: float = 15.0,
    epsilon: float = 0.01,
) -> StabilityAssessment:
    """
    Compute stresses and the factor of safety for a planar failure surface.

    Slopes below ``flat_slope_deg`` report ``flat_ground_fos``: gravity
    cannot drive failure on near-flat ground regardless of soil strength.
    """
    beta = math.radians(slope_deg)
    cos_b = math.cos(beta)
    sin_b = math.sin(beta)
    weight = unit_weight_kn_m3 * failure_depth_m

    sigma = weight * cos_b ** 2
    tau_driving = weight * sin_b * cos_b

    saturation = pore_saturation(humidity_pct, rain_7day_mm)
    u = pore_pressure(sigma, saturation, f_clay)
    sigma_effective = max(0.0, sigma - u)

    tau_resisting = cohesion_kpa + sigma_effective * math.tan(math.radians(friction_angle_deg))

    if slope_deg < flat_slope_deg:
        fos = flat_ground_fos
    else:
        fos = tau_resisting / (tau_driving + epsilon)

    return StabilityAssessment(
        normal_stress_kpa=sigma,
        driving_shear_kpa=tau_driving,
        pore_pressure_kpa=u,
        effective_normal_stress_kpa=sigma_effective,
        resisting_shear_kpa=tau_resisting,
        factor_of_safety=max(fos, 0.0),
        saturation=saturation,
    )


def soil_slope_model(
    features: EnvironmentalFeatures,
    vegetation: VegetationDensity,
    config: EngineConfig,
) -> Tuple[SoilTexture, GeotechnicalParameters, StabilityAssessment]:
    """Texture, strength parameters and stability of a soil slope."""
    texture = classify_texture(features.clay_pct, features.sand_pct, features.silt_pct)
    fractions = features.fractions()

    params = estimate_parameters(
        features.clay_pct,
        features.sand_pct,
        features.silt_pct,
        features.bulk_density,
        organic_carbon=features.organic_carbon,
        rain_7day_mm=features.rain_7day_mm,
        vegetation=vegetation,
        failure_depth_m=features.failure_depth_m,
        texture=texture,
        friction_bounds=config.friction_bounds,
        root_depth_limit_m=config.root_depth_limit_m,
    )

    stability = compute_stability(
        features.slope_deg,
        features.failure_depth_m,
        params.unit_weight_kn_m3,
        params.cohesion_kpa,
        params.friction_angle_deg,
        humidity_pct=features.humidity_pct,
        rain_7day_mm=features.rain_7day_mm,
        f_clay=fractions["clay"] if fractions else 0.0,
        flat_slope_deg=config.flat_slope_deg,
        flat_ground_fos=config.flat_ground_fos,
        epsilon=config.fos_epsilon,
    )
    return texture, params, stability
