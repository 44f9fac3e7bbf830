"""
Landslide Engine - the inference pipeline for a single point.

    features → climate → environment router ─┬→ terminal verdict
                                             └→ texture → geotech → stability → risk
"""

import logging
from typing import List, Optional

from core.climate import classify_features
from core.config import EngineConfig, get_default_config
from core.environment import route
from core.models import (
    Assessment,
    Environment,
    EnvironmentalFeatures,
    RiskVerdict,
    ScoringMode,
)
from core.risk import explain, score_risk
from core.stability import soil_slope_model
from core.susceptibility import score_susceptibility

log = logging.getLogger(__name__)


class LandslideEngine:
    """
    Stateless landslide risk engine.

    Usage:
        engine = LandslideEngine()
        assessment = engine.assess(features)
        print(assessment.verdict.level.label, assessment.verdict.reason)
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_default_config()

    def assess(self, features: EnvironmentalFeatures) -> Assessment:
        """Evaluate one feature bundle and return the verdict with its derivation."""
        cfg = self.config
        trace: List[str] = []

        climate = classify_features(features)
        trace.append(
            f"Climate: {climate.zone.value} ({climate.vegetation_density.value} vegetation"
            f"{', permafrost' if climate.permafrost else ''})"
        )

        special = route(features, climate, cfg)
        if special is not None:
            trace.append(f"Environment: {special.environment.value} (short-circuit)")
            log.info(f"({features.latitude:.4f}, {features.longitude:.4f}) → "
                     f"{special.environment.value}: {special.level.label}")
            return Assessment(
                verdict=special,
                features=features,
                climate=climate,
                scoring_mode=cfg.scoring_mode,
                reasoning_trace=trace,
            )
        trace.append(f"Environment: {Environment.SOIL_SLOPE.value}")

        texture, params, stability = soil_slope_model(features, climate.vegetation_density, cfg)
        fractions = features.fractions()
        trace.append(f"Texture: {texture.value}")
        trace.append(
            f"Strength: c={params.cohesion_kpa:.2f} kPa "
            f"(roots +{params.root_cohesion_kpa:.0f}), φ={params.friction_angle_deg:.1f}°, "
            f"γ={params.unit_weight_kn_m3:.2f} kN/m³"
        )
        fos = stability.factor_of_safety
        trace.append(
            f"Stress: σ'={stability.effective_normal_stress_kpa:.2f}, "
            f"τr={stability.resisting_shear_kpa:.2f}, τd={stability.driving_shear_kpa:.2f} kPa, "
            f"FoS={fos:.2f}"
        )

        index = None
        if cfg.scoring_mode == ScoringMode.SUSCEPTIBILITY_INDEX:
            index, probability, level = score_susceptibility(
                features.slope_deg,
                features.rain_current_mm,
                features.rain_7day_mm,
                texture,
                climate.vegetation_density,
                fos,
                cfg.overlay_weights,
                flat_slope_deg=cfg.flat_slope_deg,
                max_probability=cfg.max_probability,
            )
            trace.append(f"Susceptibility index: {index:.3f}")
        else:
            probability, level = score_risk(
                fos,
                features.slope_deg,
                features.rain_current_mm,
                features.rain_7day_mm,
                flat_slope_deg=cfg.flat_slope_deg,
                max_probability=cfg.max_probability,
            )
        trace.append(f"Risk: {level.label} (p={probability:.2f})")

        reason = explain(
            features.slope_deg,
            texture,
            fractions,
            features.rain_current_mm,
            features.rain_7day_mm,
            climate.vegetation_density,
            params,
            fos,
            flat_slope_deg=cfg.flat_slope_deg,
        )

        verdict = RiskVerdict(
            level=level,
            factor_of_safety=fos,
            probability=probability,
            soil_type=texture.value,
            environment=Environment.SOIL_SLOPE,
            reason=reason,
        )
        log.info(f"({features.latitude:.4f}, {features.longitude:.4f}) → "
                 f"{level.label} (FoS {fos:.2f}, p={probability:.2f})")

        return Assessment(
            verdict=verdict,
            features=features,
            climate=climate,
            scoring_mode=cfg.scoring_mode,
            texture=texture,
            geotechnical=params,
            stability=stability,
            susceptibility_index=index,
            reasoning_trace=trace,
        )


def assess(features: EnvironmentalFeatures, config: Optional[EngineConfig] = None) -> Assessment:
    """Assess one feature bundle with a throwaway engine."""
    return LandslideEngine(config).assess(features)
