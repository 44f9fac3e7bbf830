"""
Environment router - ordered guards for terrain that is not soil on a slope.

Each guard is checked in priority order; the first one that matches
returns a terminal verdict and the soil-slope analysis never runs.
Water and ice come first because soil fields are meaningless there.
"""

import logging
from typing import Optional, Tuple

from core.config import EngineConfig, get_default_config
from core.models import (
    ClimateZone,
    Environment,
    EnvironmentalFeatures,
    RiskLevel,
    RiskVerdict,
)
from core.stability import soil_slope_model

log = logging.getLogger(__name__)

# WMO weather codes
SNOW_CODES = frozenset({71, 73, 75, 77, 85, 86})
FREEZING_PRECIP_CODES = frozenset({56, 57, 66, 67})
PRECIP_CODES = frozenset(range(51, 68)) | frozenset({80, 81, 82, 95, 96, 99})


class EnvironmentGuard:
    """One terrain class: a trigger condition and the verdict it implies."""

    environment: Environment = Environment.SOIL_SLOPE
    soil_label: str = ""

    def matches(self, features: EnvironmentalFeatures, climate: ClimateZone) -> bool:
        raise NotImplementedError

    def verdict(
        self,
        features: EnvironmentalFeatures,
        climate: ClimateZone,
        config: EngineConfig,
    ) -> RiskVerdict:
        raise NotImplementedError

    def _verdict(self, level: RiskLevel, fos: float, probability: float, reason: str) -> RiskVerdict:
        return RiskVerdict(
            level=level,
            factor_of_safety=fos,
            probability=probability,
            soil_type=self.soil_label,
            environment=self.environment,
            reason=reason,
        )

    def _flat_verdict(self, config: EngineConfig, reason: str) -> RiskVerdict:
        """Near-flat terrain: gravity cannot drive failure."""
        return self._verdict(RiskLevel.VERY_LOW, config.flat_ground_fos, 0.0, reason)


class WaterBodyGuard(EnvironmentGuard):
    environment = Environment.WATER_BODY
    soil_label = "Water"

    MAX_ELEVATION_M = 2.0
    MAX_BULK_DENSITY = 15.0

    def matches(self, features, climate):
        if features.is_water_hint or features.composition_total <= 0:
            return True
        return (
            features.elevation_m <= self.MAX_ELEVATION_M
            and features.bulk_density < self.MAX_BULK_DENSITY
        )

    def verdict(self, features, climate, config):
        return self._verdict(
            RiskLevel.SAFE,
            config.water_fos,
            0.0,
            "Ocean or water body detected; there is no soil slope to fail.",
        )


class FrozenGroundGuard(EnvironmentGuard):
    environment = Environment.FROZEN_GROUND
    soil_label = "Ice"

    FREEZING_C = 0.0
    PERMAFROST_THAW_C = 2.0
    FOS = 0.9
    PROBABILITY = 0.6

    def matches(self, features, climate):
        if features.temperature_c <= self.FREEZING_C:
            return True
        return climate.permafrost and features.temperature_c < self.PERMAFROST_THAW_C

    def verdict(self, features, climate, config):
        if features.slope_deg < config.flat_slope_deg:
            return self._verdict(
                RiskLevel.LOW,
                config.flat_ground_fos,
                0.15,
                f"Frozen ground ({features.temperature_c:.1f}°C) on flat terrain; "
                f"thaw may cause settlement but gravity cannot drive a slide.",
            )
        return self._verdict(
            RiskLevel.HIGH,
            self.FOS,
            self.PROBABILITY,
            f"Freezing conditions ({features.temperature_c:.1f}°C): ice lenses and "
            f"freeze-thaw cycling weaken the slope.",
        )


class SnowCoveredGuard(EnvironmentGuard):
    environment = Environment.SNOW_COVERED
    soil_label = "Snow"

    NEAR_FREEZING_C = 2.0
    AVALANCHE_SLOPE_DEG = 25.0

    # (min slope, level, FoS, probability), steepest first
    TIERS = (
        (40.0, RiskLevel.EXTREME, 0.8, 0.85),
        (30.0, RiskLevel.HIGH, 0.9, 0.6),
        (AVALANCHE_SLOPE_DEG, RiskLevel.MEDIUM, 1.3, 0.35),
    )

    def is_snowing(self, features):
        code = features.weather_code
        if code in SNOW_CODES or code in FREEZING_PRECIP_CODES:
            return True
        return code in PRECIP_CODES and features.temperature_c <= self.NEAR_FREEZING_C

    def matches(self, features, climate):
        return self.is_snowing(features) and features.slope_deg >= self.AVALANCHE_SLOPE_DEG

    def verdict(self, features, climate, config):
        for min_slope, level, fos, probability in self.TIERS:
            if features.slope_deg >= min_slope:
                return self._verdict(
                    level,
                    fos,
                    probability,
                    f"Snow on a {features.slope_deg:.1f}° slope: avalanche hazard from the "
                    f"snowpack, distinct from soil shear failure.",
                )
        raise AssertionError("SnowCoveredGuard.verdict called on a slope below threshold")


class AridDesertGuard(EnvironmentGuard):
    environment = Environment.ARID_DESERT
    soil_label = "Desert Sand"

    MIN_TEMPERATURE_C = 30.0
    MAX_HUMIDITY_PCT = 25.0
    MIN_SAND_FRACTION = 0.6
    MAX_RAIN_7DAY_MM = 2.0

    PROBABILITY = 0.12

    def matches(self, features, climate):
        fractions = features.fractions()
        if fractions is None:
            return False
        return (
            features.temperature_c >= self.MIN_TEMPERATURE_C
            and features.humidity_pct <= self.MAX_HUMIDITY_PCT
            and fractions["sand"] >= self.MIN_SAND_FRACTION
            and features.rain_7day_mm < self.MAX_RAIN_7DAY_MM
            and features.rain_current_mm <= 0.0
        )

    def verdict(self, features, climate, config):
        if features.slope_deg < config.flat_slope_deg:
            return self._flat_verdict(
                config,
                "Flat arid desert: dry sand cannot slide here. "
                "Residual hazard is flash flooding during rare storms.",
            )
        # Soil-slope FoS for the same inputs, so it is never below the FoS
        # reported once more rain routes the point to the soil model
        _, params, stability = soil_slope_model(features, climate.vegetation_density, config)
        return self._verdict(
            RiskLevel.LOW,
            stability.factor_of_safety,
            self.PROBABILITY,
            f"Arid desert terrain: dry sand (cohesion {params.cohesion_kpa:.1f} kPa, "
            f"friction {params.friction_angle_deg:.0f}°) is stable while dry. "
            f"Residual hazard is flash flooding during rare storms.",
        )


class RockOutcropGuard(EnvironmentGuard):
    environment = Environment.ROCK_OUTCROP
    soil_label = "Rock"

    MIN_BULK_DENSITY = 180.0
    MAX_CLAY_PCT = 10.0
    MAX_SAND_PCT = 25.0
    ROCKFALL_SLOPE_DEG = 40.0

    def matches(self, features, climate):
        return (
            features.bulk_density >= self.MIN_BULK_DENSITY
            and features.clay_pct < self.MAX_CLAY_PCT
            and features.sand_pct < self.MAX_SAND_PCT
        )

    def verdict(self, features, climate, config):
        if features.slope_deg < config.flat_slope_deg:
            return self._flat_verdict(config, "Flat rock outcrop: competent bedrock with nothing to slide.")
        if features.slope_deg >= self.ROCKFALL_SLOPE_DEG:
            return self._verdict(
                RiskLevel.MEDIUM,
                1.3,
                0.35,
                f"Bare rock on a {features.slope_deg:.1f}° face: rockfall risk, "
                f"not a soil landslide.",
            )
        return self._verdict(
            RiskLevel.LOW,
            3.0,
            0.12,
            "Rock outcrop: competent bedrock with little soil to slide.",
        )


ENVIRONMENT_GUARDS: Tuple[EnvironmentGuard, ...] = (
    WaterBodyGuard(),
    FrozenGroundGuard(),
    SnowCoveredGuard(),
    AridDesertGuard(),
    RockOutcropGuard(),
)


def route(
    features: EnvironmentalFeatures,
    climate: ClimateZone,
    config: Optional[EngineConfig] = None,
    guards: Tuple[EnvironmentGuard, ...] = ENVIRONMENT_GUARDS,
) -> Optional[RiskVerdict]:
    """
    Return the first special-terrain verdict that applies, or None for a
    soil slope.
    """
    config = config or get_default_config()
    for guard in guards:
        if guard.matches(features, climate):
            log.debug(f"Routed to {guard.environment.value}")
            return guard.verdict(features, climate, config)
    return None
