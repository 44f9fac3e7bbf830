"""
Core data models for the Landslide Risk Engine.
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class FeatureValidationError(ValueError):
    """Raised when an input bundle carries non-finite or out-of-range values."""


class SoilTexture(Enum):
    """USDA-style soil texture classes."""
    CLAY = "Clay"
    SANDY_CLAY = "Sandy Clay"
    SILTY_CLAY = "Silty Clay"
    CLAY_LOAM = "Clay Loam"
    SILTY_CLAY_LOAM = "Silty Clay Loam"
    SANDY_CLAY_LOAM = "Sandy Clay Loam"
    LOAM = "Loam"
    SILT_LOAM = "Silt Loam"
    SILT = "Silt"
    SAND = "Sand"
    LOAMY_SAND = "Loamy Sand"
    SANDY_LOAM = "Sandy Loam"
    UNKNOWN = "Unknown"


class ClimateZoneType(Enum):
    POLAR = "Polar"
    SUBARCTIC = "Subarctic"
    COLD = "Cold"
    TROPICAL = "Tropical"
    ARID = "Arid/Semi-arid"
    TEMPERATE = "Temperate"
    CONTINENTAL = "Continental"


class VegetationDensity(Enum):
    MINIMAL = "minimal"
    SPARSE = "sparse"
    MODERATE = "moderate"
    DENSE = "dense"


class RiskLevel(Enum):
    """Ordered risk tiers. Higher value means more dangerous."""
    SAFE = 0
    VERY_LOW = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    EXTREME = 5

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class Environment(Enum):
    """Terrain class chosen by the environment router."""
    WATER_BODY = "Water Body"
    FROZEN_GROUND = "Frozen Ground"
    SNOW_COVERED = "Snow-Covered Slope"
    ARID_DESERT = "Arid Desert"
    ROCK_OUTCROP = "Rock Outcrop"
    SOIL_SLOPE = "Soil Slope"


class ScoringMode(Enum):
    """How stability outputs are turned into a probability."""
    FACTOR_OF_SAFETY = "factor_of_safety"
    SUSCEPTIBILITY_INDEX = "susceptibility_index"


def _require(condition: bool, message: str):
    if not condition:
        raise FeatureValidationError(message)


def _finite(name: str, value: float):
    _require(
        isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value),
        f"{name} must be a finite number, got {value!r}",
    )


def _in_range(name: str, value: float, low: float, high: float):
    _finite(name, value)
    _require(low <= value <= high, f"{name} must be within [{low}, {high}], got {value}")


@dataclass(frozen=True)
class EnvironmentalFeatures:
    """
    The validated input bundle for one assessment.

    Built once at the boundary (see loaders.unified.build_features) and
    never mutated. Composition percentages need not sum to 100; they are
    normalized where they are used.
    """
    latitude: float
    longitude: float
    slope_deg: float
    elevation_m: float
    rain_current_mm: float
    rain_7day_mm: float
    temperature_c: float
    humidity_pct: float
    weather_code: int
    clay_pct: float
    sand_pct: float
    silt_pct: float
    bulk_density: float  # cg/cm³, SoilGrids "bdod" units; 0 means no data
    organic_carbon: float = 0.0  # percent
    failure_depth_m: float = 2.5
    is_water_hint: bool = False
    temperature_min_c: Optional[float] = None
    temperature_max_c: Optional[float] = None
    aspect_deg: Optional[float] = None
    wind_speed_kmh: Optional[float] = None
    ph: Optional[float] = None
    is_simulated: bool = False
    soil_measured: bool = True

    def __post_init__(self):
        _in_range("latitude", self.latitude, -90.0, 90.0)
        _in_range("longitude", self.longitude, -180.0, 180.0)
        _in_range("slope_deg", self.slope_deg, 0.0, 90.0)
        _finite("elevation_m", self.elevation_m)
        _finite("rain_current_mm", self.rain_current_mm)
        _require(self.rain_current_mm >= 0, "rain_current_mm must be non-negative")
        _finite("rain_7day_mm", self.rain_7day_mm)
        _require(self.rain_7day_mm >= 0, "rain_7day_mm must be non-negative")
        _finite("temperature_c", self.temperature_c)
        _in_range("humidity_pct", self.humidity_pct, 0.0, 100.0)
        _require(
            isinstance(self.weather_code, int) and not isinstance(self.weather_code, bool),
            f"weather_code must be an integer, got {self.weather_code!r}",
        )
        for name in ("clay_pct", "sand_pct", "silt_pct"):
            _in_range(name, getattr(self, name), 0.0, 100.0)
        _finite("bulk_density", self.bulk_density)
        _require(self.bulk_density >= 0, "bulk_density must be non-negative")
        _finite("organic_carbon", self.organic_carbon)
        _require(self.organic_carbon >= 0, "organic_carbon must be non-negative")
        _finite("failure_depth_m", self.failure_depth_m)
        _require(self.failure_depth_m > 0, "failure_depth_m must be positive")

        # Daily extremes default to the current reading
        if self.temperature_min_c is None:
            object.__setattr__(self, "temperature_min_c", self.temperature_c)
        if self.temperature_max_c is None:
            object.__setattr__(self, "temperature_max_c", self.temperature_c)
        _finite("temperature_min_c", self.temperature_min_c)
        _finite("temperature_max_c", self.temperature_max_c)

        for name in ("aspect_deg", "wind_speed_kmh", "ph"):
            value = getattr(self, name)
            if value is not None:
                _finite(name, value)

    @property
    def composition_total(self) -> float:
        return self.clay_pct + self.sand_pct + self.silt_pct

    def fractions(self) -> Optional[Dict[str, float]]:
        """Clay/sand/silt as fractions summing to 1, or None without data."""
        total = self.composition_total
        if total <= 0:
            return None
        return {
            "clay": self.clay_pct / total,
            "sand": self.sand_pct / total,
            "silt": self.silt_pct / total,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ClimateZone:
    """Coarse climate proxy derived per request."""
    zone: ClimateZoneType
    vegetation_density: VegetationDensity
    permafrost: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zone": self.zone.value,
            "vegetation_density": self.vegetation_density.value,
            "permafrost": self.permafrost,
        }


@dataclass
class GeotechnicalParameters:
    """Strength parameters used by the infinite-slope model."""
    cohesion_kpa: float
    friction_angle_deg: float
    unit_weight_kn_m3: float
    base_cohesion_kpa: float = 0.0
    root_cohesion_kpa: float = 0.0
    saturation: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cohesion_kpa": round(self.cohesion_kpa, 3),
            "friction_angle_deg": round(self.friction_angle_deg, 3),
            "unit_weight_kn_m3": round(self.unit_weight_kn_m3, 3),
            "base_cohesion_kpa": round(self.base_cohesion_kpa, 3),
            "root_cohesion_kpa": round(self.root_cohesion_kpa, 3),
            "saturation": round(self.saturation, 3),
        }


@dataclass
class StabilityAssessment:
    """Stress terms and factor of safety on the failure plane."""
    normal_stress_kpa: float
    driving_shear_kpa: float
    pore_pressure_kpa: float
    effective_normal_stress_kpa: float
    resisting_shear_kpa: float
    factor_of_safety: float
    saturation: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {k: round(v, 4) for k, v in asdict(self).items()}


@dataclass
class RiskVerdict:
    """The final, human-readable answer for one point."""
    level: RiskLevel
    factor_of_safety: float
    probability: float
    soil_type: str
    environment: Environment
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.label,
            "factor_of_safety": round(self.factor_of_safety, 3),
            "probability": round(self.probability, 3),
            "soil_type": self.soil_type,
            "environment": self.environment.value,
            "reason": self.reason,
        }


@dataclass
class Assessment:
    """
    A verdict together with every intermediate value that produced it.

    Short-circuit environments leave texture, geotechnical and stability
    fields as None.
    """
    verdict: RiskVerdict
    features: EnvironmentalFeatures
    climate: ClimateZone
    scoring_mode: ScoringMode = ScoringMode.FACTOR_OF_SAFETY
    texture: Optional[SoilTexture] = None
    geotechnical: Optional[GeotechnicalParameters] = None
    stability: Optional[StabilityAssessment] = None
    susceptibility_index: Optional[float] = None
    reasoning_trace: List[str] = field(default_factory=list)

    @property
    def is_simulated(self) -> bool:
        return self.features.is_simulated

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prediction": self.verdict.to_dict(),
            "data": self.features.to_dict(),
            "climate": self.climate.to_dict(),
            "scoring_mode": self.scoring_mode.value,
            "texture": self.texture.value if self.texture else None,
            "geotechnical": self.geotechnical.to_dict() if self.geotechnical else None,
            "stability": self.stability.to_dict() if self.stability else None,
            "susceptibility_index": self.susceptibility_index,
            "saturation_pct": round(self.stability.saturation * 100, 1) if self.stability else None,
            "is_simulated": self.is_simulated,
            "reasoning_trace": list(self.reasoning_trace),
        }
