"""
Core module for the Landslide Risk Engine.
Contains data models, classifiers, the stability model and the engine facade.
"""

from core.models import (
    Assessment,
    ClimateZone,
    ClimateZoneType,
    Environment,
    EnvironmentalFeatures,
    FeatureValidationError,
    GeotechnicalParameters,
    RiskLevel,
    RiskVerdict,
    ScoringMode,
    SoilTexture,
    StabilityAssessment,
    VegetationDensity,
)
from core.config import EngineConfig
from core.engine import LandslideEngine, assess

__all__ = [
    # Models
    "Assessment",
    "ClimateZone",
    "ClimateZoneType",
    "Environment",
    "EnvironmentalFeatures",
    "FeatureValidationError",
    "GeotechnicalParameters",
    "RiskLevel",
    "RiskVerdict",
    "ScoringMode",
    "SoilTexture",
    "StabilityAssessment",
    "VegetationDensity",
    # Engine
    "EngineConfig",
    "LandslideEngine",
    "assess",
]
