"""
Engine configuration - calibration constants and the scoring mode switch.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from core.models import ScoringMode

log = logging.getLogger(__name__)


# Weighted-overlay factor weights (must sum to 1)
DEFAULT_OVERLAY_WEIGHTS = {
    "slope": 0.35,
    "rainfall": 0.25,
    "soil": 0.20,
    "vegetation": 0.10,
    "stability": 0.10,
}


@dataclass
class EngineConfig:
    """
    Fixed calibration constants for the inference engine.

    The defaults are the canonical factor-of-safety scheme. The
    susceptibility-index scheme is an alternative scoring mode and is
    only used when selected explicitly.
    """
    scoring_mode: ScoringMode = ScoringMode.FACTOR_OF_SAFETY

    # Near-flat terrain cannot fail under gravity
    flat_slope_deg: float = 5.0
    flat_ground_fos: float = 15.0

    # Sentinel FoS reported for open water
    water_fos: float = 100.0

    fos_epsilon: float = 0.01
    friction_bounds: Tuple[float, float] = (12.0, 45.0)

    # Roots rarely reach deeper failure planes
    root_depth_limit_m: float = 1.5

    default_failure_depth_m: float = 2.5
    max_probability: float = 0.99

    overlay_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_OVERLAY_WEIGHTS)
    )

    def __post_init__(self):
        low, high = self.friction_bounds
        if not 0 < low < high <= 90:
            raise ValueError(f"Invalid friction bounds: {self.friction_bounds}")
        if self.flat_slope_deg < 0:
            raise ValueError("flat_slope_deg must be non-negative")
        if self.fos_epsilon <= 0:
            raise ValueError("fos_epsilon must be positive")
        total = sum(self.overlay_weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Overlay weights must sum to 1.0, got {total:.4f}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from LANDSLIDE_* environment variables."""
        kwargs = {}

        mode = os.environ.get("LANDSLIDE_SCORING_MODE")
        if mode:
            try:
                kwargs["scoring_mode"] = ScoringMode(mode.strip().lower())
            except ValueError:
                raise ValueError(
                    f"Unknown LANDSLIDE_SCORING_MODE {mode!r}; expected one of "
                    f"{[m.value for m in ScoringMode]}"
                )

        depth = os.environ.get("LANDSLIDE_FAILURE_DEPTH_M")
        if depth:
            kwargs["default_failure_depth_m"] = float(depth)

        min_friction = os.environ.get("LANDSLIDE_MIN_FRICTION_DEG")
        if min_friction:
            kwargs["friction_bounds"] = (float(min_friction), 45.0)

        config = cls(**kwargs)
        log.debug(f"Engine config: mode={config.scoring_mode.value}, "
                  f"friction={config.friction_bounds}")
        return config


_default_config = None


def get_default_config() -> EngineConfig:
    """Get the shared default config (read-only by convention)."""
    global _default_config
    if _default_config is None:
        _default_config = EngineConfig()
    return _default_config
