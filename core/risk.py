"""
Risk classification and explanation.

Turns a factor of safety plus triggering factors into a probability,
a risk tier and a deterministic, templated rationale.
"""

from typing import List, Optional, Tuple

from core.models import GeotechnicalParameters, RiskLevel, SoilTexture, VegetationDensity
from core.texture import describe_texture

# (FoS upper bound, probability) tiers per slope band, checked in order
LENIENT_TIERS = ((1.0, 0.45), (1.3, 0.25), (1.7, 0.12))
MODERATE_TIERS = ((1.0, 0.75), (1.3, 0.50), (1.7, 0.25))
STRICT_TIERS = ((1.0, 0.95), (1.3, 0.70), (1.7, 0.40))
STABLE_PROBABILITY = {"lenient": 0.05, "moderate": 0.08, "strict": 0.12}

# (threshold mm, multiplier), highest first
CURRENT_RAIN_MULTIPLIERS = ((20.0, 1.3), (10.0, 1.15))
WEEKLY_RAIN_MULTIPLIERS = ((150.0, 1.4), (75.0, 1.2))

# (probability floor, level), highest first
LEVEL_STEPS = (
    (0.75, RiskLevel.EXTREME),
    (0.50, RiskLevel.HIGH),
    (0.25, RiskLevel.MEDIUM),
    (0.10, RiskLevel.LOW),
)


def slope_band(slope_deg: float) -> str:
    if slope_deg < 15:
        return "lenient"
    if slope_deg < 30:
        return "moderate"
    return "strict"


def base_probability(fos: float, slope_deg: float) -> float:
    """Failure probability from FoS; steeper slopes read a given FoS as riskier."""
    band = slope_band(slope_deg)
    tiers = {"lenient": LENIENT_TIERS, "moderate": MODERATE_TIERS, "strict": STRICT_TIERS}[band]
    for upper, probability in tiers:
        if fos < upper:
            return probability
    return STABLE_PROBABILITY[band]


def rainfall_multiplier(rain_current_mm: float, rain_7day_mm: float) -> float:
    multiplier = 1.0
    for threshold, factor in CURRENT_RAIN_MULTIPLIERS:
        if rain_current_mm > threshold:
            multiplier *= factor
            break
    for threshold, factor in WEEKLY_RAIN_MULTIPLIERS:
        if rain_7day_mm > threshold:
            multiplier *= factor
            break
    return multiplier


def level_for_probability(probability: float) -> RiskLevel:
    """Monotonic step function from probability to tier."""
    for floor, level in LEVEL_STEPS:
        if probability > floor:
            return level
    return RiskLevel.VERY_LOW


def score_risk(
    fos: float,
    slope_deg: float,
    rain_current_mm: float,
    rain_7day_mm: float,
    flat_slope_deg: float = 5.0,
    max_probability: float = 0.99,
) -> Tuple[float, RiskLevel]:
    """Return (probability, level) for a soil slope."""
    if slope_deg < flat_slope_deg:
        return 0.0, RiskLevel.VERY_LOW

    probability = base_probability(fos, slope_deg)
    probability *= rainfall_multiplier(rain_current_mm, rain_7day_mm)
    probability = min(probability, max_probability)
    return probability, level_for_probability(probability)


def fos_statement(fos: float) -> str:
    if fos < 1.0:
        return f"Slope failure imminent (FoS {fos:.2f})."
    if fos < 1.5:
        return f"Stability is compromised (FoS {fos:.2f})."
    return f"Terrain is stable (FoS {fos:.2f})."


def explain(
    slope_deg: float,
    texture: SoilTexture,
    fractions: Optional[dict],
    rain_current_mm: float,
    rain_7day_mm: float,
    vegetation: VegetationDensity,
    params: GeotechnicalParameters,
    fos: float,
    flat_slope_deg: float = 5.0,
) -> str:
    """
    Build the rationale from independently triggered factor sentences.

    Order is fixed: slope, soil texture, rainfall, vegetation, FoS.
    """
    sentences: List[str] = []

    # Slope
    if slope_deg > 35:
        sentences.append(f"Steep slope ({slope_deg:.1f}°) strongly favours failure.")
    elif slope_deg >= 15:
        sentences.append(f"Moderate slope ({slope_deg:.1f}°).")
    elif slope_deg < flat_slope_deg:
        sentences.append(f"Flat terrain ({slope_deg:.1f}°); gravity cannot drive a slide.")

    # Soil texture
    if fractions:
        label = texture.value
        if fractions["clay"] > 0.40:
            sentences.append(
                f"Clay-heavy {label} soil ({fractions['clay'] * 100:.0f}% clay) "
                f"provides cohesion but retains water."
            )
        elif fractions["sand"] > 0.50:
            sentences.append(
                f"Sandy {label} soil ({fractions['sand'] * 100:.0f}% sand) "
                f"drains well but lacks cohesion."
            )
        elif fractions["silt"] > 0.50:
            sentences.append(
                f"Silty {label} soil ({fractions['silt'] * 100:.0f}% silt) is {describe_texture(texture)}."
            )

    # Rainfall
    if rain_7day_mm > 150:
        sentences.append(f"Heavy 7-day rainfall ({rain_7day_mm:.0f} mm) has saturated the ground.")
    elif rain_7day_mm > 75:
        sentences.append(f"Significant 7-day rainfall ({rain_7day_mm:.0f} mm) is raising pore pressure.")
    if rain_current_mm > 20:
        sentences.append(f"Intense current rainfall ({rain_current_mm:.1f} mm) is reducing friction.")

    # Vegetation
    if params.root_cohesion_kpa > 0:
        sentences.append(
            f"{vegetation.value.capitalize()} vegetation reinforces the failure plane "
            f"(+{params.root_cohesion_kpa:.0f} kPa root cohesion)."
        )

    sentences.append(fos_statement(fos))
    return " ".join(sentences)
