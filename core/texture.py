"""
Soil texture classification on the USDA texture triangle.
"""

from core.models import SoilTexture


def normalize_composition(clay: float, sand: float, silt: float):
    """
    Rescale clay/sand/silt so they sum to 100.

    Returns None when there is no composition to work with.
    """
    total = clay + sand + silt
    if total <= 0:
        return None
    scale = 100.0 / total
    return clay * scale, sand * scale, silt * scale


def classify_texture(clay: float, sand: float, silt: float) -> SoilTexture:
    """
    Map a clay/sand/silt mix to a texture class.

    The rules are checked in order; anything not caught by an explicit
    rule is Loam.
    """
    normalized = normalize_composition(clay, sand, silt)
    if normalized is None:
        return SoilTexture.UNKNOWN
    clay, sand, silt = normalized

    # Clay-dominant
    if clay >= 40:
        if sand >= 45:
            return SoilTexture.SANDY_CLAY
        if silt >= 40:
            return SoilTexture.SILTY_CLAY
        return SoilTexture.CLAY

    # Mid-clay loams
    if clay >= 27:
        if sand > 45:
            return SoilTexture.SANDY_CLAY_LOAM
        if sand <= 20:
            return SoilTexture.SILTY_CLAY_LOAM
        return SoilTexture.CLAY_LOAM

    if silt >= 80 and clay < 12:
        return SoilTexture.SILT

    # Sand-dominant
    if sand >= 85 and silt + 1.5 * clay < 15:
        return SoilTexture.SAND
    if sand >= 70 and silt + 2 * clay < 30:
        return SoilTexture.LOAMY_SAND
    if clay >= 20 and sand > 45 and silt < 28:
        return SoilTexture.SANDY_CLAY_LOAM
    if (clay < 20 and sand >= 52) or (clay < 7 and silt < 50 and sand > 43):
        return SoilTexture.SANDY_LOAM

    if silt >= 50:
        return SoilTexture.SILT_LOAM

    return SoilTexture.LOAM


def describe_texture(texture: SoilTexture) -> str:
    """Short description of how a texture behaves on a slope."""
    return TEXTURE_NOTES.get(texture, "mixed soil")


TEXTURE_NOTES = {
    SoilTexture.CLAY: "cohesive but slow-draining",
    SoilTexture.SANDY_CLAY: "cohesive with some drainage",
    SoilTexture.SILTY_CLAY: "cohesive and water-retentive",
    SoilTexture.CLAY_LOAM: "moderately cohesive",
    SoilTexture.SILTY_CLAY_LOAM: "moderately cohesive, retains water",
    SoilTexture.SANDY_CLAY_LOAM: "moderately cohesive, drains well",
    SoilTexture.LOAM: "balanced mix of particle sizes",
    SoilTexture.SILT_LOAM: "erodible when wet",
    SoilTexture.SILT: "highly erodible, loses strength when saturated",
    SoilTexture.SAND: "free-draining with almost no cohesion",
    SoilTexture.LOAMY_SAND: "free-draining, weakly cohesive",
    SoilTexture.SANDY_LOAM: "well-drained, low cohesion",
    SoilTexture.UNKNOWN: "composition unavailable",
}
