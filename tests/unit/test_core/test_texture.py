import pytest
from core.models import SoilTexture
from core.texture import classify_texture, normalize_composition, describe_texture


@pytest.mark.parametrize("clay,sand,silt,expected", [
    (40, 30, 30, SoilTexture.CLAY),
    (45, 50, 5, SoilTexture.SANDY_CLAY),
    (45, 5, 50, SoilTexture.SILTY_CLAY),
    (30, 35, 35, SoilTexture.CLAY_LOAM),
    (30, 10, 60, SoilTexture.SILTY_CLAY_LOAM),
    (30, 50, 20, SoilTexture.SANDY_CLAY_LOAM),
    (5, 5, 90, SoilTexture.SILT),
    (2, 95, 3, SoilTexture.SAND),
    (5, 80, 15, SoilTexture.LOAMY_SAND),
    (10, 65, 25, SoilTexture.SANDY_LOAM),
    (10, 20, 70, SoilTexture.SILT_LOAM),
    (20, 40, 40, SoilTexture.LOAM),
])
def test_known_compositions(clay, sand, silt, expected):
    assert classify_texture(clay, sand, silt) == expected


def test_zero_composition_is_unknown():
    assert classify_texture(0, 0, 0) == SoilTexture.UNKNOWN


def test_unnormalized_input():
    """Percentages that don't sum to 100 are normalized first."""
    assert classify_texture(20, 15, 15) == SoilTexture.CLAY


def test_classification_is_total():
    """Every composition maps to one of the twelve labels."""
    labels = set(SoilTexture) - {SoilTexture.UNKNOWN}
    for clay in range(0, 101, 5):
        for sand in range(0, 101 - clay, 5):
            silt = 100 - clay - sand
            assert classify_texture(clay, sand, silt) in labels


@pytest.mark.parametrize("mix", [(40, 30, 30), (10, 65, 25), (5, 5, 90), (30, 10, 60), (2, 95, 3)])
@pytest.mark.parametrize("scale", [0.25, 0.5, 2.0, 8.0])
def test_scale_invariance(mix, scale):
    clay, sand, silt = mix
    assert classify_texture(clay * scale, sand * scale, silt * scale) == classify_texture(clay, sand, silt)


def test_normalize_composition():
    assert normalize_composition(1, 1, 2) == (25.0, 25.0, 50.0)
    assert normalize_composition(0, 0, 0) is None


def test_describe_texture():
    assert "cohesion" in describe_texture(SoilTexture.SAND)
