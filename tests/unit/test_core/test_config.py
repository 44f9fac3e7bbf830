import pytest
from core.config import EngineConfig, DEFAULT_OVERLAY_WEIGHTS, get_default_config
from core.models import ScoringMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LANDSLIDE_SCORING_MODE", "LANDSLIDE_FAILURE_DEPTH_M", "LANDSLIDE_MIN_FRICTION_DEG"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = EngineConfig()
    assert config.scoring_mode == ScoringMode.FACTOR_OF_SAFETY
    assert config.flat_slope_deg == 5.0
    assert config.friction_bounds == (12.0, 45.0)
    assert config.overlay_weights == DEFAULT_OVERLAY_WEIGHTS
    assert config.overlay_weights is not DEFAULT_OVERLAY_WEIGHTS


def test_from_env(monkeypatch):
    monkeypatch.setenv("LANDSLIDE_SCORING_MODE", "Susceptibility_Index")
    monkeypatch.setenv("LANDSLIDE_FAILURE_DEPTH_M", "1.2")
    monkeypatch.setenv("LANDSLIDE_MIN_FRICTION_DEG", "20")
    config = EngineConfig.from_env()
    assert config.scoring_mode == ScoringMode.SUSCEPTIBILITY_INDEX
    assert config.default_failure_depth_m == 1.2
    assert config.friction_bounds == (20.0, 45.0)


def test_from_env_empty():
    assert EngineConfig.from_env() == EngineConfig()


def test_unknown_mode(monkeypatch):
    monkeypatch.setenv("LANDSLIDE_SCORING_MODE", "magic")
    with pytest.raises(ValueError, match="LANDSLIDE_SCORING_MODE"):
        EngineConfig.from_env()


@pytest.mark.parametrize("kwargs", [
    {"friction_bounds": (40.0, 20.0)},
    {"friction_bounds": (0.0, 45.0)},
    {"flat_slope_deg": -1.0},
    {"fos_epsilon": 0.0},
    {"overlay_weights": {"slope": 0.5, "rainfall": 0.2}},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


def test_default_config_is_shared():
    assert get_default_config() is get_default_config()
