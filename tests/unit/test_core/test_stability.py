import math
import pytest
from core.stability import compute_stability, pore_pressure, pore_saturation


def _stability(slope, **kwargs):
    defaults = dict(
        failure_depth_m=2.5, unit_weight_kn_m3=13.7, cohesion_kpa=10.0,
        friction_angle_deg=30.0, humidity_pct=60.0, rain_7day_mm=0.0, f_clay=0.3,
    )
    defaults.update(kwargs)
    return compute_stability(slope, **defaults)


def test_stress_terms():
    s = _stability(30.0, humidity_pct=0.0)
    weight = 13.7 * 2.5
    assert s.normal_stress_kpa == pytest.approx(weight * math.cos(math.radians(30)) ** 2)
    assert s.driving_shear_kpa == pytest.approx(weight * math.sin(math.radians(30)) * math.cos(math.radians(30)))
    assert s.pore_pressure_kpa == 0.0
    assert s.factor_of_safety == pytest.approx(s.resisting_shear_kpa / (s.driving_shear_kpa + 0.01))


def test_flat_ground_sentinel():
    s = _stability(3.0, cohesion_kpa=0.0)
    assert s.factor_of_safety == 15.0
    s = _stability(3.0, flat_ground_fos=42.0)
    assert s.factor_of_safety == 42.0


def test_pore_pressure_capped():
    assert pore_pressure(100.0, 1.0, 1.0) == pytest.approx(90.0)
    assert pore_pressure(100.0, 0.5, 0.0) == pytest.approx(30.0)


def test_pore_saturation_bounds():
    assert pore_saturation(0.0, 0.0) == 0.0
    assert pore_saturation(100.0, 0.0) == pytest.approx(0.15)
    assert pore_saturation(100.0, 1000.0) == 1.0


@pytest.mark.parametrize("slope", [0.0, 5.0, 30.0, 45.0, 60.0, 89.0, 90.0])
@pytest.mark.parametrize("rain", [0.0, 100.0, 500.0])
def test_outputs_finite_and_bounded(slope, rain):
    s = _stability(slope, rain_7day_mm=rain, humidity_pct=100.0, f_clay=1.0)
    assert s.effective_normal_stress_kpa >= 0.0
    assert s.pore_pressure_kpa <= 0.9 * s.normal_stress_kpa + 1e-9
    assert math.isfinite(s.factor_of_safety)
    assert s.factor_of_safety >= 0.0


def test_vertical_zero_cohesion():
    s = _stability(90.0, cohesion_kpa=0.0)
    assert math.isfinite(s.factor_of_safety)
    assert s.factor_of_safety < 1.0


def test_fos_non_increasing_with_rain():
    previous = float("inf")
    for rain in range(0, 301, 25):
        fos = _stability(35.0, rain_7day_mm=float(rain)).factor_of_safety
        assert fos <= previous + 1e-9
        previous = fos


def test_steeper_is_less_stable():
    assert _stability(40.0).factor_of_safety < _stability(20.0).factor_of_safety


def test_to_dict():
    d = _stability(30.0).to_dict()
    assert set(d) == {
        "normal_stress_kpa", "driving_shear_kpa", "pore_pressure_kpa",
        "effective_normal_stress_kpa", "resisting_shear_kpa", "factor_of_safety", "saturation",
    }
