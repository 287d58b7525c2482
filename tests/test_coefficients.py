import math

import pytest

from kyrisk.risk.coefficients import (
    CoefficientTable,
    DensityWeights,
    density_factor,
    normalize_third_party_level,
    photo_factor,
    third_party_factor,
    weather_factor,
)
from kyrisk.risk.models import WeatherObservation
from kyrisk.utils.numbers import clamp, round2, scale_1to5, to_float
from kyrisk.utils.ranking import stable_rank_desc


def test_third_party_levels():
    assert third_party_factor("many") == 1.5
    assert third_party_factor("few") == 1.2
    assert third_party_factor("none") == 1.0
    assert third_party_factor("") == 1.0
    assert third_party_factor(None) == 1.0
    assert third_party_factor("crowds") == 1.0
    assert third_party_factor("  Many ") == 1.5
    assert normalize_third_party_level("少ない") == "few"


def test_weather_absent_is_neutral():
    assert weather_factor(None) == 1.0


def test_weather_heavy_rain_wind_and_heat():
    w = WeatherObservation(precipitation_mm="12mm", wind_speed_ms=12, temperature_c=30)
    assert weather_factor(w) == pytest.approx(1.332)


def test_weather_accepts_plain_mapping_and_stays_under_ceiling():
    w = {"precipitation_mm": 50, "wind_speed_ms": 40, "temperature_c": 45}
    f = weather_factor(w)
    assert f == pytest.approx(1.38)
    assert 1.0 <= f <= 1.5


def test_weather_mild_day_is_one():
    assert weather_factor(WeatherObservation(precipitation_mm=0, wind_speed_ms=0, temperature_c=20)) == 1.0


def test_density():
    assert density_factor(None) == 1.0
    assert density_factor(0) == 1.0
    assert density_factor(-3) == 1.0
    assert density_factor(5) == pytest.approx(1.15)
    assert density_factor(20) == 1.5
    assert density_factor(1000) == 1.5


def test_density_uses_passed_table():
    cfg = CoefficientTable(density=DensityWeights(baseline_workers=5, weight=0.1, ceiling=2.0))
    assert density_factor(10, cfg) == pytest.approx(1.2)


def test_photo():
    assert photo_factor(None) == 1.0
    assert photo_factor("") == 1.0
    assert photo_factor(0.8) == pytest.approx(1.4)
    assert photo_factor(3) == 1.5
    assert photo_factor(-1) == 1.0


def test_to_float_is_forgiving():
    assert to_float("12mm") == 12.0
    assert to_float("1,200") == 1200.0
    assert to_float(" 3.5 ") == 3.5
    assert to_float(True) is None
    assert to_float("") is None
    assert to_float("abc") is None
    assert to_float(float("nan")) is None
    assert to_float(float("inf")) is None
    assert to_float("12 m/s") == 12.0
    assert to_float("30 °C") == 30.0
    assert to_float("-4") == -4.0


def test_to_float_rejects_text_around_numbers():
    assert to_float("approx. 10") is None
    assert to_float("No.3") is None
    assert to_float("ca. 6 mm") is None
    assert to_float("10-20") is None
    assert to_float("1.2.3") is None
    assert photo_factor("No.3") == 1.0
    assert density_factor("approx. 10") == 1.0


def test_clamp_and_round2():
    assert clamp(float("nan"), 1.0, 2.0) == 1.0
    assert clamp(5, 0, 1) == 1
    assert round2(2.675) == 2.68
    assert round2(20 * 1.5 * 1.0 * 1.5 * 1.4 * 1.35) == 85.05
    assert round2(float("inf")) == 0.0
    assert not math.isnan(round2(float("nan")))


def test_scale_1to5():
    assert scale_1to5(0) == 1
    assert scale_1to5(9) == 5
    assert scale_1to5("4") == 4
    assert scale_1to5(None) == 1
    assert scale_1to5("x") == 1


def test_stable_rank_desc_keeps_tie_order():
    assert stable_rank_desc([1, 3, 3, 2]) == [1, 2, 3, 0]
    assert stable_rank_desc([]) == []
    assert stable_rank_desc([float("nan"), 1.0]) == [1, 0]
