import math

from guide_geometry import CircleGuide, StarGuide
from roulette import moving_center, pen_angle, pen_point
from spirotrace_config import RouletteConfig


def _reference_hypotrochoid(theta: float, R: float, r: float, d: float) -> tuple[float, float]:
    x = (R - r) * math.cos(theta) + d * math.cos((R - r) / r * theta)
    y = (R - r) * math.sin(theta) - d * math.sin((R - r) / r * theta)
    return x, y


def test_circle_guide_matches_hypotrochoid():
    R, r, d = 200.0, 50.0, 75.0
    config = RouletteConfig(guide=CircleGuide(R), moving_radius=r, pen_distance=d)
    for theta in [0.0, 0.5, 1.0, math.pi / 2, 3.0, 10.0, 123.4]:
        px, py = pen_point(config, theta)
        rx, ry = _reference_hypotrochoid(theta, R, r, d)
        assert math.isclose(px, rx, abs_tol=1e-6)
        assert math.isclose(py, ry, abs_tol=1e-6)


def test_quarter_turn_value():
    config = RouletteConfig(guide=CircleGuide(200.0), moving_radius=50.0, pen_distance=75.0)
    px, py = pen_point(config, math.pi / 2)
    assert math.isclose(px, 0.0, abs_tol=1e-9)
    assert math.isclose(py, 225.0, abs_tol=1e-9)


def test_moving_center_on_circle():
    config = RouletteConfig(guide=CircleGuide(200.0), moving_radius=50.0)
    cx, cy = moving_center(config, math.pi)
    assert math.isclose(cx, -150.0, abs_tol=1e-9)
    assert math.isclose(cy, 0.0, abs_tol=1e-9)


def test_pen_angle_ratio():
    assert math.isclose(pen_angle(200.0, 50.0, 1.0), 3.0)
    assert pen_angle(200.0, 0.0, 1.0) is None
    assert pen_angle(200.0, float("inf"), 1.0) is None


def test_degenerate_configs_give_no_point():
    assert pen_point(RouletteConfig(moving_radius=0.0), 1.0) is None
    assert pen_point(RouletteConfig(moving_radius=-3.0), 1.0) is None
    assert pen_point(RouletteConfig(moving_radius=float("nan")), 1.0) is None
    assert pen_point(RouletteConfig(pen_distance=float("inf")), 1.0) is None
    assert pen_point(RouletteConfig(), float("nan")) is None


def test_zero_pen_distance_follows_center():
    config = RouletteConfig(guide=StarGuide(200.0, 100.0, 5), moving_radius=30.0, pen_distance=0.0)
    for theta in [0.2, 2.0, 4.5]:
        assert pen_point(config, theta) == moving_center(config, theta)
