import logging
import math

import pytest

from guide_geometry import (
    CircleGuide,
    EllipseGuide,
    HexagonGuide,
    SquareGuide,
    StarGuide,
    boundary_outline,
    boundary_point,
    effective_radius,
    guide_from_spec,
    normalize_angle,
)


ALL_GUIDES = [
    CircleGuide(200.0),
    EllipseGuide(200.0, 100.0, 30.0),
    SquareGuide(200.0, 0.0),
    SquareGuide(200.0, 25.0),
    HexagonGuide(200.0, 0.0),
    HexagonGuide(200.0, 30.0),
    StarGuide(200.0, 100.0, 5),
]


def _close(p, q, tol=1e-6):
    return math.isclose(p[0], q[0], abs_tol=tol) and math.isclose(p[1], q[1], abs_tol=tol)


@pytest.mark.parametrize("guide", ALL_GUIDES, ids=lambda g: repr(g))
def test_boundary_point_is_periodic(guide):
    for theta in [0.3, 1.7, 4.0, 5.9]:
        assert _close(boundary_point(guide, theta), boundary_point(guide, theta + 2.0 * math.pi))
        assert _close(boundary_point(guide, theta), boundary_point(guide, theta - 4.0 * math.pi))


def test_normalize_angle_range():
    assert normalize_angle(0.0) == 0.0
    assert math.isclose(normalize_angle(-math.pi / 2), 1.5 * math.pi)
    assert math.isclose(normalize_angle(7.0), 7.0 - 2.0 * math.pi)
    assert 0.0 <= normalize_angle(-1e-18) < 2.0 * math.pi


def test_circle_boundary():
    x, y = boundary_point(CircleGuide(150.0), math.pi / 2)
    assert math.isclose(x, 0.0, abs_tol=1e-9)
    assert math.isclose(y, 150.0, abs_tol=1e-9)


def test_star_alternates_tips_and_valleys():
    star = StarGuide(200.0, 100.0, 5)
    assert _close(boundary_point(star, 0.0), (200.0, 0.0))
    spoke = math.pi / 5
    assert _close(boundary_point(star, spoke), (100.0 * math.cos(spoke), 100.0 * math.sin(spoke)))
    assert _close(
        boundary_point(star, 2 * spoke),
        (200.0 * math.cos(2 * spoke), 200.0 * math.sin(2 * spoke)),
    )
    # A mi-chemin entre pointe et creux, rayon moyen.
    x, y = boundary_point(star, spoke / 2)
    assert math.isclose(math.hypot(x, y), 150.0, abs_tol=1e-9)


def test_sharp_square_edges():
    square = SquareGuide(200.0, 0.0)
    assert _close(boundary_point(square, 0.0), (100.0, -100.0))
    assert _close(boundary_point(square, math.pi / 4), (100.0, 0.0))
    assert _close(boundary_point(square, 3 * math.pi / 4), (0.0, 100.0))
    assert _close(boundary_point(square, math.pi / 2 - 1e-9), boundary_point(square, math.pi / 2 + 1e-9), 1e-5)


def test_rounded_square_tends_to_sharp_square():
    sharp = SquareGuide(200.0, 0.0)
    almost = SquareGuide(200.0, 1e-6)
    for theta in [0.1, 0.8, 1.4, 2.5, 3.9, 5.5]:
        assert _close(boundary_point(sharp, theta), boundary_point(almost, theta), 1e-3)


def test_rounded_square_is_continuous():
    square = SquareGuide(200.0, 20.0)
    eps = 1e-9
    for k in range(4):
        edge = k * math.pi / 2
        assert _close(boundary_point(square, edge - eps), boundary_point(square, edge + eps), 1e-4)
    # Fin du segment droit = début de l'arc de coin.
    span = math.atan2(20.0, 80.0)
    straight_end = math.pi / 2 - span
    assert _close(boundary_point(square, straight_end - eps), (100.0, 80.0), 1e-4)
    assert _close(boundary_point(square, straight_end + eps), (100.0, 80.0), 1e-4)
    assert _close(boundary_point(square, math.pi / 2 - eps), (80.0, 100.0), 1e-4)


def test_sharp_hexagon_vertices():
    hexagon = HexagonGuide(200.0, 0.0)
    assert _close(boundary_point(hexagon, 0.0), (200.0, 0.0))
    third = math.pi / 3
    assert _close(boundary_point(hexagon, third), (200.0 * math.cos(third), 200.0 * math.sin(third)), 1e-5)
    mid = boundary_point(hexagon, third / 2)
    assert math.isclose(math.hypot(*mid), 200.0 * math.sqrt(3.0) / 2.0, abs_tol=1e-6)


def test_rounded_hexagon_is_continuous():
    hexagon = HexagonGuide(200.0, 30.0)
    eps = 1e-9
    for k in range(6):
        edge = k * math.pi / 3
        assert _close(boundary_point(hexagon, edge - eps), boundary_point(hexagon, edge + eps), 1e-4)


def test_rounded_hexagon_tends_to_sharp_hexagon():
    sharp = HexagonGuide(200.0, 0.0)
    almost = HexagonGuide(200.0, 1e-6)
    for theta in [0.2, 1.3, 2.2, 3.3, 4.9]:
        assert _close(boundary_point(sharp, theta), boundary_point(almost, theta), 1e-3)


def test_ellipse_axes_and_rotation():
    flat = EllipseGuide(200.0, 100.0, 0.0)
    assert _close(boundary_point(flat, 0.0), (100.0, 0.0))
    assert _close(boundary_point(flat, math.pi / 2), (0.0, 50.0))
    turned = EllipseGuide(200.0, 100.0, 90.0)
    assert _close(boundary_point(turned, math.pi / 2), (0.0, 100.0))


def test_effective_radius_per_family():
    assert effective_radius(CircleGuide(200.0)) == 200.0
    assert effective_radius(SquareGuide(200.0, 10.0)) == 100.0
    assert effective_radius(HexagonGuide(180.0)) == 180.0
    assert effective_radius(StarGuide(220.0, 90.0, 6)) == 220.0
    assert effective_radius(EllipseGuide(300.0, 100.0)) == 150.0


def test_negative_dimensions_are_clamped():
    assert effective_radius(CircleGuide(-5.0)) == 0.0
    assert boundary_point(CircleGuide(float("nan")), 1.0) == (0.0, 0.0)
    x, y = boundary_point(SquareGuide(100.0, 500.0), 0.7)
    assert math.isfinite(x) and math.isfinite(y)


def test_unknown_shape_falls_back_to_circle(caplog):
    with caplog.at_level(logging.WARNING):
        guide = guide_from_spec("triangle", {"radius": 10})
    assert guide == CircleGuide(150.0)
    assert "triangle" in caplog.text
    assert effective_radius(object()) == 150.0


def test_guide_from_spec_accepts_camel_case_names():
    assert guide_from_spec("square", {"edgeLength": 120, "cornerRadius": 10}) == SquareGuide(120, 10)
    star = guide_from_spec("STAR", {"points": 7.0})
    assert star == StarGuide(200.0, 100.0, 7)
    assert isinstance(star.point_count, int)


def test_boundary_outline_is_closed():
    outline = boundary_outline(SquareGuide(200.0, 20.0), 90)
    assert len(outline) == 91
    assert outline[0] == outline[-1]
