from __future__ import annotations

from dataclasses import dataclass
import functools
import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

Point = Tuple[float, float]

TAU = 2.0 * math.pi
DEFAULT_FALLBACK_RADIUS = 150.0

_LOGGER = logging.getLogger(__name__)


def _rotate(x: float, y: float, cos_a: float, sin_a: float) -> Tuple[float, float]:
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _positive(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0.0:
        return 0.0
    return value


def normalize_angle(angle: float) -> float:
    """Ramène ``angle`` dans [0, 2π)."""
    a = math.fmod(angle, TAU)
    if a < 0.0:
        a += TAU
    if a >= TAU:
        a = 0.0
    return a


class GuideShape:
    """Base de toutes les formes guides (le bord fixe à l'intérieur duquel roule la roue)."""

    shape_type = "unknown"

    def effective_radius(self) -> float:
        raise NotImplementedError

    def boundary_point(self, angle: float) -> Point:
        raise NotImplementedError


@dataclass(frozen=True)
class CircleGuide(GuideShape):
    radius: float = 200.0

    shape_type = "circle"

    def effective_radius(self) -> float:
        return _positive(self.radius)

    def boundary_point(self, angle: float) -> Point:
        R = _positive(self.radius)
        return (R * math.cos(angle), R * math.sin(angle))


@dataclass(frozen=True)
class EllipseGuide(GuideShape):
    major_axis: float = 200.0
    minor_axis: float = 100.0
    rotation_degrees: float = 0.0

    shape_type = "ellipse"

    def effective_radius(self) -> float:
        return _positive(self.major_axis) / 2.0

    def boundary_point(self, angle: float) -> Point:
        a = _positive(self.major_axis) / 2.0
        b = _positive(self.minor_axis) / 2.0
        rot = math.radians(self.rotation_degrees)
        t = angle - rot
        return _rotate(a * math.cos(t), b * math.sin(t), math.cos(rot), math.sin(rot))


def _rounded_sector_point(
    local_angle: float,
    sector: float,
    apothem: float,
    corner_radius: float,
    edge_start: Point,
    edge_end: Point,
    arc_center: Point,
    arc_start: float,
) -> Point:
    """
    Point sur un secteur de polygone régulier : d'abord le segment droit
    ``edge_start -> edge_end``, puis l'arc de coin de rayon ``corner_radius``
    centré sur ``arc_center`` qui balaie ``sector`` radians depuis ``arc_start``.

    La part angulaire du coin est ``sector/(π/2) · atan2(cr, a - cr)`` ; pour
    le carré (secteur π/2) on retrouve ``atan2(cr, h - cr)``. Le segment
    droit récupère le reste, de sorte qu'un secteur couvre exactement
    ``sector`` radians d'entrée.
    """
    corner_span = (sector / (math.pi / 2.0)) * math.atan2(corner_radius, apothem - corner_radius)
    straight_span = sector - corner_span
    if local_angle < straight_span and straight_span > 0.0:
        return _lerp(edge_start, edge_end, local_angle / straight_span)
    if corner_span <= 0.0:
        return edge_end
    q = min(1.0, max(0.0, (local_angle - straight_span) / corner_span))
    phi = arc_start + q * sector
    return (
        arc_center[0] + corner_radius * math.cos(phi),
        arc_center[1] + corner_radius * math.sin(phi),
    )


@dataclass(frozen=True)
class SquareGuide(GuideShape):
    edge_length: float = 200.0
    corner_radius: float = 0.0

    shape_type = "square"

    def effective_radius(self) -> float:
        return _positive(self.edge_length) / 2.0

    def boundary_point(self, angle: float) -> Point:
        h = _positive(self.edge_length) / 2.0
        cr = min(_positive(self.corner_radius), h)
        sector = math.pi / 2.0
        theta = normalize_angle(angle)
        k = min(3, int(theta // sector))
        local = theta - k * sector
        cos_k = math.cos(k * sector)
        sin_k = math.sin(k * sector)

        # Secteur 0 = bord droit, du coin (h, -h) vers (h, h) ; les autres
        # secteurs s'en déduisent par rotation de k·π/2.
        if cr <= 0.0:
            start = (h, -h)
            end = (h, h)
            x, y = _lerp(start, end, local / sector)
            return _rotate(x, y, cos_k, sin_k)

        inner = h - cr
        x, y = _rounded_sector_point(
            local,
            sector,
            h,
            cr,
            (h, -inner),
            (h, inner),
            (inner, inner),
            0.0,
        )
        return _rotate(x, y, cos_k, sin_k)


@dataclass(frozen=True)
class HexagonGuide(GuideShape):
    side_length: float = 200.0
    corner_radius: float = 0.0

    shape_type = "hexagon"

    def effective_radius(self) -> float:
        return _positive(self.side_length)

    def boundary_point(self, angle: float) -> Point:
        s = _positive(self.side_length)
        sector = math.pi / 3.0
        apothem = s * math.sqrt(3.0) / 2.0
        cr = min(_positive(self.corner_radius), apothem)
        theta = normalize_angle(angle)
        k = min(5, int(theta // sector))
        local = theta - k * sector
        v0 = (s * math.cos(k * sector), s * math.sin(k * sector))
        v1 = (s * math.cos((k + 1) * sector), s * math.sin((k + 1) * sector))

        if cr <= 0.0:
            return _lerp(v0, v1, local / sector)

        # Points de tangence à cr/√3 de chaque sommet le long du côté.
        cut = (cr / math.sqrt(3.0)) / s if s > 0.0 else 0.0
        edge_start = _lerp(v0, v1, cut)
        edge_end = _lerp(v0, v1, 1.0 - cut)
        center_dist = s - 2.0 * cr / math.sqrt(3.0)
        arc_center = (
            center_dist * math.cos((k + 1) * sector),
            center_dist * math.sin((k + 1) * sector),
        )
        arc_start = k * sector + sector / 2.0
        return _rounded_sector_point(
            local, sector, apothem, cr, edge_start, edge_end, arc_center, arc_start
        )


@dataclass(frozen=True)
class StarGuide(GuideShape):
    outer_radius: float = 200.0
    inner_radius: float = 100.0
    point_count: int = 5

    shape_type = "star"

    def effective_radius(self) -> float:
        return _positive(self.outer_radius)

    def boundary_point(self, angle: float) -> Point:
        n = max(3, int(self.point_count))
        outer = _positive(self.outer_radius)
        inner = _positive(self.inner_radius)
        spoke = math.pi / n
        theta = normalize_angle(angle)
        idx = min(2 * n - 1, int(theta // spoke))
        t = (theta - idx * spoke) / spoke
        # Rayons pairs = pointes, impairs = creux.
        r0 = outer if idx % 2 == 0 else inner
        r1 = inner if idx % 2 == 0 else outer
        radius = r0 + (r1 - r0) * t
        return (radius * math.cos(theta), radius * math.sin(theta))


SHAPE_TYPES: Dict[str, type] = {
    "circle": CircleGuide,
    "square": SquareGuide,
    "hexagon": HexagonGuide,
    "star": StarGuide,
    "ellipse": EllipseGuide,
}

# Noms de paramètres des descripteurs d'origine (camelCase) -> champs Python.
_PARAM_ALIASES = {
    "edgeLength": "edge_length",
    "cornerRadius": "corner_radius",
    "sideLength": "side_length",
    "outerRadius": "outer_radius",
    "innerRadius": "inner_radius",
    "points": "point_count",
    "pointCount": "point_count",
    "majorAxis": "major_axis",
    "minorAxis": "minor_axis",
    "rotation": "rotation_degrees",
    "rotationDegrees": "rotation_degrees",
}


def fallback_guide(radius: float = DEFAULT_FALLBACK_RADIUS) -> CircleGuide:
    return CircleGuide(radius)


def guide_from_spec(
    shape_type: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    fallback_radius: float = DEFAULT_FALLBACK_RADIUS,
) -> GuideShape:
    """
    Construit un descripteur à partir d'une étiquette de forme et d'un
    dictionnaire de paramètres. Les paramètres absents prennent les
    valeurs par défaut du descripteur.

    Une étiquette inconnue retombe sur un cercle de rayon ``fallback_radius``
    (avec avertissement) plutôt que de lever une erreur.
    """
    cls = SHAPE_TYPES.get((shape_type or "").strip().lower())
    if cls is None:
        _LOGGER.warning(
            "Unsupported guide shape %r, falling back to circle(%s)", shape_type, fallback_radius
        )
        return fallback_guide(fallback_radius)
    kwargs = {}
    for key, value in (params or {}).items():
        name = _PARAM_ALIASES.get(key, key)
        if name in cls.__dataclass_fields__:
            kwargs[name] = value
        else:
            _LOGGER.debug("Ignoring unknown %s parameter %r", shape_type, key)
    if "point_count" in kwargs:
        kwargs["point_count"] = int(kwargs["point_count"])
    return cls(**kwargs)


def _resolve_guide(guide: Any) -> GuideShape:
    if isinstance(guide, GuideShape) and guide.__class__ is not GuideShape:
        return guide
    _LOGGER.warning("Unsupported guide %r, falling back to default circle", guide)
    return fallback_guide()


def effective_radius(guide: GuideShape) -> float:
    """Rayon de roulement R utilisé dans la formule de la roulette."""
    return _resolve_guide(guide).effective_radius()


def boundary_point(guide: GuideShape, angle: float) -> Point:
    """Point du bord du guide pour l'angle de parcours ``angle`` (période 2π)."""
    return _resolve_guide(guide).boundary_point(angle)


@functools.lru_cache(maxsize=64)
def _outline_cached(shape: GuideShape, samples: int) -> Tuple[Point, ...]:
    pts: List[Point] = [shape.boundary_point(TAU * i / samples) for i in range(samples)]
    pts.append(pts[0])
    return tuple(pts)


def boundary_outline(guide: GuideShape, samples: int = 360) -> Tuple[Point, ...]:
    """Polyligne fermée échantillonnant le bord, pour la surcouche."""
    return _outline_cached(_resolve_guide(guide), max(3, int(samples)))


__all__ = [
    "CircleGuide",
    "DEFAULT_FALLBACK_RADIUS",
    "EllipseGuide",
    "GuideShape",
    "HexagonGuide",
    "Point",
    "SHAPE_TYPES",
    "SquareGuide",
    "StarGuide",
    "TAU",
    "boundary_outline",
    "boundary_point",
    "effective_radius",
    "fallback_guide",
    "guide_from_spec",
    "normalize_angle",
]
