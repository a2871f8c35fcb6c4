from __future__ import annotations

import math
from typing import Optional, Tuple

from guide_geometry import boundary_point, effective_radius
from spirotrace_config import RouletteConfig

Point = Tuple[float, float]


def moving_center(config: RouletteConfig, angle: float) -> Point:
    """
    Centre approché de la roue mobile.

    Convention unique pour toutes les formes : on retire ``r·(cos θ, sin θ)``
    au point de bord. Pour un cercle de rayon R on retrouve exactement
    ``(R - r)(cos θ, sin θ)``.
    """
    bx, by = boundary_point(config.guide, angle)
    r = config.moving_radius
    return (bx - r * math.cos(angle), by - r * math.sin(angle))


def pen_angle(R: float, r: float, angle: float) -> Optional[float]:
    if not (r > 0.0) or not math.isfinite(r):
        return None
    return ((R - r) / r) * angle


def pen_point(config: RouletteConfig, angle: float) -> Optional[Point]:
    """
    Position du stylo pour un angle de rotation cumulé ``angle``.

    Hypotrochoïde généralisée : centre + d·(cos φ, -sin φ) avec
    φ = ((R - r)/r)·θ ; le terme en y est inversé (axe vertical écran).
    Renvoie None si la configuration est dégénérée (r <= 0, valeurs non finies).
    """
    if not math.isfinite(angle):
        return None
    R = effective_radius(config.guide)
    phi = pen_angle(R, config.moving_radius, angle)
    if phi is None:
        return None
    cx, cy = moving_center(config, angle)
    d = config.pen_distance
    px = cx + d * math.cos(phi)
    py = cy - d * math.sin(phi)
    if not (math.isfinite(px) and math.isfinite(py)):
        return None
    return px, py


__all__ = ["moving_center", "pen_angle", "pen_point"]
