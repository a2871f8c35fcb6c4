from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Sequence, Tuple

from roulette import pen_point

if TYPE_CHECKING:
    from spirotrace_config import RouletteConfig

Point = Tuple[float, float]


def generate_trace_points(config: "RouletteConfig", angles: Sequence[float]) -> List[Point]:
    """
    Points du stylo pour chaque angle de ``angles``.

    Configuration dégénérée (r <= 0, valeur non finie) : liste vide, pour que
    les points restent alignés sur les angles demandés.
    """
    r = float(config.moving_radius)
    if not (r > 0.0) or not math.isfinite(r):
        return []
    points: List[Point] = []
    for angle in angles:
        p = pen_point(config, angle)
        if p is None:
            return []
        points.append(p)
    return points
