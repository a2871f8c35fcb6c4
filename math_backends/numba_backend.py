from __future__ import annotations

import importlib.util
import math
from typing import TYPE_CHECKING, List, Sequence, Tuple

from guide_geometry import boundary_point, effective_radius
from math_backends import python_backend

if TYPE_CHECKING:
    from spirotrace_config import RouletteConfig

Point = Tuple[float, float]

NUMBA_AVAILABLE = importlib.util.find_spec("numba") is not None
if NUMBA_AVAILABLE:
    import numba
    import numpy as np


if NUMBA_AVAILABLE:

    @numba.njit(cache=True)
    def _pen_positions_numba(
        angles: np.ndarray,
        bx: np.ndarray,
        by: np.ndarray,
        R: float,
        r: float,
        d: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        n = len(angles)
        out_x = np.empty(n, dtype=np.float64)
        out_y = np.empty(n, dtype=np.float64)
        k = (R - r) / r
        for i in range(n):
            theta = angles[i]
            cx = bx[i] - r * math.cos(theta)
            cy = by[i] - r * math.sin(theta)
            phi = k * theta
            out_x[i] = cx + d * math.cos(phi)
            out_y[i] = cy - d * math.sin(phi)
        return out_x, out_y


def generate_trace_points(config: "RouletteConfig", angles: Sequence[float]) -> List[Point]:
    """
    Même contrat que le backend Python ; les points du bord sont évalués en
    Python, la position du stylo dans un noyau compilé.
    """
    if not NUMBA_AVAILABLE:
        return python_backend.generate_trace_points(config, angles)

    r = float(config.moving_radius)
    if not (r > 0.0) or not math.isfinite(r) or not angles:
        return []

    n = len(angles)
    a = np.asarray(angles, dtype=np.float64)
    bx = np.empty(n, dtype=np.float64)
    by = np.empty(n, dtype=np.float64)
    for i, theta in enumerate(angles):
        bx[i], by[i] = boundary_point(config.guide, float(theta))

    px, py = _pen_positions_numba(
        a, bx, by, float(effective_radius(config.guide)), r, float(config.pen_distance)
    )
    if not (np.all(np.isfinite(px)) and np.all(np.isfinite(py))):
        return []
    return [(float(x), float(y)) for x, y in zip(px, py)]
