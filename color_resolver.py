from __future__ import annotations

import colorsys
import functools
import logging
import re
from typing import Optional, Tuple

from matplotlib import colors as mcolors

from spirotrace_config import DEFAULT_INK, ColorSpec, GradientSpec

RGB = Tuple[int, int, int]

HEX_RE = re.compile(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})")
HSL_RE = re.compile(
    r"\(\s*([+-]?\d*\.?\d+)\s*,\s*([+-]?\d*\.?\d+)\s*,\s*([+-]?\d*\.?\d+)\s*\)"
)

_LOGGER = logging.getLogger(__name__)


@functools.lru_cache(maxsize=256)
def normalize_color_string(s: Optional[str]) -> Optional[str]:
    """
    Renvoie la couleur normalisée en ``#rrggbb``, ou None si elle est invalide.

    Règles :
      - ``#rgb`` / ``#rrggbb`` -> hex direct.
      - ``(H, S, L)`` -> HSL, H en degrés, S et L dans [0, 1].
      - Sinon -> nom de couleur (CSS4, XKCD, Tableau...) via matplotlib.
    """
    if s is None:
        return None
    s = s.strip()
    if not s:
        return None

    if s.startswith("#"):
        m = HEX_RE.fullmatch(s)
        if not m:
            return None
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return "#" + digits.lower()

    m = HSL_RE.fullmatch(s)
    if m:
        try:
            h = float(m.group(1)) % 360.0
            sat = max(0.0, min(1.0, float(m.group(2))))
            lum = max(0.0, min(1.0, float(m.group(3))))
        except ValueError:
            return None
        # colorsys.hls_to_rgb attend (h, l, s) avec h dans [0,1]
        r_f, g_f, b_f = colorsys.hls_to_rgb(h / 360.0, lum, sat)
        return rgb_to_hex((int(round(r_f * 255)), int(round(g_f * 255)), int(round(b_f * 255))))

    name = re.sub(r"\s+", "", s.lower())
    try:
        return mcolors.to_hex(name, keep_alpha=False).lower()
    except ValueError:
        return None


def is_valid_color_string(s: str) -> bool:
    return normalize_color_string(s) is not None


def hex_to_rgb(value: str) -> RGB:
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (max(0, min(255, int(c))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def _solid(value: str) -> str:
    norm = normalize_color_string(value)
    if norm is None:
        _LOGGER.debug("Invalid color %r, using %s", value, DEFAULT_INK)
        return DEFAULT_INK
    return norm


def _find_pair(gradient: GradientSpec, progress: float) -> int:
    stops = gradient.stops
    for i in range(len(stops) - 1):
        if stops[i].position <= progress <= stops[i + 1].position:
            return i
    if progress < stops[0].position:
        return 0
    return len(stops) - 2


def resolve_color(spec: ColorSpec, progress: float) -> str:
    """
    Couleur ``#rrggbb`` pour une progression dans [0, 1).

    Couleur unie : constante. Dégradé : on cherche la première paire d'arrêts
    adjacents qui encadre ``progress`` ; en dehors de toutes les paires on
    prend la paire de bord la plus proche. Chaque canal RGB est interpolé
    linéairement puis arrondi.
    """
    if not isinstance(spec, GradientSpec):
        return _solid(spec)

    stops = spec.stops
    if not stops:
        _LOGGER.warning("Empty gradient, using %s", DEFAULT_INK)
        return DEFAULT_INK
    if len(stops) == 1:
        return _solid(stops[0].color)

    i = _find_pair(spec, progress)
    a = stops[i]
    b = stops[i + 1]
    span = b.position - a.position
    t = 0.0 if span == 0 else (progress - a.position) / span
    t = max(0.0, min(1.0, t))

    r1, g1, b1 = hex_to_rgb(_solid(a.color))
    r2, g2, b2 = hex_to_rgb(_solid(b.color))
    return rgb_to_hex(
        (
            round(r1 + (r2 - r1) * t),
            round(g1 + (g2 - g1) * t),
            round(b1 + (b2 - b1) * t),
        )
    )


__all__ = [
    "ColorSpec",
    "hex_to_rgb",
    "is_valid_color_string",
    "normalize_color_string",
    "resolve_color",
    "rgb_to_hex",
]
