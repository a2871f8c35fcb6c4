from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from spirotrace_config import DEFAULT_SETTINGS, AnimationSettings

Point = Tuple[float, float]


@dataclass
class ViewTransform:
    """
    Décalage (pan) et zoom appliqués identiquement à la couche de tracé et
    à la surcouche. Ordre : centre de la surface, puis pan, puis échelle.
    """
    pan_x: float = 0.0
    pan_y: float = 0.0
    scale: float = 1.0
    settings: AnimationSettings = DEFAULT_SETTINGS
    _drag_from: Optional[Point] = None

    @property
    def dragging(self) -> bool:
        return self._drag_from is not None

    def begin_drag(self, x: float, y: float) -> None:
        self._drag_from = (x, y)

    def drag_to(self, x: float, y: float) -> None:
        if self._drag_from is None:
            return
        lx, ly = self._drag_from
        self.pan_x += x - lx
        self.pan_y += y - ly
        self._drag_from = (x, y)

    def end_drag(self) -> None:
        self._drag_from = None

    def zoom(
        self,
        delta_y: float,
        anchor: Optional[Point] = None,
        size: Tuple[float, float] = (0.0, 0.0),
    ) -> float:
        """
        Zoom molette : facteur 0.9 pour un delta positif, 1.1 sinon, borné à
        [min_scale, max_scale]. Avec ``anchor`` (position écran du curseur) et
        ``size`` (taille de la surface), le point sous le curseur reste fixe.
        """
        s = self.settings
        factor = s.zoom_out_factor if delta_y > 0 else s.zoom_in_factor
        new_scale = max(s.min_scale, min(s.max_scale, self.scale * factor))
        if anchor is not None:
            wx, wy = self.to_world(anchor[0], anchor[1], size[0], size[1])
            cx, cy = size[0] / 2.0, size[1] / 2.0
            self.pan_x = anchor[0] - cx - new_scale * wx
            self.pan_y = anchor[1] - cy - new_scale * wy
        self.scale = new_scale
        return new_scale

    def to_screen(self, x: float, y: float, width: float, height: float) -> Point:
        return (
            width / 2.0 + self.pan_x + self.scale * x,
            height / 2.0 + self.pan_y + self.scale * y,
        )

    def to_world(self, sx: float, sy: float, width: float, height: float) -> Point:
        return (
            (sx - width / 2.0 - self.pan_x) / self.scale,
            (sy - height / 2.0 - self.pan_y) / self.scale,
        )

    def reset(self) -> None:
        self.pan_x = 0.0
        self.pan_y = 0.0
        self.scale = 1.0
        self._drag_from = None


__all__ = ["ViewTransform"]
