from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QImage, QPainter

from color_resolver import normalize_color_string, resolve_color
from drawing import compute_view_scale, draw_segments
from guide_geometry import TAU
from spirotrace_config import DEFAULT_BACKGROUND, RouletteConfig
import spirotrace_math as sm
from trace_animator import TraceSegment, TraceSurface, color_progress

_LOGGER = logging.getLogger(__name__)


class ImageSurface(TraceSurface):
    """
    Couche de tracé persistante sur une ``QImage`` transparente.

    L'origine du monde est au centre de l'image ; le fond n'est jamais peint
    dans l'image, il est composé à l'affichage et à l'export.
    """

    def __init__(self, width: int = 0, height: int = 0, *, antialias: bool = True) -> None:
        self._image: Optional[QImage] = None
        self.antialias = antialias
        if width > 0 and height > 0:
            self.resize(width, height)

    @property
    def ready(self) -> bool:
        return self._image is not None and not self._image.isNull()

    @property
    def image(self) -> Optional[QImage]:
        return self._image

    def size(self) -> Tuple[int, int]:
        if not self.ready:
            return (0, 0)
        return (self._image.width(), self._image.height())

    def resize(self, width: int, height: int) -> None:
        """Redimensionne en recopiant l'ancien contenu, centré (au mieux)."""
        width, height = int(width), int(height)
        if width <= 0 or height <= 0:
            return
        old = self._image
        if old is not None and old.width() == width and old.height() == height:
            return
        image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
        image.fill(Qt.GlobalColor.transparent)
        if old is not None and not old.isNull():
            painter = QPainter(image)
            try:
                painter.drawImage(
                    QPointF((width - old.width()) / 2.0, (height - old.height()) / 2.0),
                    old,
                )
            finally:
                painter.end()
        self._image = image

    def clear(self) -> None:
        if not self.ready:
            return
        self._image.fill(Qt.GlobalColor.transparent)

    def draw_segments(self, segments: Sequence[TraceSegment], width: float) -> None:
        if not self.ready or not segments:
            return
        w, h = self.size()
        painter = QPainter(self._image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, self.antialias)
            draw_segments(painter, segments, width=width, offset=(w / 2.0, h / 2.0))
        finally:
            painter.end()

    def export_image(self, background: str = DEFAULT_BACKGROUND) -> Optional[QImage]:
        """Copie aplatie du tracé sur la couleur de fond."""
        if not self.ready:
            return None
        w, h = self.size()
        out = QImage(w, h, QImage.Format.Format_ARGB32)
        out.fill(QColor(normalize_color_string(background) or DEFAULT_BACKGROUND))
        painter = QPainter(out)
        try:
            painter.drawImage(0, 0, self._image)
        finally:
            painter.end()
        return out

    def save_png(self, filename: str, background: str = DEFAULT_BACKGROUND) -> bool:
        image = self.export_image(background)
        if image is None:
            return False
        return image.save(filename, "PNG")


def _scaled_segments(
    config: RouletteConfig,
    angles: Sequence[float],
    points: Sequence[Tuple[float, float]],
    scale: float,
) -> List[TraceSegment]:
    segments: List[TraceSegment] = []
    for i in range(1, len(points)):
        (x0, y0), (x1, y1) = points[i - 1], points[i]
        segments.append(
            TraceSegment(
                (x0 * scale, y0 * scale),
                (x1 * scale, y1 * scale),
                resolve_color(config.color, color_progress(angles[i])),
            )
        )
    return segments


def render_full_trace(
    config: RouletteConfig,
    width: int,
    height: int,
    *,
    turns: Optional[float] = None,
    steps_per_turn: int = 720,
    margin_ratio: float = 0.45,
) -> ImageSurface:
    """
    Dessine d'un coup la courbe complète (jusqu'à sa fermeture) sur une
    nouvelle surface, mise à l'échelle pour tenir dans ``width`` x ``height``.
    """
    surface = ImageSurface(width, height)
    if turns is None:
        turns = sm.closing_turns(config)
    if not math.isfinite(turns) or turns <= 0:
        return surface
    end = TAU * turns
    steps = max(2, int(math.ceil(steps_per_turn * turns)) + 1)
    points = sm.generate_trace_points(config, 0.0, end, steps)
    if len(points) < 2:
        _LOGGER.warning("Nothing to render for %s", config)
        return surface
    angles = sm.sample_angles(0.0, end, steps)
    scale = compute_view_scale(points, width, height, margin_ratio)
    surface.draw_segments(_scaled_segments(config, angles, points, scale), config.stroke_width)
    _LOGGER.debug(
        "Rendered %d points over %.1f turns with backend %s", len(points), turns, sm.get_backend_name()
    )
    return surface


__all__ = ["ImageSurface", "render_full_trace"]
