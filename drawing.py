from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainter, QPen

from trace_animator import OverlayFrame, TraceSegment
from view_transform import ViewTransform

Point = Tuple[float, float]

GUIDE_COLOR = "#5a5a5a"
WHEEL_COLOR = "#2196f3"
PEN_COLOR = "#f50057"


def _finite(p: Optional[Point]) -> bool:
    return p is not None and math.isfinite(p[0]) and math.isfinite(p[1])


def compute_view_scale(points: Sequence[Point], width: int, height: int, margin_ratio: float = 0.45) -> float:
    """Compute a uniform scale so that ``points`` fit inside the viewport.

    The returned scale keeps aspect ratio, applies the requested margin, and
    returns ``1.0`` when there is nothing to draw.
    """

    if not points:
        return 1.0

    max_x = max(abs(x) for x, _ in points) or 1.0
    max_y = max(abs(y) for _, y in points) or 1.0
    sx = (width * margin_ratio) / max_x
    sy = (height * margin_ratio) / max_y
    return min(sx, sy)


def apply_view_transform(painter: QPainter, width: float, height: float, view: ViewTransform) -> None:
    """Centre of the surface, then pan, then uniform scale."""

    painter.translate(width / 2.0, height / 2.0)
    painter.translate(view.pan_x, view.pan_y)
    painter.scale(view.scale, view.scale)


def _map_points(points: Iterable[Point], offset: Tuple[float, float]) -> List[QPointF]:
    dx, dy = offset
    return [QPointF(x + dx, y + dy) for (x, y) in points]


def stroke_pen(color: str, width: float) -> QPen:
    pen = QPen(QColor(color))
    pen.setWidthF(width)
    pen.setCapStyle(Qt.PenCapStyle.RoundCap)
    pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
    return pen


def draw_segments(
    painter: QPainter,
    segments: Sequence[TraceSegment],
    *,
    width: float,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> None:
    """Draw colored trace segments, one stroke per color run."""

    if not segments:
        return
    dx, dy = offset
    run_color: Optional[str] = None
    for seg in segments:
        if seg.color != run_color:
            painter.setPen(stroke_pen(seg.color, width))
            run_color = seg.color
        painter.drawLine(
            QPointF(seg.start[0] + dx, seg.start[1] + dy),
            QPointF(seg.end[0] + dx, seg.end[1] + dy),
        )


def draw_polyline(
    painter: QPainter,
    points: Sequence[Point],
    *,
    color: str = GUIDE_COLOR,
    width: float = 0.0,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> None:
    """Draw a simple polyline with cosmetic width by default."""

    if len(points) < 2:
        return
    pen = QPen(QColor(color))
    pen.setWidthF(width)
    painter.setPen(pen)
    painter.drawPolyline(_map_points(points, offset))


def draw_marker(
    painter: QPainter,
    point: Point,
    *,
    radius: float = 3.0,
    color: str = PEN_COLOR,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> None:
    """Draw a small filled marker."""

    painter.setPen(Qt.PenStyle.NoPen)
    painter.setBrush(QColor(color))
    painter.drawEllipse(QPointF(point[0] + offset[0], point[1] + offset[1]), radius, radius)
    painter.setBrush(Qt.BrushStyle.NoBrush)


def draw_wheel(
    painter: QPainter,
    *,
    center: Point,
    radius: float,
    pen_point: Optional[Point] = None,
    color: str = WHEEL_COLOR,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> None:
    """Draw the moving circle and the arm from its centre to the pen."""

    pen = QPen(QColor(color))
    pen.setWidthF(0)
    painter.setPen(pen)
    cx, cy = center[0] + offset[0], center[1] + offset[1]
    if radius > 0:
        painter.drawEllipse(QPointF(cx, cy), radius, radius)
    if _finite(pen_point):
        painter.drawLine(QPointF(cx, cy), QPointF(pen_point[0] + offset[0], pen_point[1] + offset[1]))


def draw_guide_overlay(
    painter: QPainter,
    frame: Optional[OverlayFrame],
    *,
    offset: Tuple[float, float] = (0.0, 0.0),
) -> None:
    """Faint guide boundary, moving circle, pen arm and pen marker."""

    if frame is None or not frame.visible:
        return
    draw_polyline(painter, frame.outline, color=GUIDE_COLOR, offset=offset)
    if not _finite(frame.center):
        return
    draw_wheel(
        painter,
        center=frame.center,
        radius=frame.moving_radius,
        pen_point=frame.pen,
        offset=offset,
    )
    if _finite(frame.pen):
        draw_marker(painter, frame.pen, offset=offset)
