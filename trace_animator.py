from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
import time
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from color_resolver import resolve_color
from frame_scheduler import FrameTicker
from guide_geometry import TAU, boundary_outline, normalize_angle
from roulette import moving_center, pen_point
from spirotrace_config import (
    DEFAULT_SETTINGS,
    AnimationSettings,
    RouletteConfig,
    geometry_changed,
    shape_type_changed,
)

Point = Tuple[float, float]

_LOGGER = logging.getLogger(__name__)


class PlayState(Enum):
    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class TraceState:
    cumulative_angle: float = 0.0
    last_point: Optional[Point] = None   # None : stylo levé

    @property
    def pen_down(self) -> bool:
        return self.last_point is not None

    def lift_pen(self) -> None:
        self.last_point = None


class TraceSegment(NamedTuple):
    start: Point
    end: Point
    color: str


@dataclass(frozen=True)
class OverlayFrame:
    outline: Tuple[Point, ...]
    center: Point
    moving_radius: float
    pen: Optional[Point]
    visible: bool = True


class TraceSurface:
    """Couche persistante qui accumule l'encre."""

    @property
    def ready(self) -> bool:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def draw_segments(self, segments: Sequence[TraceSegment], width: float) -> None:
        raise NotImplementedError


class OverlaySink:
    """Couche éphémère, redessinée à blanc à chaque image."""

    def show_overlay(self, frame: OverlayFrame) -> None:
        raise NotImplementedError


def color_progress(angle: float) -> float:
    """Position dans le cycle de couleur, dans [0, 1)."""
    return normalize_angle(angle) / TAU


def sub_step_count(angular_speed: float, density: float) -> int:
    if not math.isfinite(angular_speed) or angular_speed <= 0.0:
        return 1
    return max(1, int(math.ceil(angular_speed * density)))


class TraceAnimator:
    """
    Boucle d'animation du tracé.

    Possède l'état du tracé (angle cumulé + dernier point) ; à chaque image
    elle avance l'angle proportionnellement au temps écoulé et émet une suite
    de segments interpolés, pour qu'une vitesse élevée ne produise jamais de
    raccourci rectiligne visible.
    """

    def __init__(
        self,
        config: RouletteConfig,
        surface: Optional[TraceSurface],
        ticker: FrameTicker,
        *,
        overlay: Optional[OverlaySink] = None,
        settings: AnimationSettings = DEFAULT_SETTINGS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.surface = surface
        self.ticker = ticker
        self.overlay = overlay
        self.settings = settings
        self.clock = clock
        self.state = TraceState()
        self.play_state = PlayState.STOPPED
        self.show_guides = True
        self._last_time: Optional[float] = None
        self._degenerate_logged: Optional[RouletteConfig] = None

    # ----- États -----

    @property
    def running(self) -> bool:
        return self.play_state is PlayState.RUNNING

    def play(self) -> None:
        if self.running:
            return
        self._last_time = None
        self.play_state = PlayState.RUNNING
        self.ticker.start(self._on_frame)
        _LOGGER.debug("Trace animation started at angle %.4f", self.state.cumulative_angle)

    def pause(self) -> None:
        self.ticker.cancel()
        if self.running:
            _LOGGER.debug("Trace animation paused at angle %.4f", self.state.cumulative_angle)
        self.play_state = PlayState.STOPPED
        self._last_time = None

    def set_playing(self, playing: bool) -> None:
        if playing:
            self.play()
        else:
            self.pause()

    def toggle(self) -> bool:
        self.set_playing(not self.running)
        return self.running

    def teardown(self) -> None:
        self.pause()
        self.overlay = None

    # ----- Commandes -----

    def set_config(self, config: RouletteConfig) -> None:
        old = self.config
        self.config = config
        if shape_type_changed(old, config):
            self.clear()
            return
        if geometry_changed(old, config):
            self.state.lift_pen()
        self._emit_overlay()

    def set_show_guides(self, visible: bool) -> None:
        self.show_guides = bool(visible)
        self._emit_overlay()

    def clear(self) -> None:
        """Efface la couche de tracé et lève le stylo ; l'angle cumulé est conservé."""
        if self._surface_ready():
            self.surface.clear()
        self.state.lift_pen()
        _LOGGER.debug("Trace cleared")
        self._emit_overlay()

    def reset(self) -> None:
        """Action « reset » de l'interface : efface et lève le stylo."""
        self.clear()
        self.state.lift_pen()

    def reset_angle(self) -> None:
        """Comme :meth:`reset`, mais repart de l'angle 0."""
        self.state.cumulative_angle = 0.0
        self.reset()

    # ----- Pas d'animation -----

    def _on_frame(self) -> None:
        if not self.running:
            return
        now = self.clock()
        if self._last_time is None:
            elapsed = 0.0
        else:
            elapsed = max(0.0, now - self._last_time)
        self._last_time = now
        self.step(min(elapsed, self.settings.max_frame_elapsed))

    def angle_delta(self, elapsed: float) -> float:
        speed = self.config.angular_speed
        if not (math.isfinite(speed) and math.isfinite(elapsed)) or speed <= 0.0 or elapsed <= 0.0:
            return 0.0
        return speed * elapsed * self.settings.base_speed

    def step(self, elapsed: float) -> List[TraceSegment]:
        """
        Avance le tracé de ``elapsed`` secondes et renvoie les segments émis.

        Sans surface prête l'image est ignorée : l'angle n'avance pas.
        """
        if not self._surface_ready():
            return []
        cfg = self.config
        start = self.state.cumulative_angle
        delta = self.angle_delta(elapsed)

        segments: List[TraceSegment] = []
        if self.state.last_point is not None and delta > 0.0:
            segments = self.interpolate(cfg, start, delta, self.state.last_point)

        end = start + delta
        self.state.cumulative_angle = end
        self.state.last_point = pen_point(cfg, end)
        if self.state.last_point is None:
            self._log_degenerate(cfg)

        if segments:
            self.surface.draw_segments(segments, cfg.stroke_width)
        self._emit_overlay()
        return segments

    def interpolate(
        self,
        config: RouletteConfig,
        start: float,
        delta: float,
        from_point: Point,
    ) -> List[TraceSegment]:
        steps = sub_step_count(config.angular_speed, self.settings.sub_step_density)
        segments: List[TraceSegment] = []
        prev: Optional[Point] = from_point
        for i in range(1, steps + 1):
            angle = start + delta * i / steps
            p = pen_point(config, angle)
            if p is None:
                prev = None
                continue
            if prev is not None:
                color = resolve_color(config.color, color_progress(angle))
                segments.append(TraceSegment(prev, p, color))
            prev = p
        return segments

    # ----- Surcouche -----

    def overlay_frame(self) -> OverlayFrame:
        cfg = self.config
        angle = self.state.cumulative_angle
        return OverlayFrame(
            outline=boundary_outline(cfg.guide, self.settings.outline_samples),
            center=moving_center(cfg, angle),
            moving_radius=cfg.moving_radius,
            pen=pen_point(cfg, angle),
            visible=self.show_guides,
        )

    def _emit_overlay(self) -> None:
        if self.overlay is None:
            return
        self.overlay.show_overlay(self.overlay_frame())

    def _surface_ready(self) -> bool:
        return self.surface is not None and self.surface.ready

    def _log_degenerate(self, config: RouletteConfig) -> None:
        if self._degenerate_logged is config:
            return
        self._degenerate_logged = config
        _LOGGER.warning(
            "Degenerate trace configuration (moving radius %r), nothing drawn",
            config.moving_radius,
        )


__all__ = [
    "OverlayFrame",
    "OverlaySink",
    "PlayState",
    "TraceAnimator",
    "TraceSegment",
    "TraceState",
    "TraceSurface",
    "color_progress",
    "sub_step_count",
]
