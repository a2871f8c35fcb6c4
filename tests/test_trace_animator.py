import logging
import math

from frame_scheduler import ManualClock, ManualFrameTicker
from guide_geometry import TAU, CircleGuide, SquareGuide
from roulette import pen_point
from spirotrace_config import AnimationSettings, RouletteConfig
from trace_animator import (
    OverlaySink,
    TraceAnimator,
    TraceSurface,
    color_progress,
    sub_step_count,
)


class RecordingSurface(TraceSurface):
    def __init__(self, ready=True):
        self._ready = ready
        self.segments = []
        self.widths = []
        self.clears = 0

    @property
    def ready(self):
        return self._ready

    def clear(self):
        self.clears += 1
        self.segments = []

    def draw_segments(self, segments, width):
        self.segments.extend(segments)
        self.widths.append(width)


class RecordingOverlay(OverlaySink):
    def __init__(self):
        self.frames = []

    def show_overlay(self, frame):
        self.frames.append(frame)


SCENARIO = RouletteConfig(guide=CircleGuide(150.0), moving_radius=50.0, pen_distance=75.0)


def _animator(config=SCENARIO, surface=None, settings=None):
    clock = ManualClock()
    ticker = ManualFrameTicker(clock)
    surface = surface if surface is not None else RecordingSurface()
    overlay = RecordingOverlay()
    kwargs = {"overlay": overlay, "clock": clock}
    if settings is not None:
        kwargs["settings"] = settings
    animator = TraceAnimator(config, surface, ticker, **kwargs)
    return animator, ticker, surface, overlay


def _close(p, q, tol=1e-9):
    return math.isclose(p[0], q[0], abs_tol=tol) and math.isclose(p[1], q[1], abs_tol=tol)


def test_helpers():
    assert sub_step_count(0.0, 20) == 1
    assert sub_step_count(0.01, 20) == 1
    assert sub_step_count(2.5, 20) == 50
    assert sub_step_count(float("nan"), 20) == 1
    assert math.isclose(color_progress(TAU + 1.0), 1.0 / TAU)
    assert 0.0 <= color_progress(-0.5) < 1.0


def test_first_step_places_pen_without_drawing():
    animator, _, surface, _ = _animator()
    segments = animator.step(0.01)
    assert segments == []
    assert surface.segments == []
    assert math.isclose(animator.state.cumulative_angle, 0.01)
    assert _close(animator.state.last_point, pen_point(SCENARIO, 0.01))


def test_second_step_draws_contiguous_segments():
    animator, _, surface, _ = _animator()
    animator.step(0.01)
    start = animator.state.last_point
    segments = animator.step(0.01)
    assert len(segments) == sub_step_count(SCENARIO.angular_speed, 20)
    assert segments[0].start == start
    for a, b in zip(segments, segments[1:]):
        assert a.end == b.start
    assert _close(segments[-1].end, pen_point(SCENARIO, 0.02))
    assert _close(animator.state.last_point, pen_point(SCENARIO, 0.02))
    assert surface.widths == [SCENARIO.stroke_width]


def test_fast_speed_subdivides():
    config = SCENARIO.with_changes(angular_speed=3.0)
    animator, _, surface, _ = _animator(config)
    animator.step(0.0)
    segments = animator.step(0.1)
    assert len(segments) == 60
    assert math.isclose(animator.state.cumulative_angle, 0.3)
    assert len(surface.segments) == 60


def test_first_frame_has_zero_elapsed():
    animator, ticker, surface, _ = _animator()
    animator.play()
    assert ticker.active
    ticker.fire()
    assert animator.state.cumulative_angle == 0.0
    assert _close(animator.state.last_point, pen_point(SCENARIO, 0.0))
    ticker.fire()
    assert math.isclose(animator.state.cumulative_angle, 1.0 / 60.0)
    assert surface.segments


def test_frame_elapsed_is_clamped():
    settings = AnimationSettings(max_frame_elapsed=0.25)
    animator, ticker, _, _ = _animator(settings=settings)
    animator.play()
    ticker.fire()
    ticker.fire(seconds=10.0)
    assert math.isclose(animator.state.cumulative_angle, 0.25)


def test_pause_and_resume():
    animator, ticker, _, _ = _animator()
    animator.play()
    ticker.fire(frames=3)
    angle = animator.state.cumulative_angle
    animator.pause()
    animator.pause()
    assert not animator.running
    assert not ticker.active
    assert ticker.fire() == 0
    ticker.clock.advance(100.0)
    assert animator.toggle()
    ticker.fire()
    assert animator.state.cumulative_angle == angle
    animator.teardown()
    assert not ticker.active
    assert animator.overlay is None


def test_degenerate_radius_draws_nothing(caplog):
    config = SCENARIO.with_changes(moving_radius=0.0)
    animator, _, surface, _ = _animator(config)
    with caplog.at_level(logging.WARNING):
        for _ in range(5):
            assert animator.step(0.05) == []
    assert surface.segments == []
    assert animator.state.last_point is None
    assert caplog.text.count("Degenerate") == 1


def test_clear_is_idempotent():
    animator, _, surface, _ = _animator()
    animator.step(0.0)
    animator.step(0.1)
    assert surface.segments
    angle = animator.state.cumulative_angle
    animator.clear()
    first = (surface.segments, animator.state.cumulative_angle, animator.state.last_point)
    animator.clear()
    second = (surface.segments, animator.state.cumulative_angle, animator.state.last_point)
    assert first == second == ([], angle, None)
    # Le stylo repose au point courant sans tirer de trait de raccord.
    assert animator.step(0.01) == []


def test_reset_angle_starts_over():
    animator, _, _, _ = _animator()
    animator.step(0.0)
    animator.step(0.5)
    animator.reset_angle()
    assert animator.state.cumulative_angle == 0.0
    assert animator.state.last_point is None


def test_unready_surface_skips_frames():
    surface = RecordingSurface(ready=False)
    animator, _, _, overlay = _animator(surface=surface)
    assert animator.step(0.1) == []
    assert animator.state.cumulative_angle == 0.0
    assert animator.state.last_point is None
    assert overlay.frames == []
    animator.surface = None
    assert animator.step(0.1) == []


def test_config_changes():
    animator, _, surface, _ = _animator()
    animator.step(0.0)
    animator.set_config(SCENARIO.with_changes(color="#ff0000"))
    assert animator.state.last_point is not None
    animator.set_config(animator.config.with_changes(moving_radius=40.0))
    assert animator.state.last_point is None
    assert surface.clears == 0
    animator.step(0.0)
    animator.set_config(animator.config.with_changes(guide=SquareGuide(200.0, 0.0)))
    assert surface.clears == 1
    assert animator.state.last_point is None


def test_overlay_frames():
    animator, _, _, overlay = _animator()
    animator.step(0.0)
    frame = overlay.frames[-1]
    assert frame.visible
    assert frame.moving_radius == 50.0
    assert _close(frame.center, (100.0, 0.0))
    assert _close(frame.pen, pen_point(SCENARIO, 0.0))
    assert frame.outline[0] == frame.outline[-1]
    animator.set_show_guides(False)
    assert not overlay.frames[-1].visible
