from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Tuple, Union

from guide_geometry import (
    DEFAULT_FALLBACK_RADIUS,
    CircleGuide,
    EllipseGuide,
    GuideShape,
    HexagonGuide,
    SquareGuide,
    StarGuide,
)

DEFAULT_INK = "#000000"
DEFAULT_BACKGROUND = "#121212"


@dataclass(frozen=True)
class GradientStop:
    color: str
    position: float   # dans [0, 1]


@dataclass(frozen=True)
class GradientSpec:
    stops: Tuple[GradientStop, ...] = ()


ColorSpec = Union[str, GradientSpec]


@dataclass(frozen=True)
class RouletteConfig:
    """
    Instantané des paramètres d'un tracé. Jamais modifié sur place :
    l'interface en crée un nouveau à chaque édition (``with_changes``).
    """
    guide: GuideShape = field(default_factory=CircleGuide)
    moving_radius: float = 50.0     # rayon r de la roue mobile
    pen_distance: float = 75.0      # distance d du stylo au centre de la roue
    angular_speed: float = 1.0
    stroke_width: float = 2.0
    color: ColorSpec = DEFAULT_INK
    background_color: str = DEFAULT_BACKGROUND

    def with_changes(self, **changes) -> "RouletteConfig":
        return replace(self, **changes)


@dataclass(frozen=True)
class AnimationSettings:
    base_speed: float = 1.0           # rad/s pour une vitesse angulaire de 1
    sub_step_density: float = 20.0    # K : sous-pas par unité de vitesse
    frame_interval_ms: int = 16
    max_frame_elapsed: float = 0.25   # s, borne l'écart après un gel
    zoom_in_factor: float = 1.1
    zoom_out_factor: float = 0.9
    min_scale: float = 0.1
    max_scale: float = 10.0
    outline_samples: int = 360
    fallback_radius: float = DEFAULT_FALLBACK_RADIUS


SHAPE_DEFAULTS: Dict[str, GuideShape] = {
    "circle": CircleGuide(radius=200.0),
    "square": SquareGuide(edge_length=200.0, corner_radius=0.0),
    "star": StarGuide(outer_radius=200.0, inner_radius=100.0, point_count=5),
    "hexagon": HexagonGuide(side_length=200.0, corner_radius=0.0),
    "ellipse": EllipseGuide(major_axis=200.0, minor_axis=100.0, rotation_degrees=0.0),
}


def _gradient(*stops: Tuple[str, float]) -> GradientSpec:
    return GradientSpec(tuple(GradientStop(c, p) for c, p in stops))


GRADIENT_PRESETS: Tuple[GradientSpec, ...] = (
    _gradient(("#FF8C42", 0.0), ("#FF5733", 0.33), ("#C70039", 0.66), ("#900C3F", 1.0)),
    _gradient(("#FF1493", 0.0), ("#00FF00", 0.33), ("#00FFFF", 0.66), ("#FF1493", 1.0)),
    _gradient(("#FF0000", 0.0), ("#FFFF00", 0.33), ("#FF00FF", 0.66), ("#FF0000", 1.0)),
)

DEFAULT_SETTINGS = AnimationSettings()
DEFAULT_CONFIG = RouletteConfig(guide=SHAPE_DEFAULTS["circle"])


def geometry_changed(old: RouletteConfig, new: RouletteConfig) -> bool:
    """Vrai si le tracé change de forme (le stylo doit être levé)."""
    return (
        old.guide != new.guide
        or old.moving_radius != new.moving_radius
        or old.pen_distance != new.pen_distance
    )


def shape_type_changed(old: RouletteConfig, new: RouletteConfig) -> bool:
    return old.guide.shape_type != new.guide.shape_type


__all__ = [
    "AnimationSettings",
    "ColorSpec",
    "DEFAULT_BACKGROUND",
    "DEFAULT_CONFIG",
    "DEFAULT_INK",
    "DEFAULT_SETTINGS",
    "GRADIENT_PRESETS",
    "GradientSpec",
    "GradientStop",
    "RouletteConfig",
    "SHAPE_DEFAULTS",
    "geometry_changed",
    "shape_type_changed",
]
