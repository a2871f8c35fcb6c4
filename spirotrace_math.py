from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, List, Tuple

from guide_geometry import effective_radius
from math_backends import numba_backend, python_backend
from spirotrace_config import RouletteConfig

Point = Tuple[float, float]

DEFAULT_MAX_TURNS = 64

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class MathBackend:
    name: str
    label: str
    available: bool
    generator: Callable


_BACKENDS: dict[str, MathBackend] = {}
_ACTIVE_BACKEND = "python"


def register_backend(backend: MathBackend) -> None:
    _BACKENDS[backend.name] = backend


def list_backends(*, available_only: bool = False) -> list[MathBackend]:
    backends = list(_BACKENDS.values())
    if available_only:
        backends = [b for b in backends if b.available]
    return sorted(backends, key=lambda b: b.name)


def get_backend_name() -> str:
    return _ACTIVE_BACKEND


def set_backend(name: str) -> None:
    backend = _BACKENDS.get(name)
    if backend is None:
        raise ValueError(f"Unknown math backend: {name}")
    if not backend.available:
        raise ValueError(f"Math backend not available: {name}")
    global _ACTIVE_BACKEND
    _ACTIVE_BACKEND = backend.name
    _LOGGER.debug("Math backend set to %s", name)


def closing_turns(config: RouletteConfig, max_turns: int = DEFAULT_MAX_TURNS) -> float:
    """
    Nombre de tours de guide avant que la courbe se referme.

    Même règle que pour les engrenages : r / pgcd(R, r) sur les rayons
    arrondis. Exact pour un guide circulaire, approché pour les autres formes.
    """
    R = effective_radius(config.guide)
    r = config.moving_radius
    if not (math.isfinite(R) and math.isfinite(r)) or r <= 0:
        return 1.0
    r_i = int(round(r))
    if r_i <= 0:
        return float(max_turns)
    g = math.gcd(int(round(R)), r_i) or 1
    return float(min(max_turns, max(1, r_i // g)))


def sample_angles(start: float, end: float, steps: int) -> List[float]:
    steps = max(2, int(steps))
    return [start + (end - start) * i / (steps - 1) for i in range(steps)]


def generate_trace_points(
    config: RouletteConfig,
    start: float,
    end: float,
    steps: int = 5000,
) -> List[Point]:
    backend = _BACKENDS.get(_ACTIVE_BACKEND)
    if backend is None:
        raise ValueError(f"Unknown math backend: {_ACTIVE_BACKEND}")
    return backend.generator(config, sample_angles(start, end, steps))


register_backend(
    MathBackend(
        name="python",
        label="Python",
        available=True,
        generator=python_backend.generate_trace_points,
    )
)
register_backend(
    MathBackend(
        name="numba",
        label="Numba",
        available=numba_backend.NUMBA_AVAILABLE,
        generator=numba_backend.generate_trace_points,
    )
)


__all__ = [
    "DEFAULT_MAX_TURNS",
    "MathBackend",
    "closing_turns",
    "generate_trace_points",
    "get_backend_name",
    "list_backends",
    "register_backend",
    "sample_angles",
    "set_backend",
]
