"""
Interpolation math for parameter control points.

The smooth mode is a cardinal cubic Hermite spline on the (non-uniform) frame
grid. Tangents are finite differences measured per frame: central differences
at interior control points, one-sided differences at the two ends, scaled by
``1 - tension`` (tension 0 gives Catmull-Rom). Neighbouring segments share the
tangent at their common control point, so the curve is C1 and passes exactly
through every control point.
"""

from enum import Enum
from typing import Sequence, Tuple

from ..math.geodesy import normalize_angle, shortest_angle_delta
from ..math.vector import Vector


class InterpolationMode(Enum):
    """Interpolation used between two control points"""
    LINEAR = "linear"
    HERMITE = "hermite"


class HermiteBasis:
    """Cubic Hermite basis functions of the local parameter t in [0, 1]"""

    @staticmethod
    def h00(t: float) -> float:
        return (1 + 2 * t) * (1 - t) * (1 - t)

    @staticmethod
    def h10(t: float) -> float:
        return t * (1 - t) * (1 - t)

    @staticmethod
    def h01(t: float) -> float:
        return t * t * (3 - 2 * t)

    @staticmethod
    def h11(t: float) -> float:
        return t * t * (t - 1)


def lerp(start: Vector, end: Vector, t: float) -> Vector:
    return start.interpolate(end, t)


def hermite(start: Vector, start_tangent: Vector, end: Vector, end_tangent: Vector,
            span: float, t: float) -> Vector:
    """
    Evaluate one Hermite segment.

    Args:
        start: Value at the segment start
        start_tangent: Derivative per frame at the segment start
        end: Value at the segment end
        end_tangent: Derivative per frame at the segment end
        span: Segment length in frames
        t: Local parameter in [0, 1]
    """
    if t == 0:
        return start
    return (start * HermiteBasis.h00(t)
            + start_tangent * (HermiteBasis.h10(t) * span)
            + end * HermiteBasis.h01(t)
            + end_tangent * (HermiteBasis.h11(t) * span))


def estimate_tangents(frames: Sequence[float], values: Sequence[Vector],
                      tension: float = 0.0) -> Tuple[Vector, ...]:
    """Finite-difference tangent (per frame) at every control point."""
    count = len(values)
    if count < 2:
        return tuple(v.kind.zero() for v in values)

    scale = 1.0 - tension
    tangents = []
    for k in range(count):
        before = max(k - 1, 0)
        after = min(k + 1, count - 1)
        slope = (values[after] - values[before]) * (1.0 / (frames[after] - frames[before]))
        tangents.append(slope * scale)
    return tuple(tangents)


def unwrap_values(values: Sequence[Vector], wrap_components: Sequence[bool]) -> Tuple[Vector, ...]:
    """
    Make angular components continuous along the shorter arc.

    Each wrapped component of value k is replaced by the value of k-1 plus the
    shortest signed delta between them, so interpolation never travels the long
    way round. Non-wrapped components are left untouched.
    """
    if not values or not any(wrap_components):
        return tuple(values)

    unwrapped = [values[0]]
    for value in values[1:]:
        previous = unwrapped[-1].components
        components = [
            previous[i] + shortest_angle_delta(previous[i], c) if wrap else c
            for i, (c, wrap) in enumerate(zip(value.components, wrap_components))
        ]
        unwrapped.append(value.from_components(components))
    return tuple(unwrapped)


def wrap_result(value: Vector, wrap_components: Sequence[bool]) -> Vector:
    """Normalise wrapped components of an interpolated value into [-180, 180)."""
    if not any(wrap_components):
        return value
    return value.from_components(
        normalize_angle(c) if wrap else c
        for c, wrap in zip(value.components, wrap_components)
    )


def get_interpolation_mode(name: str) -> InterpolationMode:
    """Resolve a mode name, falling back to Hermite for unknown names"""
    try:
        return InterpolationMode(str(name).lower())
    except ValueError:
        return InterpolationMode.HERMITE

