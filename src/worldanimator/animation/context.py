"""
Animation context: evaluates a parameter's value at any frame.

Evaluation is pure by default. Callers that repeatedly query the same frames
(e.g. a render loop redrawing a paused frame) may opt into a bounded LRU cache
keyed by animation revision, so any edit makes old entries unreachable.
"""

from __future__ import annotations

import logging
import math
import threading
from bisect import bisect_right
from collections import OrderedDict
from numbers import Real
from typing import Any, Dict, Optional, Tuple, Union

from ..config import WorldAnimatorConfig, get_config
from ..errors import InvalidFrameError, NoKeyFramesError, TimelineInvariantError
from ..math.vector import Vector
from .animation import Animation, TimelineSnapshot
from .interpolation import (
    InterpolationMode,
    estimate_tangents,
    get_interpolation_mode,
    hermite,
    lerp,
    unwrap_values,
    wrap_result,
)
from .parameter import Parameter


logger = logging.getLogger(__name__)


def validate_query_frame(frame: Any) -> float:
    """Query frames may be fractional but must be finite and non-negative."""
    if isinstance(frame, bool) or not isinstance(frame, Real) or not math.isfinite(frame):
        raise InvalidFrameError(f"frame must be a finite number, got {frame!r}", details={'frame': repr(frame)})
    if frame < 0:
        raise InvalidFrameError(f"frame must be >= 0, got {frame}", details={'frame': frame})
    return frame


class AnimationContext:
    """Interpolates parameter values from an Animation's control points."""

    def __init__(
        self,
        mode: Union[InterpolationMode, str, None] = None,
        tension: Optional[float] = None,
        cache_max_entries: Optional[int] = None,
        config: Optional[WorldAnimatorConfig] = None,
    ):
        config = config or get_config()
        if isinstance(mode, InterpolationMode):
            self.mode = mode
        else:
            self.mode = get_interpolation_mode(mode or config.interpolation_mode)
        self.tension = config.tension if tension is None else float(tension)
        if not 0.0 <= self.tension <= 1.0:
            raise ValueError(f"tension must be within [0, 1], got: {self.tension}")

        self._cache_lock = threading.Lock()
        self._cache: "OrderedDict[Tuple[Any, ...], Vector]" = OrderedDict()
        self._cache_max_entries = max(1, cache_max_entries or config.value_cache_max_entries)
        self._stats = {'hits': 0, 'misses': 0}

    # ------------------------------------------------------------------
    def get_value_at_frame(self, animation: Animation, parameter: Parameter, frame,
                           use_cache: bool = False) -> Vector:
        """
        Value of ``parameter`` at ``frame``.

        Args:
            animation: Animation holding the control points
            parameter: Parameter to evaluate
            frame: Non-negative frame, fractional frames allowed
            use_cache: Opt into the revision-keyed value cache

        Raises:
            InvalidFrameError: if frame is negative or not a finite number
            NoKeyFramesError: if the parameter has no control points
        """
        snapshot = animation.snapshot()
        if not use_cache:
            return self.value_from_snapshot(snapshot, parameter, frame)

        key = (animation, snapshot.revision, parameter, frame)
        with self._cache_lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self._stats['hits'] += 1
                return cached

        value = self.value_from_snapshot(snapshot, parameter, frame)

        with self._cache_lock:
            self._stats['misses'] += 1
            self._cache[key] = value
            while len(self._cache) > self._cache_max_entries:
                self._cache.popitem(last=False)
        return value

    def value_from_snapshot(self, snapshot: TimelineSnapshot, parameter: Parameter, frame) -> Vector:
        """Evaluate against an already captured snapshot (used by batch readers)."""
        frame = validate_query_frame(frame)
        frames, values = snapshot.control_points(parameter)
        if not frames:
            raise NoKeyFramesError(
                f"Parameter {parameter.parameter_id} has no key frames",
                details={'parameter_id': parameter.parameter_id},
            )

        # Constant extrapolation outside the authored range
        if frame <= frames[0]:
            return values[0]
        if frame >= frames[-1]:
            return values[-1]

        index = bisect_right(frames, frame) - 1
        if frames[index] == frame:
            return values[index]

        # Local window: the bracketing pair plus one neighbour on each side
        lo = max(index - 1, 0)
        hi = min(index + 2, len(frames) - 1)
        window_frames = frames[lo:hi + 1]
        window_values = unwrap_values(values[lo:hi + 1], parameter.wrap_components)
        a = index - lo
        b = a + 1

        span = window_frames[b] - window_frames[a]
        if span <= 0:
            raise TimelineInvariantError(
                f"Control points of {parameter.parameter_id} are not strictly ascending: {frames}"
            )
        t = (frame - window_frames[a]) / span

        if self.mode is InterpolationMode.LINEAR or len(frames) == 2:
            result = lerp(window_values[a], window_values[b], t)
        else:
            tangents = estimate_tangents(window_frames, window_values, self.tension)
            result = hermite(window_values[a], tangents[a], window_values[b], tangents[b], span, t)

        return wrap_result(result, parameter.wrap_components)

    # ------------------------------------------------------------------
    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def cache_info(self) -> Dict[str, int]:
        with self._cache_lock:
            return {**self._stats, 'size': len(self._cache), 'max_entries': self._cache_max_entries}

    def __repr__(self) -> str:
        return f"AnimationContext(mode={self.mode.value}, tension={self.tension})"
