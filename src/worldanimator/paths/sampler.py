"""
Path sampling for trajectory visualisation.

Walks the frame range of an Animation, evaluates the tracked parameters at every
sampled frame and combines them through a PathProjection into an ordered
polyline, flagging the frames where an authored key frame sits so that the
renderer can draw handles distinctly from interpolated waypoints.

Sampling is read-only and works on one timeline snapshot, so a concurrent edit
can never tear a path. Resamples can be abandoned between samples through a
CancellationToken, or automatically when the timeline moves to a newer revision.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from numbers import Integral
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..animation.animation import Animation, TimelineSnapshot
from ..animation.context import AnimationContext
from ..animation.parameter import Parameter
from ..config import WorldAnimatorConfig, get_config
from ..errors import EmptyTimelineError, InvalidStepError, SamplingCancelledError
from ..math.vector import Vector
from .projections import PathProjection, component_projection, single_parameter_projection


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampledPath:
    """Ordered path samples taken at one timeline revision."""

    name: str
    revision: int
    step: int
    frames: Tuple[int, ...]
    positions: Tuple[Vector, ...]
    key_frame_flags: Tuple[bool, ...]

    def __len__(self) -> int:
        return len(self.positions)

    def key_frame_positions(self) -> List[Vector]:
        """Positions of samples that coincide with an authored key frame."""
        return [p for p, flagged in zip(self.positions, self.key_frame_flags) if flagged]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'revision': self.revision,
            'step': self.step,
            'frames': list(self.frames),
            'positions': [list(p.components) for p in self.positions],
            'key_frame_flags': list(self.key_frame_flags),
        }


class CancellationToken:
    """Cooperative cancellation flag checked between samples."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


def validate_step(step: Any) -> int:
    if isinstance(step, bool) or not isinstance(step, Integral) or step < 1:
        raise InvalidStepError(f"step must be an integer >= 1, got {step!r}", details={'step': repr(step)})
    return int(step)


def sample_frames(first_frame: int, last_frame: int, step: int) -> List[int]:
    """Frames from first to last stepped by ``step``, always ending on ``last_frame``."""
    frames = list(range(first_frame, last_frame + 1, step))
    if frames[-1] != last_frame:
        frames.append(last_frame)
    return frames


def _order_parameters(tracked: Iterable[Parameter]) -> Tuple[Parameter, ...]:
    # Unordered collections get a stable component order
    if isinstance(tracked, (set, frozenset)):
        return tuple(sorted(tracked, key=lambda p: p.parameter_id))
    return tuple(tracked)


def _default_projection(parameters: Sequence[Parameter]) -> PathProjection:
    if len(parameters) == 1:
        return single_parameter_projection(parameters[0])
    return component_projection('path', parameters)


def _sample_snapshot(
    animation: Animation,
    snapshot: TimelineSnapshot,
    context: AnimationContext,
    projection: PathProjection,
    step: int,
    cancel_token: Optional[CancellationToken],
    abandon_stale: bool,
) -> SampledPath:
    if snapshot.is_empty():
        raise EmptyTimelineError(
            f"Animation {animation.name} has no key frames to sample",
            details={'path': projection.name},
        )

    parameters = projection.parameters
    frames = sample_frames(snapshot.first_frame, snapshot.last_frame, step)
    positions: List[Vector] = []
    flags: List[bool] = []

    for frame in frames:
        if cancel_token is not None and cancel_token.is_cancelled:
            logger.info(f"Sampling of {projection.name} cancelled after {len(positions)}/{len(frames)} samples")
            raise SamplingCancelledError(
                f"Sampling of {projection.name} was cancelled",
                details={'reason': 'cancelled', 'completed': len(positions), 'total': len(frames)},
            )
        if abandon_stale and animation.revision != snapshot.revision:
            logger.info(f"Sampling of {projection.name} abandoned: revision {snapshot.revision} is stale")
            raise SamplingCancelledError(
                f"Timeline changed while sampling {projection.name}",
                details={'reason': 'stale', 'revision': snapshot.revision},
            )

        values = [context.value_from_snapshot(snapshot, p, frame) for p in parameters]
        positions.append(projection.project(values))
        flags.append(any(snapshot.has_value_for_parameter(p, frame) for p in parameters))

    return SampledPath(
        name=projection.name,
        revision=snapshot.revision,
        step=step,
        frames=tuple(frames),
        positions=tuple(positions),
        key_frame_flags=tuple(flags),
    )


def sample_path(
    animation: Animation,
    context: AnimationContext,
    tracked_parameters: Iterable[Parameter],
    step: int = 1,
    projection: Optional[PathProjection] = None,
    cancel_token: Optional[CancellationToken] = None,
    abandon_stale: bool = False,
) -> SampledPath:
    """
    Sample ``tracked_parameters`` over the whole timeline.

    Args:
        animation: Animation to sample
        context: Context used to evaluate parameter values
        tracked_parameters: Parameters defining the path and its key frame markers
        step: Frame step (>= 1); the last frame is always included
        projection: Combination rule; defaults to the single parameter's value or
            the concatenation of the tracked parameters' components
        cancel_token: Checked between samples
        abandon_stale: Stop as soon as the animation moves past the sampled revision

    Raises:
        EmptyTimelineError: if the animation has no key frames
        InvalidStepError: if step is not an integer >= 1
        NoKeyFramesError: if a tracked parameter has no control points
        SamplingCancelledError: if the resample was abandoned
    """
    step = validate_step(step)
    parameters = _order_parameters(tracked_parameters)
    if not parameters:
        raise ValueError("At least one tracked parameter is required")
    if projection is None:
        projection = _default_projection(parameters)
    elif set(projection.parameters) != set(parameters):
        raise ValueError(f"Projection {projection.name} does not track the requested parameters")

    return _sample_snapshot(animation, animation.snapshot(), context, projection,
                            step, cancel_token, abandon_stale)


class PathSampler:
    """Samples one path kind, selected by its projection, with a read-through cache.

    Cached paths are keyed by (animation, revision, step, tracked parameter ids).
    An edit bumps the revision, so stale entries are simply never hit again and
    age out of the bounded cache.
    """

    def __init__(
        self,
        projection: PathProjection,
        context: Optional[AnimationContext] = None,
        cache_max_entries: Optional[int] = None,
        abandon_stale: Optional[bool] = None,
        config: Optional[WorldAnimatorConfig] = None,
    ):
        config = config or get_config()
        self.projection = projection
        self.context = context or AnimationContext(config=config)
        self.default_step = config.default_path_step
        self.abandon_stale = config.abandon_stale_samples if abandon_stale is None else abandon_stale

        self._lock = threading.Lock()
        self._cache: "OrderedDict[Tuple[Any, ...], SampledPath]" = OrderedDict()
        self._cache_max_entries = max(1, cache_max_entries or config.path_cache_max_entries)
        self._stats = {'hits': 0, 'misses': 0, 'cancelled': 0}

    @property
    def name(self) -> str:
        return self.projection.name

    def sample(self, animation: Animation, step: Optional[int] = None,
               cancel_token: Optional[CancellationToken] = None) -> SampledPath:
        """Return the path for the current timeline revision, resampling on a cache miss."""
        step = validate_step(self.default_step if step is None else step)
        snapshot = animation.snapshot()
        key = (animation, snapshot.revision, step, self.projection.parameter_ids)

        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                self._stats['hits'] += 1
                return cached

        logger.debug(f"Resampling {self.name} at revision {snapshot.revision} (step {step})")
        try:
            path = _sample_snapshot(animation, snapshot, self.context, self.projection,
                                    step, cancel_token, self.abandon_stale)
        except SamplingCancelledError:
            with self._lock:
                self._stats['cancelled'] += 1
            raise

        with self._lock:
            self._stats['misses'] += 1
            self._cache[key] = path
            while len(self._cache) > self._cache_max_entries:
                self._cache.popitem(last=False)
        return path

    def invalidate(self) -> None:
        with self._lock:
            self._cache.clear()

    def cache_info(self) -> Dict[str, int]:
        with self._lock:
            return {**self._stats, 'size': len(self._cache), 'max_entries': self._cache_max_entries}

    def __repr__(self) -> str:
        return f"PathSampler({self.name!r}, step={self.default_step})"
