"""
Animation timeline store.

The Animation owns the ordered, frame-unique key frames and the registry of
parameters. It is the only place timeline state is mutated.

Thread model: a single writer mutates the timeline under ``_lock``. Each
mutation builds a new immutable ``TimelineSnapshot`` and publishes it with one
reference assignment, so readers (path sampling, rendering) take
``animation.snapshot()`` without locking and never see a half-applied edit.
"""

from __future__ import annotations

import logging
import threading
from bisect import bisect_left, bisect_right
from numbers import Integral
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from ..errors import InvalidFrameError, UnknownParameterError
from ..math.vector import Vector
from .keyframe import KeyFrame
from .parameter import Parameter, ParameterValue

if TYPE_CHECKING:
    from .context import AnimationContext


logger = logging.getLogger(__name__)

ChangeListener = Callable[["Animation", int], None]


def validate_frame(frame: Any, argument: str = 'frame') -> int:
    """Return ``frame`` as an int, or raise InvalidFrameError."""
    if isinstance(frame, bool) or not isinstance(frame, Integral):
        raise InvalidFrameError(
            f"{argument} must be an integer, got {frame!r}",
            details={argument: repr(frame)},
        )
    if frame < 0:
        raise InvalidFrameError(f"{argument} must be >= 0, got {frame}", details={argument: int(frame)})
    return int(frame)


class ControlPoints(NamedTuple):
    """Frames and values of the key frames carrying one parameter, ascending."""
    frames: Tuple[int, ...]
    values: Tuple[Vector, ...]


class TimelineSnapshot:
    """Immutable view of the timeline at one revision."""

    __slots__ = ('revision', 'key_frames', 'frames', '_control_points')

    def __init__(self, revision: int, key_frames: Tuple[KeyFrame, ...]):
        self.revision = revision
        self.key_frames = key_frames
        self.frames: Tuple[int, ...] = tuple(k.frame for k in key_frames)
        self._control_points: Dict[Parameter, ControlPoints] = {}

    def is_empty(self) -> bool:
        return not self.key_frames

    @property
    def first_frame(self) -> Optional[int]:
        return self.frames[0] if self.frames else None

    @property
    def last_frame(self) -> Optional[int]:
        return self.frames[-1] if self.frames else None

    def find(self, frame) -> Optional[KeyFrame]:
        index = bisect_left(self.frames, frame)
        if index < len(self.frames) and self.frames[index] == frame:
            return self.key_frames[index]
        return None

    def has_value_for_parameter(self, parameter: Parameter, frame) -> bool:
        key_frame = self.find(frame)
        return key_frame is not None and key_frame.has_value_for_parameter(parameter)

    def control_points(self, parameter: Parameter) -> ControlPoints:
        """Control points for ``parameter``, computed once per snapshot."""
        points = self._control_points.get(parameter)
        if points is None:
            frames: List[int] = []
            values: List[Vector] = []
            for key_frame in self.key_frames:
                parameter_value = key_frame.get_value_for_parameter(parameter)
                if parameter_value is not None:
                    frames.append(key_frame.frame)
                    values.append(parameter_value.value)
            points = ControlPoints(tuple(frames), tuple(values))
            self._control_points[parameter] = points
        return points

    def __len__(self) -> int:
        return len(self.key_frames)


class Animation:
    """Aggregate root: ordered key frames plus the parameter registry."""

    def __init__(self, name: str = 'Animation', parameters: Optional[List[Parameter]] = None):
        self.name = name
        self._lock = threading.RLock()
        self._parameters: Dict[str, Parameter] = {}
        self._snapshot = TimelineSnapshot(0, ())
        self._listeners: List[ChangeListener] = []

        for parameter in parameters or ():
            self._register_locked(parameter)

    # ------------------------------------------------------------------
    # Read side (lock free)
    def snapshot(self) -> TimelineSnapshot:
        return self._snapshot

    @property
    def revision(self) -> int:
        return self._snapshot.revision

    def get_key_frames(self) -> Tuple[KeyFrame, ...]:
        return self._snapshot.key_frames

    def get_key_frame(self, frame: int) -> Optional[KeyFrame]:
        return self._snapshot.find(validate_frame(frame))

    def get_first_frame(self) -> Optional[int]:
        return self._snapshot.first_frame

    def get_last_frame(self) -> Optional[int]:
        return self._snapshot.last_frame

    @property
    def frame_count(self) -> int:
        last = self._snapshot.last_frame
        return 0 if last is None else last + 1

    def has_value_for_parameter(self, parameter: Parameter, frame: int) -> bool:
        return self._snapshot.has_value_for_parameter(parameter, validate_frame(frame))

    def get_key_frame_with_parameter_before(self, parameter: Parameter, frame: int) -> Optional[KeyFrame]:
        """Nearest key frame strictly before ``frame`` carrying ``parameter``."""
        snapshot = self._snapshot
        frames = snapshot.control_points(parameter).frames
        index = bisect_left(frames, frame) - 1
        return snapshot.find(frames[index]) if index >= 0 else None

    def get_key_frame_with_parameter_after(self, parameter: Parameter, frame: int) -> Optional[KeyFrame]:
        """Nearest key frame strictly after ``frame`` carrying ``parameter``."""
        snapshot = self._snapshot
        frames = snapshot.control_points(parameter).frames
        index = bisect_right(frames, frame)
        return snapshot.find(frames[index]) if index < len(frames) else None

    def get_parameters(self) -> Tuple[Parameter, ...]:
        with self._lock:
            return tuple(self._parameters.values())

    def get_parameter(self, parameter_id: str) -> Parameter:
        with self._lock:
            parameter = self._parameters.get(parameter_id)
        if parameter is None:
            raise UnknownParameterError(
                f"Unknown parameter: {parameter_id}",
                details={'parameter_id': parameter_id},
            )
        return parameter

    def apply(self, context: "AnimationContext", frame) -> Dict[Parameter, Vector]:
        """Values of every enabled parameter that has control points at ``frame``."""
        snapshot = self._snapshot
        applied: Dict[Parameter, Vector] = {}
        for parameter in self.get_parameters():
            if not parameter.enabled or not snapshot.control_points(parameter).frames:
                continue
            applied[parameter] = context.value_from_snapshot(snapshot, parameter, frame)
        return applied

    # ------------------------------------------------------------------
    # Listeners
    def add_change_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, revision: int) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self, revision)
            except Exception as e:
                logger.warning(f"Animation change listener {listener!r} failed: {e}")

    # ------------------------------------------------------------------
    # Write side
    def _publish(self, key_frames: Tuple[KeyFrame, ...], reason: str) -> int:
        snapshot = TimelineSnapshot(self._snapshot.revision + 1, key_frames)
        self._snapshot = snapshot
        logger.debug(f"{self.name}: revision {snapshot.revision} ({reason}, {len(key_frames)} key frames)")
        return snapshot.revision

    def _register_locked(self, parameter: Parameter) -> bool:
        existing = self._parameters.get(parameter.parameter_id)
        if existing is parameter:
            return False
        if existing is not None:
            raise ValueError(f"Parameter id already registered: {parameter.parameter_id}")
        self._parameters[parameter.parameter_id] = parameter
        return True

    def register_parameter(self, parameter: Parameter) -> None:
        with self._lock:
            if not self._register_locked(parameter):
                return
            revision = self._publish(self._snapshot.key_frames, f"registered {parameter.parameter_id}")
        self._notify(revision)

    def set_parameter_enabled(self, parameter: Parameter, enabled: bool) -> None:
        with self._lock:
            self._register_locked(parameter)
            if parameter.enabled == bool(enabled):
                return
            parameter.enabled = bool(enabled)
            state = 'enabled' if enabled else 'disabled'
            revision = self._publish(self._snapshot.key_frames, f"{state} {parameter.parameter_id}")
        self._notify(revision)

    def add_or_replace_value(self, parameter: Parameter, frame: int, value: Any) -> ParameterValue:
        """
        Store ``value`` for ``parameter`` at ``frame``.

        An existing key frame at ``frame`` keeps the values of other parameters;
        only this parameter's value is replaced.

        Raises:
            InvalidFrameError: if frame is negative or not an integer
            InvalidValueError: if value does not match the parameter's kind
        """
        frame = validate_frame(frame)
        parameter_value = ParameterValue.create(parameter, value)

        with self._lock:
            self._register_locked(parameter)
            snapshot = self._snapshot
            key_frames = list(snapshot.key_frames)
            index = bisect_left(snapshot.frames, frame)
            if index < len(key_frames) and key_frames[index].frame == frame:
                key_frames[index] = key_frames[index].with_value(parameter_value)
            else:
                key_frames.insert(index, KeyFrame(frame, {parameter: parameter_value}))
            revision = self._publish(tuple(key_frames), f"set {parameter.parameter_id}@{frame}")

        self._notify(revision)
        return parameter_value

    def remove_value(self, parameter: Parameter, frame: int) -> bool:
        """Remove the value of ``parameter`` at ``frame``; returns False if there was none."""
        frame = validate_frame(frame)

        with self._lock:
            snapshot = self._snapshot
            index = bisect_left(snapshot.frames, frame)
            if index == len(snapshot.frames) or snapshot.frames[index] != frame:
                return False
            key_frame = snapshot.key_frames[index]
            if not key_frame.has_value_for_parameter(parameter):
                return False

            key_frames = list(snapshot.key_frames)
            remaining = key_frame.without_parameter(parameter)
            if remaining.is_empty():
                del key_frames[index]
            else:
                key_frames[index] = remaining
            revision = self._publish(tuple(key_frames), f"removed {parameter.parameter_id}@{frame}")

        self._notify(revision)
        return True

    def remove_key_frame(self, frame: int) -> bool:
        frame = validate_frame(frame)

        with self._lock:
            snapshot = self._snapshot
            index = bisect_left(snapshot.frames, frame)
            if index == len(snapshot.frames) or snapshot.frames[index] != frame:
                return False
            key_frames = snapshot.key_frames[:index] + snapshot.key_frames[index + 1:]
            revision = self._publish(key_frames, f"removed key frame {frame}")

        self._notify(revision)
        return True

    def move_key_frame(self, from_frame: int, to_frame: int) -> bool:
        """
        Move the key frame at ``from_frame`` to ``to_frame``.

        If ``to_frame`` already holds a key frame, the moved values are merged into
        it by parameter and the moved values win.

        Returns:
            False when there is no key frame at ``from_frame`` or the frames are equal
        """
        from_frame = validate_frame(from_frame, 'from_frame')
        to_frame = validate_frame(to_frame, 'to_frame')
        if from_frame == to_frame:
            return False

        with self._lock:
            snapshot = self._snapshot
            moving = snapshot.find(from_frame)
            if moving is None:
                return False

            key_frames = [k for k in snapshot.key_frames if k.frame != from_frame]
            frames = [k.frame for k in key_frames]
            moved = moving.with_frame(to_frame)
            index = bisect_left(frames, to_frame)
            if index < len(key_frames) and key_frames[index].frame == to_frame:
                key_frames[index] = key_frames[index].merged_with(moved)
            else:
                key_frames.insert(index, moved)
            revision = self._publish(tuple(key_frames), f"moved key frame {from_frame}->{to_frame}")

        self._notify(revision)
        return True

    def clear_parameter(self, parameter: Parameter) -> int:
        """Remove every value of ``parameter``. Returns the number of values removed."""
        with self._lock:
            snapshot = self._snapshot
            key_frames: List[KeyFrame] = []
            removed = 0
            for key_frame in snapshot.key_frames:
                if key_frame.has_value_for_parameter(parameter):
                    removed += 1
                    key_frame = key_frame.without_parameter(parameter)
                    if key_frame.is_empty():
                        continue
                key_frames.append(key_frame)
            if not removed:
                return 0
            revision = self._publish(tuple(key_frames), f"cleared {parameter.parameter_id}")

        self._notify(revision)
        return removed

    def scale(self, factor: float) -> None:
        """
        Rescale the timeline, moving each key frame to ``round(frame * factor)``.

        Key frames that land on the same frame are merged by parameter, later key
        frames winning.
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got: {factor}")

        with self._lock:
            merged: Dict[int, KeyFrame] = {}
            for key_frame in self._snapshot.key_frames:
                target = int(round(key_frame.frame * factor))
                moved = key_frame.with_frame(target)
                merged[target] = merged[target].merged_with(moved) if target in merged else moved
            key_frames = tuple(merged[f] for f in sorted(merged))
            revision = self._publish(key_frames, f"scaled by {factor}")

        self._notify(revision)

    def clear(self) -> None:
        with self._lock:
            if self._snapshot.is_empty():
                return
            revision = self._publish((), "cleared timeline")
        self._notify(revision)

    def replace_key_frames(self, key_frames: Iterable[KeyFrame],
                           enabled: Optional[Mapping[Parameter, bool]] = None) -> int:
        """
        Replace the whole timeline in one revision.

        Every key frame and parameter is checked before anything changes, so a
        failure leaves the timeline untouched. Empty key frames are dropped.

        Args:
            key_frames: Replacement key frames, in any order
            enabled: Optional enabled state per parameter, applied with the swap

        Returns:
            The published revision

        Raises:
            InvalidFrameError: if a key frame sits on an invalid frame
            ValueError: if two key frames share a frame or a parameter id clashes
                with a different registered parameter
        """
        ordered = sorted((k for k in key_frames if not k.is_empty()), key=lambda k: validate_frame(k.frame))
        for before, after in zip(ordered, ordered[1:]):
            if before.frame == after.frame:
                raise ValueError(f"Duplicate key frame at frame {after.frame}")
        enabled = dict(enabled or {})

        with self._lock:
            incoming: Dict[str, Parameter] = {}
            for parameter in [p for k in ordered for p in k.parameters] + list(enabled):
                existing = self._parameters.get(parameter.parameter_id, incoming.get(parameter.parameter_id))
                if existing is not None and existing is not parameter:
                    raise ValueError(f"Parameter id already registered: {parameter.parameter_id}")
                incoming[parameter.parameter_id] = parameter

            for parameter in incoming.values():
                self._register_locked(parameter)
            for parameter, state in enabled.items():
                parameter.enabled = bool(state)
            revision = self._publish(tuple(ordered), f"replaced timeline ({len(ordered)} key frames)")

        self._notify(revision)
        return revision

    def __repr__(self) -> str:
        snapshot = self._snapshot
        return (f"<Animation {self.name!r}: {len(snapshot)} key frames, "
                f"{len(self._parameters)} parameters, revision {snapshot.revision}>")
