"""Key frames: the parameter values authored at a single frame of the timeline."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Tuple

from .parameter import Parameter, ParameterValue


class KeyFrame:
    """Immutable set of parameter values at one frame.

    Edits never modify a KeyFrame in place; ``with_value``/``without_parameter``
    return new instances so that published timeline snapshots stay stable.
    """

    __slots__ = ('_frame', '_values')

    def __init__(self, frame: int, values: Optional[Mapping[Parameter, ParameterValue]] = None):
        self._frame = frame
        self._values: Mapping[Parameter, ParameterValue] = MappingProxyType(dict(values or {}))

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def values(self) -> Mapping[Parameter, ParameterValue]:
        """Read-only mapping of parameter to its value at this frame."""
        return self._values

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(self._values.keys())

    def has_value_for_parameter(self, parameter: Parameter) -> bool:
        return parameter in self._values

    def get_value_for_parameter(self, parameter: Parameter) -> Optional[ParameterValue]:
        return self._values.get(parameter)

    def is_empty(self) -> bool:
        return not self._values

    def with_value(self, parameter_value: ParameterValue) -> "KeyFrame":
        values = dict(self._values)
        values[parameter_value.parameter] = parameter_value
        return KeyFrame(self._frame, values)

    def without_parameter(self, parameter: Parameter) -> "KeyFrame":
        values = dict(self._values)
        values.pop(parameter, None)
        return KeyFrame(self._frame, values)

    def with_frame(self, frame: int) -> "KeyFrame":
        return KeyFrame(frame, self._values)

    def merged_with(self, other: "KeyFrame") -> "KeyFrame":
        """Merge by parameter; values from ``other`` win."""
        values = dict(self._values)
        values.update(other.values)
        return KeyFrame(self._frame, values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[ParameterValue]:
        return iter(self._values.values())

    def __repr__(self) -> str:
        names = ', '.join(p.parameter_id for p in self._values)
        return f"KeyFrame(frame={self._frame}, parameters=[{names}])"
