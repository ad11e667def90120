"""
Animatable parameters and the values authored for them.

A Parameter is a lookup key into an Animation's timeline; it never stores values
itself. A ParameterValue is one Parameter's authored value at one key frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple

from ..errors import InvalidValueError
from ..math.geodesy import normalize_angle
from ..math.vector import Vector, VectorKind


@dataclass(eq=False)
class Parameter:
    """A named animatable channel owned by a scene entity.

    Parameters hash and compare by identity so two entities may expose channels
    with the same display name without colliding in a key frame.

    Attributes:
        parameter_id: Stable identifier, unique within one Animation
        display_name: Human readable name shown by editors
        kind: Vector kind every value of this parameter must have
        owner: Scene entity exposing the parameter (camera, layer, ...)
        enabled: Whether the parameter is applied during playback
        wrap_components: Per-component flag marking angles in degrees that wrap at 360
    """

    parameter_id: str
    display_name: str
    kind: VectorKind = VectorKind.SCALAR
    owner: Any = None
    enabled: bool = True
    wrap_components: Tuple[bool, ...] = field(default=())

    def __post_init__(self):
        if not self.wrap_components:
            self.wrap_components = (False,) * self.kind.dimensions
        elif len(self.wrap_components) != self.kind.dimensions:
            raise ValueError(
                f"wrap_components for {self.parameter_id} must have {self.kind.dimensions} entries"
            )
        self.wrap_components = tuple(bool(w) for w in self.wrap_components)

    @property
    def is_angular(self) -> bool:
        return any(self.wrap_components)

    def normalize(self, value: Vector) -> Vector:
        """Wrap angular components into [-180, 180); other components pass through."""
        if not self.is_angular:
            return value
        components = value.components
        wrapped = tuple(
            normalize_angle(c) if wrap else c
            for c, wrap in zip(components, self.wrap_components)
        )
        return value if wrapped == components else value.from_components(wrapped)

    def coerce_value(self, value: Any) -> Vector:
        """Convert a raw value to this parameter's vector kind.

        Angular components are stored normalised, so stored values and
        interpolated values share one range.

        Raises:
            InvalidValueError: if the value's dimensionality does not match
        """
        try:
            vector = self.kind.coerce(value)
        except ValueError as e:
            raise InvalidValueError(
                f"Invalid value for parameter {self.parameter_id}: {e}",
                details={'parameter_id': self.parameter_id, 'kind': self.kind.name},
            ) from e
        return self.normalize(vector)

    def __repr__(self) -> str:
        return f"Parameter({self.parameter_id!r}, kind={self.kind.name}, enabled={self.enabled})"


@dataclass(frozen=True)
class ParameterValue:
    """A snapshot of one parameter's value, stored under exactly one key frame."""

    parameter: Parameter
    value: Vector

    def __post_init__(self):
        if not isinstance(self.value, Vector) or self.value.kind is not self.parameter.kind:
            raise InvalidValueError(
                f"Value {self.value!r} does not match kind {self.parameter.kind.name} "
                f"of parameter {self.parameter.parameter_id}",
                details={'parameter_id': self.parameter.parameter_id},
            )
        object.__setattr__(self, 'value', self.parameter.normalize(self.value))

    @classmethod
    def create(cls, parameter: Parameter, value: Any) -> "ParameterValue":
        return cls(parameter, parameter.coerce_value(value))

    @property
    def owner(self) -> Parameter:
        return self.parameter
