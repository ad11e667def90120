"""
Immutable vector value types used as animatable parameter values.

Three concrete kinds exist (scalar, 2D, 3D). They share one arithmetic contract
(add, subtract, scale, distance, interpolate) and only differ in dimensionality.
``VectorKind`` tags a kind so that containers and parameters can dispatch on it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Iterable, Tuple, Type


class Vector:
    """Shared arithmetic for the concrete vector kinds. Never instantiated directly."""

    __slots__ = ()

    @property
    def components(self) -> Tuple[float, ...]:
        raise NotImplementedError

    @property
    def kind(self) -> "VectorKind":
        return _KIND_BY_CLASS[type(self)]

    @classmethod
    def from_components(cls, components: Iterable[float]) -> "Vector":
        return cls(*(float(c) for c in components))

    def _check(self, other: "Vector") -> None:
        if type(other) is not type(self):
            raise TypeError(f"Cannot combine {type(self).__name__} with {type(other).__name__}")

    def add(self, other: "Vector") -> "Vector":
        self._check(other)
        return self.from_components(a + b for a, b in zip(self.components, other.components))

    def subtract(self, other: "Vector") -> "Vector":
        self._check(other)
        return self.from_components(a - b for a, b in zip(self.components, other.components))

    def scale(self, factor: float) -> "Vector":
        return self.from_components(c * factor for c in self.components)

    def distance_to(self, other: "Vector") -> float:
        self._check(other)
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self.components, other.components)))

    def interpolate(self, other: "Vector", t: float) -> "Vector":
        """Component-wise linear interpolation; t=0 returns self unchanged."""
        self._check(other)
        if t == 0:
            return self
        return self.from_components(a + (b - a) * t for a, b in zip(self.components, other.components))

    def is_close(self, other: "Vector", tolerance: float = 1e-9) -> bool:
        self._check(other)
        return all(math.isclose(a, b, rel_tol=tolerance, abs_tol=tolerance)
                   for a, b in zip(self.components, other.components))

    def __add__(self, other: "Vector") -> "Vector":
        return self.add(other)

    def __sub__(self, other: "Vector") -> "Vector":
        return self.subtract(other)

    def __mul__(self, factor: float) -> "Vector":
        return self.scale(factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector":
        return self.scale(-1.0)

    def __iter__(self):
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)


@dataclass(frozen=True)
class Vector1(Vector):
    x: float

    @property
    def components(self) -> Tuple[float, ...]:
        return (self.x,)

    def __float__(self) -> float:
        return float(self.x)


@dataclass(frozen=True)
class Vector2(Vector):
    x: float
    y: float

    @property
    def components(self) -> Tuple[float, ...]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Vector3(Vector):
    x: float
    y: float
    z: float

    @property
    def components(self) -> Tuple[float, ...]:
        return (self.x, self.y, self.z)


class VectorKind(Enum):
    """Tag for the closed set of vector kinds"""
    SCALAR = 1
    VECTOR2 = 2
    VECTOR3 = 3

    @property
    def dimensions(self) -> int:
        return self.value

    @property
    def vector_class(self) -> Type[Vector]:
        return _CLASS_BY_KIND[self]

    def make(self, *components: float) -> Vector:
        if len(components) != self.dimensions:
            raise ValueError(f"{self.name} expects {self.dimensions} components, got {len(components)}")
        return self.vector_class.from_components(components)

    def zero(self) -> Vector:
        return self.make(*([0.0] * self.dimensions))

    def coerce(self, value: Any) -> Vector:
        """Turn a vector, a number or a sequence of numbers into this kind.

        Raises:
            ValueError: if the value has the wrong dimensionality or is not numeric
        """
        if isinstance(value, Vector):
            if value.kind is not self:
                raise ValueError(f"Expected {self.name} value, got {value.kind.name}")
            return value
        if isinstance(value, Real) and not isinstance(value, bool):
            return self.make(float(value))
        if isinstance(value, (list, tuple)):
            try:
                return self.make(*(float(c) for c in value))
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid {self.name} value {value!r}: {e}") from e
        raise ValueError(f"Cannot convert {type(value).__name__} to {self.name}")


_CLASS_BY_KIND = {
    VectorKind.SCALAR: Vector1,
    VectorKind.VECTOR2: Vector2,
    VectorKind.VECTOR3: Vector3,
}
_KIND_BY_CLASS = {cls: kind for kind, cls in _CLASS_BY_KIND.items()}


__all__ = ['Vector', 'Vector1', 'Vector2', 'Vector3', 'VectorKind']
