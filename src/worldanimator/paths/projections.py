"""
Projection strategies for path sampling.

A projection names the parameters a path tracks and how their values at one
frame combine into the single position drawn for that frame. Path kinds (eye
path, lookat path, single parameter plot) differ only in the projection they
hand to the PathSampler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from ..math.geodesy import geodetic_to_cartesian
from ..math.vector import Vector, Vector3, VectorKind
from ..animation.parameter import Parameter

Combiner = Callable[[Sequence[Vector]], Vector]


@dataclass(frozen=True)
class PathProjection:
    """Tracked parameters plus the rule combining their values into one position."""

    name: str
    parameters: Tuple[Parameter, ...]
    combine: Combiner

    def __post_init__(self):
        if not self.parameters:
            raise ValueError(f"Projection {self.name} must track at least one parameter")

    def project(self, values: Sequence[Vector]) -> Vector:
        return self.combine(values)

    @property
    def parameter_ids(self) -> frozenset:
        return frozenset(p.parameter_id for p in self.parameters)


def single_parameter_projection(parameter: Parameter, name: Optional[str] = None) -> PathProjection:
    """Plot one parameter's own value."""
    return PathProjection(name or parameter.parameter_id, (parameter,), lambda values: values[0])


def component_projection(name: str, parameters: Sequence[Parameter]) -> PathProjection:
    """
    Concatenate the components of several parameters into one vector.

    The total number of components must fit one of the vector kinds (1 to 3).
    """
    parameters = tuple(parameters)
    dimensions = sum(p.kind.dimensions for p in parameters)
    if dimensions > VectorKind.VECTOR3.dimensions:
        raise ValueError(f"Projection {name} spans {dimensions} components, at most 3 supported")
    kind = VectorKind(dimensions)

    def combine(values: Sequence[Vector]) -> Vector:
        return kind.make(*(c for value in values for c in value.components))

    return PathProjection(name, parameters, combine)


def geographic_position_projection(
    name: str,
    latitude: Parameter,
    longitude: Parameter,
    elevation: Parameter,
    globe_radius: Optional[float] = None,
) -> PathProjection:
    """
    Combine latitude, longitude and elevation into a position.

    Args:
        name: Path name
        latitude: Scalar latitude parameter (degrees)
        longitude: Scalar longitude parameter (degrees)
        elevation: Scalar elevation parameter (metres)
        globe_radius: When given, positions are converted to Cartesian world
            coordinates on a sphere of this radius; otherwise they stay as
            Vector3(lat, lon, elevation)
    """
    for parameter in (latitude, longitude, elevation):
        if parameter.kind is not VectorKind.SCALAR:
            raise ValueError(f"{parameter.parameter_id} must be a scalar parameter for {name}")

    def combine(values: Sequence[Vector]) -> Vector:
        position = Vector3(values[0].x, values[1].x, values[2].x)
        if globe_radius is None:
            return position
        return geodetic_to_cartesian(position, globe_radius)

    return PathProjection(name, (latitude, longitude, elevation), combine)
