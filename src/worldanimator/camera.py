"""
Animatable globe camera.

The camera owns the parameters a globe fly-through animates: eye and lookat
positions (latitude, longitude, elevation), roll and field of view. It holds no
values itself; positions for a frame are read through an AnimationContext from
the Animation the parameters are registered with.
"""

import logging
from typing import Dict, Optional, Tuple

from .animation.animation import Animation
from .animation.context import AnimationContext
from .animation.parameter import Parameter
from .config import get_config
from .math.geodesy import geodetic_to_cartesian
from .math.vector import Vector3, VectorKind
from .paths.projections import PathProjection, geographic_position_projection


logger = logging.getLogger(__name__)


class Camera:
    """Globe camera exposing its animatable parameters and position helpers"""

    PARAMETER_NAMES = (
        ('eye_lat', 'Eye latitude', False),
        ('eye_lon', 'Eye longitude', True),
        ('eye_elevation', 'Eye elevation', False),
        ('lookat_lat', 'Look-at latitude', False),
        ('lookat_lon', 'Look-at longitude', True),
        ('lookat_elevation', 'Look-at elevation', False),
        ('roll', 'Roll', True),
        ('field_of_view', 'Field of view', False),
    )

    def __init__(self, name: str = 'camera', globe_radius: Optional[float] = None):
        """
        Initialize camera parameters.

        Args:
            name: Camera name, used as the parameter id prefix
            globe_radius: Globe radius for world-space conversion (config default if omitted)
        """
        self.name = name
        self.globe_radius = globe_radius if globe_radius is not None else get_config().globe_radius
        self._parameters: Dict[str, Parameter] = {}

        for key, display_name, wraps in self.PARAMETER_NAMES:
            self._parameters[key] = Parameter(
                parameter_id=f"{name}.{key}",
                display_name=display_name,
                kind=VectorKind.SCALAR,
                owner=self,
                wrap_components=(wraps,),
            )

    # Parameter accessors
    @property
    def eye_lat(self) -> Parameter:
        return self._parameters['eye_lat']

    @property
    def eye_lon(self) -> Parameter:
        return self._parameters['eye_lon']

    @property
    def eye_elevation(self) -> Parameter:
        return self._parameters['eye_elevation']

    @property
    def lookat_lat(self) -> Parameter:
        return self._parameters['lookat_lat']

    @property
    def lookat_lon(self) -> Parameter:
        return self._parameters['lookat_lon']

    @property
    def lookat_elevation(self) -> Parameter:
        return self._parameters['lookat_elevation']

    @property
    def roll(self) -> Parameter:
        return self._parameters['roll']

    @property
    def field_of_view(self) -> Parameter:
        return self._parameters['field_of_view']

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(self._parameters.values())

    @property
    def eye_parameters(self) -> Tuple[Parameter, Parameter, Parameter]:
        return (self.eye_lat, self.eye_lon, self.eye_elevation)

    @property
    def lookat_parameters(self) -> Tuple[Parameter, Parameter, Parameter]:
        return (self.lookat_lat, self.lookat_lon, self.lookat_elevation)

    def register_with(self, animation: Animation) -> None:
        for parameter in self.parameters:
            animation.register_parameter(parameter)

    # Frame queries
    def _position_at_frame(self, parameters, context: AnimationContext, animation: Animation, frame) -> Vector3:
        snapshot = animation.snapshot()
        lat, lon, elevation = (context.value_from_snapshot(snapshot, p, frame).x for p in parameters)
        return Vector3(lat, lon, elevation)

    def get_eye_position_at_frame(self, context: AnimationContext, animation: Animation, frame) -> Vector3:
        """Eye position as Vector3(latitude, longitude, elevation)"""
        return self._position_at_frame(self.eye_parameters, context, animation, frame)

    def get_lookat_position_at_frame(self, context: AnimationContext, animation: Animation, frame) -> Vector3:
        """Look-at position as Vector3(latitude, longitude, elevation)"""
        return self._position_at_frame(self.lookat_parameters, context, animation, frame)

    def to_world(self, position: Vector3) -> Vector3:
        """Convert a geographic position to Cartesian world coordinates."""
        return geodetic_to_cartesian(position, self.globe_radius)

    def set_position(self, animation: Animation, frame: int, eye: Vector3,
                     lookat: Optional[Vector3] = None) -> None:
        """Key the eye (and optionally look-at) position at ``frame``."""
        for parameter, value in zip(self.eye_parameters, eye.components):
            animation.add_or_replace_value(parameter, frame, value)
        if lookat is not None:
            for parameter, value in zip(self.lookat_parameters, lookat.components):
                animation.add_or_replace_value(parameter, frame, value)
        logger.debug(f"{self.name}: keyed position at frame {frame}")

    # Path projections
    def eye_path_projection(self, world_space: bool = False) -> PathProjection:
        return geographic_position_projection(
            f"{self.name}.eye_path", *self.eye_parameters,
            globe_radius=self.globe_radius if world_space else None,
        )

    def lookat_path_projection(self, world_space: bool = False) -> PathProjection:
        return geographic_position_projection(
            f"{self.name}.lookat_path", *self.lookat_parameters,
            globe_radius=self.globe_radius if world_space else None,
        )

    def __repr__(self) -> str:
        return f"Camera({self.name!r})"
