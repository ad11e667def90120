"""
Keyframe timeline and interpolation.

- Parameters and their authored values
- Immutable key frames
- Animation timeline store with copy-on-write snapshots
- Interpolation math and the evaluating AnimationContext
"""

from .parameter import Parameter, ParameterValue
from .keyframe import KeyFrame
from .animation import Animation, ControlPoints, TimelineSnapshot, validate_frame
from .interpolation import (
    HermiteBasis,
    InterpolationMode,
    estimate_tangents,
    get_interpolation_mode,
    hermite,
    lerp,
    unwrap_values,
    wrap_result,
)
from .context import AnimationContext, validate_query_frame

__all__ = [
    'Parameter',
    'ParameterValue',
    'KeyFrame',
    'Animation',
    'ControlPoints',
    'TimelineSnapshot',
    'validate_frame',
    'HermiteBasis',
    'InterpolationMode',
    'estimate_tangents',
    'get_interpolation_mode',
    'hermite',
    'lerp',
    'unwrap_values',
    'wrap_result',
    'AnimationContext',
    'validate_query_frame',
]
