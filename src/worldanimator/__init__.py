"""
WorldAnimator: keyframe parameter animation for globe camera fly-throughs.

Authoring code edits an Animation (key frames per parameter), render code asks an
AnimationContext for interpolated values, and editors draw camera trajectories
produced by a PathSampler.
"""

__version__ = "0.1.0"

from .errors import (
    AnimatorError,
    EmptyTimelineError,
    InvalidFrameError,
    InvalidStepError,
    InvalidValueError,
    NoKeyFramesError,
    SamplingCancelledError,
    TimelineInvariantError,
    UnknownParameterError,
    ValidationFailure,
)
from .math import Vector, Vector1, Vector2, Vector3, VectorKind
from .animation import (
    Animation,
    AnimationContext,
    InterpolationMode,
    KeyFrame,
    Parameter,
    ParameterValue,
    TimelineSnapshot,
)
from .camera import Camera
from .paths import (
    CancellationToken,
    PathProjection,
    PathSampler,
    SampledPath,
    sample_path,
)
from .config import WorldAnimatorConfig, get_config

__all__ = [
    '__version__',
    'AnimatorError',
    'EmptyTimelineError',
    'InvalidFrameError',
    'InvalidStepError',
    'InvalidValueError',
    'NoKeyFramesError',
    'SamplingCancelledError',
    'TimelineInvariantError',
    'UnknownParameterError',
    'ValidationFailure',
    'Vector',
    'Vector1',
    'Vector2',
    'Vector3',
    'VectorKind',
    'Animation',
    'AnimationContext',
    'InterpolationMode',
    'KeyFrame',
    'Parameter',
    'ParameterValue',
    'TimelineSnapshot',
    'Camera',
    'CancellationToken',
    'PathProjection',
    'PathSampler',
    'SampledPath',
    'sample_path',
    'WorldAnimatorConfig',
    'get_config',
]
