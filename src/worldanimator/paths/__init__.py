"""Path sampling: projections per path kind and the caching PathSampler."""

from .projections import (
    PathProjection,
    component_projection,
    geographic_position_projection,
    single_parameter_projection,
)
from .sampler import (
    CancellationToken,
    PathSampler,
    SampledPath,
    sample_frames,
    sample_path,
    validate_step,
)

__all__ = [
    'PathProjection',
    'component_projection',
    'geographic_position_projection',
    'single_parameter_projection',
    'CancellationToken',
    'PathSampler',
    'SampledPath',
    'sample_frames',
    'sample_path',
    'validate_step',
]
