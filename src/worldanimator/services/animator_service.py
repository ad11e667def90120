"""Service layer exposing animation operations to authoring and render collaborators."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from ..animation.animation import Animation, validate_frame
from ..animation.context import AnimationContext
from ..animation.keyframe import KeyFrame
from ..animation.parameter import Parameter, ParameterValue
from ..camera import Camera
from ..config import WorldAnimatorConfig, get_config
from ..errors import AnimatorError, ValidationFailure, error_response
from ..logging import setup_logging
from ..paths.projections import PathProjection, single_parameter_projection
from ..paths.sampler import CancellationToken, PathSampler
from ..schemas import (
    MODEL_MAP,
    GetValuePayload,
    KeyFramePayload,
    MoveKeyFramePayload,
    ParameterTogglePayload,
    RemoveValuePayload,
    SamplePathPayload,
    SetValuePayload,
    validate_payload,
)


logger = logging.getLogger(__name__)


class AnimatorService:
    """Wrap timeline edits, value queries and path sampling behind dict payloads.

    Every operation returns a dict with ``success`` set. Failures carry the
    structured error payload of the raised AnimatorError.
    """

    def __init__(
        self,
        animation: Animation,
        context: Optional[AnimationContext] = None,
        cameras: Sequence[Camera] = (),
        config: Optional[WorldAnimatorConfig] = None,
    ) -> None:
        self._config = config or get_config()
        setup_logging('worldanimator', level='DEBUG' if self._config.debug_mode else None)
        self._animation = animation
        self._context = context or AnimationContext(config=self._config)
        self._samplers: Dict[Tuple[str, bool], PathSampler] = {}
        self._active_tokens: Dict[Tuple[str, bool], CancellationToken] = {}

        for camera in cameras:
            self.add_camera(camera)

    @property
    def animation(self) -> Animation:
        return self._animation

    @property
    def context(self) -> AnimationContext:
        return self._context

    # ------------------------------------------------------------------
    # Helpers
    def add_camera(self, camera: Camera) -> None:
        camera.register_with(self._animation)
        for world_space in (False, True):
            self.register_path(camera.eye_path_projection(world_space), world_space)
            self.register_path(camera.lookat_path_projection(world_space), world_space)

    def register_path(self, projection: PathProjection, world_space: bool = False) -> PathSampler:
        sampler = PathSampler(projection, self._context, config=self._config)
        self._samplers[(projection.name, world_space)] = sampler
        return sampler

    def _sampler_for(self, path: str, world_space: bool) -> PathSampler:
        sampler = self._samplers.get((path, world_space))
        if sampler is not None:
            return sampler
        # Fall back to plotting a single parameter by id
        parameter = self._animation.get_parameter(path)
        return self.register_path(single_parameter_projection(parameter), world_space)

    def _parameter(self, parameter_id: str) -> Parameter:
        return self._animation.get_parameter(parameter_id)

    def _run(self, operation: str, handler: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
        try:
            result = handler()
        except AnimatorError as e:
            logger.warning(f"{operation} failed: [{e.code}] {e.message}")
            return e.to_payload()
        result.setdefault('success', True)
        result.setdefault('revision', self._animation.revision)
        return result

    def handle(self, operation: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Dispatch a payload operation by name (``set_value``, ``sample_path``, ...)."""
        if operation not in MODEL_MAP:
            return error_response(
                'UNKNOWN_OPERATION',
                f"Unknown operation: {operation}",
                details={'supported': sorted(MODEL_MAP)},
            )
        return getattr(self, operation)(payload or {})

    # ------------------------------------------------------------------
    # Timeline edits
    def set_value(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(SetValuePayload, payload)
            parameter = self._parameter(data['parameter_id'])
            stored = self._animation.add_or_replace_value(parameter, data['frame'], data['value'])
            return {
                'parameter_id': parameter.parameter_id,
                'frame': data['frame'],
                'value': list(stored.value.components),
            }
        return self._run('set_value', handler)

    def remove_value(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(RemoveValuePayload, payload)
            parameter = self._parameter(data['parameter_id'])
            removed = self._animation.remove_value(parameter, data['frame'])
            return {'parameter_id': parameter.parameter_id, 'frame': data['frame'], 'removed': removed}
        return self._run('remove_value', handler)

    def remove_key_frame(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(KeyFramePayload, payload)
            return {'frame': data['frame'], 'removed': self._animation.remove_key_frame(data['frame'])}
        return self._run('remove_key_frame', handler)

    def move_key_frame(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(MoveKeyFramePayload, payload)
            moved = self._animation.move_key_frame(data['from_frame'], data['to_frame'])
            return {'from_frame': data['from_frame'], 'to_frame': data['to_frame'], 'moved': moved}
        return self._run('move_key_frame', handler)

    def set_parameter_enabled(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(ParameterTogglePayload, payload)
            parameter = self._parameter(data['parameter_id'])
            self._animation.set_parameter_enabled(parameter, data['enabled'])
            return {'parameter_id': parameter.parameter_id, 'enabled': parameter.enabled}
        return self._run('set_parameter_enabled', handler)

    # ------------------------------------------------------------------
    # Queries
    def get_value(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        def handler():
            data = validate_payload(GetValuePayload, payload)
            parameter = self._parameter(data['parameter_id'])
            value = self._context.get_value_at_frame(
                self._animation, parameter, data['frame'], use_cache=data['use_cache']
            )
            return {
                'parameter_id': parameter.parameter_id,
                'frame': data['frame'],
                'value': list(value.components),
            }
        return self._run('get_value', handler)

    def sample_path(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Sample a registered path (or a single parameter by id).

        A newer request for the same path and space cancels the one still running.
        """
        def handler():
            data = validate_payload(SamplePathPayload, payload)
            sampler = self._sampler_for(data['path'], data['world_space'])

            key = (sampler.name, data['world_space'])
            token = CancellationToken()
            previous = self._active_tokens.get(key)
            if previous is not None:
                previous.cancel()
            self._active_tokens[key] = token
            try:
                path = sampler.sample(self._animation, data['step'], cancel_token=token)
            finally:
                if self._active_tokens.get(key) is token:
                    del self._active_tokens[key]

            result = path.to_dict()
            result['world_space'] = data['world_space']
            return result
        return self._run('sample_path', handler)

    def describe_timeline(self) -> Dict[str, Any]:
        """Plain-dict view of the key frame graph for persistence collaborators."""
        snapshot = self._animation.snapshot()
        return {
            'success': True,
            'name': self._animation.name,
            'revision': snapshot.revision,
            'first_frame': snapshot.first_frame,
            'last_frame': snapshot.last_frame,
            'parameters': [
                {
                    'parameter_id': p.parameter_id,
                    'display_name': p.display_name,
                    'kind': p.kind.name,
                    'enabled': p.enabled,
                }
                for p in self._animation.get_parameters()
            ],
            'key_frames': [
                {
                    'frame': key_frame.frame,
                    'values': {
                        pv.parameter.parameter_id: list(pv.value.components)
                        for pv in key_frame
                    },
                }
                for key_frame in snapshot.key_frames
            ],
        }

    def restore_timeline(self, description: Dict[str, Any]) -> Dict[str, Any]:
        """Rebuild the timeline from a ``describe_timeline`` result.

        All entries are resolved before the swap, and the new timeline is
        published as a single revision. Any bad entry leaves the timeline as it was.
        """
        def handler():
            values_by_frame: Dict[int, Dict[Parameter, ParameterValue]] = {}
            for key_frame in description.get('key_frames', []):
                frame = validate_frame(key_frame.get('frame'))
                values = values_by_frame.setdefault(frame, {})
                for parameter_id, value in key_frame.get('values', {}).items():
                    parameter = self._parameter(parameter_id)
                    values[parameter] = ParameterValue.create(parameter, value)

            enabled = {
                self._parameter(entry.get('parameter_id')): bool(entry['enabled'])
                for entry in description.get('parameters', [])
                if 'enabled' in entry
            }

            key_frames = [KeyFrame(frame, values) for frame, values in values_by_frame.items()]
            try:
                self._animation.replace_key_frames(key_frames, enabled)
            except ValueError as e:
                raise ValidationFailure(f"Cannot restore timeline: {e}") from e
            return {'restored_values': sum(len(v) for v in values_by_frame.values())}
        return self._run('restore_timeline', handler)

    def get_status(self) -> Dict[str, Any]:
        snapshot = self._animation.snapshot()
        return {
            'success': True,
            'revision': snapshot.revision,
            'key_frame_count': len(snapshot),
            'parameter_count': len(self._animation.get_parameters()),
            'interpolation_mode': self._context.mode.value,
            'value_cache': self._context.cache_info(),
            'paths': {
                f"{name}{' (world)' if world else ''}": sampler.cache_info()
                for (name, world), sampler in self._samplers.items()
            },
        }


__all__ = ['AnimatorService']
