"""Request schema definitions for AnimatorService operations."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ValidationFailure


class AnimatorModel(BaseModel):
    """Base model configuration with permissive extra handling."""

    model_config = ConfigDict(extra='allow', populate_by_name=True)


class SetValuePayload(AnimatorModel):
    parameter_id: str = Field(alias='parameter')
    frame: int
    value: Union[float, List[float]]


class RemoveValuePayload(AnimatorModel):
    parameter_id: str = Field(alias='parameter')
    frame: int


class KeyFramePayload(AnimatorModel):
    frame: int


class MoveKeyFramePayload(AnimatorModel):
    from_frame: int
    to_frame: int


class ParameterTogglePayload(AnimatorModel):
    parameter_id: str = Field(alias='parameter')
    enabled: bool


class GetValuePayload(AnimatorModel):
    parameter_id: str = Field(alias='parameter')
    frame: float
    use_cache: bool = False


class SamplePathPayload(AnimatorModel):
    path: str
    step: Optional[int] = None
    world_space: bool = False


MODEL_MAP = {
    'set_value': SetValuePayload,
    'remove_value': RemoveValuePayload,
    'remove_key_frame': KeyFramePayload,
    'move_key_frame': MoveKeyFramePayload,
    'set_parameter_enabled': ParameterTogglePayload,
    'get_value': GetValuePayload,
    'sample_path': SamplePathPayload,
}


def validate_payload(model_cls, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate a request payload, returning the normalised field values.

    Raises:
        ValidationFailure: with the pydantic error list under ``details['errors']``
    """
    try:
        return model_cls.model_validate(data or {}).model_dump()
    except ValidationError as exc:
        errors = [
            {'loc': list(err['loc']), 'msg': err['msg'], 'type': err['type']}
            for err in exc.errors()
        ]
        raise ValidationFailure(
            f"Invalid {model_cls.__name__}: {len(errors)} validation error(s)",
            details={'errors': errors},
        ) from exc


__all__ = [
    'MODEL_MAP',
    'AnimatorModel',
    'SetValuePayload',
    'RemoveValuePayload',
    'KeyFramePayload',
    'MoveKeyFramePayload',
    'ParameterTogglePayload',
    'GetValuePayload',
    'SamplePathPayload',
    'validate_payload',
]
