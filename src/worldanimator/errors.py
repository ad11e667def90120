"""Domain-specific errors and helpers for the WorldAnimator engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ErrorPayload:
    """Structured error payload returned to service callers."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'success': False,
            'error_code': self.code,
            'error': self.message,
        }
        if self.details:
            payload['details'] = self.details
        return payload


class AnimatorError(Exception):
    """Base exception for recoverable animation failures."""

    code: str = 'ANIMATOR_ERROR'

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self) -> Dict[str, Any]:
        return ErrorPayload(self.code, self.message, self.details or None).to_dict()


class InvalidFrameError(AnimatorError):
    """Frame argument is negative or not a valid timeline coordinate."""

    code = 'INVALID_FRAME'


class NoKeyFramesError(AnimatorError):
    """Interpolation requested for a parameter without control points."""

    code = 'NO_KEYFRAMES'


class EmptyTimelineError(AnimatorError):
    """Path sampling requested on an animation with no key frames."""

    code = 'EMPTY_TIMELINE'


class InvalidValueError(AnimatorError):
    """Value does not match the vector kind declared by its parameter."""

    code = 'INVALID_VALUE'


class InvalidStepError(AnimatorError):
    code = 'INVALID_STEP'


class SamplingCancelledError(AnimatorError):
    """A path resample was abandoned before it finished."""

    code = 'SAMPLING_CANCELLED'


class UnknownParameterError(AnimatorError):
    code = 'UNKNOWN_PARAMETER'


class ValidationFailure(AnimatorError):
    code = 'VALIDATION_ERROR'


class TimelineInvariantError(RuntimeError):
    """Internal timeline invariant was violated. Not recoverable."""


def error_response(code: str, message: str, *, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a standardised error payload."""
    return ErrorPayload(code, message, details).to_dict()


__all__ = [
    'ErrorPayload',
    'AnimatorError',
    'InvalidFrameError',
    'NoKeyFramesError',
    'EmptyTimelineError',
    'InvalidValueError',
    'InvalidStepError',
    'SamplingCancelledError',
    'UnknownParameterError',
    'ValidationFailure',
    'TimelineInvariantError',
    'error_response',
]
