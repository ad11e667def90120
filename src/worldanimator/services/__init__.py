"""Service facade used by authoring UIs and render loops."""

from .animator_service import AnimatorService

__all__ = ['AnimatorService']
