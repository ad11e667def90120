"""Pytest configuration: import from the source tree and share timeline fixtures."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

_SRC = Path(__file__).resolve().parent.parent / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from worldanimator.animation import Animation, AnimationContext, Parameter  # noqa: E402
from worldanimator.camera import Camera  # noqa: E402
from worldanimator.config import WorldAnimatorConfig  # noqa: E402
from worldanimator.logging import reset_logging  # noqa: E402
from worldanimator.math import VectorKind  # noqa: E402


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop handlers a service installed so they never outlive the test's captured streams."""
    root = logging.getLogger()
    level = root.level
    yield
    reset_logging()
    root.setLevel(level)


@pytest.fixture
def config(monkeypatch):
    """Defaults only, regardless of the developer's environment."""
    for key in WorldAnimatorConfig.DEFAULTS:
        monkeypatch.delenv(f"WORLDANIMATOR_{key.upper()}", raising=False)
    monkeypatch.delenv("WORLDANIMATOR_CONFIG_FILE", raising=False)
    return WorldAnimatorConfig()


@pytest.fixture
def animation():
    return Animation('test')


@pytest.fixture
def elevation():
    return Parameter('elevation', 'Elevation', VectorKind.SCALAR)


@pytest.fixture
def elevation_animation(animation, elevation):
    """The reference scenario: 1000 -> 2000 -> 1000 over frames 0, 10, 20."""
    animation.add_or_replace_value(elevation, 0, 1000.0)
    animation.add_or_replace_value(elevation, 10, 2000.0)
    animation.add_or_replace_value(elevation, 20, 1000.0)
    return animation


@pytest.fixture
def hermite_context(config):
    return AnimationContext(mode='hermite', config=config)


@pytest.fixture
def linear_context(config):
    return AnimationContext(mode='linear', config=config)


@pytest.fixture
def camera(config):
    return Camera('camera', globe_radius=config.globe_radius)


@pytest.fixture
def camera_animation(camera):
    animation = Animation('flight')
    camera.register_with(animation)
    lookat = camera.lookat_parameters
    for frame, (lat, lon, elev) in {0: (-35.0, 149.0, 0.0), 30: (-33.9, 151.2, 100.0), 60: (-37.8, 145.0, 50.0)}.items():
        for parameter, value in zip(lookat, (lat, lon, elev)):
            animation.add_or_replace_value(parameter, frame, value)
    for frame, (lat, lon, elev) in {0: (-36.0, 149.0, 20000.0), 45: (-35.0, 148.0, 5000.0)}.items():
        for parameter, value in zip(camera.eye_parameters, (lat, lon, elev)):
            animation.add_or_replace_value(parameter, frame, value)
    return animation
