"""
WorldAnimator configuration.

Hierarchical loading, lowest to highest precedence:
1. ``DEFAULTS`` defined on the class
2. JSON config file (keys starting with ``_`` are treated as comments)
3. Environment variables ``WORLDANIMATOR_<KEY>``

Usage:
    from worldanimator.config import get_config

    config = get_config()
    step = config.default_path_step
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


INTERPOLATION_MODES = ('hermite', 'linear')


class WorldAnimatorConfig:
    """Configuration for the animation engine, path sampler and service facade."""

    DEFAULTS: Dict[str, Any] = {
        # Interpolation
        'interpolation_mode': 'hermite',
        'tension': 0.0,
        'value_cache_max_entries': 4096,

        # Path sampling
        'default_path_step': 1,
        'path_cache_max_entries': 32,
        'abandon_stale_samples': True,

        # Globe used by projections that convert to world coordinates
        'globe_radius': 6378137.0,

        # Service logging at DEBUG level
        'debug_mode': False,
    }

    ENV_PREFIX = 'WORLDANIMATOR_'

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self._config: Dict[str, Any] = {}
        self._config_file = Path(config_file) if config_file else None
        self._load_configuration()

    def _load_configuration(self):
        """Load configuration from all sources in priority order."""
        self._config = self.DEFAULTS.copy()
        self._load_from_json_config()
        self._load_from_environment()
        self._validate_config()

        if self.debug_mode:
            logger.info(f"worldanimator configuration loaded: {len(self._config)} settings")

    def _load_from_json_config(self):
        if self._config_file is None:
            env_path = os.getenv(f'{self.ENV_PREFIX}CONFIG_FILE')
            if not env_path:
                return
            self._config_file = Path(env_path)

        if not self._config_file.exists():
            logger.debug(f"No config file found at {self._config_file}")
            return

        try:
            with open(self._config_file, 'r') as f:
                json_config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load JSON config from {self._config_file}: {e}")
            return

        # Monolithic config files keep our settings under a 'worldanimator' section
        if isinstance(json_config.get('worldanimator'), dict):
            json_config = json_config['worldanimator']

        self._config.update({
            k: v for k, v in json_config.items()
            if not k.startswith('_')
        })
        logger.debug(f"Loaded JSON config from {self._config_file}")

    def _load_from_environment(self):
        for key in self._config.keys():
            env_key = f"{self.ENV_PREFIX}{key.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                converted_value = self._convert_env_value(env_value, self._config[key])
                self._config[key] = converted_value
                logger.debug(f"Loaded environment variable: {env_key} = {converted_value}")

    def _convert_env_value(self, env_value: str, default_value: Any) -> Any:
        """Convert environment variable string to the type of the current value."""
        if isinstance(default_value, bool):
            return env_value.lower() in ('true', '1', 'yes', 'on')
        elif isinstance(default_value, int):
            try:
                return int(env_value)
            except ValueError:
                logger.warning(f"Invalid integer value in environment: {env_value}")
                return default_value
        elif isinstance(default_value, float):
            try:
                return float(env_value)
            except ValueError:
                logger.warning(f"Invalid float value in environment: {env_value}")
                return default_value
        return env_value

    def _reset(self, key: str, reason: str):
        logger.warning(f"Invalid {key} {self._config[key]!r} ({reason}), using {self.DEFAULTS[key]!r}")
        self._config[key] = self.DEFAULTS[key]

    def _validate_config(self):
        mode = str(self._config.get('interpolation_mode', '')).lower()
        if mode not in INTERPOLATION_MODES:
            self._reset('interpolation_mode', f"expected one of {INTERPOLATION_MODES}")
        else:
            self._config['interpolation_mode'] = mode

        tension = self._config.get('tension')
        if not isinstance(tension, (int, float)) or isinstance(tension, bool) or not 0.0 <= tension <= 1.0:
            self._reset('tension', "must be within [0, 1]")

        for key in ('default_path_step', 'path_cache_max_entries', 'value_cache_max_entries'):
            value = self._config.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                self._reset(key, "must be a positive integer")

        radius = self._config.get('globe_radius')
        if not isinstance(radius, (int, float)) or isinstance(radius, bool) or radius <= 0:
            self._reset('globe_radius', "must be positive")

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value (runtime only)."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()

    def reload(self):
        """Reload configuration from all sources."""
        self._load_configuration()

    @property
    def interpolation_mode(self) -> str:
        return self.get('interpolation_mode', 'hermite')

    @property
    def tension(self) -> float:
        return float(self.get('tension', 0.0))

    @property
    def value_cache_max_entries(self) -> int:
        return self.get('value_cache_max_entries', 4096)

    @property
    def default_path_step(self) -> int:
        return self.get('default_path_step', 1)

    @property
    def path_cache_max_entries(self) -> int:
        return self.get('path_cache_max_entries', 32)

    @property
    def abandon_stale_samples(self) -> bool:
        return self.get('abandon_stale_samples', True)

    @property
    def globe_radius(self) -> float:
        return float(self.get('globe_radius', 6378137.0))

    @property
    def debug_mode(self) -> bool:
        return self.get('debug_mode', False)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {len(self._config)} settings>"


_global_config_instance = None


def get_config() -> WorldAnimatorConfig:
    """Get the process-wide configuration instance."""
    global _global_config_instance
    if _global_config_instance is None:
        _global_config_instance = WorldAnimatorConfig()
    return _global_config_instance


def reset_config():
    """Drop the process-wide instance so the next get_config() reloads."""
    global _global_config_instance
    _global_config_instance = None
