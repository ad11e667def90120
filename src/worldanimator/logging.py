"""
Logging setup for the WorldAnimator engine and its host applications.

Defaults:
- INFO/DEBUG records go to stdout, WARNING and above to stderr
- Level INFO (overridable via env, or by the caller)
- Optional JSON format and optional rotating file via env, no static paths

Env options (optional):
- AGENT_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR (default INFO)
- AGENT_LOG_JSON=1 (JSON formatting)
- AGENT_LOG_FILE=/path/to/file.log (RotatingFileHandler)
- AGENT_LOG_DIR=/path/to/dir (uses <service>.log when AGENT_LOG_FILE unset)
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Iterable, Optional


_INITIALIZED = False
_DEFAULT_SERVICE = ""
_SERVICE_PREFIXES: list[tuple[str, str]] = []

_TRUTHY = ('1', 'true', 'yes', 'on')

__all__ = [
    "setup_logging",
    "reset_logging",
]


def _register_alias(service: str, alias: str) -> None:
    alias = alias.strip()
    if not alias:
        return

    for idx, (prefix, _) in enumerate(_SERVICE_PREFIXES):
        if prefix == alias:
            _SERVICE_PREFIXES[idx] = (alias, service)
            break
    else:
        _SERVICE_PREFIXES.append((alias, service))

    # Longest prefixes first for more specific matches
    _SERVICE_PREFIXES.sort(key=lambda item: len(item[0]), reverse=True)


def _service_for(record: logging.LogRecord) -> str:
    current = getattr(record, 'service', None)
    if current:
        return current

    name = record.name
    for prefix, service in _SERVICE_PREFIXES:
        if name == prefix or name.startswith(f"{prefix}."):
            record.service = service
            return service

    record.service = _DEFAULT_SERVICE
    return record.service


class _ServiceFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        _service_for(record)
        return True


class _LevelRangeFilter(logging.Filter):
    def __init__(self, min_level: int = logging.NOTSET, max_level: int = logging.CRITICAL):
        super().__init__()
        self.min_level = min_level
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return self.min_level <= record.levelno <= self.max_level


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'ts': self.formatTime(record, datefmt='%Y-%m-%dT%H:%M:%S'),
            'level': record.levelname,
            'name': record.name,
            'service': getattr(record, 'service', ''),
            'message': record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _get_level(level: Optional[str] = None) -> int:
    level = (level or os.getenv('AGENT_LOG_LEVEL') or 'INFO').upper()
    return getattr(logging, level, logging.INFO)


def _resolve_log_path(service: str) -> Optional[str]:
    log_path = os.getenv('AGENT_LOG_FILE')
    if not log_path:
        log_dir = os.getenv('AGENT_LOG_DIR')
        if log_dir:
            log_path = str(Path(log_dir) / f'{service}.log')
    return log_path


def setup_logging(
    service: str = 'worldanimator',
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    aliases: Optional[Iterable[str]] = None,
) -> None:
    """Configure logging once. Safe to call multiple times.

    Args:
        service: service label shown in every record (e.g. 'worldanimator')
        level: optional level override (DEBUG/INFO/...) else from env
        json_format: optional flag to force JSON format, else from env
        aliases: logger-name prefixes that should map to this service when a
            record carries no explicit service field.
    """
    global _DEFAULT_SERVICE
    global _INITIALIZED

    root = logging.getLogger()

    if not _INITIALIZED:
        root.setLevel(_get_level(level))

        if json_format is not None:
            use_json = str(json_format).lower() in _TRUTHY
        else:
            use_json = os.getenv('AGENT_LOG_JSON', '').lower() in _TRUTHY
        if use_json:
            formatter: logging.Formatter = _JSONFormatter()
        else:
            formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s [%(service)s] %(message)s')

        service_filter = _ServiceFilter()

        stdout_handler = logging.StreamHandler(stream=sys.stdout)
        stdout_handler.addFilter(_LevelRangeFilter(max_level=logging.INFO))
        stderr_handler = logging.StreamHandler(stream=sys.stderr)
        stderr_handler.addFilter(_LevelRangeFilter(min_level=logging.WARNING))
        handlers: list[logging.Handler] = [stdout_handler, stderr_handler]

        log_path = _resolve_log_path(service)
        if log_path:
            try:
                Path(log_path).parent.mkdir(parents=True, exist_ok=True)
                handlers.append(logging.handlers.RotatingFileHandler(
                    log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8'
                ))
            except OSError:
                root.warning(f"Could not open log file {log_path}, using console only")

        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(service_filter)
            root.addHandler(handler)

        _INITIALIZED = True
        if not _DEFAULT_SERVICE:
            _DEFAULT_SERVICE = service

    # Register aliases even when handlers are already configured
    for alias in {service, *(aliases or ())}:
        _register_alias(service, str(alias))


def reset_logging() -> None:
    """Remove handlers installed by setup_logging (used by tests and reloads)."""
    global _DEFAULT_SERVICE
    global _INITIALIZED

    root = logging.getLogger()
    for handler in list(root.handlers):
        if any(isinstance(f, _ServiceFilter) for f in handler.filters):
            root.removeHandler(handler)
            handler.close()
    _SERVICE_PREFIXES.clear()
    _DEFAULT_SERVICE = ""
    _INITIALIZED = False

