"""Process settings and logging configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_RECURSION_LIMIT = 10000

DEBUG_PY_TRACE_ENV = "PUFFIN_DEBUG_PY_TRACE"

_TRUTHY = {"1", "true", "yes", "on"}

def _flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY

def debug_py_trace_enabled() -> bool:
    """Read live so the REPL can toggle it mid-session."""
    return _flag(os.environ.get(DEBUG_PY_TRACE_ENV))

def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)

@dataclass
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None
    recursion_limit: int = DEFAULT_RECURSION_LIMIT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]]=None) -> 'Settings':
        env = os.environ if environ is None else environ

        try:
            limit = int(env.get("PUFFIN_RECURSION_LIMIT", DEFAULT_RECURSION_LIMIT))
        except ValueError:
            limit = DEFAULT_RECURSION_LIMIT

        if limit <= 0:
            limit = DEFAULT_RECURSION_LIMIT

        return cls(
            log_level=env.get("PUFFIN_LOG_LEVEL", DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL,
            log_file=env.get("PUFFIN_LOG_FILE") or None,
            recursion_limit=limit,
        )

def setup_logging(level: str=DEFAULT_LOG_LEVEL, log_file: Optional[str]=None) -> None:
    """Configure the root logger; stderr unless `log_file` is given."""
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    config: dict = {
        'level': numeric_level,
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    }

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        config['filename'] = log_file

    # program output owns stdout
    logging.basicConfig(**config)
    logging.getLogger(__name__).debug("logging initialized at %s", level.upper())
