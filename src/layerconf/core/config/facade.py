"""
Process-wide configuration access.

``get_instance()`` lazily builds a DefaultConfiguration from the bootstrap
settings and hands the same object to every caller until ``reset()`` or
``set_configuration()``. Each call also polls the touchfile named by
``layerconf.touchfile`` and refreshes the configuration when it changes.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from dotenv import load_dotenv

from layerconf.core.utils.logger import log_debug, log_error, log_info, log_warning

from .accessors import ConfigurationAccessors, MapConfiguration
from .configuration import DefaultConfiguration
from .errors import ConversionError
from .keys import DEFAULT_TOUCHFILE_INTERVAL_MS, TOUCHFILE, TOUCHFILE_INTERVAL
from .touchfile import Touchfile


@dataclass(frozen=True)
class ConfigChangeEvent:
    """Sent to listeners after a configuration has been refreshed."""

    source: Any
    timestamp: float = field(default_factory=time.time)


ConfigListener = Callable[[ConfigChangeEvent], None]

_lock = threading.RLock()
_instance: Optional[ConfigurationAccessors] = None
_listeners: List[ConfigListener] = []
_touchfile: Optional[Touchfile] = None
_dotenv_loaded = False


def load_env_file() -> None:
    """Load a .env from the working directory once, never overriding the environment."""
    global _dotenv_loaded
    if _dotenv_loaded:
        return
    _dotenv_loaded = True
    dotenv_path = Path.cwd() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)
        log_debug("FACADE", f"Loaded environment from {dotenv_path}")


def get_instance() -> ConfigurationAccessors:
    """Get the process-wide configuration, building it on first use."""
    global _instance
    with _lock:
        if _instance is None:
            load_env_file()
            _instance = DefaultConfiguration()
        config = _instance
    _check_touchfile(config)
    return config


def set_configuration(config: ConfigurationAccessors) -> None:
    """Replace the process-wide configuration."""
    global _instance, _touchfile
    with _lock:
        _instance = config
        _touchfile = None


def reset() -> None:
    """Drop the process-wide configuration; the next get_instance() rebuilds it."""
    global _instance, _touchfile
    with _lock:
        _instance = None
        _touchfile = None


def copy_configuration(config: ConfigurationAccessors) -> MapConfiguration:
    """Detached snapshot of every key currently in ``config``."""
    return MapConfiguration(config.as_dict())


def add_listener(listener: ConfigListener) -> None:
    with _lock:
        if listener not in _listeners:
            _listeners.append(listener)


def remove_listener(listener: ConfigListener) -> None:
    with _lock:
        if listener in _listeners:
            _listeners.remove(listener)


def clear_listeners() -> None:
    with _lock:
        _listeners.clear()


def notify_listeners(source: Any = None) -> None:
    """
    Tell every listener the configuration changed.

    A failing listener is logged and the remaining listeners still run.
    """
    with _lock:
        listeners = list(_listeners)
    event = ConfigChangeEvent(source=source)
    for listener in listeners:
        try:
            listener(event)
        except Exception as exc:
            log_error("FACADE", f"Configuration listener {listener!r} failed", "", exc)


def _touchfile_for(config: ConfigurationAccessors) -> Optional[Touchfile]:
    """The touchfile for the current settings, rebuilt when they change."""
    global _touchfile
    filename = config.get(TOUCHFILE)
    if not filename:
        _touchfile = None
        return None
    try:
        interval_ms = config.get_int(TOUCHFILE_INTERVAL, DEFAULT_TOUCHFILE_INTERVAL_MS)
    except ConversionError as exc:
        log_warning("FACADE", str(exc), "using the default touchfile interval")
        interval_ms = DEFAULT_TOUCHFILE_INTERVAL_MS
    interval = interval_ms / 1000
    if (
        _touchfile is None
        or _touchfile.filename != filename
        or _touchfile.check_interval != max(interval, 0)
    ):
        _touchfile = Touchfile(filename, interval)
        log_debug("FACADE", f"Watching {filename} every {interval}s")
    return _touchfile


def _check_touchfile(config: ConfigurationAccessors) -> None:
    refresh = getattr(config, "refresh", None)
    if refresh is None:
        return
    with _lock:
        touchfile = _touchfile_for(config)
        if touchfile is None or not touchfile.has_changed():
            return
    log_info("FACADE", f"Touchfile {touchfile.filename} changed, refreshing configuration")
    refresh()
