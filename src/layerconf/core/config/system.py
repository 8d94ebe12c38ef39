"""
Process-wide system properties.

Python has no equivalent of a runtime-wide property table, so this module
provides one: a thread-safe mutable mapping that acts both as the source of
the system-property overlay and as the sink for keys published under
``layerconf.parameters.system.``.
"""

from __future__ import annotations

import threading
from collections.abc import MutableMapping
from typing import Dict, Iterator, Optional


class SystemProperties(MutableMapping):
    """Thread-safe string-to-string mapping shared by the whole process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = threading.RLock()
        self._values: Dict[str, str] = dict(initial or {})

    def __getitem__(self, key: str) -> str:
        with self._lock:
            return self._values[key]

    def __setitem__(self, key: str, value: str) -> None:
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("System properties must map str keys to str values.")
        with self._lock:
            self._values[key] = value

    def __delitem__(self, key: str) -> None:
        with self._lock:
            del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self) -> Dict[str, str]:
        """Return a copy that is safe to iterate while others write."""
        with self._lock:
            return dict(self._values)


system_properties = SystemProperties()


def get_system_properties() -> SystemProperties:
    """Get the process-wide system properties."""
    return system_properties


def reset_system_properties() -> None:
    """Remove every system property (used by tests and CLI runs)."""
    system_properties.clear()
