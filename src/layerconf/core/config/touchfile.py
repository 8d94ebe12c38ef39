"""Modification-time watcher used to trigger configuration refreshes."""

from __future__ import annotations

import time
from pathlib import Path


class Touchfile:
    """
    Reports whether a file's mtime moved since the last check.

    ``check_interval`` is in seconds; checks closer together than that always
    report no change. A missing file has ``last_modified == 0``.
    """

    def __init__(self, filename: str, check_interval: float):
        if not filename:
            raise ValueError("A touch filename must be provided.")
        self.filename = filename
        self.path = Path(filename)
        self.check_interval = max(check_interval, 0)
        self.last_checked = time.monotonic()
        self.last_modified = self._modified()

    def _modified(self) -> float:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return 0

    def has_changed(self) -> bool:
        now = time.monotonic()
        if now - self.last_checked < self.check_interval:
            return False
        self.last_checked = now

        modified = self._modified()
        if modified == self.last_modified:
            return False
        self.last_modified = modified
        return True

    def __repr__(self) -> str:
        return f"Touchfile({self.filename!r}, check_interval={self.check_interval})"
