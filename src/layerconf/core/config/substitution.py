"""
``${name}`` variable substitution.

Each key is resolved depth-first: before a placeholder is replaced, the key
it refers to is itself substituted, so one pass over the store reaches the
fixpoint. A key revisited while still in progress is part of a cycle; every
key on that cycle is blanked and its history marked instead of recursing
forever.
"""

from __future__ import annotations

from typing import List, Optional, Set, Tuple

from .diagnostics import LoadMessages
from .profile import ProfileOverlay
from .store import KeyValueStore

PLACEHOLDER_START = "${"
PLACEHOLDER_END = "}"


def find_placeholder(value: str, position: int = 0) -> Optional[Tuple[int, int, str]]:
    """Return ``(start, end, name)`` of the first placeholder at or after ``position``."""
    start = value.find(PLACEHOLDER_START, position)
    if start == -1:
        return None
    end = value.find(PLACEHOLDER_END, start + len(PLACEHOLDER_START))
    if end == -1:
        return None
    return start, end, value[start + len(PLACEHOLDER_START) : end]


def rescan_position(value: str, start: int) -> int:
    """
    Where scanning resumes after a replacement made at ``start``.

    The inserted text may complete a new placeholder, either on its own or
    together with a ``$`` just before it, so the scan restarts there.
    """
    if start > 0 and value[start - 1] == "$":
        return start - 1
    return start


class SubstitutionEngine:
    def __init__(
        self,
        store: KeyValueStore,
        overlay: ProfileOverlay,
        messages: Optional[LoadMessages] = None,
    ):
        self.store = store
        self.overlay = overlay
        self.messages = messages if messages is not None else LoadMessages()
        self._in_progress: List[str] = []
        self._recursive: Set[str] = set()

    def substitute_all(self) -> bool:
        """Substitute every key once; True if any value changed."""
        changed = False
        for key in self.store.keys():
            if self.substitute(key):
                changed = True
        return changed

    def substitute(self, key: str) -> bool:
        """
        Resolve every placeholder in ``key`` whose name is defined.

        Returns:
            True if the value of ``key`` changed.
        """
        if key in self._in_progress:
            self._break_cycle(key)
            return True

        value = self.store.get(key)
        if value is None or find_placeholder(value) is None:
            return False

        self._in_progress.append(key)
        try:
            return self._resolve(key, value)
        finally:
            self._in_progress.pop()
            if not self._in_progress:
                self._recursive.clear()

    def expand(self, text: str) -> str:
        """
        Resolve placeholders in a value that is not (yet) stored.

        Referenced values are expanded too, but nothing is written back:
        stored keys keep their placeholders until the full substitution pass,
        so resources loaded later can still override what they point at.
        """
        return self._expand(text, [])

    def _expand(self, text: str, visiting: List[str]) -> str:
        position = 0
        while True:
            found = find_placeholder(text, position)
            if found is None:
                return text
            start, end, name = found
            target = self.overlay.effective_key(name)
            value = self.store.get(target)
            if value is None:
                position = start + len(PLACEHOLDER_START)
                continue
            # A reference back into the chain expands to nothing
            if target in visiting:
                replacement = ""
            else:
                replacement = self._expand(value, visiting + [target])
            text = text[:start] + replacement + text[end + 1 :]
            position = rescan_position(text, start)

    def _lookup(self, name: str) -> Optional[str]:
        # Substitute the key that will actually answer the read, which may be
        # the profile-suffixed one.
        target = self.overlay.effective_key(name)
        self.substitute(target)
        return self.store.get(target)

    def _resolve(self, key: str, value: str) -> bool:
        changed = False
        position = 0
        while True:
            found = find_placeholder(value, position)
            if found is None:
                return changed
            start, end, name = found
            replacement = self._lookup(name)
            if key in self._recursive:
                return True
            if replacement is None:
                # Undefined names stay verbatim
                position = start + len(PLACEHOLDER_START)
                continue
            value = value[:start] + replacement + value[end + 1 :]
            self.store.replace_value(key, value, f"substitution of ${{{name}}}")
            changed = True
            position = rescan_position(value, start)

    def _break_cycle(self, key: str) -> None:
        cycle = self._in_progress[self._in_progress.index(key) :]
        for member in cycle:
            if member in self._recursive:
                continue
            self._recursive.add(member)
            self.store.mark_recursive(member)
            self.messages.record(
                f"WARNING: Recursive substitution detected on parameter {member}"
            )
