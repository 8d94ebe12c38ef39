"""Backing key/value store with truthy index and per-key origin history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .keys import TRUTHY_VALUES

RECURSION_MARKER = "recursion detected, using null value"


def is_truthy_value(value: Optional[str]) -> bool:
    return value is not None and value.lower() in TRUTHY_VALUES


@dataclass
class Entry:
    """A resolved key with the origins that defined it, most recent first."""

    key: str
    value: str
    history: List[str] = field(default_factory=list)

    @property
    def is_truthy(self) -> bool:
        return is_truthy_value(self.value)

    def describe_history(self) -> str:
        return "; ".join(self.history)


class KeyValueStore:
    """
    Mutable mapping of key to Entry.

    Every key in the truthy index is also present in the entries with a
    truthy value. Last write wins per key.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Entry] = {}
        self._truthy: Set[str] = set()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def entry(self, key: str) -> Optional[Entry]:
        return self._entries.get(key)

    def is_truthy(self, key: str) -> bool:
        return key in self._truthy

    def history(self, key: str) -> List[str]:
        entry = self._entries.get(key)
        return list(entry.history) if entry is not None else []

    def put(self, key: str, value: str, origin: str) -> None:
        """Write ``key=value`` and prepend ``origin`` to the key's history."""
        entry = self._entries.get(key)
        if entry is None:
            entry = Entry(key=key, value=value, history=[origin])
            self._entries[key] = entry
        else:
            entry.value = value
            entry.history.insert(0, origin)
        self._index(key, value)

    def replace_value(self, key: str, value: str, note: str) -> None:
        """Rewrite an existing key in place, recording ``note`` in its history."""
        entry = self._entries[key]
        entry.value = value
        entry.history.insert(0, note)
        self._index(key, value)

    def mark_recursive(self, key: str) -> None:
        """Blank a key caught in a substitution cycle."""
        self.replace_value(key, "", RECURSION_MARKER)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)
        self._truthy.discard(key)

    def clear(self) -> None:
        self._entries.clear()
        self._truthy.clear()

    def keys(self) -> List[str]:
        return list(self._entries)

    def items(self) -> List[Tuple[str, str]]:
        return [(key, entry.value) for key, entry in self._entries.items()]

    def as_dict(self) -> Dict[str, str]:
        return {key: entry.value for key, entry in self._entries.items()}

    def _index(self, key: str, value: str) -> None:
        if is_truthy_value(value):
            self._truthy.add(key)
        else:
            self._truthy.discard(key)
