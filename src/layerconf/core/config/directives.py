"""Interpretation of directive keys while properties are ingested."""

from __future__ import annotations

from typing import Callable, Optional

from .diagnostics import LoadMessages
from .keys import INCLUDE, INCLUDE_AFTER
from .properties import split_list
from .store import KeyValueStore
from .substitution import SubstitutionEngine

APPEND_KEY_MARKER = "+"
APPEND_VALUE_MARKER = "+="


class DirectiveProcessor:
    """
    Called once per key/value pair, in source order.

    ``include`` loads the listed resources on the spot through
    ``include_loader``, so included content lands exactly where the directive
    appears. Append markers (``key+=v`` or ``key += v``) join the new value to
    the existing one with a comma, where the existing value is read through
    the active profile (``key.<profile>`` when defined) and the result is
    written to the bare key; ``includeAfter`` always appends. Anything
    else is a plain last-write-wins put.
    """

    def __init__(
        self,
        store: KeyValueStore,
        engine: SubstitutionEngine,
        include_loader: Callable[[str], None],
        messages: Optional[LoadMessages] = None,
    ):
        self.store = store
        self.engine = engine
        self.include_loader = include_loader
        self.messages = messages if messages is not None else engine.messages

    def ingest(self, key: str, value: str, origin: str) -> Optional[str]:
        """
        Apply one key/value pair.

        Returns:
            The key that was written, or None for an ``include``.
        """
        if key == INCLUDE:
            names = split_list(self.engine.expand(value))
            self.messages.record(f"Including {', '.join(names)} from {origin}")
            for name in names:
                self.include_loader(name)
            return None

        append = False
        if key.endswith(APPEND_KEY_MARKER):
            key = key[: -len(APPEND_KEY_MARKER)]
            append = True
        elif value.startswith(APPEND_VALUE_MARKER):
            value = value[len(APPEND_VALUE_MARKER) :].strip()
            append = True

        if append or key == INCLUDE_AFTER:
            existing = self.engine.overlay.read(key)
            if existing is not None:
                value = f"{existing},{value}"

        self.store.put(key, value, origin)
        return key
