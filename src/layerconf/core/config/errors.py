"""Exceptions raised by the configuration API."""

from __future__ import annotations


class ConversionError(ValueError):
    """A value is present but cannot be converted to the requested type."""

    def __init__(self, key: str, value: str, target: str):
        self.key = key
        self.value = value
        self.target = target
        super().__init__(f"Cannot convert {key}={value!r} to {target}.")
