"""Typed accessors shared by every configuration view."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional

from .errors import ConversionError
from .properties import split_list
from .store import is_truthy_value


def _convert(key: str, value: str, converter: Callable[[str], Any], target: str) -> Any:
    try:
        return converter(value.strip())
    except (ValueError, InvalidOperation) as exc:
        raise ConversionError(key, value, target) from exc


class ConfigurationAccessors:
    """
    String-to-type conversions on top of ``get``.

    Subclasses provide ``get``, ``contains_key``, ``get_keys``, ``is_empty``,
    ``as_dict`` and ``get_sub_properties``. A missing key always yields the
    default; a present value that does not convert raises ConversionError.
    """

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        raise NotImplementedError

    def contains_key(self, key: str) -> bool:
        raise NotImplementedError

    def get_keys(self, prefix: Optional[str] = None) -> List[str]:
        raise NotImplementedError

    def is_empty(self) -> bool:
        raise NotImplementedError

    def as_dict(self) -> Dict[str, str]:
        raise NotImplementedError

    def get_sub_properties(self, prefix: str, truncate: bool = False) -> Dict[str, str]:
        raise NotImplementedError

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.get(key, default)

    def get_boolean(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return is_truthy_value(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        if value is None:
            return default
        return _convert(key, value, int, "int")

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key)
        if value is None:
            return default
        return _convert(key, value, float, "float")

    def get_decimal(self, key: str, default: Optional[Decimal] = None) -> Optional[Decimal]:
        value = self.get(key)
        if value is None:
            return default
        return _convert(key, value, Decimal, "Decimal")

    def get_string_array(self, key: str) -> List[str]:
        """Comma-separated items, trimmed, blanks dropped; empty when missing."""
        return split_list(self.get(key))

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        if not self.contains_key(key):
            return list(default) if default is not None else []
        return self.get_string_array(key)

    def get_properties(self, key: str) -> Dict[str, str]:
        """
        Parse ``a=1,b=2`` style values into a dict.

        Raises:
            ValueError: if an item has no ``=`` or an empty name.
        """
        properties: Dict[str, str] = {}
        for pair in self.get_string_array(key):
            index = pair.find("=")
            if index < 1:
                raise ValueError(f"Malformed property: {pair}")
            properties[pair[:index]] = pair[index + 1 :]
        return properties

    def subset(self, prefix: str) -> "MapConfiguration":
        """Keys starting with ``prefix`` (kept whole) as a detached view."""
        return MapConfiguration(self.get_sub_properties(prefix, False))


class MapConfiguration(ConfigurationAccessors):
    """Read-only configuration over a plain snapshot of key/value pairs."""

    def __init__(self, values: Mapping[str, str]):
        self._values: Dict[str, str] = dict(values)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(key, default)

    def contains_key(self, key: str) -> bool:
        return key in self._values

    def get_keys(self, prefix: Optional[str] = None) -> List[str]:
        if not prefix:
            return list(self._values)
        return [key for key in self._values if key.startswith(prefix)]

    def is_empty(self) -> bool:
        return not self._values

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def get_sub_properties(self, prefix: str, truncate: bool = False) -> Dict[str, str]:
        return {
            (key[len(prefix) :] if truncate else key): value
            for key, value in self._values.items()
            if key.startswith(prefix)
        }

    def __len__(self) -> int:
        return len(self._values)
