"""
The default layered configuration.

``DefaultConfiguration`` resolves its resources once on construction and
again on every ``refresh()``. All reads and writes go through one re-entrant
lock, and a refresh swaps in a completely rebuilt pipeline, so readers see
either the old or the new state but never a mix.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Mapping, MutableMapping, Optional, Tuple

from layerconf.core.utils.logger import log_configuration_change, log_info

from .accessors import ConfigurationAccessors
from .bootstrap import get_init_settings
from .keys import ORIGIN_RUNTIME
from .pipeline import ResolutionPipeline
from .resources import ResourceLoader


class DefaultConfiguration(ConfigurationAccessors):
    """
    Layered configuration resolved from ordered resources.

    Args:
        *resource_names: Resources to load, lowest precedence first. When none
            are given the bootstrap resource order is used.
        resource_loader: Where resources come from (search path by default).
        system_properties: System-property source and sink (process-wide by
            default).
        environ: Environment used by the environment overlay (``os.environ``
            by default).
    """

    def __init__(
        self,
        *resource_names: str,
        resource_loader: Optional[ResourceLoader] = None,
        system_properties: Optional[MutableMapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        names = [name for name in resource_names if name and name.strip()]
        if not names:
            names = list(get_init_settings().resource_load_order)
        self.resource_load_order: Tuple[str, ...] = tuple(names)
        self.resource_loader = resource_loader
        self.system_properties = system_properties
        self.environ = environ

        self._lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._subset_cache: Dict[Tuple[bool, str], Dict[str, str]] = {}
        self._pipeline = self._resolve()

    def _resolve(self) -> ResolutionPipeline:
        pipeline = ResolutionPipeline(
            loader=self.resource_loader,
            system_properties=self.system_properties,
            environ=self.environ,
        )
        pipeline.resolve(self.resource_load_order)
        return pipeline

    def refresh(self) -> None:
        """Re-resolve every resource from scratch, then notify listeners."""
        from .facade import notify_listeners

        with self._refresh_lock:
            pipeline = self._resolve()
            with self._lock:
                self._pipeline = pipeline
                self._subset_cache.clear()
            log_info("CONFIG", f"Configuration refreshed ({len(pipeline.store)} parameters)")
            notify_listeners(self)

    # Reads

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            value = self._pipeline.overlay.read(key)
        return default if value is None else value

    def contains_key(self, key: str) -> bool:
        with self._lock:
            return self._pipeline.overlay.contains(key)

    def get_boolean(self, key: str, default: bool = False) -> bool:
        with self._lock:
            overlay = self._pipeline.overlay
            if not overlay.contains(key):
                return default
            return overlay.is_truthy(key)

    def get_keys(self, prefix: Optional[str] = None) -> List[str]:
        with self._lock:
            keys = self._pipeline.store.keys()
        if not prefix:
            return keys
        return [key for key in keys if key.startswith(prefix)]

    def is_empty(self) -> bool:
        with self._lock:
            return len(self._pipeline.store) == 0

    def as_dict(self) -> Dict[str, str]:
        with self._lock:
            return self._pipeline.store.as_dict()

    def get_sub_properties(self, prefix: str, truncate: bool = False) -> Dict[str, str]:
        """
        Keys starting with ``prefix``, optionally with the prefix removed.

        Results are cached per ``(truncate, prefix)`` until the next mutation;
        callers always get their own copy.
        """
        cache_key = (truncate, prefix)
        with self._lock:
            cached = self._subset_cache.get(cache_key)
            if cached is None:
                cached = {
                    (key[len(prefix) :] if truncate else key): value
                    for key, value in self._pipeline.store.items()
                    if key.startswith(prefix)
                }
                self._subset_cache[cache_key] = cached
            return dict(cached)

    def get_history(self, key: str) -> List[str]:
        """Origins that defined ``key``, most recent first."""
        with self._lock:
            return self._pipeline.store.history(key)

    def get_effective_key(self, key: str) -> str:
        """The key that answers a read of ``key`` under the active profile."""
        with self._lock:
            return self._pipeline.overlay.effective_key(key)

    @property
    def profile(self) -> Optional[str]:
        with self._lock:
            return self._pipeline.overlay.profile

    def use_profile_key(self, key: str) -> bool:
        with self._lock:
            return self._pipeline.overlay.use_profile_key(key)

    def get_profile_key(self, key: str) -> str:
        with self._lock:
            return self._pipeline.overlay.profile_key(key)

    @property
    def load_messages(self) -> List[str]:
        with self._lock:
            return list(self._pipeline.messages)

    # Writes

    def add_or_modify_property(self, name: str, value: Optional[str]) -> None:
        """
        Set ``name`` at runtime.

        The value is substituted against the current state before it is
        stored, and goes through directive handling, so ``include`` and the
        append markers behave as they do in a resource.

        Raises:
            ValueError: if ``name`` is None or empty, or ``value`` is None.
        """
        if name is None:
            raise ValueError("name parameter can not be None.")
        if not name:
            raise ValueError("name parameter can not be the empty string.")
        if value is None:
            raise ValueError("value parameter can not be None.")

        with self._lock:
            pipeline = self._pipeline
            old_value = pipeline.store.get(name)
            pipeline.messages.record(
                f"Adding property '{name}' with the value '{value}' at runtime."
            )
            expanded = pipeline.engine.expand(str(value))
            written = pipeline.processor.ingest(name, expanded, ORIGIN_RUNTIME)
            self._properties_changed()
            if written is not None:
                log_configuration_change(written, old_value, pipeline.store.get(written))

    def set_property(self, key: str, value: object) -> None:
        self.add_or_modify_property(key, None if value is None else str(value))

    def add_property(self, key: str, value: object) -> None:
        """Append ``value`` to an existing key with a comma, or set it."""
        with self._lock:
            if self.contains_key(key):
                new_value = f"{self.get(key)},{'' if value is None else value}"
            else:
                new_value = None if value is None else str(value)
            self.add_or_modify_property(key, new_value)

    def clear(self) -> None:
        with self._lock:
            self._pipeline.store.clear()
            self._properties_changed()

    def clear_property(self, key: str) -> None:
        with self._lock:
            self._pipeline.store.remove(key)
            self._properties_changed()

    def _properties_changed(self) -> None:
        self._subset_cache.clear()
        self._pipeline.overlay.refresh_profile()

    def __repr__(self) -> str:
        return f"DefaultConfiguration({', '.join(self.resource_load_order)})"
