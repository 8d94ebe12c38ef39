"""
Ordered resolution of configuration resources into one KeyValueStore.

One ``ResolutionPipeline`` is one resolution pass: it owns the store, the
profile overlay, the substitution engine and the directive processor for that
pass. ``refresh()`` on a configuration simply builds a new pipeline.
"""

from __future__ import annotations

import os
import time
from typing import Iterable, List, Mapping, MutableMapping, Optional

from layerconf.core.utils.logger import log_debug, log_info, log_performance

from .diagnostics import (
    LoadMessages,
    render_header,
    render_report,
    write_report,
)
from .directives import DirectiveProcessor
from .keys import (
    DIRECTIVE_KEYS,
    DUMP_CONSOLE,
    DUMP_FILE,
    INCLUDE_AFTER,
    ORIGIN_ENVIRONMENT,
    ORIGIN_SYSTEM,
    SYSTEM_PARAMETERS_PREFIX,
    USE_ENV_PREFIXES,
    USE_ENV_PROPERTIES,
    USE_SYSTEM_OVERWRITE_ONLY,
    USE_SYSTEM_PREFIXES,
    USE_SYSTEM_PROPERTIES,
)
from .profile import ProfileOverlay
from .properties import iter_properties, split_list
from .resources import (
    ResourceInstance,
    ResourceLoader,
    SearchPathResourceLoader,
    dedupe_instances,
)
from .store import KeyValueStore, is_truthy_value
from .substitution import SubstitutionEngine
from .system import get_system_properties


def is_allowed_key(key: str, prefixes: List[str]) -> bool:
    """With no prefixes every key is allowed."""
    if not prefixes:
        return True
    return any(key.startswith(prefix) for prefix in prefixes)


class ResolutionPipeline:
    """
    Loads resources in order, applies overlays, substitutes and publishes.

    Resources named later override earlier ones. ``includeAfter`` resources
    are loaded depth-first once the top-level resource that named them is
    done. Read failures are recorded and never abort the pass.
    """

    def __init__(
        self,
        loader: Optional[ResourceLoader] = None,
        system_properties: Optional[MutableMapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.loader = loader if loader is not None else SearchPathResourceLoader()
        self.system_properties = (
            system_properties if system_properties is not None else get_system_properties()
        )
        self.environ = environ if environ is not None else os.environ
        self.store = KeyValueStore()
        self.messages = LoadMessages()
        self.overlay = ProfileOverlay(self.store)
        self.engine = SubstitutionEngine(self.store, self.overlay, self.messages)
        self.processor = DirectiveProcessor(
            self.store, self.engine, self.load, self.messages
        )

    def resolve(self, resource_names: Iterable[str]) -> KeyValueStore:
        """Run the full pass over ``resource_names`` and return the store."""
        start = time.perf_counter()
        names = list(resource_names)

        for name in names:
            self.load_top(name)

        if self.flag(USE_SYSTEM_PROPERTIES):
            self.apply_system_overlay()
        if self.flag(USE_ENV_PROPERTIES):
            self.apply_environment_overlay()
        self.overlay.refresh_profile()

        self.engine.substitute_all()
        # The profile key itself may have been a placeholder
        self.overlay.refresh_profile()

        self.emit_diagnostics()
        self.publish_system_parameters()

        log_performance("resolve", time.perf_counter() - start, ", ".join(names))
        return self.store

    def load_top(self, name: str) -> None:
        """Load ``name`` then any ``includeAfter`` resources it accumulated."""
        self.load(name)
        self.overlay.refresh_profile()

        if INCLUDE_AFTER not in self.store:
            return
        after = split_list(self.engine.expand(self.store.get(INCLUDE_AFTER)))
        self.store.remove(INCLUDE_AFTER)
        for after_name in after:
            self.load_top(after_name)

    def load(self, name: str) -> None:
        """Load every copy of one resource, lowest precedence first."""
        try:
            instances = self.loader.find_resource_instances(name)
            self.messages.record(f"Resource {name} was found {len(instances)} times")
            if not instances:
                self.messages.record(f"Did not find resource {name}")
                return
            for instance in dedupe_instances(instances, self._record_duplicate):
                self.load_instance(instance)
        except (OSError, ValueError) as exc:
            # Includes UnicodeDecodeError and malformed \uxxxx escapes
            self.messages.record_exception(name, exc)

    def load_instance(self, instance: ResourceInstance) -> None:
        self.messages.record(f"Loading from {instance.origin}")
        text = instance.content.decode("utf-8")
        for key, value in iter_properties(text):
            self.processor.ingest(key, value, instance.origin)

    def _record_duplicate(self, skipped: ResourceInstance, kept: ResourceInstance) -> None:
        self.messages.record(
            f"Skipped {skipped.origin}: same content as {kept.origin}"
        )

    def flag(self, key: str, default: bool = False) -> bool:
        value = self.overlay.read(key)
        if value is None:
            return default
        return is_truthy_value(value)

    def apply_system_overlay(self) -> None:
        overwrite_only = self.flag(USE_SYSTEM_OVERWRITE_ONLY, default=True)
        prefixes = split_list(self.overlay.read(USE_SYSTEM_PREFIXES))
        applied = 0

        for key, value in list(self.system_properties.items()):
            if key in DIRECTIVE_KEYS:
                continue
            if not is_allowed_key(key, prefixes):
                continue
            if overwrite_only and not self.overlay.contains(key):
                continue
            self.store.put(key, value, ORIGIN_SYSTEM)
            applied += 1

        self.messages.record(f"Applied {applied} system properties")

    def apply_environment_overlay(self) -> None:
        prefixes = split_list(self.overlay.read(USE_ENV_PREFIXES))
        applied = 0

        for key, value in list(self.environ.items()):
            if not is_allowed_key(key, prefixes):
                continue
            self.store.put(key, value, ORIGIN_ENVIRONMENT)
            applied += 1

        self.messages.record(f"Applied {applied} environment variables")

    def emit_diagnostics(self) -> None:
        dump_console = self.flag(DUMP_CONSOLE)
        dump_file = self.overlay.read(DUMP_FILE) or ""
        log_debug("CONFIG", render_header(dump_console, dump_file))

        if not dump_console and not dump_file:
            return
        report = render_report(self.store, self.messages)
        if dump_console:
            log_info("CONFIG", report)
        if dump_file and write_report(report, dump_file) is None:
            self.messages.record(f"ERROR: could not write parameter dump to {dump_file}")

    def publish_system_parameters(self) -> None:
        """Copy ``layerconf.parameters.system.*`` keys, prefix stripped, to the sink."""
        for key, value in self.store.items():
            if not key.startswith(SYSTEM_PARAMETERS_PREFIX):
                continue
            name = key[len(SYSTEM_PARAMETERS_PREFIX) :]
            if not name:
                continue
            self.system_properties[name] = value
            log_debug("CONFIG", f"Published system property {name}", key)
