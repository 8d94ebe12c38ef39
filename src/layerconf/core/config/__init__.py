"""Layered configuration resolution and access."""

from .accessors import ConfigurationAccessors, MapConfiguration
from .bootstrap import (
    DEFAULT_LOAD_ORDER,
    InitSettings,
    get_init_settings,
    reset_init_settings,
    set_init_settings,
)
from .configuration import DefaultConfiguration
from .errors import ConversionError
from .facade import (
    ConfigChangeEvent,
    add_listener,
    copy_configuration,
    get_instance,
    notify_listeners,
    remove_listener,
    reset,
    set_configuration,
)
from .pipeline import ResolutionPipeline
from .resources import (
    MappingResourceLoader,
    ResourceInstance,
    ResourceLoader,
    SearchPathResourceLoader,
)
from .store import Entry, KeyValueStore
from .system import get_system_properties, reset_system_properties
from .touchfile import Touchfile

__all__ = [
    "ConfigChangeEvent",
    "ConfigurationAccessors",
    "ConversionError",
    "DEFAULT_LOAD_ORDER",
    "DefaultConfiguration",
    "Entry",
    "InitSettings",
    "KeyValueStore",
    "MapConfiguration",
    "MappingResourceLoader",
    "ResolutionPipeline",
    "ResourceInstance",
    "ResourceLoader",
    "SearchPathResourceLoader",
    "Touchfile",
    "add_listener",
    "copy_configuration",
    "get_init_settings",
    "get_instance",
    "get_system_properties",
    "notify_listeners",
    "remove_listener",
    "reset",
    "reset_init_settings",
    "reset_system_properties",
    "set_configuration",
    "set_init_settings",
]
