"""
Process-wide bootstrap settings.

Before the first configuration is built, an optional settings file
(``layerconf.properties`` unless ``LAYERCONF_CONFIG_FILE`` names another one,
as an environment variable or a system property) decides which resources are
loaded and in what order.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from layerconf.core.utils.logger import log_debug

from .accessors import MapConfiguration
from .properties import iter_properties
from .resources import ResourceLoader, SearchPathResourceLoader
from .system import get_system_properties

CONFIG_FILE_ENV = "LAYERCONF_CONFIG_FILE"
DEFAULT_CONFIG_FILE = "layerconf.properties"

RESOURCE_ORDER_KEY = "layerconf.resource.order"
RESOURCE_APPEND_KEY = "layerconf.resource.append"

DEFAULT_LOAD_ORDER: Tuple[str, ...] = (
    # Internal defaults shipped with the application
    "layerconf-defaults.properties",
    # Application properties
    "layerconf-app.properties",
    # Local/developer overrides, loaded last
    "layerconf-local.properties",
)


@dataclass(frozen=True)
class InitSettings:
    config_file: str
    resource_load_order: Tuple[str, ...]


def get_config_file_name() -> str:
    name = os.getenv(CONFIG_FILE_ENV, "")
    if name.strip():
        return name
    name = get_system_properties().get(CONFIG_FILE_ENV, "")
    return name if name.strip() else DEFAULT_CONFIG_FILE


def load_settings_file(
    file_name: str, loader: Optional[ResourceLoader] = None
) -> MapConfiguration:
    """
    Read the settings file, later copies overriding earlier ones.

    A missing file yields an empty configuration.

    Raises:
        ValueError: if a copy of the file cannot be decoded or parsed.
    """
    loader = loader if loader is not None else SearchPathResourceLoader()
    values = {}
    for instance in loader.find_resource_instances(file_name):
        try:
            values.update(iter_properties(instance.content.decode("utf-8")))
        except ValueError as exc:
            raise ValueError(f"Could not load config file [{file_name}]. {exc}") from exc
        log_debug("BOOTSTRAP", f"Loaded settings from {instance.origin}")
    return MapConfiguration(values)


def build_resource_order(settings: MapConfiguration) -> Tuple[str, ...]:
    order = settings.get_string_array(RESOURCE_ORDER_KEY) or list(DEFAULT_LOAD_ORDER)
    order.extend(settings.get_string_array(RESOURCE_APPEND_KEY))
    return tuple(order)


def load_init_settings(loader: Optional[ResourceLoader] = None) -> InitSettings:
    config_file = get_config_file_name()
    settings = load_settings_file(config_file, loader)
    return InitSettings(config_file=config_file, resource_load_order=build_resource_order(settings))


_init_settings: Optional[InitSettings] = None


def get_init_settings() -> InitSettings:
    """Get the bootstrap settings, loading them on first use."""
    global _init_settings
    if _init_settings is None:
        _init_settings = load_init_settings()
    return _init_settings


def set_init_settings(settings: InitSettings) -> None:
    global _init_settings
    _init_settings = settings


def reset_init_settings() -> None:
    """Forget the loaded settings so the next call re-reads them."""
    global _init_settings
    _init_settings = None
