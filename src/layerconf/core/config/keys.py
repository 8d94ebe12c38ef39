"""Reserved configuration keys understood by the resolution engine."""

from __future__ import annotations

# Comma-separated resources loaded at the point the key is encountered.
INCLUDE = "include"

# Comma-separated resources loaded once the current top-level resource is done.
INCLUDE_AFTER = "includeAfter"

DIRECTIVE_KEYS = frozenset({INCLUDE, INCLUDE_AFTER})

USE_SYSTEM_PROPERTIES = "layerconf.parameters.useSystemProperties"
USE_SYSTEM_OVERWRITE_ONLY = "layerconf.parameters.useSystemOverWriteOnly"
USE_SYSTEM_PREFIXES = "layerconf.parameters.useSystemPrefixes"

USE_ENV_PROPERTIES = "layerconf.parameters.useEnvProperties"
USE_ENV_PREFIXES = "layerconf.parameters.useEnvPrefixes"

DUMP_CONSOLE = "layerconf.parameters.dump.console"
DUMP_FILE = "layerconf.parameters.dump.file"

PROFILE_PROPERTY = "layerconf.profile"
# Older name for the profile key; only consulted when PROFILE_PROPERTY is unset.
ENVIRONMENT_PROPERTY = "layerconf.environment"

PROFILE_KEYS = frozenset({PROFILE_PROPERTY, ENVIRONMENT_PROPERTY})

# Keys under this prefix are copied, prefix stripped, into the system properties.
SYSTEM_PARAMETERS_PREFIX = "layerconf.parameters.system."

TOUCHFILE = "layerconf.touchfile"
TOUCHFILE_INTERVAL = "layerconf.touchfile.interval"
DEFAULT_TOUCHFILE_INTERVAL_MS = 10000

TRUTHY_VALUES = frozenset({"true", "yes"})

# Origin labels recorded in key histories
ORIGIN_SYSTEM = "System Properties"
ORIGIN_ENVIRONMENT = "Environment Properties"
ORIGIN_RUNTIME = "Runtime: added at runtime"
