"""
layerconf - Layered Properties Configuration

Resolves application configuration from ordered properties resources into one
flat key/value namespace.

Key Features:
- Deterministic override precedence across defaults, app and local resources
- ``include`` / ``includeAfter`` directives and ``+=`` append syntax
- Recursive ``${name}`` substitution with cycle detection
- Profile-suffixed keys (``key.<profile>``)
- Optional system-property and environment overlays
- Origin history for every key, refresh with change listeners

Package Structure:
- core/config/: Resolution engine and public configuration API
- core/utils/: Logging helpers
- cli/: Command-line interface for inspecting resolved configuration
"""

__version__ = "0.1.0"
