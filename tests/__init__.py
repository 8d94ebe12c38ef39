"""
Test suite for layerconf.

Tests mirror the package layout:

- core/config/: resolution engine, configuration API, facade and bootstrap
- core/utils/: logging helpers
- cli/: command-line interface
"""
