"""
Core modules for layerconf.

- config: resolution engine, configuration API and process-wide facade
- utils: logging
"""
