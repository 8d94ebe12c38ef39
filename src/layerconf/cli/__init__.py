"""Command-line interface for layerconf."""
