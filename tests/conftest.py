"""
Shared pytest fixtures and configuration for layerconf tests.

Every test starts from a clean process-wide state: no system properties, no
cached facade instance or listeners, no cached bootstrap settings and no
LAYERCONF_* environment overrides.
"""

import os
import sys
from pathlib import Path
from typing import Callable, Dict, List

import pytest

# Put `src/` first so `import layerconf` uses workspace code.
_REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO_ROOT / "src"))

from layerconf.core.config import facade  # noqa: E402
from layerconf.core.config.bootstrap import reset_init_settings  # noqa: E402
from layerconf.core.config.resources import MappingResourceLoader  # noqa: E402
from layerconf.core.config.system import reset_system_properties  # noqa: E402
from layerconf.core.utils.logger import reset_logging  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_config_state(monkeypatch):
    """Reset every process-wide configuration singleton around each test."""
    for key in list(os.environ):
        if key.startswith("LAYERCONF_"):
            monkeypatch.delenv(key, raising=False)
    reset_system_properties()
    reset_init_settings()
    facade.reset()
    facade.clear_listeners()
    yield
    reset_system_properties()
    reset_init_settings()
    facade.reset()
    facade.clear_listeners()
    reset_logging()


@pytest.fixture
def memory_loader() -> Callable[..., MappingResourceLoader]:
    """Build an in-memory loader from ``name -> text`` or ``name -> [texts]``."""

    def _build(resources: Dict[str, object]) -> MappingResourceLoader:
        mapping: Dict[str, List] = {}
        for name, content in resources.items():
            mapping[name] = content if isinstance(content, list) else [content]
        return MappingResourceLoader(mapping)

    return _build


@pytest.fixture
def write_properties(tmp_path) -> Callable[[str, str], Path]:
    """Write a properties file under tmp_path and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
