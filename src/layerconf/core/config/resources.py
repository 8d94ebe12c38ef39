"""
Resource discovery for configuration loading.

The resolution engine only needs to ask "what content exists for this
resource name?"; a ``ResourceLoader`` answers with every visible copy,
lowest precedence first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

from layerconf.core.utils.logger import log_error, log_file_operation

SEARCH_PATH_ENV = "LAYERCONF_PATH"


@dataclass(frozen=True)
class ResourceInstance:
    """One copy of a named resource: where it came from and its raw bytes."""

    origin: str
    content: bytes


class ResourceLoader(Protocol):
    """Anything that can enumerate the copies of a named resource."""

    def find_resource_instances(self, name: str) -> List[ResourceInstance]:
        """Return every copy of ``name``, lowest precedence first."""
        ...


def default_search_path() -> List[Path]:
    """Directories from LAYERCONF_PATH, highest precedence first."""
    raw = os.getenv(SEARCH_PATH_ENV, "")
    return [Path(part) for part in raw.split(os.pathsep) if part.strip()]


def dedupe_instances(
    instances: Sequence[ResourceInstance],
    on_skip: Optional[Callable[[ResourceInstance, ResourceInstance], None]] = None,
) -> List[ResourceInstance]:
    """
    Drop byte-identical copies, keeping the highest-precedence one.

    ``instances`` is ordered lowest precedence first and so is the result.
    ``on_skip(skipped, kept)`` is called for every dropped copy.
    """
    kept: Dict[bytes, ResourceInstance] = {}
    result: List[ResourceInstance] = []
    for instance in reversed(instances):
        existing = kept.get(instance.content)
        if existing is not None:
            if on_skip is not None:
                on_skip(instance, existing)
            continue
        kept[instance.content] = instance
        result.append(instance)
    result.reverse()
    return result


class SearchPathResourceLoader:
    """
    Default loader: a directory search path plus literal file probes.

    ``search_path`` lists directories highest precedence first, the way a
    classpath is written; every directory holding the resource contributes a
    copy. The name is then probed as a literal file, relative names under each
    of ``base_dirs`` in increasing precedence (user home, then the working
    directory by default).
    """

    def __init__(
        self,
        search_path: Optional[Iterable[Path | str]] = None,
        base_dirs: Optional[Iterable[Path | str]] = None,
    ):
        if search_path is None:
            self.search_path = default_search_path()
        else:
            self.search_path = [Path(p) for p in search_path]
        if base_dirs is None:
            self.base_dirs: Optional[List[Path]] = None
        else:
            self.base_dirs = [Path(p) for p in base_dirs]

    def _probe_dirs(self) -> List[Path]:
        if self.base_dirs is not None:
            return self.base_dirs
        return [Path.home(), Path.cwd()]

    def candidate_paths(self, name: str) -> List[Path]:
        """Candidate files for ``name``, lowest precedence first."""
        candidates: List[Path] = [
            directory / name for directory in reversed(self.search_path)
        ]
        literal = Path(name).expanduser()
        if literal.is_absolute():
            candidates.append(literal)
        else:
            candidates.extend(directory / literal for directory in self._probe_dirs())
        return candidates

    def find_resource_instances(self, name: str) -> List[ResourceInstance]:
        instances: List[ResourceInstance] = []
        seen: set[Path] = set()
        for candidate in self.candidate_paths(name):
            if not candidate.is_file():
                continue
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            try:
                content = resolved.read_bytes()
            except OSError as exc:
                log_error("RESOURCES", f"Could not read {resolved}", name, exc)
                continue
            log_file_operation("read", str(resolved), True)
            instances.append(ResourceInstance(origin=resolved.as_uri(), content=content))
        return instances


class MappingResourceLoader:
    """Serves resources from memory; each name maps to its copies in order."""

    def __init__(self, resources: Dict[str, Sequence[ResourceInstance | bytes | str]]):
        self._resources = resources

    def find_resource_instances(self, name: str) -> List[ResourceInstance]:
        instances: List[ResourceInstance] = []
        for index, item in enumerate(self._resources.get(name, [])):
            if isinstance(item, ResourceInstance):
                instances.append(item)
                continue
            content = item.encode("utf-8") if isinstance(item, str) else item
            instances.append(ResourceInstance(origin=f"memory:{name}#{index}", content=content))
        return instances
