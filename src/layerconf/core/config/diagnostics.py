"""Load messages and the diagnostic dump of resolved parameters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from layerconf.core.utils.logger import log_debug, log_error, log_file_operation

from .keys import DUMP_CONSOLE, DUMP_FILE
from .store import KeyValueStore

LOG_PREFIX = "PARAM_DEBUG: "


class LoadMessages:
    """Messages accumulated during one resolution pass."""

    def __init__(self) -> None:
        self._messages: List[str] = []

    def record(self, message: str) -> None:
        self._messages.append(message)
        log_debug("CONFIG", message)

    def record_exception(self, context: str, exc: BaseException) -> None:
        self._messages.append(f"ERROR: {context}: {exc}")
        log_error("CONFIG", f"Error loading config. {exc}", context, exc)

    def warnings(self) -> List[str]:
        return [m for m in self._messages if m.startswith("WARNING")]

    def clear(self) -> None:
        self._messages.clear()

    def __iter__(self):
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)


def render_header(dump_console: bool, dump_file: str) -> str:
    lines = [
        "----Config: Info start----",
        f"Working directory is: {Path.cwd()}",
        f"To dump all params to the console set {DUMP_CONSOLE} to true; current value is {str(dump_console).lower()}",
        f"To dump all params to a file set {DUMP_FILE} to file location; current value is {dump_file}",
        "----Config: Info end------",
    ]
    return "\n".join(lines)


def render_load_messages(messages: LoadMessages) -> str:
    lines = ["----Config: Load messages start----"]
    lines.extend(messages)
    lines.append("----Config: Load messages end----")
    return "\n".join(lines) + "\n"


def render_properties(store: KeyValueStore) -> str:
    """Sorted ``key = value (history)`` listing of every resolved key."""
    lines = ["----Config: Properties loaded start----"]
    for key in sorted(store.keys()):
        entry = store.entry(key)
        lines.append(f"{LOG_PREFIX}{key} = {entry.value} ({entry.describe_history()})")
    lines.append("----Config: Properties loaded end----")
    return "\n".join(lines) + "\n"


def render_report(store: KeyValueStore, messages: LoadMessages) -> str:
    return render_load_messages(messages) + render_properties(store)


def write_report(report: str, target: str | Path) -> Optional[Path]:
    """Write ``report`` to ``target``, replacing any existing file."""
    target_path = Path(target)
    temp_path = target_path.with_name(target_path.name + ".tmp")
    try:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.write_text(report, encoding="utf-8")
        temp_path.replace(target_path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        log_file_operation("write", str(target_path), False, str(exc))
        return None
    log_file_operation("write", str(target_path), True)
    return target_path
