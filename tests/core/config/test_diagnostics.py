from layerconf.core.config.diagnostics import (
    LoadMessages,
    render_header,
    render_properties,
    render_report,
    write_report,
)
from layerconf.core.config.keys import DUMP_CONSOLE, DUMP_FILE
from layerconf.core.config.store import KeyValueStore


def make_store():
    store = KeyValueStore()
    store.put("b", "2", "file:b")
    store.put("a", "1", "file:a")
    store.put("a", "one", "file:c")
    return store


class TestLoadMessages:
    """Tests for accumulated load messages."""

    def test_record_and_warnings(self):
        messages = LoadMessages()
        messages.record("Loading from x")
        messages.record("WARNING: Recursive substitution detected on parameter a")

        assert len(messages) == 2
        assert messages.warnings() == ["WARNING: Recursive substitution detected on parameter a"]

        messages.clear()
        assert list(messages) == []

    def test_record_exception(self):
        messages = LoadMessages()
        messages.record_exception("app.properties", ValueError("Malformed \\uxxxx encoding"))

        assert list(messages) == ["ERROR: app.properties: Malformed \\uxxxx encoding"]


class TestReport:
    """Tests for the diagnostic dump."""

    def test_properties_sorted_with_history(self):
        text = render_properties(make_store())
        lines = text.splitlines()

        assert lines[0] == "----Config: Properties loaded start----"
        assert lines[1] == "PARAM_DEBUG: a = one (file:c; file:a)"
        assert lines[2] == "PARAM_DEBUG: b = 2 (file:b)"
        assert lines[-1] == "----Config: Properties loaded end----"

    def test_report_includes_messages(self):
        messages = LoadMessages()
        messages.record("Resource a was found 1 times")

        report = render_report(make_store(), messages)

        assert report.index("Load messages start") < report.index("Resource a was found 1 times")
        assert report.index("Load messages end") < report.index("Properties loaded start")

    def test_header_names_dump_keys(self):
        header = render_header(True, "/tmp/dump.txt")

        assert DUMP_CONSOLE in header
        assert "current value is true" in header
        assert DUMP_FILE in header
        assert "/tmp/dump.txt" in header

    def test_write_report(self, tmp_path):
        target = tmp_path / "nested" / "dump.txt"

        assert write_report("content", target) == target
        assert target.read_text(encoding="utf-8") == "content"

        assert write_report("again", target) == target
        assert target.read_text(encoding="utf-8") == "again"

    def test_write_report_failure(self, tmp_path):
        target = tmp_path / "is-a-directory"
        target.mkdir()

        assert write_report("content", target) is None
