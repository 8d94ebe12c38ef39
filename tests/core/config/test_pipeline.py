import logging

from layerconf.core.config.keys import (
    INCLUDE_AFTER,
    ORIGIN_ENVIRONMENT,
    ORIGIN_SYSTEM,
)
from layerconf.core.config.pipeline import ResolutionPipeline, is_allowed_key
from layerconf.core.config.store import RECURSION_MARKER


def resolve(loader, *names, system=None, environ=None):
    pipeline = ResolutionPipeline(
        loader=loader,
        system_properties=system if system is not None else {},
        environ=environ if environ is not None else {},
    )
    pipeline.resolve(names)
    return pipeline


class TestLoadOrder:
    """Tests for resource precedence and include directives."""

    def test_later_resource_wins(self, memory_loader):
        loader = memory_loader(
            {
                "defaults": "test.override=DEFAULTS\nonly.defaults=d",
                "app": "test.override=APP",
                "local": "test.override=LOCAL",
            }
        )

        store = resolve(loader, "defaults", "app", "local").store

        assert store.get("test.override") == "LOCAL"
        assert store.get("only.defaults") == "d"
        assert store.history("test.override") == [
            "memory:local#0",
            "memory:app#0",
            "memory:defaults#0",
        ]

    def test_include_is_loaded_at_the_directive(self, memory_loader):
        loader = memory_loader(
            {
                "A": "k=1\nk2=early\ninclude=B\nk2=late\n",
                "B": "k=fromB\nk2=fromB\n",
            }
        )

        store = resolve(loader, "A").store

        assert store.get("k") == "fromB"
        assert store.get("k2") == "late"

    def test_include_after_is_deferred_until_resource_is_done(self, memory_loader):
        loader = memory_loader(
            {
                "A": "includeAfter=C\nk=fromA\n",
                "C": "k=fromC\n",
            }
        )

        store = resolve(loader, "A").store

        assert store.get("k") == "fromC"
        assert INCLUDE_AFTER not in store

    def test_include_after_runs_before_next_top_level_resource(self, memory_loader):
        loader = memory_loader(
            {
                "A": "includeAfter=C\n",
                "C": "k=C\nm=C\n",
                "D": "k=D\n",
            }
        )

        store = resolve(loader, "A", "D").store

        assert store.get("k") == "D"
        assert store.get("m") == "C"

    def test_include_after_is_cumulative(self, memory_loader):
        loader = memory_loader(
            {
                "A": "includeAfter=C\ninclude=B\n",
                "B": "includeAfter=E\n",
                "C": "k=C\n",
                "E": "k=E\n",
            }
        )

        assert resolve(loader, "A").store.get("k") == "E"

    def test_include_after_is_substituted(self, memory_loader):
        loader = memory_loader(
            {
                "A": "name=extra\nincludeAfter=${name}.properties\n",
                "extra.properties": "k=extra\n",
            }
        )

        assert resolve(loader, "A").store.get("k") == "extra"

    def test_include_leaves_referenced_keys_to_later_overrides(self, memory_loader):
        """Expanding an include value must not freeze the keys it refers to."""
        loader = memory_loader(
            {
                "defaults": (
                    "app.home=/opt/default\n"
                    "conf.dir=${app.home}/conf\n"
                    "include=${conf.dir}/extra\n"
                ),
                "/opt/default/conf/extra": "extra.loaded=yes\n",
                "local": "app.home=/srv/app\n",
            }
        )

        store = resolve(loader, "defaults", "local").store

        assert store.get("conf.dir") == "/srv/app/conf"
        assert store.get("extra.loaded") == "yes"
        assert store.history("conf.dir") == [
            "substitution of ${app.home}",
            "memory:defaults#0",
        ]

    def test_include_after_leaves_referenced_keys_to_later_overrides(self, memory_loader):
        loader = memory_loader(
            {
                "A": "base=x\nafter=${base}-after\nincludeAfter=${after}\n",
                "x-after": "k=1\n",
                "B": "base=y\n",
            }
        )

        store = resolve(loader, "A", "B").store

        assert store.get("k") == "1"
        assert store.get("after") == "y-after"

    def test_nested_include_after(self, memory_loader):
        loader = memory_loader(
            {
                "A": "includeAfter=B\nk=A\n",
                "B": "includeAfter=C\nk=B\n",
                "C": "k=C\n",
            }
        )

        assert resolve(loader, "A").store.get("k") == "C"

    def test_duplicate_content_is_loaded_once(self, memory_loader):
        loader = memory_loader({"A": ["k=1", "k=1"]})

        pipeline = resolve(loader, "A")

        assert pipeline.store.history("k") == ["memory:A#1"]
        assert any(m.startswith("Skipped memory:A#0") for m in pipeline.messages)

    def test_multiple_copies_highest_precedence_last(self, memory_loader):
        loader = memory_loader({"A": ["k=low\nlow=1", "k=high"]})

        store = resolve(loader, "A").store

        assert store.get("k") == "high"
        assert store.get("low") == "1"


class TestLoadErrors:
    """Tests for resource failures degrading gracefully."""

    def test_missing_resource_is_recorded(self, memory_loader):
        pipeline = resolve(memory_loader({"A": "k=v"}), "nope", "A")

        assert "Did not find resource nope" in list(pipeline.messages)
        assert pipeline.store.get("k") == "v"

    def test_malformed_resource_does_not_stop_resolution(self, memory_loader):
        loader = memory_loader({"A": "a=1\nbad=\\u00ZZ\n", "B": "b=2"})

        pipeline = resolve(loader, "A", "B")

        assert pipeline.store.get("b") == "2"
        assert any(m.startswith("ERROR: A") for m in pipeline.messages)

    def test_undecodable_resource(self, memory_loader):
        loader = memory_loader({"A": [b"\xff\xfe=1"], "B": "b=2"})

        pipeline = resolve(loader, "A", "B")

        assert pipeline.store.get("b") == "2"

    def test_loader_io_error(self):
        class BrokenLoader:
            def find_resource_instances(self, name):
                raise OSError("disk on fire")

        pipeline = resolve(BrokenLoader(), "A")

        assert pipeline.store.as_dict() == {}
        assert any("disk on fire" in m for m in pipeline.messages)


class TestAppendAndSubstitution:
    """Tests for append directives and substitution within a pass."""

    def test_append_across_resources(self, memory_loader):
        loader = memory_loader(
            {"defaults": "list=a", "app": "list+=b", "local": "list += c"}
        )

        assert resolve(loader, "defaults", "app", "local").store.get("list") == "a,b,c"

    def test_append_without_prior_value(self, memory_loader):
        assert resolve(memory_loader({"A": "fresh+=v"}), "A").store.get("fresh") == "v"

    def test_transitive_substitution(self, memory_loader):
        loader = memory_loader({"A": "X=${Y}\nY=${Z}\nZ=value\n"})

        store = resolve(loader, "A").store

        assert store.get("X") == "value"
        assert store.get("Y") == "value"

    def test_cycle_is_safe(self, memory_loader):
        pipeline = resolve(memory_loader({"A": "A=${B}\nB=${A}\n"}), "A")

        assert pipeline.store.get("A") == ""
        assert pipeline.store.get("B") == ""
        assert RECURSION_MARKER in pipeline.store.history("A")
        assert RECURSION_MARKER in pipeline.store.history("B")
        assert len(pipeline.messages.warnings()) == 2

    def test_substitution_is_idempotent(self, memory_loader):
        pipeline = resolve(
            memory_loader(
                {"A": "X=${Y}\nY=y\nU=${missing}\nC=${C}\na=$${b}\nb={c}\nc=value\n"}
            ),
            "A",
        )

        assert pipeline.store.get("a") == "value"
        assert pipeline.engine.substitute_all() is False

    def test_profile_overlay(self, memory_loader):
        loader = memory_loader({"A": "layerconf.profile=qa\nk=Y\nk.qa=X\nother=Y\n"})

        pipeline = resolve(loader, "A")

        assert pipeline.overlay.read("k") == "X"
        assert pipeline.overlay.read("other") == "Y"

    def test_profile_from_placeholder(self, memory_loader):
        loader = memory_loader({"A": "env=qa\nlayerconf.profile=${env}\nk=Y\nk.qa=X\n"})

        pipeline = resolve(loader, "A")

        assert pipeline.overlay.profile == "qa"
        assert pipeline.overlay.read("k") == "X"


class TestOverlays:
    """Tests for the system-property and environment overlays."""

    def test_system_overlay_off_by_default(self, memory_loader):
        store = resolve(memory_loader({"A": "q=file"}), "A", system={"q": "sys"}).store
        assert store.get("q") == "file"

    def test_overwrite_only_is_the_default(self, memory_loader):
        loader = memory_loader({"A": "layerconf.parameters.useSystemProperties=true\nq=file\n"})

        store = resolve(loader, "A", system={"p": "sys", "q": "sys"}).store

        assert store.get("p") is None
        assert store.get("q") == "sys"
        assert store.history("q")[0] == ORIGIN_SYSTEM

    def test_overwrite_only_disabled(self, memory_loader):
        loader = memory_loader(
            {
                "A": "layerconf.parameters.useSystemProperties=true\n"
                "layerconf.parameters.useSystemOverWriteOnly=false\n"
            }
        )

        store = resolve(loader, "A", system={"p": "sys"}).store

        assert store.get("p") == "sys"

    def test_system_prefix_allow_list(self, memory_loader):
        loader = memory_loader(
            {
                "A": "layerconf.parameters.useSystemProperties=true\n"
                "layerconf.parameters.useSystemOverWriteOnly=false\n"
                "layerconf.parameters.useSystemPrefixes=app., svc.\n"
            }
        )

        store = resolve(loader, "A", system={"app.x": "1", "svc.y": "2", "other.z": "3"}).store

        assert store.get("app.x") == "1"
        assert store.get("svc.y") == "2"
        assert store.get("other.z") is None

    def test_system_directive_keys_are_ignored(self, memory_loader):
        loader = memory_loader(
            {
                "A": "layerconf.parameters.useSystemProperties=true\n"
                "layerconf.parameters.useSystemOverWriteOnly=false\n",
                "evil": "hacked=1",
            }
        )

        store = resolve(loader, "A", system={"include": "evil", "includeAfter": "evil"}).store

        assert store.get("hacked") is None
        assert "include" not in store

    def test_system_values_are_substituted(self, memory_loader):
        loader = memory_loader(
            {
                "A": "layerconf.parameters.useSystemProperties=true\n"
                "host=default\nurl=http://${host}\n"
            }
        )

        store = resolve(loader, "A", system={"host": "override"}).store

        assert store.get("url") == "http://override"

    def test_environment_overlay(self, memory_loader):
        loader = memory_loader(
            {
                "A": "layerconf.parameters.useEnvProperties=true\n"
                "layerconf.parameters.useEnvPrefixes=APP_\n"
            }
        )

        store = resolve(loader, "A", environ={"APP_HOME": "/opt/app", "OTHER": "x"}).store

        assert store.get("APP_HOME") == "/opt/app"
        assert store.history("APP_HOME") == [ORIGIN_ENVIRONMENT]
        assert store.get("OTHER") is None

    def test_environment_overlay_off_by_default(self, memory_loader):
        store = resolve(memory_loader({"A": "k=v"}), "A", environ={"APP_HOME": "/opt"}).store
        assert "APP_HOME" not in store


class TestOutputs:
    """Tests for diagnostics and publishing to system properties."""

    def test_system_parameters_are_published_with_prefix_stripped(self, memory_loader):
        system = {}
        loader = memory_loader(
            {
                "A": "base=/b\n"
                "layerconf.parameters.system.http.proxy=proxy:80\n"
                "layerconf.parameters.system.home=${base}/x\n"
            }
        )

        resolve(loader, "A", system=system)

        assert system == {"http.proxy": "proxy:80", "home": "/b/x"}

    def test_dump_file(self, memory_loader, tmp_path):
        target = tmp_path / "out" / "dump.txt"
        loader = memory_loader(
            {"A": f"layerconf.parameters.dump.file={target.as_posix()}\nk=v\n"}
        )

        resolve(loader, "A")

        content = target.read_text(encoding="utf-8")
        assert "----Config: Load messages start----" in content
        assert "PARAM_DEBUG: k = v (memory:A#0)" in content

    def test_dump_console(self, memory_loader, caplog):
        caplog.set_level(logging.INFO, logger="layerconf")
        loader = memory_loader({"A": "layerconf.parameters.dump.console=true\nk=v\n"})

        resolve(loader, "A")

        assert "PARAM_DEBUG: k = v (memory:A#0)" in caplog.text

    def test_no_dump_by_default(self, memory_loader, caplog):
        caplog.set_level(logging.INFO, logger="layerconf")

        resolve(memory_loader({"A": "k=v"}), "A")

        assert "PARAM_DEBUG" not in caplog.text


def test_is_allowed_key():
    assert is_allowed_key("anything", [])
    assert is_allowed_key("app.x", ["svc.", "app."])
    assert not is_allowed_key("other", ["app."])
