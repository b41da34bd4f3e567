import pytest

from wirekit import CircularDependencyError, Config, MissingConfigError


@pytest.fixture
def config():
    return Config({"init": "data"})


def test_resolve_reference_keeps_type(config):
    config.set("a.b", "{a.c}")
    config.set("a.c", 5)

    assert config.resolve("a.b") == 5


def test_resolve_chained_references(config):
    config.set("more.a", "{more.b}")
    config.set("more.b", "{more.c.x}")
    config.set("more.c", {"x": 1})

    assert config.resolve("more.a") == 1
    assert config.resolve("more.b") == 1
    assert config.get("more.a") == "{more.b}", "single-path resolve must not write back"


def test_resolve_single_placeholder_passes_structures_through(config):
    config.set("db", {"host": "h", "port": 1})
    config.set("alias", "{db}")

    assert config.resolve("alias") == {"host": "h", "port": 1}


def test_resolve_interpolates_mixed_strings(config):
    config.set("db", {"host": "localhost", "port": 5432})
    config.set("url", "pg://{db.host}:{db.port}/app")

    assert config.resolve("url") == "pg://localhost:5432/app"


def test_resolve_value_directly(config):
    config.set("name", "world")

    assert config.resolve_value("hello {name}") == "hello world"
    assert config.resolve_value("{init}") == "data"


def test_self_relative_marker(config):
    config.set("db", {"host": "localhost", "url": "pg://{$.host}", "same": "{$.host}"})

    assert config.resolve("db.url") == "pg://localhost"
    assert config.resolve("db.same") == "localhost"


def test_self_relative_marker_at_top_level(config):
    config.set("host", "h")
    config.set("url", "x-{$.host}")

    assert config.resolve("url") == "x-h"


def test_resolve_structure_rebuilds_every_leaf(config):
    config.set("name", "svc")
    config.set("service", {"labels": ["{name}", "static"], "meta": {"id": "{name}-1"}, "port": 80})

    assert config.resolve("service") == {
        "labels": ["svc", "static"],
        "meta": {"id": "svc-1"},
        "port": 80,
    }


def test_scalars_pass_through(config):
    config.set("n", 3)
    config.set("flag", True)

    assert config.resolve("n") == 3
    assert config.resolve("flag") is True


def test_whole_tree_resolve_writes_back():
    config = Config()
    config.set("more.a", "{more.b}")
    config.set("more.b", "{more.c.x}")
    config.set("more.c", {"x": 1})
    config.set("more.escape", "\\{escaped}")

    assert config.get("more.escape") == "\\{escaped}"

    resolved = config.resolve()

    assert config.get("more")["a"] == 1
    assert config.get("more.b") == 1
    assert config.get("more.c.x") == 1
    assert config.get("more.escape") == "{escaped}"
    assert resolved["more.a"] == 1


def test_whole_tree_resolve_is_order_independent():
    config = Config()
    config.set("first", "{last}")
    config.set("middle", "\\{literal}")
    config.set("last", "x{middle}")

    config.resolve()

    assert config.get("first") == "x{literal}"
    assert config.get("last") == "x{literal}"


def test_whole_tree_resolve_fails_fast_without_writing():
    config = Config()
    config.set("ok", "{target}")
    config.set("target", 1)
    config.set("bad", "{nowhere}")

    with pytest.raises(MissingConfigError):
        config.resolve()

    assert config.get("ok") == "{target}"


def test_alternative_delimiters():
    config = Config({}, left="${", right="}")
    config.set("more.a", "${more.b}")
    config.set("more.b", "${more.c.x}")
    config.set("more.c", {"x": 1})
    config.set("more.escape", "\\${escaped}")
    config.set("more.plain", "{more.b}")

    assert config.resolve("more.a") == 1
    assert config.get("more.a") == "${more.b}"

    config.resolve()

    assert config.get("more.a") == 1
    assert config.get("more.escape") == "${escaped}"
    assert config.get("more.plain") == "{more.b}"


def test_missing_reference_in_strict_mode_raises(config):
    config.set("url", "{nowhere}")

    with pytest.raises(MissingConfigError):
        config.resolve("url")


def test_missing_reference_renders_empty_when_not_strict():
    config = Config({"url": "pg://{nowhere}/db"}, strict=False)

    assert config.resolve("url") == "pg:///db"


def test_circular_reference_is_detected(config):
    config.set("a", "{b}")
    config.set("b", "x{a}")

    with pytest.raises(CircularDependencyError) as exc_info:
        config.resolve("a")

    assert exc_info.value.chain == ["a", "b", "a"]


def test_scoped_store_resolves_against_parent():
    config = Config({"app": {"name": "svc"}, "db": {"name": "{app.name}_db"}})
    db = config.path("db")

    assert db.resolve("name") == "svc_db"
