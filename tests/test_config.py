import unittest

import pytest

from wirekit import ConfigError, Config, MissingConfigError


class TestConfigAccess(unittest.TestCase):
    config: Config

    def setUp(self):
        self.config = Config({"init": "data", "more.init": "more"})

    def test_get_initialized_data(self):
        assert self.config.get("init") == "data"
        assert self.config.get("more")["init"] == "more"
        assert self.config.get("more.init") == "more"

    def test_get_without_path_returns_root(self):
        assert self.config.get() is self.config.data

    def test_set_data(self):
        self.config.set("more.a", "a")
        self.config.set("more.b", "b")
        self.config.set("more.c", {"x": 1})

        assert self.config.get("more")["a"] == "a"
        assert self.config.get("more.b") == "b"
        assert self.config.get("more.c.x") == 1

    def test_set_with_object_expansion_suppressed_stores_as_is(self):
        value = {"x": 1}
        self.config.set("raw", value, True)

        assert self.config.get("raw") is value

    def test_set_overwrites_scalar_parent_with_mapping(self):
        self.config.set("init.nested", 1)

        assert self.config.get("init") == {"nested": 1}

    def test_set_single_mapping_merges_from_root(self):
        self.config.set({"more": {"extra": 2}, "top": 3})

        assert self.config.get("more.init") == "more"
        assert self.config.get("more.extra") == 2
        assert self.config.get("top") == 3

    def test_set_scalar_at_root_raises(self):
        with pytest.raises(ConfigError):
            self.config.set("", 1)

    def test_set_empty_containers_are_stored(self):
        self.config.set("empty", {})
        self.config.set("none", [])

        assert self.config.get("empty") == {}
        assert self.config.get("none") == []

    def test_has(self):
        assert self.config.has("init")
        assert not self.config.has("nothing")

    def test_has_counts_none_values_as_present(self):
        self.config.set("flag", None)

        assert self.config.has("flag")
        assert self.config.get("flag") is None

    def test_default(self):
        assert self.config.default("init", "init") == "data"
        assert self.config.default("a.b", "nothing") == "nothing"

    def test_missing_raises_in_strict_mode(self):
        with pytest.raises(MissingConfigError) as exc_info:
            self.config.get("missing")

        assert exc_info.value.path == "missing"
        assert isinstance(exc_info.value, KeyError)

    def test_missing_tolerated_when_ignored(self):
        assert self.config.get("missing", True) is None
        assert self.config.get("more.missing.deep", True) is None

    def test_missing_returns_none_when_not_strict(self):
        config = Config({"a": 1}, strict=False)

        assert config.get("missing") is None

    def test_mapping_protocol(self):
        self.config["x.y"] = 5

        assert self.config["x.y"] == 5
        assert "x.y" in self.config
        assert "x.z" not in self.config
        with pytest.raises(MissingConfigError):
            self.config["x.z"]


class TestConfigPaths(unittest.TestCase):
    def test_bracket_and_dot_paths_are_equivalent(self):
        config = Config({"servers": [{"host": "a"}, {"host": "b"}]})

        assert config.get("servers[1].host") == "b"
        assert config.get("servers.1.host") == "b"
        assert config.get("[servers][0][host]") == "a"

    def test_index_zero_materializes_sequence(self):
        config = Config()
        config.set("items.0", "a")
        config.set("items.1", "b")

        assert config.get("items") == ["a", "b"]

    def test_nonzero_index_materializes_mapping(self):
        config = Config()
        config.set("items.2", "c")

        assert config.get("items") == {"2": "c"}
        assert config.get("items[2]") == "c"

    def test_sparse_index_converts_sequence_to_mapping(self):
        config = Config({"items": ["a", "b"]})
        config.set("items[5]", "f")

        assert config.get("items") == {"0": "a", "1": "b", "5": "f"}
        assert config.get("items.0") == "a"
        assert config.get("items[5]") == "f"

    def test_list_values_are_copied_per_leaf(self):
        source = [1, 2]
        config = Config({"nums": source})
        config.set("nums.0", 9)

        assert source == [1, 2]
        assert config.get("nums") == [9, 2]


class TestConfigFlattenAndScopes(unittest.TestCase):
    def test_flatten_mapping(self):
        config = Config()

        assert config.flatten({"x": 1, "y": {"z": 2}}) == {"x": 1, "y.z": 2}

    def test_flatten_own_tree_with_sequences(self):
        config = Config({"test": {"a": 1, "b": {"c": 2}}, "list": [1, {"k": "v"}], "empty": []})
        flat = config.flatten()

        assert flat["test.a"] == 1
        assert flat["test.b.c"] == 2
        assert flat["list[0]"] == 1
        assert flat["list[1].k"] == "v"
        assert flat["empty"] == []

    def test_flatten_keeps_non_identifier_keys_as_leaves(self):
        config = Config()
        flat = config.flatten({"a b": {"c": 1}})

        assert flat == {"a b": {"c": 1}}

    def test_extend_overlays_leaves(self):
        config = Config({"db": {"host": "localhost", "port": 5432}})
        config.extend({"db": {"host": "prod"}, "debug": False})

        assert config.get("db") == {"host": "prod", "port": 5432}
        assert config.get("debug") is False

    def test_extend_accepts_config(self):
        config = Config({"a": 1})
        config.extend(Config({"b": {"c": 2}}))

        assert config.get("b.c") == 2

    def test_path_creates_scoped_store(self):
        config = Config({"db": {"host": "h"}, "app": {"name": "n"}}, left="${", right="}")
        db = config.path("db")

        assert db.get("host") == "h"
        assert db.delimiters == config.delimiters
        assert db.get("app.name") == "n"

        db.set("host", "other")
        assert config.get("db.host") == "h"

    def test_path_to_non_mapping_raises(self):
        config = Config({"a": 1, "hosts": ["x", "y"]})

        with pytest.raises(ConfigError):
            config.path("a")
        with pytest.raises(ConfigError):
            config.path("hosts")

    def test_create_inherits_delimiters_without_parent(self):
        config = Config({"a": 1}, left="<", right=">")
        other = config.create({"b": 2})

        assert other.delimiters.left == "<"
        assert other.parent is None
        assert not other.has("a")
