from __future__ import annotations

import logging
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ._errors import CircularDependencyError, ConfigError, MissingConfigError
from ._template import compile_template


logger = logging.getLogger(__name__)

# Placeholder keys starting with this marker are relative to the parent of
# the value that contains them: at `db.url`, `{$.host}` reads `db.host`.
SELF_MARKER = "$."

_MISSING: Any = object()
_INDEX = re.compile(r"^\d+$")
_SIMPLE_KEY = re.compile(r"^[A-Za-z_$0-9.]+$")

Segment = str | int


@dataclass(frozen=True)
class Delimiters:
    left: str = "{"
    right: str = "}"


def split_path(path: str) -> list[Segment]:
    """Split a dotted/bracketed path; numeric segments become ints.

    `a[0].b`, `[a][0][b]` and `a.0.b` all give `["a", 0, "b"]`.
    """
    if not path:
        return []
    normalized = path.removeprefix("[").replace("[", ".").replace("]", "")
    return [int(part) if _INDEX.match(part) else part for part in normalized.split(".")]


def normalize_path(path: str) -> str:
    return ".".join(str(part) for part in split_path(path))


def join_path(prefix: str, key: Segment) -> str:
    if isinstance(key, int) or _INDEX.match(key):
        return f"{prefix}[{key}]"
    return f"{prefix}.{key}" if prefix else key


class Config:
    """Hierarchical configuration addressed by path.

    String values may reference other paths through placeholders
    (`"{db.host}:{db.port}"`); `resolve` substitutes them recursively.
    Lookups of unset paths raise `MissingConfigError` in strict mode unless
    `ignore_missing` is passed.

    Example:
      config = Config({"db": {"host": "localhost", "url": "pg://{$.host}"}})
      config.resolve("db.url")  # 'pg://localhost'
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        left: str = "{",
        right: str = "}",
        strict: bool = True,
        parent: Config | None = None,
    ) -> None:
        self.delimiters = Delimiters(left, right)
        self.strict = strict
        self.parent = parent
        self.data: dict[str, Any] = {}
        self._lock = threading.RLock()
        if data:
            self.set(data)

    def get(self, path: str | None = None, ignore_missing: bool = False) -> Any:
        if not path:
            return self.data

        value = self._find(split_path(path))
        if value is _MISSING:
            if not ignore_missing and self.strict:
                raise MissingConfigError(normalize_path(path))
            return None
        return value

    def set(self, path: str | Mapping[str, Any], value: Any = _MISSING, ignore_object_expansion: bool = False) -> Any:
        """Set `value` at `path`; `set(mapping)` merges from the root.

        Mappings and sequences are expanded into one entry per leaf unless
        `ignore_object_expansion` is true. Missing parents are created: a
        sequence when the next segment is index 0, a mapping otherwise.
        """
        with self._lock:
            if value is _MISSING:
                if not isinstance(path, Mapping):
                    msg = f"set() with a single argument expects a mapping, got {type(path).__name__}"
                    raise TypeError(msg)
                for key, child in path.items():
                    self.set(str(key), child)
                return path

            if not ignore_object_expansion and _is_structured(value) and value:
                prefix = normalize_path(path)
                for key, child in _items(value):
                    self.set(f"{prefix}.{key}" if prefix else str(key), child)
                return value

            parts = split_path(path)
            if not parts:
                msg = "Cannot replace the config root with a single value"
                raise ConfigError(msg)
            self._store(parts, value)
            return value

    def has(self, path: str) -> bool:
        return self._find(split_path(path)) is not _MISSING

    def default(self, path: str, fallback: Any) -> Any:
        return self.get(path) if self.has(path) else fallback

    def flatten(self, node: Any = None) -> dict[str, Any]:
        """Map each leaf's path to its value, e.g. `{"y": {"z": 2}}` -> `{"y.z": 2}`."""
        flat: dict[str, Any] = {}
        _flatten_into(flat, "", self.data if node is None else node)
        return flat

    def resolve_value(self, raw: str, path: str = "") -> Any:
        """Substitute the placeholders of `raw`, found at `path`.

        A value that is exactly one placeholder resolves to the referenced
        value itself, keeping its type.
        """
        return self._resolve_string(raw, normalize_path(path), ())

    def resolve(self, path: str | None = None) -> Any:
        """Resolve one path, or with no path the whole tree in place.

        The whole-tree form resolves every flattened entry against the tree
        as it was before the pass and only then writes the results back, so
        the outcome does not depend on entry order. The first failing entry
        aborts the pass with nothing written.
        """
        if path is not None:
            return self._resolve(path, ())

        resolved = {key: self._resolve(key, ()) for key in self.flatten()}
        with self._lock:
            for key, value in resolved.items():
                self.set(key, value)
        logger.debug("Resolved %d config entries", len(resolved))
        return resolved

    def path(self, sub_path: str) -> Config:
        """A store over a copy of the subtree at `sub_path`, falling back to this one.

        The subtree must be a mapping; sequences and scalars raise `ConfigError`.
        """
        subtree = self.get(sub_path)
        if not isinstance(subtree, Mapping):
            msg = f"Config at {sub_path!r} is not a mapping"
            raise ConfigError(msg)
        return Config(subtree, left=self.delimiters.left, right=self.delimiters.right, strict=self.strict, parent=self)

    def create(self, data: Mapping[str, Any] | None = None) -> Config:
        return Config(data, left=self.delimiters.left, right=self.delimiters.right, strict=self.strict)

    def extend(self, data: Mapping[str, Any] | Config) -> Config:
        """Overlay every leaf of `data`; siblings of overwritten leaves are kept."""
        if isinstance(data, Config):
            data = data.data
        with self._lock:
            for key, value in self.flatten(data).items():
                self.set(key, value)
        return self

    def __getitem__(self, path: str) -> Any:
        value = self._find(split_path(path))
        if value is _MISSING:
            raise MissingConfigError(normalize_path(path))
        return value

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.has(path)

    def __repr__(self) -> str:
        return f"Config({self.data!r})"

    def _find(self, parts: list[Segment]) -> Any:
        value = _walk(self.data, parts)
        if value is _MISSING and self.parent is not None:
            return self.parent._find(parts)  # noqa: SLF001
        return value

    def _store(self, parts: list[Segment], value: Any) -> None:
        *parent_parts, current = parts
        container = _walk(self.data, parent_parts)
        if not isinstance(container, (dict, list)):
            container = [] if current == 0 and not isinstance(current, bool) else {}
            self._store(parent_parts, container)

        if isinstance(container, dict):
            container[str(current)] = value
        elif isinstance(current, int) and current < len(container):
            container[current] = value
        elif isinstance(current, int) and current == len(container):
            container.append(value)
        else:
            # no sparse sequences: re-key the existing entries by index
            converted = {str(i): item for i, item in enumerate(container)}
            converted[str(current)] = value
            self._store(parent_parts, converted)

    def _resolve(self, path: str, chain: tuple[str, ...]) -> Any:
        canonical = normalize_path(path)
        if canonical in chain:
            raise CircularDependencyError([*chain, canonical])
        chain = (*chain, canonical)

        value = self.get(path)
        if isinstance(value, str):
            return self._resolve_string(value, canonical, chain)
        if isinstance(value, Mapping):
            return {key: self._resolve(join_path(canonical, key), chain) for key in value}
        if isinstance(value, list):
            return [self._resolve(join_path(canonical, i), chain) for i in range(len(value))]
        return value

    def _resolve_string(self, raw: str, path: str, chain: tuple[str, ...]) -> Any:
        template = compile_template(raw, self.delimiters.left, self.delimiters.right)
        if template.single_key is not None:
            return self._resolve(self._relative(template.single_key, path), chain)

        values = {key: self._resolve(self._relative(key, path), chain) for key in template.keys}
        return template.render(values)

    def _relative(self, key: str, path: str) -> str:
        if not key.startswith(SELF_MARKER):
            return key
        rest = key[len(SELF_MARKER) :]
        parent = ".".join(str(part) for part in split_path(path)[:-1])
        return f"{parent}.{rest}" if parent else rest


def _is_structured(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _items(value: Any) -> list[tuple[Segment, Any]]:
    if isinstance(value, Mapping):
        return list(value.items())
    return list(enumerate(value))


def _walk(node: Any, parts: list[Segment]) -> Any:
    for part in parts:
        if isinstance(node, Mapping):
            if part in node:
                node = node[part]
            elif isinstance(part, int) and str(part) in node:
                node = node[str(part)]
            else:
                return _MISSING
        elif isinstance(node, (list, tuple)) and isinstance(part, int) and part < len(node):
            node = node[part]
        else:
            return _MISSING
    return node


def _flatten_into(flat: dict[str, Any], prefix: str, node: Any) -> None:
    if not _is_structured(node):
        return
    for key, child in _items(node):
        child_path = join_path(prefix, key)
        nested = isinstance(child, Mapping) or (isinstance(child, (list, tuple)) and len(child) > 0)
        if nested and _SIMPLE_KEY.match(str(key)):
            _flatten_into(flat, child_path, child)
        else:
            flat[child_path] = child
