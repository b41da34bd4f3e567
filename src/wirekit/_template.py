from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Mapping

ESCAPE = "\\"

# Characters allowed between the delimiters: path segments, brackets, `$`.
_KEY_CHARS = r"[$0-9_a-zA-Z.\[\]]+"


@dataclass(frozen=True)
class Placeholder:
    key: str


@dataclass(frozen=True)
class Template:
    """Compiled placeholder template.

    `segments` alternates literal text (`str`) and `Placeholder` entries in
    source order; adjacent literals are merged. `keys` lists the distinct
    placeholder keys in order of first appearance.
    """

    source: str
    segments: tuple[str | Placeholder, ...]
    keys: tuple[str, ...]

    def __call__(self, values: Mapping[str, Any] | None = None) -> str:
        return self.render(values)

    def render(self, values: Mapping[str, Any] | None = None) -> str:
        values = values or {}
        out = []
        for segment in self.segments:
            if isinstance(segment, Placeholder):
                value = values.get(segment.key)
                out.append("" if value is None else str(value))
            else:
                out.append(segment)
        return "".join(out)

    @property
    def single_key(self) -> str | None:
        """The key when the whole source is exactly one placeholder."""
        if len(self.segments) == 1 and isinstance(self.segments[0], Placeholder):
            return self.segments[0].key
        return None


@functools.lru_cache(maxsize=1024)
def _pattern(left: str, right: str) -> re.Pattern[str]:
    return re.compile(re.escape(left) + "(" + _KEY_CHARS + ")" + re.escape(right))


@functools.lru_cache(maxsize=4096)
def compile_template(source: str, left: str = "{", right: str = "}") -> Template:
    """Compile `source` into a `Template`.

    A placeholder directly preceded by a backslash stays literal; the
    backslash is dropped and the delimiters are kept.

    Example:
      >>> compile_template("{host}:{port}").render({"host": "db", "port": 5432})
      'db:5432'
      >>> compile_template("\\\\{host}").render({"host": "db"})
      '{host}'
    """
    segments: list[str | Placeholder] = []
    literal = ""
    last = 0

    for match in _pattern(left, right).finditer(source):
        preceding = source[last : match.start()]
        last = match.end()
        if preceding.endswith(ESCAPE):
            literal += preceding[: -len(ESCAPE)] + match.group(0)
            continue

        literal += preceding
        if literal:
            segments.append(literal)
            literal = ""
        segments.append(Placeholder(match.group(1)))

    literal += source[last:]
    if literal:
        segments.append(literal)

    keys = dict.fromkeys(s.key for s in segments if isinstance(s, Placeholder))
    return Template(source, tuple(segments), tuple(keys))
