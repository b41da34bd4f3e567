from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._errors import RegistrationError


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

# Key under which the resolving component's metadata travels in `extra`.
META_KEY = "_meta"


class Kind(Enum):
    OBJECT = "object"
    LOADER = "loader"
    FACTORY = "factory"
    REF = "ref"


class _Unset:
    def __repr__(self) -> str:
        return "<unset>"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class ResolutionMeta:
    name: str
    caller: str | None = None


@dataclass(frozen=True)
class Held:
    """A pre-built value, returned as-is."""

    value: Any


@dataclass(frozen=True)
class Loader:
    """A provider invoked once; its product is memoized on the descriptor."""

    provider: Callable[..., Any]
    deps: Sequence[str] | None = None


@dataclass(frozen=True)
class Factory:
    """A provider invoked on every resolution."""

    provider: Callable[..., Any]
    deps: Sequence[str] | None = None


@dataclass(frozen=True)
class Ref:
    """Forwards resolution to another registered name."""

    target: str


Registration = Held | Loader | Factory | Ref


@dataclass
class ComponentDescriptor:
    name: str
    kind: Kind
    deps: tuple[str, ...] = ()
    provider: Callable[..., Any] | None = None
    object: Any = field(default=UNSET)
    ref: str | None = None
    # Trailing deps that the provider only accepts by keyword.
    keywords: tuple[str, ...] = ()

    @property
    def has_object(self) -> bool:
        return self.object is not UNSET


def _parameters(target: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError) as exc:
        logger.warning("Cannot inspect parameters of %r (%s); assuming no dependencies", target, exc)
        return []

    return [
        p
        for p in sig.parameters.values()
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def dependency_names(target: Callable[..., Any]) -> tuple[str, ...]:
    """Return the declared parameter names of a callable, in order.

    Classes are inspected through their constructor. Variadic parameters are
    skipped since they cannot be filled by name.
    """
    return tuple(p.name for p in _parameters(target))


def keyword_only_names(target: Callable[..., Any]) -> tuple[str, ...]:
    """The trailing part of `dependency_names` that must be passed by keyword."""
    return tuple(p.name for p in _parameters(target) if p.kind is inspect.Parameter.KEYWORD_ONLY)


def split_arguments(values: Sequence[Any], keywords: Sequence[str]) -> tuple[list[Any], dict[str, Any]]:
    """Split resolved values into positional arguments and trailing keyword arguments."""
    cut = len(values) - len(keywords)
    return list(values[:cut]), dict(zip(keywords, values[cut:]))


def coerce_registration(name: str, component: Any, *, is_held_object: bool = False) -> Registration:
    """Map the accepted registration shapes onto one of the tagged variants."""
    if is_held_object:
        return component if isinstance(component, Held) else Held(component)

    if isinstance(component, (Held, Loader, Factory, Ref)):
        return component

    if isinstance(component, Mapping):
        deps = component.get("deps")
        if callable(component.get("loader")):
            return Loader(component["loader"], deps)
        if callable(component.get("factory")):
            return Factory(component["factory"], deps)
        if isinstance(component.get("ref"), str):
            return Ref(component["ref"])
    elif callable(component):
        return Loader(component)

    msg = f"Cannot register component {name!r}: unsupported descriptor {component!r}"
    raise RegistrationError(msg)


def build_descriptor(name: str, component: Registration) -> ComponentDescriptor:
    if isinstance(component, Held):
        return ComponentDescriptor(name, Kind.OBJECT, object=component.value)

    if isinstance(component, Ref):
        return ComponentDescriptor(name, Kind.REF, ref=component.target)

    if not callable(component.provider):
        msg = f"Cannot register component {name!r}: provider {component.provider!r} is not callable"
        raise RegistrationError(msg)

    if component.deps:
        deps, keywords = tuple(component.deps), ()
    else:
        deps, keywords = dependency_names(component.provider), keyword_only_names(component.provider)
    for dep in deps:
        if not isinstance(dep, str):
            msg = f"Cannot register component {name!r}: dependency names must be strings, got {dep!r}"
            raise RegistrationError(msg)

    kind = Kind.LOADER if isinstance(component, Loader) else Kind.FACTORY
    return ComponentDescriptor(name, kind, deps=deps, provider=component.provider, keywords=keywords)
