"""Named-component dependency injection with templated configuration.

This package resolves a registry of named component descriptors into live
objects on demand, and provides a hierarchical configuration store whose
string values may reference other paths through placeholders.

Exports:
- `Injector`: Async resolver over a `Registry`; memoizes loaders, runs
  factories per call, detects cycles and de-duplicates concurrent resolutions.
  `create_scope()` returns a child injector falling back to its parent.
- `Held`, `Loader`, `Factory`, `Ref`: The accepted registration shapes.
- `Component`: Base class with `initialize`/`destroy` lifecycle hooks.
- `Config`: Path-addressed configuration with `{path}` placeholders.
- `compile_template`: Compiles a placeholder string into a reusable `Template`.
"""

from ._component import Component
from ._config import Config, Delimiters
from ._descriptors import (
    META_KEY,
    ComponentDescriptor,
    Factory,
    Held,
    Kind,
    Loader,
    Ref,
    ResolutionMeta,
    dependency_names,
)
from ._errors import (
    CircularDependencyError,
    ConfigError,
    MethodNotFoundError,
    MissingConfigError,
    RegistrationError,
    ResolutionError,
    UnresolvedComponentError,
    WirekitError,
)
from ._events import EventEmitter, Events
from ._injector import Injector
from ._registry import Registry
from ._template import Template, compile_template


__all__ = [
    "META_KEY",
    "CircularDependencyError",
    "Component",
    "ComponentDescriptor",
    "Config",
    "ConfigError",
    "Delimiters",
    "EventEmitter",
    "Events",
    "Factory",
    "Held",
    "Injector",
    "Kind",
    "Loader",
    "MethodNotFoundError",
    "MissingConfigError",
    "Ref",
    "RegistrationError",
    "Registry",
    "ResolutionError",
    "ResolutionMeta",
    "Template",
    "UnresolvedComponentError",
    "WirekitError",
    "compile_template",
    "dependency_names",
]
