from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ._component import Component
from ._descriptors import (
    META_KEY,
    UNSET,
    Kind,
    ResolutionMeta,
    dependency_names,
    keyword_only_names,
    split_arguments,
)
from ._errors import (
    CircularDependencyError,
    MethodNotFoundError,
    ResolutionError,
    UnresolvedComponentError,
)
from ._events import EventEmitter, Events
from ._registry import Registry


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ._descriptors import ComponentDescriptor


class Injector(EventEmitter):
    """Resolves registered names into live instances.

    - loaders are instantiated once and memoized; factories run per call
    - circular chains fail on the first repeated name
    - concurrent resolutions of one name share a single in-flight task
    - names unknown locally are delegated to the parent injector, if any.
    """

    def __init__(self, parent: Injector | None = None, registry: Registry | None = None) -> None:
        super().__init__()
        self.parent = parent
        self.registry = registry if registry is not None else Registry()
        self._resolve_locks: dict[str, asyncio.Future[Any]] = {}

        for event in (Events.BEFORE_REGISTER, Events.AFTER_REGISTER):
            self.registry.on(event, functools.partial(self.emit_sync, event))

    def register(self, name: str, component: Any, is_held_object: bool = False) -> None:
        self.registry.register(name, component, is_held_object)

    def alias(self, alias_name: str, original_name: str) -> None:
        self.registry.alias(alias_name, original_name)

    def get_descriptor(self, name: str) -> ComponentDescriptor | None:
        return self.registry.get_descriptor(name)

    def get_component_names(self) -> list[str]:
        return self.registry.get_component_names()

    def create_scope(self) -> Injector:
        """Create an injector that prefers its own registrations, falls back to this one."""
        return Injector(parent=self)

    async def resolve(
        self,
        name: str,
        extra: Mapping[str, Any] | None = None,
        prev: Sequence[str] | None = None,
    ) -> Any:
        """Resolve `name` to an instance.

        `extra` pre-satisfies dependencies by name without a registry lookup.
        `prev` is the chain of names already being resolved by the caller.
        """
        path = list(prev or ())
        if name in path:
            path.append(name)
            raise CircularDependencyError(path)
        path.append(name)

        pending = self._resolve_locks.get(name)
        if pending is not None:
            logger.debug("Awaiting in-flight resolution of %r", name)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._resolve(name, extra, path))
        self._resolve_locks[name] = task
        try:
            return await task
        finally:
            if self._resolve_locks.get(name) is task:
                del self._resolve_locks[name]

    async def _resolve(self, name: str, extra: Mapping[str, Any] | None, path: list[str]) -> Any:
        await self.emit(Events.BEFORE_RESOLVE, name, extra, path)

        descriptor = self.registry.lookup(name)
        if descriptor is None:
            if self.parent is not None:
                return await self.parent.resolve(name, extra, path[:-1])
            raise UnresolvedComponentError(name, path)

        if descriptor.kind is Kind.REF:
            return await self.resolve(descriptor.ref, extra, path)

        scoped = dict(extra or {})
        scoped[META_KEY] = ResolutionMeta(name, _caller_name(scoped.get(META_KEY)))

        if descriptor.has_object:
            instance = descriptor.object
        else:
            deps = await self.dependencies(descriptor.deps, scoped, path)

            args, kwargs = split_arguments(deps, descriptor.keywords)
            if descriptor.kind is Kind.FACTORY:
                instance = await self._instantiate(descriptor.provider, args, kwargs, scoped, path)
            elif descriptor.kind is Kind.LOADER:
                instance = await self._instantiate(descriptor.provider, args, kwargs, scoped, path)
                if instance is None:
                    msg = f"Cannot resolve component {name!r}: loader produced no object"
                    raise ResolutionError(msg)
                descriptor.object = instance
                logger.debug("Instantiated component %r", name)
                await self.emit(Events.INSTANTIATE, name, instance)
            else:
                msg = f"Cannot resolve component {name!r}"
                raise ResolutionError(msg)

        await self.emit(Events.AFTER_RESOLVE, name, instance)
        return instance

    async def dependencies(
        self,
        names: Sequence[str],
        extra: Mapping[str, Any] | None = None,
        path: Sequence[str] = (),
    ) -> list[Any]:
        """Resolve `names` in order, taking values from `extra` where present."""
        extra = extra or {}
        resolved = []
        for name in names:
            if name in extra:
                resolved.append(extra[name])
            else:
                resolved.append(await self.resolve(name, extra, path))
        return resolved

    async def execute(self, fn: Callable[..., Any]) -> Any:
        """Call `fn` with its parameters resolved by name.

        Component subclasses are constructed and initialized instead.
        """
        deps = await self.dependencies(dependency_names(fn))
        args, kwargs = split_arguments(deps, keyword_only_names(fn))

        if inspect.isclass(fn) and issubclass(fn, Component):
            instance = fn(*args, **kwargs)
            await instance._initialize(self)  # noqa: SLF001
            return instance

        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def resolve_method(self, path: str) -> Callable[..., Any]:
        """Resolve `"component.method"` to the bound method of the resolved component."""
        component_name, _, method_name = path.partition(".")
        if not component_name or not method_name:
            msg = f"Invalid method path {path!r}, expected 'component.method'"
            raise MethodNotFoundError(msg)

        component = await self.resolve(component_name)
        method = getattr(component, method_name, None)
        if not callable(method):
            msg = f"Cannot find function {method_name!r} of component {component_name!r}"
            raise MethodNotFoundError(msg)
        return method

    async def shutdown(self) -> None:
        """Call `destroy` on instantiated components, most recently registered first.

        Memoized loader objects are dropped, so a later resolve instantiates afresh.
        """
        for descriptor in reversed(self.registry.memoized()):
            destroy = getattr(descriptor.object, "destroy", None)
            if callable(destroy):
                logger.debug("Destroying component %r", descriptor.name)
                result = destroy()
                if inspect.isawaitable(result):
                    await result
            if descriptor.kind is Kind.LOADER:
                descriptor.object = UNSET

    async def _instantiate(
        self,
        provider: Callable[..., Any],
        args: list[Any],
        kwargs: dict[str, Any],
        extra: Mapping[str, Any],
        path: Sequence[str],
    ) -> Any:
        if inspect.isclass(provider):
            instance = provider(*args, **kwargs)
            await self._run_initialize(instance, extra, path)
            return instance

        result = provider(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def _run_initialize(self, instance: Any, extra: Mapping[str, Any], path: Sequence[str]) -> None:
        if isinstance(instance, Component):
            await instance._initialize(self, extra, path)  # noqa: SLF001
            return

        hook = getattr(instance, "initialize", None)
        if callable(hook):
            result = hook()
            if inspect.isawaitable(result):
                await result


def _caller_name(meta: Any) -> str | None:
    if isinstance(meta, ResolutionMeta):
        return meta.name
    if isinstance(meta, Mapping):
        return meta.get("name")
    return None
