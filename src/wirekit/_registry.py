from __future__ import annotations

import dataclasses
import logging
import threading
from typing import TYPE_CHECKING, Any

from ._descriptors import Kind, Ref, build_descriptor, coerce_registration
from ._errors import RegistrationError
from ._events import EventEmitter, Events


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._descriptors import ComponentDescriptor


class Registry(EventEmitter):
    """Named component descriptors.

    - `register` validates the descriptor shape up front
    - registering an existing name replaces it entirely
    - `ref` descriptors must point at a name that is already registered.
    """

    def __init__(self) -> None:
        super().__init__()
        self._components: dict[str, ComponentDescriptor] = {}
        self._lock = threading.RLock()

    def register(self, name: str, component: Any, is_held_object: bool = False) -> None:
        """Register a component under `name`.

        Example:
          registry.register("settings", {"debug": True}, True)
          registry.register("db", create_db)
          registry.register("request", Factory(Request, deps=["db"]))
          registry.register("database", Ref("db"))

        """
        self.emit_sync(Events.BEFORE_REGISTER, name, component, is_held_object)

        tagged = coerce_registration(name, component, is_held_object=is_held_object)
        with self._lock:
            if isinstance(tagged, Ref) and tagged.target not in self._components:
                msg = f"Cannot register {name!r}: referenced component {tagged.target!r} not found"
                raise RegistrationError(msg)

            descriptor = build_descriptor(name, tagged)
            self._components[name] = descriptor

        logger.debug("Registered %s component %r (deps=%s)", descriptor.kind.value, name, list(descriptor.deps))
        self.emit_sync(Events.AFTER_REGISTER, name, self.get_descriptor(name))

    def alias(self, alias_name: str, original_name: str) -> None:
        if original_name not in self._components:
            msg = f"Cannot resolve alias {alias_name!r}: component {original_name!r} not found"
            raise RegistrationError(msg)
        self.register(alias_name, Ref(original_name))

    def get_descriptor(self, name: str) -> ComponentDescriptor | None:
        descriptor = self._components.get(name)
        return dataclasses.replace(descriptor) if descriptor is not None else None

    def get_component_names(self) -> list[str]:
        return list(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def lookup(self, name: str) -> ComponentDescriptor | None:
        """Live descriptor (not a copy); the injector memoizes loader objects on it."""
        return self._components.get(name)

    def memoized(self) -> list[ComponentDescriptor]:
        with self._lock:
            return [d for d in self._components.values() if d.kind is not Kind.REF and d.has_object]
