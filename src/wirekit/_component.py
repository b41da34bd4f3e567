from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ._injector import Injector


class Component:
    """Base class for components with lifecycle hooks.

    Subclasses may declare `__deps__`, a mapping of attribute name to
    component name; those are resolved and set on the instance before
    `initialize` runs. Override `initialize`/`destroy` as coroutines.

    Example:
      class Mailer(Component):
          __deps__ = {"transport": "smtp"}

          def __init__(self, config):
              self.config = config

          async def initialize(self):
              await self.transport.connect()
    """

    __deps__: ClassVar[Mapping[str, str]] = {}

    async def _initialize(
        self,
        injector: Injector,
        extra: Mapping[str, Any] | None = None,
        path: Sequence[str] = (),
    ) -> None:
        for attr, component_name in self.__deps__.items():
            setattr(self, attr, await injector.resolve(component_name, extra, path))

        await self.initialize()

    async def initialize(self) -> None:
        pass

    async def destroy(self) -> None:
        pass
