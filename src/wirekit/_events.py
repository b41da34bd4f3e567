from __future__ import annotations

import inspect
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable


class Events(str, Enum):
    BEFORE_REGISTER = "before_register"
    AFTER_REGISTER = "after_register"
    BEFORE_RESOLVE = "before_resolve"
    AFTER_RESOLVE = "after_resolve"
    INSTANTIATE = "instantiate"


@dataclass
class _Listener:
    id: int
    handler: Callable[..., Any]
    once: bool


class EventEmitter:
    """Per-instance observer registry.

    Handlers receive the positional arguments passed to `emit`. A handler
    returning an awaitable is awaited before the next one runs.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = {}
        self._ids = itertools.count(1)

    def on(self, event: str, handler: Callable[..., Any], *, once: bool = False) -> int:
        listener = _Listener(next(self._ids), handler, once)
        self._listeners.setdefault(_key(event), []).append(listener)
        return listener.id

    def once(self, event: str, handler: Callable[..., Any]) -> int:
        return self.on(event, handler, once=True)

    def off(self, event: str, listener_id: int) -> None:
        key = _key(event)
        if key in self._listeners:
            self._listeners[key] = [item for item in self._listeners[key] if item.id != listener_id]

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(_key(event)))

    async def emit(self, event: str, *args: Any) -> None:
        for listener in self._take(event):
            result = listener.handler(*args)
            if inspect.isawaitable(result):
                await result

    def emit_sync(self, event: str, *args: Any) -> None:
        """Dispatch to synchronous handlers only."""
        for listener in self._take(event):
            result = listener.handler(*args)
            if inspect.isawaitable(result):
                if inspect.iscoroutine(result):
                    result.close()
                msg = f"Handler {listener.handler!r} for {_key(event)!r} returned an awaitable; this event is synchronous"
                raise TypeError(msg)

    def _take(self, event: str) -> list[_Listener]:
        key = _key(event)
        listeners = self._listeners.get(key)
        if not listeners:
            return []
        # once-handlers are dropped before dispatch so re-entrant emits skip them
        self._listeners[key] = [item for item in listeners if not item.once]
        return list(listeners)


def _key(event: str) -> str:
    return event.value if isinstance(event, Events) else event
