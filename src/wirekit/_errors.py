from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class WirekitError(Exception):
    pass


class RegistrationError(WirekitError, ValueError):
    pass


class ResolutionError(WirekitError, RuntimeError):
    pass


class CircularDependencyError(ResolutionError):
    """Raised on the first name that repeats along a resolution chain."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Circular dependency detected for {self.chain[-1]!r}: {'->'.join(self.chain)}")


class UnresolvedComponentError(ResolutionError, KeyError):
    def __init__(self, name: str, required_by: Sequence[str] = ()) -> None:
        self.name = name
        self.required_by = list(required_by)
        msg = f"Cannot resolve {name!r}: component not registered."
        if len(self.required_by) > 1:
            msg += f"\nrequired by: {'->'.join(self.required_by)}"
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return str(self.args[0])


class MethodNotFoundError(ResolutionError, AttributeError):
    pass


class ConfigError(WirekitError):
    pass


class MissingConfigError(ConfigError, KeyError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Cannot find config: {path}")

    def __str__(self) -> str:
        return str(self.args[0])
