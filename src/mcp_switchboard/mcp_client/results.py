"""
Per-server outcome of a fan-out operation.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import MCPClientError

T = TypeVar("T")


@dataclass(frozen=True)
class ServerResult(Generic[T]):
    server_id: str
    value: T | None = None
    error: MCPClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Returns the value, or raises the captured error."""
        if self.error is not None:
            raise self.error
        return self.value # type: ignore[return-value]
