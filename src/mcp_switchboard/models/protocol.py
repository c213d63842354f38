"""
JSON-RPC request and response envelopes.
"""
from typing import Any

from pydantic import Field

from .common import BasePydanticModel

JSONRPC_VERSION = "2.0"


class ProtocolRequest(BasePydanticModel):
    method: str
    params: dict[str, Any] = Field(default_factory=dict)
    id: int | str

    def to_payload(self) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }


class ProtocolResponse(BasePydanticModel):
    """
    One parsed JSON-RPC reply. `data` is the raw payload; an explicitly supplied
    `id` takes precedence over the id embedded in the payload.
    """
    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    data: dict[str, Any]
    id: int | str | None = None

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "ProtocolResponse":
        return cls(data=data)

    def is_error(self) -> bool:
        return isinstance(self.data.get("error"), dict)

    def is_success(self) -> bool:
        return not self.is_error() and "result" in self.data

    def get_result(self) -> Any:
        return self.data.get("result")

    def get_error(self) -> dict[str, Any] | None:
        error = self.data.get("error")
        return error if isinstance(error, dict) else None

    def get_error_code(self) -> int | None:
        error = self.get_error()
        return error.get("code") if error else None

    def get_error_message(self) -> str | None:
        error = self.get_error()
        return error.get("message") if error else None

    def get_id(self) -> int | str | None:
        if self.id is not None:
            return self.id
        return self.data.get("id")

    def get_jsonrpc_version(self) -> str:
        return self.data.get("jsonrpc", JSONRPC_VERSION)
