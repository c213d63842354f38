"""
Capability entries advertised by a server's listing methods.

Entries are frozen: the owning `server_id` is set when a listing is parsed and
never reassigned. A refreshed listing replaces the old entries wholesale.
"""
from typing import Any

from pydantic import Field

from .common import BasePydanticModel, CapabilityKind


class _CapabilityEntry(BasePydanticModel):
    model_config = {
        "extra": "ignore",
        "frozen": True,
        "populate_by_name": True,
        "use_enum_values": True,
    }

    server_id: str | None = Field(None, description="Id of the server that advertised this entry.")


class MCPTool(_CapabilityEntry):
    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")


class MCPResource(_CapabilityEntry):
    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = Field(None, alias="mimeType")


class MCPPrompt(_CapabilityEntry):
    name: str
    description: str | None = None
    arguments: list[dict[str, Any]] = Field(default_factory=list)


class MCPSample(_CapabilityEntry):
    name: str
    description: str | None = None
    arguments: list[dict[str, Any]] = Field(default_factory=list)


CapabilityEntry = MCPTool | MCPResource | MCPPrompt | MCPSample

ENTRY_MODELS: dict[CapabilityKind, type[_CapabilityEntry]] = {
    CapabilityKind.TOOLS: MCPTool,
    CapabilityKind.RESOURCES: MCPResource,
    CapabilityKind.PROMPTS: MCPPrompt,
    CapabilityKind.SAMPLES: MCPSample,
}


def parse_entries(kind: CapabilityKind, items: list[dict[str, Any]], server_id: str) -> tuple[CapabilityEntry, ...]:
    """Parses raw listing items into frozen entries tagged with `server_id`."""
    model = ENTRY_MODELS[kind]
    return tuple(model.model_validate({**item, "server_id": server_id}) for item in items)
