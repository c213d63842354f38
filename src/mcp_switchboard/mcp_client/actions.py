"""
Fixed mapping from caller-facing action names to protocol methods.

Each action names a request method and a function that shapes the caller's
params into that method's params. The table is checked against the method
catalog when this module is imported.
"""
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..protocol.methods import MCPMethod, is_known_method, is_notification
from .exceptions import MCPProtocolError

ParamsShaper = Callable[[dict[str, Any]], dict[str, Any]]


@dataclass(frozen=True)
class ActionSpec:
    method: str
    shape: ParamsShaper


def _passthrough(params: dict[str, Any]) -> dict[str, Any]:
    return dict(params)

def _empty(params: dict[str, Any]) -> dict[str, Any]:
    # Listing methods accept an optional pagination cursor and nothing else
    return {"cursor": params["cursor"]} if params.get("cursor") else {}

def _named_call(params: dict[str, Any]) -> dict[str, Any]:
    if "name" not in params:
        raise MCPProtocolError("Missing required 'name' parameter.")
    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}
    elif not isinstance(arguments, Mapping):
        raise MCPProtocolError(f"Parameter 'arguments' must be an object, got {type(arguments).__name__}.")
    return {"name": params["name"], "arguments": dict(arguments)}

def _uri(params: dict[str, Any]) -> dict[str, Any]:
    if "uri" not in params:
        raise MCPProtocolError("Missing required 'uri' parameter.")
    return {"uri": params["uri"]}

def _log_level(params: dict[str, Any]) -> dict[str, Any]:
    if "level" not in params:
        raise MCPProtocolError("Missing required 'level' parameter.")
    return {"level": params["level"]}


ACTION_TABLE: Mapping[str, ActionSpec] = {
    "initialize": ActionSpec(MCPMethod.INITIALIZE.value, _passthrough),
    "ping": ActionSpec(MCPMethod.PING.value, _empty),
    "list_tools": ActionSpec(MCPMethod.TOOLS_LIST.value, _empty),
    "call": ActionSpec(MCPMethod.TOOLS_CALL.value, _named_call),
    "call_tool": ActionSpec(MCPMethod.TOOLS_CALL.value, _named_call),
    "list_resources": ActionSpec(MCPMethod.RESOURCES_LIST.value, _empty),
    "read_resource": ActionSpec(MCPMethod.RESOURCES_READ.value, _uri),
    "subscribe_resource": ActionSpec(MCPMethod.RESOURCES_SUBSCRIBE.value, _uri),
    "unsubscribe_resource": ActionSpec(MCPMethod.RESOURCES_UNSUBSCRIBE.value, _uri),
    "list_prompts": ActionSpec(MCPMethod.PROMPTS_LIST.value, _empty),
    "get_prompt": ActionSpec(MCPMethod.PROMPTS_GET.value, _named_call),
    "list_samples": ActionSpec(MCPMethod.SAMPLES_LIST.value, _empty),
    "get_sample": ActionSpec(MCPMethod.SAMPLES_GET.value, _named_call),
    "set_log_level": ActionSpec(MCPMethod.LOGGING_SET_LEVEL.value, _log_level),
}


def validate_action_table(table: Mapping[str, ActionSpec]) -> None:
    for action, spec in table.items():
        if not is_known_method(spec.method):
            raise ValueError(f"Action '{action}' maps to unknown MCP method '{spec.method}'.")
        if is_notification(spec.method):
            raise ValueError(f"Action '{action}' maps to notification '{spec.method}', which has no response.")


def resolve_action(action: str, params: dict[str, Any] | None = None) -> tuple[str, dict[str, Any]]:
    """
    Returns (method, params) for `action`.

    Table entries win; a request method name from the catalog is used verbatim;
    any other name is taken to be a tool and sent as ``tools/call``.
    """
    if params is None:
        params = {}
    elif not isinstance(params, Mapping):
        raise MCPProtocolError(f"Action params must be an object, got {type(params).__name__}.")
    params = dict(params)
    spec = ACTION_TABLE.get(action)
    if spec is not None:
        return spec.method, spec.shape(params)
    if is_notification(action):
        raise MCPProtocolError(f"'{action}' is a notification and cannot be executed as a request.")
    if is_known_method(action):
        return action, params
    return MCPMethod.TOOLS_CALL.value, {"name": action, "arguments": params}


validate_action_table(ACTION_TABLE)
