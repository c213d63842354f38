"""
The fixed MCP method catalog.

Methods under the ``notifications/`` prefix are one-way notifications; everything
else is a request that expects a response.
"""
from enum import Enum

NOTIFICATION_PREFIX = "notifications/"


class MCPMethod(str, Enum):
    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    PING = "ping"
    PONG = "pong"

    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"

    RESOURCES_LIST = "resources/list"
    RESOURCES_READ = "resources/read"
    RESOURCES_SUBSCRIBE = "resources/subscribe"
    RESOURCES_UNSUBSCRIBE = "resources/unsubscribe"

    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"

    SAMPLES_LIST = "samples/list"
    SAMPLES_GET = "samples/get"

    LOGGING_SET_LEVEL = "logging/setLevel"

    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    NOTIFICATIONS_TOOLS_LIST_CHANGED = "notifications/tools/list_changed"
    NOTIFICATIONS_RESOURCES_LIST_CHANGED = "notifications/resources/list_changed"
    NOTIFICATIONS_PROMPTS_LIST_CHANGED = "notifications/prompts/list_changed"
    NOTIFICATIONS_SAMPLES_LIST_CHANGED = "notifications/samples/list_changed"


def all_methods() -> list[str]:
    return [m.value for m in MCPMethod]


def is_known_method(method: str) -> bool:
    return method in _KNOWN


def is_notification(method: str) -> bool:
    return method.startswith(NOTIFICATION_PREFIX)


def is_request(method: str) -> bool:
    return not is_notification(method)


_KNOWN = frozenset(all_methods())
