"""
Per-server configuration.
"""
import base64
from typing import Any

from pydantic import Field, HttpUrl, field_validator

from .common import AuthType, BasePydanticModel

# Header names that carry credentials. When a token is configured, user-supplied
# headers with these names are dropped so exactly one credential header is sent.
AUTH_HEADER_NAMES = frozenset({"authorization", "x-api-key"})

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ServerConfig(BasePydanticModel):
    """Immutable configuration of one remote MCP endpoint."""

    model_config = {
        "extra": "ignore", # Config maps carry keys like health_check_interval that we don't use
        "frozen": True,
        "populate_by_name": True,
        "use_enum_values": False,
    }

    id: str = Field(..., min_length=1, description="Unique server identifier.")
    name: str = Field(..., description="Human-readable server name.")
    url: HttpUrl = Field(..., description="JSON-RPC endpoint the client POSTs to.")
    enabled: bool = True
    timeout: float = Field(default=30.0, gt=0, description="Hard per-call deadline in seconds.")
    auth_token: str | None = None
    auth_type: AuthType = AuthType.BEARER
    headers: dict[str, str] = Field(default_factory=dict)
    capabilities: list[str] = Field(default_factory=list, description="Capability kinds declared in configuration.")
    version: str | None = None
    description: str | None = None
    available_actions: list[str] = Field(default_factory=list)

    @field_validator("auth_type", mode="before")
    @classmethod
    def normalise_auth_type(cls, v: Any) -> Any:
        """Any value other than bearer/api_key/basic is treated as `other`."""
        if v is None:
            return AuthType.BEARER
        if isinstance(v, AuthType):
            return v
        try:
            return AuthType(str(v).lower())
        except ValueError:
            return AuthType.OTHER

    @classmethod
    def from_mapping(cls, server_id: str, data: dict[str, Any], default_timeout: float | None = None) -> "ServerConfig":
        """Builds a config from one entry of the `servers` configuration map."""
        values = dict(data)
        values["id"] = server_id
        values.setdefault("name", server_id)
        if values.get("timeout") is None and default_timeout is not None:
            values["timeout"] = default_timeout
        return cls.model_validate(values)

    def get_auth_headers(self) -> dict[str, str]:
        if not self.auth_token:
            return {}
        if self.auth_type == AuthType.BEARER:
            return {"Authorization": f"Bearer {self.auth_token}"}
        if self.auth_type == AuthType.API_KEY:
            return {"X-API-Key": self.auth_token}
        if self.auth_type == AuthType.BASIC:
            encoded = base64.b64encode(self.auth_token.encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {encoded}"}
        return {"Authorization": self.auth_token}

    def get_all_headers(self) -> dict[str, str]:
        """
        Union of the server's extra headers, the auth header and the fixed JSON
        headers. The latter two win over same-named extra headers, compared
        case-insensitively.
        """
        auth_headers = self.get_auth_headers()
        overriding = {name.lower() for name in (*auth_headers, *JSON_HEADERS)}
        if auth_headers:
            overriding |= AUTH_HEADER_NAMES

        merged = {name: value for name, value in self.headers.items() if name.lower() not in overriding}
        merged.update(auth_headers)
        merged.update(JSON_HEADERS)
        return merged
