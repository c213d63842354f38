from enum import Enum

from pydantic import BaseModel


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }

class AuthType(str, Enum):
    BEARER = "bearer"
    API_KEY = "api_key"
    BASIC = "basic"
    OTHER = "other" # Token is sent verbatim in the Authorization header

class CapabilityKind(str, Enum):
    TOOLS = "tools"
    RESOURCES = "resources"
    PROMPTS = "prompts"
    SAMPLES = "samples"

    @property
    def list_method(self) -> str:
        return f"{self.value}/list"

    @property
    def result_key(self) -> str:
        # Listing results carry their items under the kind's own name, e.g. {"tools": [...]}
        return self.value

class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
