from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServerMode(str, Enum):
    default = "default"
    maintenance = "maintenance"


class MaintenanceResponseOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status_code: int = Field(..., alias="statusCode", ge=100, le=599)
    body: dict[str, Any]


class MaintenanceState(BaseModel):
    """Wire shape shared with the external store.

    Aliases match the documents other replicas read and write, so a state
    saved by one instance is picked up unchanged by the next refresh of another.
    """

    model_config = ConfigDict(populate_by_name=True)

    mode: ServerMode = Field(default=ServerMode.default, alias="currentServerMode")
    response_options: MaintenanceResponseOptions | None = Field(default=None, alias="maintenanceResponseOptions")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HealthResponse(BaseModel):
    status: str
    maintenance_mode: ServerMode
    store: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    request_id: str
