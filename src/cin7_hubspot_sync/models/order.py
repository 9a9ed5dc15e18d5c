"""Order records on both sides of the sync."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SourceOrder(BaseModel):
    """
    Raw sales order from Cin7.
    The response shape has changed over time, so the payload is kept as-is
    and attributes are looked up through candidate field lists.
    """

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] = Field(default_factory=dict)


class UpsertInput(BaseModel):
    """One HubSpot write: unique key value plus schema-filtered properties."""

    id: str = Field(..., description="Cin7 order id, stored in the unique property")
    properties: dict[str, Any] = Field(default_factory=dict)
