from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GenerateOverrides(BaseModel):
    """Query parameters overriding the fields of a free-running identifier.

    Args:
        reserved (Optional[int]): Reserved bit(s), 0 by default.
        timestamp (Optional[int]): Time units since the variant's epoch, now by default.
        region (Optional[int]): Deployment region, the configured region by default.
        machine (Optional[int]): Machine identifier, the configured machine by default.
        precision (Optional[int]): 0 for seconds, 1 for milliseconds (jasmine only).
        sequence (Optional[int]): Sequence, the next shared counter value by default.
    """

    reserved: Optional[int] = Field(None, ge=0, description="Reserved bit(s)")
    timestamp: Optional[int] = Field(
        None, ge=0, description="Time units elapsed since the variant's epoch"
    )
    region: Optional[int] = Field(None, ge=0, description="Deployment region")
    machine: Optional[int] = Field(None, ge=0, description="Machine identifier")
    precision: Optional[int] = Field(
        None,
        ge=0,
        description="Time precision, 0 for seconds or 1 for milliseconds (jasmine only)",
    )
    sequence: Optional[int] = Field(None, ge=0, description="Intra-unit sequence")


class IDResponse(BaseModel):
    """Response model for a generated identifier.

    The identifier is rendered as decimal text so that 64-bit values survive
    JSON clients limited to 53-bit integers.
    """

    id: str = Field(..., description="Signed 64-bit identifier as decimal text")


class DecodedID(BaseModel):
    """Response model for a decoded identifier."""

    id: str = Field(..., description="Signed 64-bit identifier as decimal text")
    variant: str = Field(..., description="Layout the identifier was decoded with")
    fields: dict[str, int] = Field(..., description="Unpacked field values")
    creation_time: datetime = Field(
        ..., description="Instant encoded by the timestamp field (UTC)"
    )
