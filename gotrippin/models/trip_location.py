from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID

from gotrippin.services.utils import Utils

utils = Utils()


class CreateTripLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location_name: str = Field(examples=["Paris, France"])
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    order_index: int | None = Field(default=None, gt=0, description="Auto-assigned if not provided")
    arrival_date: str | None = None
    departure_date: str | None = None

    @field_validator("arrival_date", "departure_date")
    def check_iso_date(cls, v):
        if v is not None:
            return utils.validate_iso8601(v)
        return v


class UpdateTripLocation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location_name: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    order_index: int | None = Field(default=None, gt=0)
    arrival_date: str | None = None
    departure_date: str | None = None

    @field_validator("arrival_date", "departure_date")
    def check_iso_date(cls, v):
        if v is not None:
            return utils.validate_iso8601(v)
        return v


class ReorderLocations(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location_ids: list[UUID] = Field(min_length=1, description="Location IDs in the new order")

    @field_validator("location_ids")
    def check_uuid_v4(cls, v):
        for location_id in v:
            if location_id.version != 4:
                raise ValueError("each value in location_ids must be a UUID")
        if len(set(v)) != len(v):
            raise ValueError("location_ids must not contain duplicates")
        return v
