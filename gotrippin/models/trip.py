from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from uuid import UUID

from gotrippin.services.utils import Utils

utils = Utils()


class TripData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=200)
    destination: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: str | None = None
    end_date: str | None = None
    image_url: str | None = None
    cover_photo_id: UUID | None = None
    color: str | None = None
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("start_date", "end_date")
    def check_iso_date(cls, v):
        if v is not None:
            return utils.validate_iso8601(v)
        return v

    @field_validator("image_url")
    def check_image_url(cls, v):
        if v is not None:
            return utils.validate_url(v)
        return v

    @field_validator("color")
    def check_color(cls, v):
        if v is not None:
            return utils.validate_hex_color(v)
        return v

    @model_validator(mode="after")
    def check_date_range(self):
        if utils.ends_before(self.start_date, self.end_date):
            raise ValueError("End date must be after or equal to start date")
        return self


class CreateTrip(TripData):
    pass


class UpdateTrip(TripData):
    pass


class AddMember(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: UUID = Field(description="User ID to add to the trip")

    @field_validator("user_id")
    def check_uuid_v4(cls, v):
        if v.version != 4:
            raise ValueError("User ID must be a valid UUID")
        return v
