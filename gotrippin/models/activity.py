from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
import enum

from gotrippin.services.utils import Utils

utils = Utils()


class ActivityType(str, enum.Enum):
    FLIGHT = "flight"
    ACCOMMODATION = "accommodation"
    RESTAURANT = "restaurant"
    ATTRACTION = "attraction"
    TRANSPORT = "transport"
    CUSTOM = "custom"
    CAR_RENTAL = "car_rental"
    TRAIN = "train"
    BUS = "bus"
    FERRY = "ferry"
    MUSEUM = "museum"
    CONCERT = "concert"
    SHOPPING = "shopping"
    BEACH = "beach"
    HIKING = "hiking"
    OTHER = "other"


class CreateActivity(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location_id: UUID | None = None
    type: ActivityType = Field(default=ActivityType.CUSTOM)
    title: str = Field(max_length=255, examples=["Visit Eiffel Tower"])
    notes: str | None = Field(default=None, max_length=5000)
    start_time: str | None = None
    end_time: str | None = None
    all_day: bool = False
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = None

    @field_validator("start_time", "end_time")
    def check_iso_date(cls, v):
        if v is not None:
            return utils.validate_iso8601(v)
        return v


class UpdateActivity(BaseModel):
    model_config = ConfigDict(extra="forbid")

    location_id: UUID | None = None
    type: ActivityType | None = None
    title: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=5000)
    start_time: str | None = None
    end_time: str | None = None
    all_day: bool | None = None
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = None

    @field_validator("start_time", "end_time")
    def check_iso_date(cls, v):
        if v is not None:
            return utils.validate_iso8601(v)
        return v
