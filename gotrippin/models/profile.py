from pydantic import BaseModel, ConfigDict, field_validator
from typing import Literal

from gotrippin.services.utils import Utils

utils = Utils()


class UpdateProfile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    display_name: str | None = None
    avatar_color: str | None = None
    preferred_lng: Literal["en", "bg"] | None = None
    avatar_url: str | None = None

    @field_validator("avatar_color")
    def check_avatar_color(cls, v):
        if v is not None:
            return utils.validate_hex_color(v)
        return v

    @field_validator("avatar_url")
    def check_avatar_url(cls, v):
        if v is not None:
            return utils.validate_url(v)
        return v


class AvatarUploadRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content_type: Literal["image/jpeg", "image/png", "image/webp", "image/gif"]
    file_extension: str = "jpg"

    @field_validator("file_extension")
    def check_extension(cls, v):
        v = v.lstrip(".").lower()
        if not v.isalnum() or len(v) > 5:
            raise ValueError("Invalid file extension")
        return v
