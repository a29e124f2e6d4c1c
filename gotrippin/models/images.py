from pydantic import BaseModel, ConfigDict, Field


class TrackDownload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    downloadUrl: str = Field(min_length=1)
