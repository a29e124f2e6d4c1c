from pydantic import BaseModel, Field


class RecommendationQuery(BaseModel):
    query: str = Field(examples=["Weekend trip ideas near Lisbon"])
