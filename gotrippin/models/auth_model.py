from pydantic import BaseModel, EmailStr, Field


class EmailPasswordRequestForm(BaseModel):
    email: EmailStr = Field(examples=["traveller@example.com"])
    password: str = Field(min_length=6, json_schema_extra={"format": "password"})
