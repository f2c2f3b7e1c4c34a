from pydantic import BaseModel, Field


class StatusUpdateIn(BaseModel):
    status: str = Field(min_length=1, max_length=30)
    reason: str | None = Field(default=None, max_length=2000)


class RejectIn(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)


class StatusUpdateOut(BaseModel):
    listing_id: str
    status: str
    previous_status: str
    changed: bool
    message: str
