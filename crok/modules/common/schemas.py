"""Schemas shared across modules."""

from datetime import datetime

from pydantic import BaseModel, Field


class TimestampSchema(BaseModel):
    created_at: datetime = Field(description="Creation time")
    updated_at: datetime | None = Field(default=None, description="Last modification time")


class EditTimestampSchema(BaseModel):
    created_at: datetime = Field(description="Creation time, set once")
    last_edited_at: datetime = Field(description="Refreshed on every update")


class DataUriResponse(BaseModel):
    url: str = Field(description="Inline data URI")
