"""Record schemas."""
from pydantic import BaseModel, Field


class RecordCreate(BaseModel):
    """Request to create a record."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str | None = None


class RecordUpdate(BaseModel):
    """Partial update; an explicit null clears ``content``."""

    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = None


class RecordResponse(BaseModel):
    """Record response."""

    id: str
    title: str
    content: str | None
    created_at: str
    updated_at: str

    class Config:
        from_attributes = True
