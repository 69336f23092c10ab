"""Tag schemas for API validation."""

from typing import Optional

from pydantic import BaseModel, Field


class TagCreate(BaseModel):
    """Schema for creating a tag by hand."""
    name: Optional[str] = Field(None, max_length=100)
    color_code: Optional[str] = Field(None, pattern=r"^#[0-9a-fA-F]{3,8}$")


class TagResponse(BaseModel):
    """Schema for tag response."""
    id: str
    name: str
    color_code: Optional[str] = None

    class Config:
        from_attributes = True
