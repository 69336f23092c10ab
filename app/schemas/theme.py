"""Theme schemas for API validation."""

from pydantic import BaseModel


class ThemeBase(BaseModel):
    """Base theme schema."""
    name: str
    order_index: int = 0


class ThemeResponse(ThemeBase):
    """Schema for theme response."""
    id: str

    class Config:
        from_attributes = True
