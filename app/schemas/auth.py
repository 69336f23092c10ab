"""Access-code authentication schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class AccessCodeRequest(BaseModel):
    code: Optional[str] = Field(None, max_length=255)


class AuthOkResponse(BaseModel):
    ok: bool = True
