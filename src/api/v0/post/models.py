from pydantic import BaseModel, Field, field_validator
from datetime import datetime
import bleach


class PostCreate(BaseModel):
    """Request schema for creating a post"""
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=50000)
    category: str | None = Field(None, max_length=64)

    @field_validator("title", "content", "category")
    @classmethod
    def sanitize_text(cls, v: str | None) -> str | None:
        """Strip markup to prevent XSS"""
        if v:
            return bleach.clean(v, tags=[], strip=True)
        return v


class PostResponse(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    category: str | None = None
    author: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
