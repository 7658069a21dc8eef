# covergen/features/community/schemas.py
from typing import Literal, Optional
from pydantic import BaseModel, Field

URL_PATTERN = r"^https?://\S+$"
SortBy = Literal["latest", "popular"]


class CreatePostRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    image_url: str = Field(..., pattern=URL_PATTERN)
    thumbnail_url: str = Field(..., pattern=URL_PATTERN)
    platform_id: str = Field(..., min_length=1)
    prompt: str = Field(..., min_length=1)


class CreateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
