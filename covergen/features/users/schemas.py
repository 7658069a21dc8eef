# covergen/features/users/schemas.py
from typing import Literal, Optional
from pydantic import BaseModel, Field

PostListType = Literal["posts", "liked"]


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = Field(None, pattern=r"^https?://\S+$")
