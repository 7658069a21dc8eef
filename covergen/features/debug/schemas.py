# covergen/features/debug/schemas.py
from typing import Optional
from pydantic import BaseModel, Field


class PromptPreviewRequest(BaseModel):
    text: str = Field(..., min_length=10, max_length=10000)
    platform_id: str = "xiaohongshu"
    visual_style_id: Optional[str] = None
