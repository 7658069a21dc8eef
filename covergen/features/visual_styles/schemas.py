# covergen/features/visual_styles/schemas.py
from typing import Literal
from pydantic import BaseModel

VisualStyleCategory = Literal["realistic", "illustration", "manga", "abstract"]


class VisualStyle(BaseModel):
    id: str
    name: str
    description: str
    preview: str
    category: VisualStyleCategory
    prompt_fragment: str
    is_recommended: bool = False
    sort_order: int = 999


class VisualStylePublic(BaseModel):
    """What the API exposes: everything except the prompt fragment."""
    id: str
    name: str
    description: str
    preview: str
    category: VisualStyleCategory
    is_recommended: bool = False
    sort_order: int = 999
