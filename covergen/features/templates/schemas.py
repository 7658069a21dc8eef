# covergen/features/templates/schemas.py
from typing import Literal
from pydantic import BaseModel, Field

HEX = r"^#[0-9A-Fa-f]{6}$"
Layout = Literal["center", "top", "bottom", "left", "right"]
TemplateCategory = Literal["minimal", "bold", "elegant", "nature"]


class FontSize(BaseModel):
    title: int = Field(..., gt=0)
    subtitle: int = Field(..., gt=0)


class StyleTemplate(BaseModel):
    id: str
    name: str
    description: str
    preview: str
    background_color: str = Field(..., pattern=HEX)
    text_color: str = Field(..., pattern=HEX)
    accent_color: str = Field(..., pattern=HEX)
    font_family: str
    font_size: FontSize
    layout: Layout = "center"
    category: TemplateCategory
