# covergen/features/platforms/schemas.py
from typing import List, Literal
from pydantic import BaseModel, Field

PlatformCategory = Literal["social", "ecommerce", "content"]


class Dimensions(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class Platform(BaseModel):
    id: str
    name: str
    description: str = ""
    aspect_ratio: str = Field(..., pattern=r"^\d+(\.\d+)?:\d+(\.\d+)?$")
    dimensions: Dimensions
    max_file_size: int = Field(..., gt=0, description="bytes")
    supported_formats: List[str]
    category: PlatformCategory
