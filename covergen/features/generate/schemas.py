# covergen/features/generate/schemas.py
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

JobStatus = Literal["pending", "processing", "completed", "failed"]


class Customizations(BaseModel):
    background_color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    text_color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class GenerateCoverRequest(BaseModel):
    text: str = Field(..., min_length=10, max_length=10000)
    platforms: List[str] = Field(..., min_length=1, max_length=10)
    style_template: str = Field(..., min_length=1)
    model_id: Optional[str] = None
    visual_style_id: Optional[str] = None
    customizations: Optional[Customizations] = None

    @field_validator("platforms")
    @classmethod
    def _no_duplicates(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("Duplicate platforms are not allowed")
        return v


class PlatformResult(BaseModel):
    platform_id: str
    status: Literal["completed", "failed"]
    id: Optional[str] = None
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    title: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class JobView(BaseModel):
    job_id: str
    status: JobStatus
    progress: int = Field(..., ge=0, le=100)
    step: Optional[str] = None
    results: List[PlatformResult] = []
    error: Optional[str] = None
    request: Dict[str, Any]
    created_at: datetime
    updated_at: datetime
    estimated_time_remaining: int = Field(0, description="milliseconds")
