# covergen/features/cache/schemas.py
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


class CacheSetRequest(BaseModel):
    key: str = Field(..., min_length=1)
    value: Any = None
    ttl: Optional[int] = Field(None, gt=0, description="seconds; preset TTL when omitted")


class CacheClearRequest(BaseModel):
    pattern: Optional[str] = None


class CacheWarmRequest(BaseModel):
    strategy: Literal["all", "templates", "patterns"] = "all"
