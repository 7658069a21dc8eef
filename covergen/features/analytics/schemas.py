# covergen/features/analytics/schemas.py
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ClientEvent(BaseModel):
    event: str = Field(..., min_length=1, max_length=100)
    properties: Optional[Dict[str, Any]] = None
    timestamp: Optional[float] = Field(None, description="client clock, epoch milliseconds")


class ClientSession(BaseModel):
    id: str = Field(..., min_length=1)
    duration: float = Field(..., ge=0)
    page_views: int = Field(..., ge=0)
    features_used: List[str] = []


class EventBatch(BaseModel):
    events: List[ClientEvent] = Field(..., max_length=100)
    session: Optional[ClientSession] = None


class TrackedEvent(BaseModel):
    event: str
    properties: Dict[str, Any]
    session_id: Optional[str] = None
    ip: Optional[str] = None
    timestamp: datetime
