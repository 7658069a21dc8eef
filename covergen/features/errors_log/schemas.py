# covergen/features/errors_log/schemas.py
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class ClientErrorReport(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)
    stack: Optional[str] = Field(None, max_length=20000)
    url: Optional[str] = None
    user_agent: Optional[str] = None
    component: Optional[str] = None
    level: Literal["error", "warning", "info"] = "error"


class ClientErrorEntry(ClientErrorReport):
    id: str
    ip: str
    timestamp: datetime
