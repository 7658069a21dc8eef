# covergen/features/moderate/schemas.py
from typing import Dict, Optional
from pydantic import BaseModel, Field

CATEGORIES = (
    "sexual",
    "hate",
    "harassment",
    "self_harm",
    "sexual_minors",
    "hate_threatening",
    "violence_graphic",
    "self_harm_intent",
    "self_harm_instructions",
    "harassment_threatening",
    "violence",
)


class ModerationResult(BaseModel):
    flagged: bool
    categories: Dict[str, bool]
    category_scores: Dict[str, float] = {}
    reason: Optional[str] = None


class ModerateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    batch: bool = False
    strict: bool = False
