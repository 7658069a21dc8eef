# covergen/features/creative_director/schemas.py
from typing import List, Optional
from pydantic import BaseModel, Field


class TitleSuggestion(BaseModel):
    text: str
    confidence: float = Field(..., ge=0, le=1)


class DirectorOutput(BaseModel):
    full_text: str = Field(..., description="Plain-text brief with summary, titles and image prompt sections")
    title_suggestions: List[TitleSuggestion]
    provider: Optional[str] = None
    fallback: bool = False

    @property
    def best_title(self) -> Optional[str]:
        return self.title_suggestions[0].text if self.title_suggestions else None
