# covergen/features/moderate/service.py
from __future__ import annotations

from typing import List, Optional, Tuple

from covergen.config import config
from covergen.lib.errors import ContentFlaggedError
from covergen.lib.openai_client import client
from covergen.logger import get_logger

from .schemas import CATEGORIES, ModerationResult

log = get_logger(__name__)

UNAVAILABLE_REASON = "Moderation service unavailable - content blocked for safety"

# categories that block content when strict mode is off
BLOCKING_CATEGORIES = (
    "sexual",
    "hate",
    "harassment",
    "sexual_minors",
    "violence_graphic",
    "self_harm_intent",
    "self_harm_instructions",
)

REWRITE_SYSTEM_PROMPT = (
    "You are a content moderator. Rewrite the following text to make it appropriate for all "
    "audiences while preserving the original meaning as much as possible. Do not include "
    "harmful, offensive, or inappropriate content."
)


def _blocked(reason: str) -> ModerationResult:
    return ModerationResult(
        flagged=True,
        categories={c: False for c in CATEGORIES},
        category_scores={},
        reason=reason,
    )


def moderate_text(text: str) -> ModerationResult:
    """OpenAI moderation for one text. Fails closed: API errors count as flagged."""
    try:
        resp = client.moderations.create(model=config.openai_moderation_model, input=text)
        r = resp.results[0]
        return ModerationResult(
            flagged=bool(r.flagged),
            categories={c: bool(getattr(r.categories, c, False) or False) for c in CATEGORIES},
            category_scores={c: float(getattr(r.category_scores, c, 0.0) or 0.0) for c in CATEGORIES},
        )
    except Exception as e:
        log.error(f"moderation call failed: {e}")
        return _blocked(UNAVAILABLE_REASON)


def flagged_reason(result: ModerationResult) -> Optional[str]:
    if not result.flagged:
        return None
    flagged = [c for c, hit in result.categories.items() if hit]
    return f"Content flagged for: {', '.join(flagged)}. {result.reason or ''}".strip()


def is_content_safe(text: str) -> Tuple[bool, Optional[str]]:
    result = moderate_text(text)
    return not result.flagged, flagged_reason(result)


def moderate_batch(texts: List[str]) -> List[ModerationResult]:
    return [moderate_text(t) for t in texts]


def is_blocking(result: ModerationResult, strict: bool = False) -> bool:
    if strict:
        return result.flagged
    return any(result.categories.get(c) for c in BLOCKING_CATEGORIES)


def generate_safe_alternative(text: str) -> str:
    """Ask the LLM for a clean rewrite; returns the original text if anything goes wrong."""
    try:
        resp = client.chat.completions.create(
            model=config.openai_text_model,
            temperature=0.7,
            max_tokens=500,
            messages=[
                {"role": "system", "content": REWRITE_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
        )
        alternative = (resp.choices[0].message.content or "").strip()
        if not alternative:
            raise ValueError("empty rewrite")
        if moderate_text(alternative).flagged:
            raise ValueError("rewrite is still flagged")
        return alternative
    except Exception as e:
        log.warning(f"safe alternative failed: {e}")
        return text


def enforce(text: str, *, strict: Optional[bool] = None) -> ModerationResult:
    """Block mode: raise ContentFlaggedError when `text` should not be processed."""
    strict = config.content_moderation_strict if strict is None else strict
    result = moderate_text(text)
    if is_blocking(result, strict):
        log.info(f"content blocked: {flagged_reason(result)}")
        raise ContentFlaggedError(details={"reason": flagged_reason(result), "categories": result.categories})
    return result
