# covergen/features/account/service.py
from __future__ import annotations

from typing import Any, Dict, Optional

from covergen.features.payment.service import QUOTA_LIMITS
from covergen.lib.errors import RateLimitError
from covergen.lib.store import month_start, next_month_start, store
from covergen.logger import get_logger

log = get_logger(__name__)

COVER_GENERATION = "COVER_GENERATION"


def quota_for(user_id: str) -> Dict[str, Any]:
    sub = store.ensure_subscription(user_id)
    limit = QUOTA_LIMITS.get(sub.plan_type, QUOTA_LIMITS["FREE"])
    used = sum(r.quantity for r in store.usage_between(user_id, month_start(), type=COVER_GENERATION))
    remaining = -1 if limit == -1 else max(0, limit - used)
    return {
        "limit": limit,
        "used": used,
        "remaining": remaining,
        "reset_at": next_month_start(),
    }


def check_quota(user_id: str) -> Dict[str, Any]:
    """Raise 429 when the user's monthly generation quota is used up."""
    quota = quota_for(user_id)
    if quota["limit"] != -1 and quota["used"] >= quota["limit"]:
        log.info(f"quota exhausted for {user_id}: {quota['used']}/{quota['limit']}")
        raise RateLimitError(
            f"Monthly quota exceeded ({quota['used']}/{quota['limit']}). Please upgrade your plan.",
            code="QUOTA_EXCEEDED",
            details=quota,
        )
    return quota


def record_usage(user_id: str, type: str = COVER_GENERATION, quantity: int = 1, metadata: Optional[Dict[str, Any]] = None):
    if quantity <= 0:
        return None
    sub = store.ensure_subscription(user_id)
    rec = store.add_usage(user_id, sub.id, type, quantity, metadata or {})
    log.debug(f"usage recorded for {user_id}: {type} x{quantity}")
    return rec


def subscription_summary(user_id: str) -> Dict[str, Any]:
    sub = store.ensure_subscription(user_id)
    return {
        "subscription": {
            "id": sub.id,
            "plan_type": sub.plan_type,
            "status": sub.status,
            "billing_cycle": sub.billing_cycle,
            "current_period_end": sub.current_period_end,
        },
        "quota": quota_for(user_id),
    }


def usage_history(user_id: str, *, month: int = 0, limit: int = 50) -> Dict[str, Any]:
    start = month_start(offset=month)
    end = next_month_start(start)
    records = store.usage_between(user_id, start, end)[:limit]

    summary: Dict[str, int] = {}
    for r in records:
        summary[r.type] = summary.get(r.type, 0) + r.quantity

    return {
        "month": start.strftime("%Y-%m"),
        "start_date": start,
        "end_date": end,
        "records": [
            {
                "id": r.id,
                "type": r.type,
                "quantity": r.quantity,
                "metadata": r.metadata,
                "created_at": r.created_at,
            }
            for r in records
        ],
        "summary": summary,
        "total": len(records),
    }
