# covergen/features/payment/schemas.py
from typing import Literal, Optional
from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    plan_type: Optional[str] = None
    billing_cycle: Literal["monthly", "yearly"] = "monthly"


class CheckoutSession(BaseModel):
    session_id: str
    url: Optional[str] = None
