# covergen/features/payment/router.py
from fastapi import APIRouter, Depends, Header, Request

from covergen.lib.auth import require_user
from covergen.lib.rate_limit import rate_limit
from covergen.lib.responses import success
from covergen.lib.store import User
from .schemas import CheckoutRequest, CheckoutSession
from .service import construct_event, create_checkout, handle_event

router = APIRouter(prefix="/api/payment", tags=["payment"])


@router.post("/create-checkout", dependencies=[Depends(rate_limit("default"))])
async def create_checkout_endpoint(req: CheckoutRequest, user: User = Depends(require_user)):
    session = create_checkout(user, plan_type=req.plan_type, billing_cycle=req.billing_cycle)
    return success(CheckoutSession(**session))


@router.post("/webhook")
async def webhook_endpoint(request: Request, stripe_signature: str = Header(default="")):
    """Stripe calls this; the raw body is needed for signature verification."""
    payload = await request.body()
    event = construct_event(payload, stripe_signature)
    handle_event(event)
    return {"received": True}
