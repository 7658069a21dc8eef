# covergen/features/payment/service.py
from __future__ import annotations

from typing import Any, Dict

import stripe

from covergen.config import config, stripe_price_id
from covergen.lib.errors import AppError, ValidationError
from covergen.lib.store import Payment, User, new_id, period_end, store, utcnow
from covergen.logger import get_logger

log = get_logger(__name__)

PAID_PLANS = ("PRO", "ENTERPRISE")

# generations per calendar month; -1 = unlimited
QUOTA_LIMITS: Dict[str, int] = {
    "FREE": 10,
    "PRO": 1000,
    "ENTERPRISE": -1,
}


def _stripe() -> Any:
    if not config.stripe_secret_key:
        raise AppError("STRIPE_SECRET_KEY is not configured", code="PAYMENT_NOT_CONFIGURED")
    stripe.api_key = config.stripe_secret_key
    return stripe


def create_checkout(user: User, *, plan_type: str, billing_cycle: str = "monthly") -> Dict[str, str]:
    if not plan_type:
        raise ValidationError("plan_type is required", field="plan_type")
    if plan_type == "FREE":
        raise ValidationError("Cannot checkout for free plan", field="plan_type")
    if plan_type not in PAID_PLANS:
        raise ValidationError(f"Unknown plan: {plan_type}", field="plan_type")

    price_id = stripe_price_id(plan_type, billing_cycle)
    if not price_id:
        raise ValidationError("Invalid plan configuration", field="plan_type")

    client = _stripe()
    sub = store.ensure_subscription(user.id)
    if not sub.stripe_customer_id:
        customer = client.Customer.create(
            email=user.email,
            name=user.name,
            metadata={"user_id": user.id},
        )
        sub.stripe_customer_id = customer["id"]
        sub.updated_at = utcnow()
        log.info(f"created stripe customer {sub.stripe_customer_id} for {user.id}")

    session = client.checkout.Session.create(
        customer=sub.stripe_customer_id,
        mode="payment",
        payment_method_types=["card", "alipay"],
        line_items=[{"price": price_id, "quantity": 1}],
        success_url=f"{config.app_url}/payment/success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{config.app_url}/pricing",
        metadata={"user_id": user.id, "plan_type": plan_type, "billing_cycle": billing_cycle},
    )
    log.info(f"checkout session {session['id']} for {user.id}: {plan_type}/{billing_cycle}")
    return {"session_id": session["id"], "url": session["url"]}


def construct_event(payload: bytes, signature: str) -> Any:
    if not config.stripe_webhook_secret:
        raise AppError("Webhook secret not configured", code="PAYMENT_NOT_CONFIGURED")
    if not signature:
        raise ValidationError("Missing stripe-signature header")
    try:
        return stripe.Webhook.construct_event(payload, signature, config.stripe_webhook_secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        log.warning(f"webhook signature verification failed: {e}")
        raise ValidationError("Invalid signature")


def handle_event(event: Any) -> None:
    event_type = event["type"]
    obj = event["data"]["object"]
    log.info(f"stripe event {event_type}")

    if event_type == "checkout.session.completed":
        handle_checkout_completed(obj)
    elif event_type == "payment_intent.succeeded":
        log.info(f"payment succeeded: {obj.get('id')}")
    else:
        log.debug(f"unhandled stripe event {event_type}")


def handle_checkout_completed(session: Dict[str, Any]) -> None:
    meta = session.get("metadata") or {}
    user_id = meta.get("user_id")
    plan_type = meta.get("plan_type")
    billing_cycle = meta.get("billing_cycle") or "monthly"
    if not user_id or plan_type not in PAID_PLANS:
        log.warning(f"checkout session {session.get('id')} has no usable metadata, ignoring")
        return

    store.ensure_user(user_id)
    sub = store.ensure_subscription(user_id)
    now = utcnow()
    sub.plan_type = plan_type
    sub.status = "ACTIVE"
    sub.billing_cycle = billing_cycle
    sub.stripe_customer_id = session.get("customer") or sub.stripe_customer_id
    sub.current_period_start = now
    sub.current_period_end = period_end(now, billing_cycle)
    sub.updated_at = now

    store.add_payment(Payment(
        id=new_id(),
        user_id=user_id,
        stripe_session_id=session.get("id", ""),
        amount=int(session.get("amount_total") or 0),
        currency=session.get("currency") or "usd",
        status=session.get("payment_status") or "paid",
        plan_type=plan_type,
        billing_cycle=billing_cycle,
    ))
    log.info(f"{user_id} upgraded to {plan_type} until {sub.current_period_end.isoformat()}")
