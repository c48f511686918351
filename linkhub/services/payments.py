import datetime
import uuid
from dataclasses import dataclass, field

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.order import Order
from ..models.subscription import BILLING_CYCLES, Subscription
from ..utils.errors import (
    ActivationFailed,
    GatewayNotConfigured,
    NotFound,
    OrderNotFound,
    OrderStateError,
    SignatureInvalid,
    ValidationError,
)
from ..utils.money import apply_discount, to_minor_units
from ..utils.plan_checker import invalidate_plan_limits
from . import promo_codes
from .plan_catalog import get_purchasable_plan
from .razorpay_client import RazorpayClient, verify_payment_signature

CYCLE_DAYS = {
    "monthly": 30,
    "yearly": 365,
}


@dataclass
class OrderResult:
    free: bool
    order_id: str | None = None
    amount: int = 0
    currency: str | None = None
    key_id: str | None = None
    plan_name: str | None = None
    subscription: Subscription | None = field(default=None, repr=False)

    def to_dict(self) -> dict:
        if self.free:
            return {
                "free": True,
                "subscription": subscription_to_dict(self.subscription),
            }
        return {
            "free": False,
            "orderId": self.order_id,
            "amount": self.amount,
            "currency": self.currency,
            "keyId": self.key_id,
            "planName": self.plan_name,
        }


@dataclass
class VerifyResult:
    subscription: Subscription
    already_verified: bool = False

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "subscription": subscription_to_dict(self.subscription),
        }


def normalize_cycle(billing_cycle) -> str:
    cycle = billing_cycle.strip().lower() if isinstance(billing_cycle, str) else ""
    if cycle not in BILLING_CYCLES:
        raise ValidationError("billingCycle must be 'monthly' or 'yearly'")
    return cycle


def period_end(billing_cycle: str, start: datetime.datetime) -> datetime.datetime:
    return start + datetime.timedelta(days=CYCLE_DAYS[billing_cycle])


def compute_amount(plan, billing_cycle: str, discount_percent=None, currency: str = "INR") -> int:
    """Order amount in minor units: cycle price, then the promo discount."""
    price = plan.yearly_price if billing_cycle == "yearly" else plan.monthly_price
    amount = to_minor_units(price, currency)
    if discount_percent:
        amount = apply_discount(amount, discount_percent)
    return amount


def upsert_subscription(tenant_id, plan_id, billing_cycle: str,
                        now: datetime.datetime | None = None) -> Subscription:
    """
    Point the tenant's single subscription row at plan/cycle, active from now.
    Caller commits.
    """
    now = now or datetime.datetime.utcnow()
    sub = Subscription.query.filter_by(tenant_id=tenant_id).first()
    if not sub:
        sub = Subscription(tenant_id=tenant_id, created_at=now)
        db.session.add(sub)

    sub.plan_id = plan_id
    sub.billing_cycle = billing_cycle
    sub.status = "active"
    sub.current_period_start = now
    sub.current_period_end = period_end(billing_cycle, now)
    sub.updated_at = now
    return sub


def subscription_to_dict(sub: Subscription | None, now: datetime.datetime | None = None) -> dict | None:
    if not sub:
        return None
    now = now or datetime.datetime.utcnow()
    status = sub.status
    if status == "active" and sub.current_period_end and sub.current_period_end <= now:
        status = "expired"
    plan = sub.plan
    return {
        "id": sub.id,
        "status": status,
        "billingCycle": sub.billing_cycle,
        "currentPeriodStart": sub.current_period_start.isoformat() if sub.current_period_start else None,
        "currentPeriodEnd": sub.current_period_end.isoformat() if sub.current_period_end else None,
        "planId": sub.plan_id,
        "planName": plan.name if plan else None,
        "planMonthlyPrice": str(plan.monthly_price) if plan else None,
        "planYearlyPrice": str(plan.yearly_price) if plan else None,
    }


def get_subscription(tenant_id) -> Subscription | None:
    return Subscription.query.filter_by(tenant_id=tenant_id).first()


def create_order(tenant_id, plan_id, billing_cycle, promo_code=None,
                 gateway: RazorpayClient | None = None) -> OrderResult:
    cycle = normalize_cycle(billing_cycle)
    plan = get_purchasable_plan(plan_id)
    currency = current_app.config.get("PAYMENT_CURRENCY", "INR")

    if promo_code is not None and not isinstance(promo_code, str):
        raise ValidationError("promoCode must be a string")

    quote = None
    if promo_code is not None and promo_code.strip():
        # an invalid code aborts checkout rather than charging full price
        quote = promo_codes.validate(promo_code)

    amount = compute_amount(plan, cycle, quote.discount_percent if quote else None, currency)

    if amount == 0:
        sub = upsert_subscription(tenant_id, plan.id, cycle)
        db.session.commit()
        invalidate_plan_limits(tenant_id)
        if quote:
            promo_codes.consume(quote.code)
        current_app.logger.info(f"Tenant {tenant_id} activated {plan.name} ({cycle}) without payment")
        return OrderResult(free=True, plan_name=plan.name, subscription=sub)

    gateway = gateway or RazorpayClient.from_config(current_app.config)
    receipt = f"rcpt_{uuid.uuid4().hex[:20]}"
    gateway_order = gateway.create_order(
        amount=amount,
        currency=currency,
        receipt=receipt,
        notes={
            "tenantId": str(tenant_id),
            "planId": str(plan.id),
            "billingCycle": cycle,
            "promoCode": quote.code if quote else "",
        },
    )

    order = Order(
        tenant_id=tenant_id,
        plan_id=plan.id,
        billing_cycle=cycle,
        promo_code=quote.code if quote else None,
        amount=amount,
        currency=gateway_order.get("currency", currency),
        gateway_order_id=gateway_order["id"],
        status="created",
    )
    db.session.add(order)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(
            f"Gateway order {gateway_order['id']} opened for tenant {tenant_id} but not stored: {e}"
        )
        raise

    current_app.logger.info(
        f"Created order {order.gateway_order_id} for tenant {tenant_id}: {plan.name} {cycle} {amount} {order.currency}"
    )
    return OrderResult(
        free=False,
        order_id=order.gateway_order_id,
        amount=gateway_order.get("amount", amount),
        currency=order.currency,
        key_id=gateway.key_id,
        plan_name=plan.name,
    )


def _check_matches_order(order: Order, plan_id, billing_cycle):
    if plan_id is not None and str(plan_id) != str(order.plan_id):
        raise ValidationError("Payment details do not match the order")
    if billing_cycle is not None and normalize_cycle(billing_cycle) != order.billing_cycle:
        raise ValidationError("Payment details do not match the order")


def _mark_failed(order: Order, reason: str):
    order.status = "failed"
    order.failure_reason = reason
    order.updated_at = datetime.datetime.utcnow()
    db.session.commit()


def _activate(order_pk: str, payment_id: str, signature: str) -> Subscription:
    """Mark the order verified and upsert the subscription in one transaction, with retries."""
    attempts = max(1, int(current_app.config.get("ACTIVATION_MAX_ATTEMPTS", 3)))
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            order = db.session.get(Order, order_pk)
            now = datetime.datetime.utcnow()
            order.status = "verified"
            order.gateway_payment_id = payment_id
            order.gateway_signature = signature
            order.failure_reason = None
            order.updated_at = now
            sub = upsert_subscription(order.tenant_id, order.plan_id, order.billing_cycle, now)
            db.session.commit()
            return sub
        except SQLAlchemyError as e:
            db.session.rollback()
            last_error = e
            current_app.logger.warning(
                f"Activation attempt {attempt}/{attempts} failed for order {order_pk}: {e}"
            )

    # Money has moved; leave the order in `created` with the payment reference for support.
    try:
        order = db.session.get(Order, order_pk)
        order.gateway_payment_id = payment_id
        order.gateway_signature = signature
        order.failure_reason = "activation_failed"
        order.updated_at = datetime.datetime.utcnow()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Could not record payment {payment_id} on order {order_pk}: {e}")

    current_app.logger.critical(
        f"ACTIVATION FAILED: payment {payment_id} captured for order {order_pk} "
        f"but subscription was not activated: {last_error}"
    )
    raise ActivationFailed(payment_id)


def verify_payment(tenant_id, order_id, payment_id, signature, plan_id=None,
                   billing_cycle=None, promo_code=None) -> VerifyResult:
    if not all(isinstance(v, str) and v for v in (order_id, payment_id, signature)):
        raise ValidationError("razorpayOrderId, razorpayPaymentId and razorpaySignature are required")
    if promo_code is not None and not isinstance(promo_code, str):
        raise ValidationError("promoCode must be a string")

    order = Order.query.filter_by(gateway_order_id=order_id, tenant_id=tenant_id).first()
    if not order:
        raise OrderNotFound()
    _check_matches_order(order, plan_id, billing_cycle)

    if order.status == "failed":
        raise OrderStateError()

    secret = current_app.config.get("RAZORPAY_KEY_SECRET")
    if not secret:
        raise GatewayNotConfigured()

    if not verify_payment_signature(order_id, payment_id, signature, secret):
        current_app.logger.warning(f"Signature mismatch for order {order_id} (tenant {tenant_id})")
        if order.status == "created":
            _mark_failed(order, "signature_mismatch")
        raise SignatureInvalid()

    if order.status == "verified":
        # duplicate submit of an already settled receipt
        return VerifyResult(subscription=get_subscription(tenant_id), already_verified=True)

    if promo_code and promo_codes.normalize_code(promo_code) != (order.promo_code or ""):
        current_app.logger.warning(
            f"Promo code on verify for order {order_id} differs from checkout; using the order's"
        )

    sub = _activate(order.id, payment_id, signature)
    invalidate_plan_limits(tenant_id)

    if order.promo_code:
        promo_codes.consume(order.promo_code)

    current_app.logger.info(f"Verified order {order_id}; tenant {tenant_id} subscription active")
    return VerifyResult(subscription=sub)


def cancel_subscription(tenant_id) -> Subscription:
    sub = get_subscription(tenant_id)
    if not sub or sub.status != "active":
        raise NotFound("No active subscription to cancel")

    sub.status = "cancelled"
    sub.updated_at = datetime.datetime.utcnow()
    db.session.commit()
    invalidate_plan_limits(tenant_id)
    current_app.logger.info(f"Tenant {tenant_id} cancelled subscription {sub.id}")
    return sub
