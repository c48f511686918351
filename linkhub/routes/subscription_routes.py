from flask import Blueprint, request

from ..services import payments
from ..utils.response import api_response
from .auth_routes import token_required

payments_bp = Blueprint("payments", __name__)


@payments_bp.route("/subscription", methods=["GET"])
@token_required
def get_subscription(current_user):
    sub = payments.get_subscription(current_user.id)
    return api_response(True, "Subscription fetched", payments.subscription_to_dict(sub))


@payments_bp.route("/create-order", methods=["POST"])
@token_required
def create_order(current_user):
    data = request.get_json(silent=True) or {}

    result = payments.create_order(
        current_user.id,
        data.get("planId"),
        data.get("billingCycle"),
        data.get("promoCode"),
    )
    message = "Subscribed without payment" if result.free else "Payment order created"
    return api_response(True, message, result.to_dict())


@payments_bp.route("/verify", methods=["POST"])
@token_required
def verify(current_user):
    data = request.get_json(silent=True) or {}

    result = payments.verify_payment(
        current_user.id,
        data.get("razorpayOrderId"),
        data.get("razorpayPaymentId"),
        data.get("razorpaySignature"),
        plan_id=data.get("planId"),
        billing_cycle=data.get("billingCycle"),
        promo_code=data.get("promoCode"),
    )
    return api_response(True, "Payment verified and subscription activated", result.to_dict())


@payments_bp.route("/cancel", methods=["POST"])
@token_required
def cancel(current_user):
    sub = payments.cancel_subscription(current_user.id)
    return api_response(True, "Subscription cancelled. You are now on the Free plan.",
                        payments.subscription_to_dict(sub))
