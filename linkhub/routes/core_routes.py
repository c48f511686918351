from flask import Blueprint, request

from ..services.plan_catalog import list_active_plans, plan_to_dict
from ..services import promo_codes
from ..utils.response import api_response

core_bp = Blueprint("core", __name__)
pricing_bp = Blueprint("pricing", __name__)
promo_bp = Blueprint("promo_codes", __name__)


@core_bp.route("/health")
def health():
    return {"status": "ok"}, 200


@pricing_bp.route("/plans", methods=["GET"])
def plans():
    return api_response(True, "Plans fetched", [plan_to_dict(p) for p in list_active_plans()])


@promo_bp.route("/validate", methods=["POST"])
def validate_promo():
    data = request.get_json(silent=True) or {}
    quote = promo_codes.validate(data.get("code"))
    return api_response(True, "Promo code applied", quote.to_dict())
