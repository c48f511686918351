from functools import wraps

import jwt
from flask import Blueprint, request

from ..extensions import db
from ..models.user import User
from ..utils.jwt_helper import decode_token
from ..utils.plan_checker import plan_limits_payload
from ..utils.response import api_response

auth_bp = Blueprint("auth", __name__)


def token_required(f):
    """Resolve the bearer token to the tenant and pass it as the first argument."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        if 'Authorization' in request.headers:
            auth_header = request.headers['Authorization']
            if " " in auth_header:
                token = auth_header.split(" ")[1]
            else:
                token = auth_header

        if not token:
            return api_response(False, "Token is missing!", None, 401)

        try:
            payload = decode_token(token)
        except jwt.ExpiredSignatureError:
            return api_response(False, "Token has expired!", None, 401)
        except jwt.InvalidTokenError:
            return api_response(False, "Invalid token!", None, 401)

        tenant_id = payload.get('tenant_id')
        if tenant_id is None:
            return api_response(False, "Invalid token!", None, 401)

        current_user = db.session.get(User, tenant_id)
        if not current_user:
            return api_response(False, "User not found!", None, 401)

        return f(current_user, *args, **kwargs)

    return decorated


@auth_bp.route('/plan-limits', methods=['GET'])
@token_required
def plan_limits(current_user):
    return api_response(True, "Plan limits fetched", plan_limits_payload(current_user.id))
