import datetime
import jwt
from flask import current_app


def encode_token(tenant_id: int, days: int = 7) -> str:
    """Sign a bearer token for a tenant. Issuing happens in the auth service; tests use this too."""
    payload = {
        "tenant_id": tenant_id,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=days),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def decode_token(token: str) -> dict:
    return jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
