import json

from flask import current_app

from .. import extensions


def _key(tenant_id, resource: str) -> str:
    return f"{resource}:{tenant_id}"


def get_cached(tenant_id, resource: str):
    client = extensions.redis_client
    if not client:
        return None
    try:
        raw = client.get(_key(tenant_id, resource))
        return json.loads(raw) if raw else None
    except Exception as e:
        current_app.logger.warning(f"Redis read failed for {resource}:{tenant_id}: {e}")
        return None


def set_cached(tenant_id, resource: str, value, ttl: int | None = None):
    client = extensions.redis_client
    if not client:
        return
    ttl = ttl or int(current_app.config.get("REDIS_TTL", 3600))
    try:
        client.setex(_key(tenant_id, resource), ttl, json.dumps(value))
    except Exception as e:
        current_app.logger.warning(f"Redis write failed for {resource}:{tenant_id}: {e}")


def invalidate(tenant_id, *resources: str):
    client = extensions.redis_client
    if not client or not resources:
        return
    try:
        client.delete(*[_key(tenant_id, r) for r in resources])
    except Exception as e:
        current_app.logger.warning(f"Redis cleanup failed for tenant {tenant_id}: {e}")
