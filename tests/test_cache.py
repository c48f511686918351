from linkhub import extensions


class DictRedis:
    """Enough of the redis client surface for the plan-limits cache."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


class BrokenRedis:
    def get(self, key):
        raise ConnectionError("redis down")

    def setex(self, key, ttl, value):
        raise ConnectionError("redis down")

    def delete(self, *keys):
        raise ConnectionError("redis down")


def test_plan_limits_are_cached_per_tenant_and_invalidated_on_create(client, tenant, auth_headers):
    fake = DictRedis()
    extensions.redis_client = fake
    key = f"plan_limits:{tenant.id}"

    first = client.get("/api/auth/plan-limits", headers=auth_headers).get_json()["data"]
    assert first["currentLinks"] == 0
    assert key in fake.store
    assert fake.ttls[key] == 30

    client.post("/api/links", headers=auth_headers, json={"title": "Menu", "url": "https://m.test"})
    assert key not in fake.store

    second = client.get("/api/auth/plan-limits", headers=auth_headers).get_json()["data"]
    assert second["currentLinks"] == 1


def test_redis_failures_fall_back_to_database(client, tenant, auth_headers):
    extensions.redis_client = BrokenRedis()

    resp = client.get("/api/auth/plan-limits", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["maxLinks"] == 5

    assert client.post("/api/links", headers=auth_headers,
                       json={"title": "Menu", "url": "https://m.test"}).status_code == 201
