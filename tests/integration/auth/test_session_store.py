import json
from unittest.mock import AsyncMock

import pytest

from src.core.service.auth.cache.session_store import InMemorySessionStore, RedisSessionStore


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the session store"""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.mark.asyncio
async def test_memory_store_round_trip(identity):
    store = InMemorySessionStore()
    assert await store.read() is None

    await store.write(identity)
    assert await store.read() == identity

    await store.clear()
    assert await store.read() is None


@pytest.mark.asyncio
async def test_redis_store_writes_camel_case_json(fake_redis, identity):
    store = RedisSessionStore(fake_redis, key="test:user")
    await store.write(identity)

    stored = json.loads(fake_redis.data["test:user"])
    assert stored["phone"] == identity.phone
    assert stored["createdAt"] == "2023-12-01T09:00:00Z"
    assert stored["lastLogin"] == "2024-01-01T08:00:00Z"
    assert "password" not in stored


@pytest.mark.asyncio
async def test_redis_store_reads_identity_written_elsewhere(fake_redis):
    fake_redis.data["test:user"] = json.dumps({
        "id": "user-9",
        "phone": "+447700900123",
        "name": "Bob",
        "createdAt": "2023-11-01T00:00:00Z",
        "lastLogin": "2024-01-02T00:00:00Z"
    })
    store = RedisSessionStore(fake_redis, key="test:user")

    identity = await store.read()

    assert identity.id == "user-9"
    assert identity.last_login == "2024-01-02T00:00:00Z"


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["{not json", "[]", json.dumps({"name": "no id or phone"})])
async def test_unreadable_session_is_cleared(fake_redis, raw):
    fake_redis.data["test:user"] = raw
    store = RedisSessionStore(fake_redis, key="test:user")

    assert await store.read() is None
    assert "test:user" not in fake_redis.data


@pytest.mark.asyncio
async def test_redis_store_clear(fake_redis, identity):
    store = RedisSessionStore(fake_redis, key="test:user")
    await store.write(identity)

    await store.clear()

    assert await store.read() is None


@pytest.mark.asyncio
async def test_redis_errors_propagate():
    redis_client = AsyncMock()
    redis_client.get.side_effect = ConnectionError("redis down")
    store = RedisSessionStore(redis_client, key="test:user")

    with pytest.raises(ConnectionError):
        await store.read()
