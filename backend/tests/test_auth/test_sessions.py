"""Tests for the in-memory session store."""

import uuid
from datetime import timedelta

from havenstay.auth.sessions import InMemorySessionStore


class TestInMemorySessionStore:
    async def test_create_and_resolve(self):
        store = InMemorySessionStore(timedelta(hours=1))
        user_id = uuid.uuid4()
        token = await store.create(user_id)
        assert await store.get(token) == user_id

    async def test_tokens_are_unique(self):
        store = InMemorySessionStore(timedelta(hours=1))
        user_id = uuid.uuid4()
        assert await store.create(user_id) != await store.create(user_id)

    async def test_unknown_token(self):
        store = InMemorySessionStore(timedelta(hours=1))
        assert await store.get("nope") is None

    async def test_destroy(self):
        store = InMemorySessionStore(timedelta(hours=1))
        token = await store.create(uuid.uuid4())
        await store.destroy(token)
        assert await store.get(token) is None
        # Destroying twice is harmless
        await store.destroy(token)

    async def test_expired_session_is_dropped(self):
        store = InMemorySessionStore(timedelta(seconds=-1))
        token = await store.create(uuid.uuid4())
        assert await store.get(token) is None
        assert len(store) == 0

    async def test_get_slides_expiry(self):
        store = InMemorySessionStore(timedelta(hours=1))
        token = await store.create(uuid.uuid4())
        _, first_expiry = store._sessions[token]
        await store.get(token)
        _, second_expiry = store._sessions[token]
        assert second_expiry >= first_expiry
