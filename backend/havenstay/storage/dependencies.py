"""FastAPI dependency yielding the request's :class:`Storage`."""

from collections.abc import AsyncIterator

from fastapi import Request

from havenstay.database import async_session_factory
from havenstay.storage.base import Storage
from havenstay.storage.sql import SqlStorage


async def get_storage(request: Request) -> AsyncIterator[Storage]:
    """Yield the storage adapter for one request.

    With the in-memory backend the shared instance on ``app.state`` is used.
    Otherwise a fresh SQL session is opened and rolled back on any error.
    Handlers that write call ``storage.commit()`` before returning, since
    the code after ``yield`` may only run once the response has gone out::

        @router.post("/items")
        async def create_item(storage: Storage = Depends(get_storage)):
            ...
            await storage.commit()
    """
    memory = getattr(request.app.state, "memory_storage", None)
    if memory is not None:
        yield memory
        return

    async with async_session_factory() as session:
        try:
            yield SqlStorage(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
