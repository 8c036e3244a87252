"""Shared API dependencies — single import point for all routers.

Re-exports the storage and authentication dependencies so that router
modules can import everything they need from one place::

    from havenstay.api.deps import get_storage, require_host
"""

from havenstay.auth.dependencies import (
    get_optional_user,
    get_session_store,
    require_admin,
    require_authenticated,
    require_host,
)
from havenstay.storage.dependencies import get_storage

__all__ = [
    "get_storage",
    "get_session_store",
    "get_optional_user",
    "require_authenticated",
    "require_host",
    "require_admin",
]
