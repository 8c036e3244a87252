"""Storage port and its adapters."""

from havenstay.storage.base import PropertyFilters, Storage
from havenstay.storage.memory import MemoryStorage
from havenstay.storage.sql import SqlStorage

__all__ = [
    "MemoryStorage",
    "PropertyFilters",
    "SqlStorage",
    "Storage",
]
