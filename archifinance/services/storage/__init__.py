"""
Storage Services Package

Provides the abstract document storage interface and its implementations:
JSON files on disk, and an in-memory store for tests.
"""

from archifinance.services.storage.interface import (
    DatasetStorageInterface,
    StorageError,
)
from archifinance.services.storage.json_files import JsonFileStorage
from archifinance.services.storage.memory import InMemoryStorage

__all__ = [
    # Interface
    "DatasetStorageInterface",
    # Exceptions
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
