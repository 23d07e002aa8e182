"""
Services Package

Outer-facing services: document storage, the backup codec, and the
server-sync pull.
"""

from archifinance.services.backup import (
    FULL_BACKUP_PREFIX,
    ImportKind,
    ImportPlan,
    backup_filename,
    build_backup,
    dumps_document,
    parse_import,
    project_filename,
    sanitize_filename,
)
from archifinance.services.storage import (
    DatasetStorageInterface,
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
)
from archifinance.services.sync import fetch_server_projects

__all__ = [
    # Backup codec
    "FULL_BACKUP_PREFIX",
    "ImportKind",
    "ImportPlan",
    "backup_filename",
    "build_backup",
    "dumps_document",
    "parse_import",
    "project_filename",
    "sanitize_filename",
    # Storage
    "DatasetStorageInterface",
    "InMemoryStorage",
    "JsonFileStorage",
    "StorageError",
    # Sync
    "fetch_server_projects",
]
