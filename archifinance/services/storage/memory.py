"""
In-Memory Storage

Keeps serialized documents in a dict. Used by tests and by callers that
want the engine without touching disk. Documents are stored as JSON
strings so every load returns fresh records, like a real backend.
"""

import json
from pathlib import Path
from typing import Optional

from archifinance.models.firm import FirmSettings
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Project
from archifinance.services.storage.interface import (
    DatasetStorageInterface,
    StorageError,
)


class InMemoryStorage(DatasetStorageInterface):
    
    def __init__(
        self,
        projects: Optional[list[Project]] = None,
        general_fund: Optional[list[GeneralTransaction]] = None,
        settings: Optional[FirmSettings] = None,
    ):
        self.documents: dict[str, str] = {}
        self.exports: dict[str, str] = {}
        self.fail_writes = False
        if projects is not None:
            self.save_projects(projects)
        if general_fund is not None:
            self.save_general_fund(general_fund)
        if settings is not None:
            self.save_settings(settings)
    
    def load_projects(self) -> list[Project]:
        return [Project.model_validate(p) for p in self._load("projects", [])]
    
    def save_projects(self, projects: list[Project]) -> None:
        self._save("projects", [p.to_document() for p in projects])
    
    def load_general_fund(self) -> list[GeneralTransaction]:
        return [GeneralTransaction.model_validate(t) for t in self._load("general_fund", [])]
    
    def save_general_fund(self, transactions: list[GeneralTransaction]) -> None:
        self._save("general_fund", [t.to_document() for t in transactions])
    
    def load_settings(self) -> FirmSettings:
        data = self._load("settings", None)
        return FirmSettings.model_validate(data) if data is not None else FirmSettings()
    
    def save_settings(self, settings: FirmSettings) -> None:
        self._save("settings", settings.to_document())
    
    def write_export(self, filename: str, content: str) -> Path:
        if self.fail_writes:
            raise StorageError(f"Write refused: {filename}")
        self.exports[filename] = content
        return Path(filename)
    
    def _load(self, key: str, default):
        raw = self.documents.get(key)
        return json.loads(raw) if raw is not None else default
    
    def _save(self, key: str, document) -> None:
        if self.fail_writes:
            raise StorageError(f"Write refused: {key}")
        self.documents[key] = json.dumps(document, ensure_ascii=False)
