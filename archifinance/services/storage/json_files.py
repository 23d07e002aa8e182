"""
JSON File Storage Implementation

Each document is a plain JSON file in the data directory, written exactly
as the records serialize (original key names, pretty-printed), so the
files stay readable and interchangeable with exported backups.

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so a reader never sees a half-written document.

Older documents are migrated on load:
- projects without projectTypes get them from the legacy projectType
- settings without projectTypes / transactionCategories get the defaults
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from archifinance.config import StorageSettings, get_settings
from archifinance.models.firm import FirmSettings
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Project
from archifinance.services.backup import dumps_document
from archifinance.services.storage.interface import (
    DatasetStorageInterface,
    StorageError,
)
from archifinance.tracking.logger import get_logger


class JsonFileStorage(DatasetStorageInterface):
    """Documents stored as JSON files under the configured data directory."""
    
    def __init__(self, settings: Optional[StorageSettings] = None):
        self._settings = settings or get_settings().storage
        self._logger = get_logger(__name__)
    
    # ---- documents -------------------------------------------------------
    
    def load_projects(self) -> list[Project]:
        data = self._read(self._settings.projects_path, default=[])
        if not isinstance(data, list):
            raise StorageError(f"Projects document is not a list: {self._settings.projects_path}")
        return self._validate_list(Project, data, self._settings.projects_path)
    
    def save_projects(self, projects: list[Project]) -> None:
        self._write(self._settings.projects_path, [p.to_document() for p in projects])
    
    def load_general_fund(self) -> list[GeneralTransaction]:
        data = self._read(self._settings.general_fund_path, default=[])
        if not isinstance(data, list):
            raise StorageError(f"General fund document is not a list: {self._settings.general_fund_path}")
        return self._validate_list(GeneralTransaction, data, self._settings.general_fund_path)
    
    def save_general_fund(self, transactions: list[GeneralTransaction]) -> None:
        self._write(self._settings.general_fund_path, [t.to_document() for t in transactions])
    
    def load_settings(self) -> FirmSettings:
        data = self._read(self._settings.settings_path, default=None)
        if data is None:
            return FirmSettings()
        try:
            return FirmSettings.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Settings document is invalid: {e.error_count()} fields") from e
    
    def save_settings(self, settings: FirmSettings) -> None:
        self._write(self._settings.settings_path, settings.to_document())
    
    def write_export(self, filename: str, content: str) -> Path:
        path = self._settings.export_dir / filename
        self._write_text(path, content)
        return path
    
    # ---- helpers ---------------------------------------------------------
    
    def _read(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            self._logger.error("document_read_failed", path=str(path), error=str(e))
            raise StorageError(f"Failed to read {path}: {e}") from e
    
    def _validate_list(self, model: type, data: list, path: Path) -> list:
        try:
            return [model.model_validate(entry) for entry in data]
        except ValidationError as e:
            raise StorageError(f"Invalid record in {path}: {e.error_count()} fields") from e
    
    def _write(self, path: Path, document: Any) -> None:
        self._write_text(path, dumps_document(document))
    
    def _write_text(self, path: Path, content: str) -> None:
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            self._logger.error("document_write_failed", path=str(path), error=str(e))
            raise StorageError(f"Failed to write {path}: {e}") from e
        self._logger.debug("document_written", path=str(path), size=len(content))
