"""
Backup Codec

Recognizes the three importable document shapes and writes the two export
shapes.

Accepted on import:
1. Full backup  {version, exportedAt, projects, generalFund}
2. Legacy array [project, ...]  (projects only; general fund untouched)
3. One project  {id, name, ...} (merged by id)

Anything else is rejected as InvalidFormatError; text that is not JSON at
all is rejected as ParseFailedError. Parsing never touches the dataset.
"""

import json
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from archifinance.errors import InvalidFormatError, ParseFailedError
from archifinance.models.backup import BackupDocument
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Project


FULL_BACKUP_PREFIX = "ArchiFinance_FullBackup"

# Keep ASCII letters/digits and CJK ideographs; everything else becomes "_".
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9一-龥]", re.IGNORECASE)


class ImportKind(str, Enum):
    FULL_BACKUP = "full_backup"
    LEGACY_ARRAY = "legacy_array"
    SINGLE_PROJECT = "single_project"


class ImportPlan(BaseModel):
    """
    A parsed import, not yet applied.
    
    Full backups and legacy arrays replace the project collection and must
    be confirmed by the user first; a single project is merged by id.
    """
    
    kind: ImportKind
    projects: list[Project] = Field(default_factory=list)
    general_fund: Optional[list[GeneralTransaction]] = Field(
        default=None,
        description="Only set for full backups"
    )
    
    @property
    def replaces_collection(self) -> bool:
        return self.kind in (ImportKind.FULL_BACKUP, ImportKind.LEGACY_ARRAY)
    
    @property
    def project(self) -> Optional[Project]:
        """The imported project of a single-project import."""
        if self.kind == ImportKind.SINGLE_PROJECT and self.projects:
            return self.projects[0]
        return None


def parse_import(text: str) -> ImportPlan:
    """
    Classify and validate an import document.
    
    Raises:
        ParseFailedError: If the text is not valid JSON
        InvalidFormatError: If the JSON is not one of the accepted shapes
    """
    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ParseFailedError(f"JSON parse failed: {e}") from e
    
    try:
        return _plan_for(payload)
    except ValidationError as e:
        raise InvalidFormatError(f"Invalid backup format: {e.error_count()} invalid fields") from e


def _plan_for(payload: Any) -> ImportPlan:
    if isinstance(payload, list):
        if not all(isinstance(entry, dict) for entry in payload):
            raise InvalidFormatError("Invalid backup format: array entries must be projects")
        return ImportPlan(
            kind=ImportKind.LEGACY_ARRAY,
            projects=[Project.model_validate(entry) for entry in payload],
        )
    
    if isinstance(payload, dict):
        if isinstance(payload.get("projects"), list):
            document = BackupDocument.model_validate(payload)
            general_fund = document.general_fund if "generalFund" in payload else None
            return ImportPlan(
                kind=ImportKind.FULL_BACKUP,
                projects=document.projects,
                general_fund=general_fund,
            )
        if payload.get("id") and payload.get("name"):
            return ImportPlan(
                kind=ImportKind.SINGLE_PROJECT,
                projects=[Project.model_validate(payload)],
            )
    
    raise InvalidFormatError("Invalid backup format: not a backup, project list, or project")


def build_backup(
    projects: list[Project],
    general_fund: list[GeneralTransaction],
    version: str,
    exported_at: Optional[datetime] = None,
) -> BackupDocument:
    document = BackupDocument(version=version, projects=projects, general_fund=general_fund)
    if exported_at is not None:
        document = document.model_copy(update={"exported_at": exported_at.isoformat()})
    return document


def dumps_document(document: Any) -> str:
    """Pretty-printed JSON (2-space indent, non-ASCII kept as is)."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def backup_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"{FULL_BACKUP_PREFIX}_{now.strftime('%Y%m%d_%H%M%S')}.json"


def sanitize_filename(name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def project_filename(project: Project, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{sanitize_filename(project.name)}_{today.strftime('%Y%m%d')}.json"
