"""Full backup document model."""

from datetime import datetime, timezone

from pydantic import Field

from archifinance.models.base import RecordModel
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Project


class BackupDocument(RecordModel):
    """
    Everything needed to restore the dataset on another machine.
    
    Settings are not part of the backup; they live in their own document.
    """
    
    version: str = ""
    exported_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="exportedAt",
    )
    projects: list[Project] = Field(default_factory=list)
    general_fund: list[GeneralTransaction] = Field(
        default_factory=list,
        alias="generalFund",
    )
