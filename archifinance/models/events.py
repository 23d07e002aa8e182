"""
Change Event Models

Every write path the engine exposes produces a ChangeEvent. Events are
not stored anywhere; they are handed to the mutation gate, which logs
them and flips the unexported-changes flag.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ChangeEventType(str, Enum):
    """
    Kinds of writes and sync points.
    
    The gate decides dirty versus clean from the event type alone.
    """
    # Project collection
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    
    # Firm-level documents
    SETTINGS_SAVED = "settings_saved"
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    
    # Import / export / sync
    PROJECT_IMPORTED = "project_imported"
    BACKUP_RESTORED = "backup_restored"
    BACKUP_EXPORTED = "backup_exported"
    SERVER_SYNCED = "server_synced"


# Event types after which the dataset matches an external copy.
CLEAN_EVENT_TYPES = frozenset({
    ChangeEventType.BACKUP_RESTORED,
    ChangeEventType.BACKUP_EXPORTED,
    ChangeEventType.SERVER_SYNCED,
})


class ChangeEvent(BaseModel):
    """A single write (or sync point) seen by the mutation gate."""
    
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ChangeEventType = Field(
        ...,
        description="Type of event"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'project', 'transaction')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    
    @property
    def marks_clean(self) -> bool:
        return self.event_type in CLEAN_EVENT_TYPES
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
        }


class ChangeEventBuilder:
    """
    Helper class to build change events with common patterns.
    
    Usage:
        event = ChangeEventBuilder.project_updated(project.id, project.name)
        event = ChangeEventBuilder.server_synced(project_count=12)
    """
    
    @staticmethod
    def project_created(project_id: str, name: str) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.PROJECT_CREATED,
            entity_type="project",
            entity_id=project_id,
            description=f"Project created: {name}",
        )
    
    @staticmethod
    def project_updated(project_id: str, name: str) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.PROJECT_UPDATED,
            entity_type="project",
            entity_id=project_id,
            description=f"Project updated: {name}",
        )
    
    @staticmethod
    def project_deleted(project_id: str) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.PROJECT_DELETED,
            entity_type="project",
            entity_id=project_id,
            description="Project deleted",
        )
    
    @staticmethod
    def settings_saved() -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.SETTINGS_SAVED,
            entity_type="settings",
            description="Firm settings saved",
        )
    
    @staticmethod
    def transaction_changed(
        event_type: ChangeEventType,
        transaction_id: str,
        amount: Optional[float] = None,
    ) -> ChangeEvent:
        details = {"amount": amount} if amount is not None else {}
        return ChangeEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"General fund {event_type.value.split('_')[1]}",
            details=details,
        )
    
    @staticmethod
    def project_imported(project_id: str, name: str, replaced: bool) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.PROJECT_IMPORTED,
            entity_type="project",
            entity_id=project_id,
            description=f"Project {'replaced' if replaced else 'added'} from import: {name}",
            details={"replaced": replaced},
        )
    
    @staticmethod
    def backup_restored(project_count: int, kind: str) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.BACKUP_RESTORED,
            entity_type="dataset",
            description=f"Dataset restored from {kind} ({project_count} projects)",
            details={"project_count": project_count, "kind": kind},
        )
    
    @staticmethod
    def backup_exported(path: str, project_count: int) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.BACKUP_EXPORTED,
            entity_type="dataset",
            description=f"Full backup exported ({project_count} projects)",
            details={"path": path, "project_count": project_count},
        )
    
    @staticmethod
    def server_synced(project_count: int) -> ChangeEvent:
        return ChangeEvent(
            event_type=ChangeEventType.SERVER_SYNCED,
            entity_type="dataset",
            description=f"Projects replaced from server ({project_count} projects)",
            details={"project_count": project_count},
        )
