"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for document storage.
This allows us to:
1. Keep the JSON files on disk today
2. Use in-memory storage for testing
3. Move to another backend without touching the engine

Each document (projects, general fund, settings) is read whole and written
whole. There are no partial patches, and a write must never be observable
half-done.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from archifinance.errors import ArchiFinanceError
from archifinance.models.firm import FirmSettings
from archifinance.models.ledger import GeneralTransaction
from archifinance.models.project import Project


class DatasetStorageInterface(ABC):
    """
    Abstract interface for the three persisted documents and exports.
    
    Any storage implementation must implement these methods.
    """
    
    @abstractmethod
    def load_projects(self) -> list[Project]:
        """
        Load the project collection.
        
        Returns:
            The stored projects, or an empty list if none were saved yet
            
        Raises:
            StorageError: If the document exists but cannot be read
        """
        pass
    
    @abstractmethod
    def save_projects(self, projects: list[Project]) -> None:
        """
        Replace the stored project collection.
        
        Raises:
            StorageError: If the write fails (the old document is kept)
        """
        pass
    
    @abstractmethod
    def load_general_fund(self) -> list[GeneralTransaction]:
        """Load the general fund transactions (empty if never saved)."""
        pass
    
    @abstractmethod
    def save_general_fund(self, transactions: list[GeneralTransaction]) -> None:
        """Replace the stored general fund document."""
        pass
    
    @abstractmethod
    def load_settings(self) -> FirmSettings:
        """Load firm settings, or the defaults if never saved."""
        pass
    
    @abstractmethod
    def save_settings(self, settings: FirmSettings) -> None:
        """Replace the stored settings document."""
        pass
    
    @abstractmethod
    def write_export(self, filename: str, content: str) -> Path:
        """
        Write an export file.
        
        Returns:
            Where the file was written
            
        Raises:
            StorageError: If the file cannot be written
        """
        pass


class StorageError(ArchiFinanceError):
    """Base exception for storage operations."""
    pass
