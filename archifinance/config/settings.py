"""
Configuration Management for ArchiFinance

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see where documents are stored, where the server
copy lives, and which numbering conventions are in force.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON document storage configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="ARCHIFINANCE_STORAGE_",
        extra="ignore"
    )
    
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted JSON documents"
    )
    projects_filename: str = Field(
        default="projects.json",
        description="Document holding the project collection"
    )
    general_fund_filename: str = Field(
        default="general_fund.json",
        description="Document holding the firm-wide general transactions"
    )
    settings_filename: str = Field(
        default="settings.json",
        description="Document holding firm settings"
    )
    export_dir: Path = Field(
        default=Path("exports"),
        description="Directory where backup and project exports are written"
    )
    
    @property
    def projects_path(self) -> Path:
        return self.data_dir / self.projects_filename
    
    @property
    def general_fund_path(self) -> Path:
        return self.data_dir / self.general_fund_filename
    
    @property
    def settings_path(self) -> Path:
        return self.data_dir / self.settings_filename


class SyncSettings(BaseSettings):
    """Server-sync pull configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="ARCHIFINANCE_SYNC_",
        extra="ignore"
    )
    
    server_url: Optional[str] = Field(
        default=None,
        description="URL of the canonical projects.json on the file server"
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="HTTP timeout for the sync request"
    )
    
    @field_validator('server_url')
    @classmethod
    def strip_server_url(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank URL as unset."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="ARCHIFINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    
    # Document conventions
    invoice_number_prefix: str = Field(
        default="INV",
        min_length=1,
        max_length=10,
        description="Prefix of suggested invoice numbers (INV-2024-001)"
    )
    service_fee_label: str = Field(
        default="專業服務費",
        description="Leading text of the service line created from a payment term"
    )
    reimbursable_label: str = Field(
        default="代墊費用",
        description="Default description of a new reimbursable line"
    )
    backup_version: str = Field(
        default="1.3.0",
        description="Version stamped on full backup documents"
    )
    
    # Reporting
    revenue_series_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="How many monthly buckets the revenue series keeps"
    )
    
    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case for the level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()
    
    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    for name in ("storage", "sync", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)
    
    return results
