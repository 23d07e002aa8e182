"""
Server Sync

Pulls the canonical project list from the office file server. The server
copy is a plain projects.json (the same bare array the app stores), so the
response is migrated exactly like a local load.

A failed pull never touches local state; the caller decides what to do
with the SyncError.
"""

from typing import Optional

import requests
from pydantic import ValidationError

from archifinance.config import get_settings
from archifinance.errors import SyncError
from archifinance.models.base import now_ms
from archifinance.models.project import Project
from archifinance.tracking.logger import get_logger


logger = get_logger(__name__)


def fetch_server_projects(
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> list[Project]:
    """
    Download and validate the server's project list.
    
    Args:
        url: projects.json location (defaults to the configured server URL)
        timeout: request timeout in seconds (defaults to the configured one)
        session: optional requests session, mainly for tests
        
    Returns:
        The server's projects, migrated to the current record shape
        
    Raises:
        SyncError: No URL configured, network/HTTP failure, or a body that
            is not a JSON array of projects
    """
    sync_settings = get_settings().sync
    url = url or sync_settings.server_url
    if not url:
        raise SyncError("No sync server URL configured")
    timeout = timeout if timeout is not None else sync_settings.timeout_seconds
    
    http = session or requests
    try:
        # The t parameter defeats intermediate caches on the file server.
        response = http.get(url, params={"t": now_ms()}, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error("server_sync_failed", url=url, error=str(e))
        raise SyncError(f"Failed to fetch projects from server: {e}") from e
    
    if not isinstance(payload, list):
        logger.error("server_sync_failed", url=url, error="response is not a list")
        raise SyncError("Server data format error: expected a list of projects")
    
    try:
        projects = [Project.model_validate(entry) for entry in payload]
    except ValidationError as e:
        logger.error("server_sync_failed", url=url, error=f"{e.error_count()} invalid fields")
        raise SyncError(f"Server data format error: {e.error_count()} invalid fields") from e
    
    logger.info("server_sync_fetched", url=url, project_count=len(projects))
    return projects
