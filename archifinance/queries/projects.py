"""
Project List Queries

Filtering for the project dashboard: an active/archived tab, an optional
classification tag, and a free-text search over name and client. Each
matching project can be paired with its financial figures for the list
cards.
"""

from enum import Enum

from pydantic import BaseModel, Field

from archifinance.ledger.aggregator import ProjectFinancials, project_financials
from archifinance.models.project import Project, ProjectStatus


ALL_TYPES = "all"


class ProjectTab(str, Enum):
    """Completed projects are listed with the active ones."""
    ACTIVE = "active"
    ARCHIVED = "archived"


class ProjectQuery(BaseModel):
    tab: ProjectTab = ProjectTab.ACTIVE
    project_type: str = Field(
        default=ALL_TYPES,
        description="Classification tag to require, or 'all'"
    )
    search: str = Field(
        default="",
        description="Case-insensitive match against name or client"
    )


class ProjectCard(BaseModel):
    project: Project
    financials: ProjectFinancials


def matches(project: Project, query: ProjectQuery) -> bool:
    is_archived = project.status == ProjectStatus.ARCHIVED
    if query.tab == ProjectTab.ACTIVE and is_archived:
        return False
    if query.tab == ProjectTab.ARCHIVED and not is_archived:
        return False
    
    if query.project_type != ALL_TYPES and query.project_type not in project.project_types:
        return False
    
    needle = query.search.lower()
    return needle in project.name.lower() or needle in project.client.lower()


def filter_projects(projects: list[Project], query: ProjectQuery) -> list[Project]:
    """Matching projects in collection order."""
    return [p for p in projects if matches(p, query)]


def project_cards(projects: list[Project], query: ProjectQuery) -> list[ProjectCard]:
    return [
        ProjectCard(project=p, financials=project_financials(p))
        for p in filter_projects(projects, query)
    ]


def toggle_archive(project: Project) -> Project:
    """Archived projects go back to active; anything else is archived."""
    status = ProjectStatus.ACTIVE if project.status == ProjectStatus.ARCHIVED else ProjectStatus.ARCHIVED
    return project.model_copy(update={"status": status})
