"""Project list queries."""

from archifinance.queries.projects import (
    ALL_TYPES,
    ProjectCard,
    ProjectQuery,
    ProjectTab,
    filter_projects,
    project_cards,
    toggle_archive,
)

__all__ = [
    "ALL_TYPES",
    "ProjectCard",
    "ProjectQuery",
    "ProjectTab",
    "filter_projects",
    "project_cards",
    "toggle_archive",
]
