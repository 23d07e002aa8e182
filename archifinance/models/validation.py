"""
Validation Signal Models

Validation in the engine is advisory: it reports, it never blocks a save
and never corrects data.
"""

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single validation issue found."""
    
    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'terms_not_100', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """All signals raised for one record."""
    
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )
    
    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
    
    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
    
    @property
    def is_clean(self) -> bool:
        """True when nothing above info level was raised."""
        return all(issue.severity == "info" for issue in self.issues)
    
    def by_type(self, issue_type: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.issue_type == issue_type]
