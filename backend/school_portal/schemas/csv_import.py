"""Pydantic schemas for CSV bulk imports."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Row records
# ============================================================================


class CSVRow(BaseModel):
    """Base for a typed CSV row. Field aliases are the CSV header names."""

    model_config = ConfigDict(populate_by_name=True)


class ClassRow(CSVRow):
    """One row of a classes import."""

    name: str = ""
    level: str = ""
    academic_year: str = Field(default="", alias="academicYear")
    teacher_id: str | None = Field(default=None, alias="teacherId")


class SubjectRow(CSVRow):
    """One row of a subjects import.

    ``max_score`` holds ``-1`` when the source cell was not a number.
    """

    name: str = ""
    code: str = ""
    max_score: int | float = Field(default=-1, alias="maxScore")
    description: str | None = None


class TermRow(CSVRow):
    """One row of a terms import."""

    name: str = ""
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    is_current: bool = Field(default=False, alias="isCurrent")
    academic_year: str = Field(default="", alias="academicYear")


class TeacherRow(CSVRow):
    """One row of a teachers import."""

    name: str = ""
    email: str = ""
    phone: str | None = None


RowT = TypeVar("RowT", bound=CSVRow)

# ============================================================================
# Issues and results
# ============================================================================


class IssueCode:
    """Stable identifiers for import rule violations."""

    EMPTY_FILE = "EMPTY_FILE"
    MISSING_HEADER = "MISSING_HEADER"
    MISSING_REQUIRED = "MISSING_REQUIRED"
    TOO_LONG = "TOO_LONG"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    ROW_LIMIT = "ROW_LIMIT"
    DUPLICATE = "DUPLICATE"


class ImportIssue(BaseModel):
    """A single rule violation found while importing a CSV file.

    ``row`` is the 1-based data row (the row after the header is row 1) and
    is ``None`` for file-level and batch-level issues.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    row: int | None = None
    field: str | None = None

    def render(self) -> str:
        """Render the issue as the user-facing error string."""
        if self.row is None:
            return self.message
        return f"Row {self.row}: {self.message}"

    def __str__(self) -> str:
        return self.render()


class ValidationResult(BaseModel):
    """Outcome of validating one row."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    issues: list[ImportIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, issues: list[ImportIssue]) -> "ValidationResult":
        return cls(valid=not issues, errors=[i.render() for i in issues], issues=issues)


class ImportResult(BaseModel, Generic[RowT]):
    """Outcome of a whole import call.

    ``data`` holds every row that passed row and batch validation, even when
    ``success`` is false; callers should not persist it in that case.
    """

    success: bool
    data: list[RowT] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    issues: list[ImportIssue] = Field(default_factory=list)

    @classmethod
    def build(cls, data: list[RowT], issues: list[ImportIssue]) -> "ImportResult[RowT]":
        return cls(
            success=not issues,
            data=data,
            errors=[i.render() for i in issues],
            issues=issues,
        )

    def to_response(self) -> dict:
        """JSON body for API callers, using the CSV header names as keys."""
        return {
            "success": self.success,
            "data": [row.model_dump(by_alias=True, exclude_none=True) for row in self.data],
            "errors": list(self.errors),
            "issues": [issue.model_dump() for issue in self.issues],
        }
