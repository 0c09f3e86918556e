"""Row validators for import engine."""

import re
from datetime import date

from school_portal.schemas.csv_import import (
    ClassRow,
    CSVRow,
    ImportIssue,
    IssueCode,
    SubjectRow,
    TeacherRow,
    TermRow,
    ValidationResult,
)
from school_portal.services.importer.entities import CLASSES, SUBJECTS, TEACHERS, TERMS, ImportSchema

NAME_MAX_LENGTH = 100

ACADEMIC_YEAR_RE = re.compile(r"[0-9]{4}/[0-9]{4}")
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
SUBJECT_CODE_RE = re.compile(r"[A-Z0-9]+")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class RowValidator:
    """Base validator: collects every issue of a row, never stops at the first."""

    schema: ImportSchema

    def validate(self, row: CSVRow, row_number: int) -> list[ImportIssue]:
        """
        Validate one mapped row.

        Args:
            row: Mapped row record
            row_number: 1-based data row number

        Returns:
            List of issues (empty if valid)
        """
        issues: list[ImportIssue] = []
        self.check(row, row_number, issues)
        return issues

    def check(self, row: CSVRow, row_number: int, issues: list[ImportIssue]) -> None:
        raise NotImplementedError

    def _require(
        self, issues: list[ImportIssue], row_number: int, column: str, value: str | None
    ) -> None:
        if not value or not value.strip():
            issues.append(
                ImportIssue(
                    code=IssueCode.MISSING_REQUIRED,
                    message=f'Missing required field "{column}"',
                    row=row_number,
                    field=column,
                )
            )

    def _name_length(self, issues: list[ImportIssue], row_number: int, name: str) -> None:
        if name and len(name) > NAME_MAX_LENGTH:
            issues.append(
                ImportIssue(
                    code=IssueCode.TOO_LONG,
                    message=f"{self.schema.label} name must be {NAME_MAX_LENGTH} characters or less",
                    row=row_number,
                    field="name",
                )
            )

    def _academic_year(self, issues: list[ImportIssue], row_number: int, value: str) -> None:
        # Shape only; the second year is not checked against the first
        if value and not ACADEMIC_YEAR_RE.fullmatch(value):
            issues.append(
                ImportIssue(
                    code=IssueCode.INVALID_FORMAT,
                    message="Invalid academic year format. Use YYYY/YYYY (e.g., 2024/2025)",
                    row=row_number,
                    field="academicYear",
                )
            )


class ClassRowValidator(RowValidator):
    schema = CLASSES

    def check(self, row: ClassRow, row_number: int, issues: list[ImportIssue]) -> None:
        self._require(issues, row_number, "name", row.name)
        self._require(issues, row_number, "level", row.level)
        self._require(issues, row_number, "academicYear", row.academic_year)
        self._name_length(issues, row_number, row.name)
        self._academic_year(issues, row_number, row.academic_year)


class SubjectRowValidator(RowValidator):
    schema = SUBJECTS

    def check(self, row: SubjectRow, row_number: int, issues: list[ImportIssue]) -> None:
        self._require(issues, row_number, "name", row.name)
        self._require(issues, row_number, "code", row.code)
        self._name_length(issues, row_number, row.name)

        if row.code and not SUBJECT_CODE_RE.fullmatch(row.code):
            issues.append(
                ImportIssue(
                    code=IssueCode.INVALID_FORMAT,
                    message="Code must be uppercase letters and numbers only (e.g., MATH, ENG101)",
                    row=row_number,
                    field="code",
                )
            )

        if not row.max_score or row.max_score <= 0:
            issues.append(
                ImportIssue(
                    code=IssueCode.INVALID_NUMBER,
                    message="maxScore must be a positive number",
                    row=row_number,
                    field="maxScore",
                )
            )


class TermRowValidator(RowValidator):
    schema = TERMS

    def check(self, row: TermRow, row_number: int, issues: list[ImportIssue]) -> None:
        self._require(issues, row_number, "name", row.name)
        self._require(issues, row_number, "startDate", row.start_date)
        self._require(issues, row_number, "endDate", row.end_date)
        self._require(issues, row_number, "academicYear", row.academic_year)
        self._name_length(issues, row_number, row.name)

        start_ok = self._date_format(issues, row_number, "startDate", row.start_date)
        end_ok = self._date_format(issues, row_number, "endDate", row.end_date)

        if start_ok and end_ok:
            start = _calendar_date(row.start_date)
            end = _calendar_date(row.end_date)
            # Well-shaped but impossible dates (2024-13-40) skip the ordering check
            if start is not None and end is not None and end <= start:
                issues.append(
                    ImportIssue(
                        code=IssueCode.INVALID_DATE_RANGE,
                        message="endDate must be after startDate",
                        row=row_number,
                        field="endDate",
                    )
                )

        self._academic_year(issues, row_number, row.academic_year)

    def _date_format(
        self, issues: list[ImportIssue], row_number: int, column: str, value: str
    ) -> bool:
        if not value:
            return False
        if DATE_RE.fullmatch(value):
            return True
        issues.append(
            ImportIssue(
                code=IssueCode.INVALID_FORMAT,
                message=f"Invalid date format for {column}. Use YYYY-MM-DD",
                row=row_number,
                field=column,
            )
        )
        return False


class TeacherRowValidator(RowValidator):
    schema = TEACHERS

    def check(self, row: TeacherRow, row_number: int, issues: list[ImportIssue]) -> None:
        self._require(issues, row_number, "name", row.name)
        self._require(issues, row_number, "email", row.email)
        self._name_length(issues, row_number, row.name)

        if row.email and not EMAIL_RE.fullmatch(row.email):
            issues.append(
                ImportIssue(
                    code=IssueCode.INVALID_FORMAT,
                    message="Invalid email format",
                    row=row_number,
                    field="email",
                )
            )


ROW_VALIDATORS: dict[str, RowValidator] = {
    validator.schema.plural: validator
    for validator in (
        ClassRowValidator(),
        SubjectRowValidator(),
        TermRowValidator(),
        TeacherRowValidator(),
    )
}


def _calendar_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def validate_class_row(row: ClassRow, row_number: int) -> ValidationResult:
    """Validate a single class row."""
    return ValidationResult.from_issues(ROW_VALIDATORS["classes"].validate(row, row_number))


def validate_subject_row(row: SubjectRow, row_number: int) -> ValidationResult:
    """Validate a single subject row."""
    return ValidationResult.from_issues(ROW_VALIDATORS["subjects"].validate(row, row_number))


def validate_term_row(row: TermRow, row_number: int) -> ValidationResult:
    """Validate a single term row."""
    return ValidationResult.from_issues(ROW_VALIDATORS["terms"].validate(row, row_number))


def validate_teacher_row(row: TeacherRow, row_number: int) -> ValidationResult:
    """Validate a single teacher row."""
    return ValidationResult.from_issues(ROW_VALIDATORS["teachers"].validate(row, row_number))
