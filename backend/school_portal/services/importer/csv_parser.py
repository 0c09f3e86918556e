"""CSV tokenizer and header checks for the import engine."""

from school_portal.schemas.csv_import import ImportIssue, IssueCode

BOM = "\ufeff"
EMPTY_FILE_MESSAGE = "CSV file is empty"


class CSVParseError(Exception):
    """CSV parsing error."""

    pass


class EmptyCSVError(CSVParseError):
    """Raised when the input holds no non-blank lines."""

    def __init__(self, message: str = EMPTY_FILE_MESSAGE):
        super().__init__(message)
        self.message = message

    def to_issue(self) -> ImportIssue:
        return ImportIssue(code=IssueCode.EMPTY_FILE, message=self.message)


def parse_csv(text: str) -> list[list[str]]:
    """
    Split raw CSV text into rows of trimmed cells.

    A leading byte-order mark is dropped and blank lines are skipped, so the
    first returned row is the header. Cells are split on every comma; quoted
    fields are not interpreted.

    Args:
        text: Decoded file content

    Returns:
        List of rows, each a list of cell strings

    Raises:
        EmptyCSVError: If the input has no non-blank lines
    """
    if text.startswith(BOM):
        text = text[len(BOM):]

    content = text.strip()
    if not content:
        raise EmptyCSVError()

    rows = [
        [cell.strip() for cell in line.split(",")]
        for line in (raw.strip() for raw in content.split("\n"))
        if line
    ]
    if not rows:
        raise EmptyCSVError()
    return rows


def find_missing_headers(header_row: list[str], required_headers: tuple[str, ...] | list[str]) -> list[ImportIssue]:
    """Return one issue per required header absent from the header row (case-sensitive)."""
    present = set(header_row)
    return [
        ImportIssue(
            code=IssueCode.MISSING_HEADER,
            message=f"Missing required header: {name}",
            field=name,
        )
        for name in required_headers
        if name not in present
    ]


def validate_headers(header_row: list[str], required_headers: tuple[str, ...] | list[str]) -> list[str]:
    """Return ``Missing required header: <name>`` for every absent required header."""
    return [issue.render() for issue in find_missing_headers(header_row, required_headers)]


def build_header_index(header_row: list[str]) -> dict[str, int]:
    """Map header names to column positions (a repeated name keeps its last position)."""
    return {name: index for index, name in enumerate(header_row)}
