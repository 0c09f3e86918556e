"""Batch-level checks for import engine: row cap and duplicate natural keys."""

from school_portal.schemas.csv_import import CSVRow, ImportIssue, IssueCode
from school_portal.services.importer.entities import ImportSchema


class BatchValidator:
    """Validate a whole batch: row cap over every parsed row, duplicates over the valid ones."""

    def __init__(self, schema: ImportSchema):
        self.schema = schema

    def check(
        self, rows: list[CSVRow], parsed_count: int | None = None
    ) -> tuple[list[CSVRow], list[ImportIssue]]:
        """
        Apply the row cap and drop repeated natural keys.

        The first occurrence of a key is kept; every later occurrence yields
        a DUPLICATE issue and is left out of the accepted rows.

        Args:
            rows: Rows in file order
            parsed_count: Number of data rows in the file, valid or not;
                defaults to ``len(rows)``

        Returns:
            Tuple of (accepted rows, issues)
        """
        issues: list[ImportIssue] = []

        count = len(rows) if parsed_count is None else parsed_count
        if count > self.schema.row_cap:
            issues.append(
                ImportIssue(
                    code=IssueCode.ROW_LIMIT,
                    message=(
                        f"Maximum {self.schema.row_cap} {self.schema.plural} allowed per import"
                    ),
                )
            )

        accepted: list[CSVRow] = []
        seen: set[str] = set()
        column = self.schema.mapping[self.schema.natural_key]["column"]
        for row in rows:
            key = self.schema.key_of(row)
            if key in seen:
                issues.append(
                    ImportIssue(
                        code=IssueCode.DUPLICATE,
                        message=(
                            f"Duplicate {self.schema.duplicate_label} found: "
                            f"{getattr(row, self.schema.natural_key)}"
                        ),
                        field=column,
                    )
                )
                continue
            seen.add(key)
            accepted.append(row)

        return accepted, issues

    def validate(self, rows: list[CSVRow], parsed_count: int | None = None) -> list[str]:
        """Return the rendered batch errors for ``rows``."""
        _, issues = self.check(rows, parsed_count)
        return [issue.render() for issue in issues]
