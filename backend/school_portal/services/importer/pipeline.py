"""Import pipeline: tokenize, check headers, map, validate rows, validate batch."""

from school_portal.core.logging import get_logger
from school_portal.schemas.csv_import import (
    ClassRow,
    CSVRow,
    ImportIssue,
    ImportResult,
    SubjectRow,
    TeacherRow,
    TermRow,
)
from school_portal.services.importer.batch import BatchValidator
from school_portal.services.importer.csv_parser import (
    EmptyCSVError,
    build_header_index,
    find_missing_headers,
    parse_csv,
)
from school_portal.services.importer.entities import (
    CLASSES,
    SUBJECTS,
    TEACHERS,
    TERMS,
    ImportSchema,
    get_import_schema,
)
from school_portal.services.importer.row_mapper import RowMapper
from school_portal.services.importer.validators import ROW_VALIDATORS

logger = get_logger(__name__)


class ImportPipeline:
    """Run one CSV payload through every validation stage for a schema.

    Stateless between calls; one instance may serve concurrent imports.
    """

    def __init__(self, schema: ImportSchema):
        self.schema = schema
        self.mapper = RowMapper(schema)
        self.validator = ROW_VALIDATORS[schema.plural]
        self.batch = BatchValidator(schema)
        self.result_type = ImportResult[schema.row_model]

    def run(self, text: str) -> ImportResult:
        """
        Parse and validate CSV text.

        Args:
            text: Decoded CSV content

        Returns:
            ImportResult with accepted rows and every rendered error
        """
        try:
            lines = parse_csv(text)
        except EmptyCSVError as e:
            return self.result_type.build([], [e.to_issue()])

        header_row, data_lines = lines[0], lines[1:]

        header_issues = find_missing_headers(header_row, self.schema.required_headers)
        if header_issues:
            logger.debug(
                "CSV import rejected at header check",
                extra={
                    "entity": self.schema.plural,
                    "missing_headers": [i.field for i in header_issues],
                },
            )
            return self.result_type.build([], header_issues)

        header_index = build_header_index(header_row)
        issues: list[ImportIssue] = []
        valid_rows: list[CSVRow] = []

        for row_number, cells in enumerate(data_lines, start=1):
            row = self.mapper.map_row(cells, header_index)
            row_issues = self.validator.validate(row, row_number)
            if row_issues:
                issues.extend(row_issues)
            else:
                valid_rows.append(row)

        # Cap counts every data row; duplicates only among rows that passed
        accepted, batch_issues = self.batch.check(valid_rows, parsed_count=len(data_lines))
        issues.extend(batch_issues)

        logger.info(
            "CSV import processed",
            extra={
                "entity": self.schema.plural,
                "rows": len(data_lines),
                "accepted": len(accepted),
                "error_count": len(issues),
            },
        )

        return self.result_type.build(accepted, issues)


_PIPELINES: dict[str, ImportPipeline] = {}


def get_pipeline(entity: str) -> ImportPipeline:
    """Pipeline for an entity name (``classes`` or ``class``)."""
    schema = get_import_schema(entity)
    pipeline = _PIPELINES.get(schema.plural)
    if pipeline is None:
        pipeline = _PIPELINES[schema.plural] = ImportPipeline(schema)
    return pipeline


def parse_classes_csv(text: str) -> ImportResult[ClassRow]:
    """Parse and validate a classes CSV file."""
    return get_pipeline(CLASSES.plural).run(text)


def parse_subjects_csv(text: str) -> ImportResult[SubjectRow]:
    """Parse and validate a subjects CSV file."""
    return get_pipeline(SUBJECTS.plural).run(text)


def parse_terms_csv(text: str) -> ImportResult[TermRow]:
    """Parse and validate a terms CSV file."""
    return get_pipeline(TERMS.plural).run(text)


def parse_teachers_csv(text: str) -> ImportResult[TeacherRow]:
    """Parse and validate a teachers CSV file."""
    return get_pipeline(TEACHERS.plural).run(text)
