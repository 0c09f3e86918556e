"""Import engine for bulk CSV imports of classes, subjects, terms and teachers."""

from school_portal.services.importer.batch import BatchValidator
from school_portal.services.importer.csv_parser import (
    CSVParseError,
    EmptyCSVError,
    parse_csv,
    validate_headers,
)
from school_portal.services.importer.entities import (
    IMPORT_SCHEMAS,
    ImportSchema,
    UnknownEntityError,
    get_import_schema,
)
from school_portal.services.importer.pipeline import (
    ImportPipeline,
    get_pipeline,
    parse_classes_csv,
    parse_subjects_csv,
    parse_teachers_csv,
    parse_terms_csv,
)
from school_portal.services.importer.row_mapper import RowMapper
from school_portal.services.importer.validators import (
    validate_class_row,
    validate_subject_row,
    validate_teacher_row,
    validate_term_row,
)

__all__ = [
    "BatchValidator",
    "CSVParseError",
    "EmptyCSVError",
    "IMPORT_SCHEMAS",
    "ImportPipeline",
    "ImportSchema",
    "RowMapper",
    "UnknownEntityError",
    "get_import_schema",
    "get_pipeline",
    "parse_csv",
    "parse_classes_csv",
    "parse_subjects_csv",
    "parse_teachers_csv",
    "parse_terms_csv",
    "validate_class_row",
    "validate_headers",
    "validate_subject_row",
    "validate_teacher_row",
    "validate_term_row",
]
