"""Import schemas for the importable entities.

Each schema describes how CSV columns map onto a row model, which headers
must be present, the per-import row cap and the natural key used for
duplicate detection.
"""

from dataclasses import dataclass
from typing import Any

from school_portal.schemas.csv_import import ClassRow, CSVRow, SubjectRow, TeacherRow, TermRow


class UnknownEntityError(KeyError):
    """Raised when an entity type has no import schema."""

    def __init__(self, entity: str, supported: list[str]):
        super().__init__(entity)
        self.entity = entity
        self.supported = supported

    def __str__(self) -> str:
        return f"Unknown entity type: {self.entity}. Supported types: {', '.join(self.supported)}"


@dataclass(frozen=True)
class ImportSchema:
    """Column mapping and batch rules for one entity.

    ``mapping`` is keyed by row model attribute; each entry names the CSV
    ``column`` and the value ``type`` (``string``, ``number`` or
    ``boolean``). ``optional`` string fields become ``None`` when blank.
    """

    entity: str
    plural: str
    row_model: type[CSVRow]
    mapping: dict[str, dict[str, Any]]
    required_headers: tuple[str, ...]
    row_cap: int
    natural_key: str
    duplicate_label: str
    case_insensitive_key: bool = False
    label: str = ""

    @property
    def headers(self) -> list[str]:
        return [config["column"] for config in self.mapping.values()]

    def key_of(self, row: CSVRow) -> str:
        """Natural key of a row as used for duplicate detection."""
        value = str(getattr(row, self.natural_key) or "").strip()
        return value.lower() if self.case_insensitive_key else value


CLASSES = ImportSchema(
    entity="class",
    plural="classes",
    label="Class",
    row_model=ClassRow,
    mapping={
        "name": {"column": "name", "type": "string"},
        "level": {"column": "level", "type": "string"},
        "academic_year": {"column": "academicYear", "type": "string"},
        "teacher_id": {"column": "teacherId", "type": "string", "optional": True},
    },
    required_headers=("name", "level", "academicYear"),
    row_cap=100,
    natural_key="name",
    duplicate_label="class name",
)

SUBJECTS = ImportSchema(
    entity="subject",
    plural="subjects",
    label="Subject",
    row_model=SubjectRow,
    mapping={
        "name": {"column": "name", "type": "string"},
        "code": {"column": "code", "type": "string"},
        "max_score": {"column": "maxScore", "type": "number"},
        "description": {"column": "description", "type": "string", "optional": True},
    },
    required_headers=("name", "code", "maxScore"),
    row_cap=50,
    natural_key="code",
    duplicate_label="subject code",
)

TERMS = ImportSchema(
    entity="term",
    plural="terms",
    label="Term",
    row_model=TermRow,
    mapping={
        "name": {"column": "name", "type": "string"},
        "start_date": {"column": "startDate", "type": "string"},
        "end_date": {"column": "endDate", "type": "string"},
        "is_current": {"column": "isCurrent", "type": "boolean"},
        "academic_year": {"column": "academicYear", "type": "string"},
    },
    required_headers=("name", "startDate", "endDate", "isCurrent", "academicYear"),
    row_cap=20,
    natural_key="name",
    duplicate_label="term name",
)

TEACHERS = ImportSchema(
    entity="teacher",
    plural="teachers",
    label="Teacher",
    row_model=TeacherRow,
    mapping={
        "name": {"column": "name", "type": "string"},
        "email": {"column": "email", "type": "string"},
        "phone": {"column": "phone", "type": "string", "optional": True},
    },
    # phone values are optional but the column itself must be present
    required_headers=("name", "email", "phone"),
    row_cap=100,
    natural_key="email",
    duplicate_label="email",
    case_insensitive_key=True,
)

IMPORT_SCHEMAS: dict[str, ImportSchema] = {
    schema.plural: schema for schema in (CLASSES, SUBJECTS, TERMS, TEACHERS)
}


def get_import_schema(entity: str) -> ImportSchema:
    """Look up an import schema by plural (``classes``) or singular (``class``) name."""
    schema = IMPORT_SCHEMAS.get(entity)
    if schema is None:
        schema = next((s for s in IMPORT_SCHEMAS.values() if s.entity == entity), None)
    if schema is None:
        raise UnknownEntityError(entity, sorted(IMPORT_SCHEMAS))
    return schema
