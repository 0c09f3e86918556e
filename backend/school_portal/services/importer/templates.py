"""CSV template generation and export for bulk imports.

Templates are built from entity field definitions instead of hardcoded
strings, so the downloadable sample always matches what the importer expects.
Tenants may declare extra custom fields per entity in their settings.
"""

import copy
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Literal, Mapping

from school_portal.services.importer.entities import UnknownEntityError

FieldType = Literal["string", "number", "date", "boolean", "email", "phone"]

DATE_COLUMN_GAP_DAYS = 90


@dataclass
class EntityField:
    """One column of an importable entity."""

    name: str
    type: FieldType
    required: bool
    label: str
    description: str | None = None
    sample_values: list[Any] = field(default_factory=list)


@dataclass
class EntityStructure:
    """Field layout and import limit of an entity type."""

    entity_name: str
    fields: list[EntityField]
    custom_fields: list[EntityField] = field(default_factory=list)
    import_limit: int | None = None


ENTITY_STRUCTURES: dict[str, EntityStructure] = {
    "class": EntityStructure(
        entity_name="class",
        fields=[
            EntityField("name", "string", True, "Class Name", "Full name of the class (e.g., JSS 1A, Year 5 Blue)"),
            EntityField(
                "level", "string", True, "Level", "Grade level (e.g., JSS1, SS2, Year5)",
                ["JSS1", "JSS2", "JSS3", "SS1", "SS2", "SS3"],
            ),
            EntityField(
                "academicYear", "string", True, "Academic Year", "Academic year in YYYY/YYYY format",
                ["2024/2025", "2025/2026"],
            ),
            EntityField("teacherId", "string", False, "Teacher ID", "Optional: ID of class teacher"),
        ],
        import_limit=100,
    ),
    "subject": EntityStructure(
        entity_name="subject",
        fields=[
            EntityField(
                "name", "string", True, "Subject Name", "Full name of the subject",
                ["Mathematics", "English Language", "Physics", "Chemistry", "Biology"],
            ),
            EntityField(
                "code", "string", True, "Subject Code", "Unique uppercase code (e.g., MATH, ENG, PHY)",
                ["MATH", "ENG", "PHY", "CHEM", "BIO"],
            ),
            EntityField("maxScore", "number", True, "Maximum Score", "Total possible score", [100, 50, 75]),
            EntityField("description", "string", False, "Description", "Optional subject description"),
        ],
        import_limit=50,
    ),
    "term": EntityStructure(
        entity_name="term",
        fields=[
            EntityField(
                "name", "string", True, "Term Name", "Name of the term",
                ["First Term 2024/2025", "Second Term 2024/2025", "Third Term 2024/2025"],
            ),
            EntityField("startDate", "date", True, "Start Date", "Term start date (YYYY-MM-DD)"),
            EntityField("endDate", "date", True, "End Date", "Term end date (YYYY-MM-DD)"),
            EntityField(
                "isCurrent", "boolean", True, "Is Current", "Is this the current term? (true/false)",
                [True, False],
            ),
            EntityField(
                "academicYear", "string", True, "Academic Year", "Academic year in YYYY/YYYY format",
                ["2024/2025", "2025/2026"],
            ),
        ],
        import_limit=20,
    ),
    "teacher": EntityStructure(
        entity_name="teacher",
        fields=[
            EntityField(
                "name", "string", True, "Teacher Name", "Full name of teacher",
                ["John Doe", "Jane Smith", "Robert Johnson"],
            ),
            EntityField(
                "email", "email", True, "Email Address", "Valid email address",
                ["john.doe@school.com", "jane.smith@school.com"],
            ),
            EntityField(
                "phone", "phone", False, "Phone Number", "Optional phone number",
                ["1234567890", "0987654321", ""],
            ),
        ],
        import_limit=100,
    ),
    "student": EntityStructure(
        entity_name="student",
        fields=[
            EntityField("firstName", "string", True, "First Name", "Student first name", ["John", "Jane", "Michael", "Sarah"]),
            EntityField("middleName", "string", False, "Middle Name", "Optional middle name"),
            EntityField("lastName", "string", True, "Last Name", "Student last name", ["Doe", "Smith", "Johnson", "Williams"]),
            EntityField(
                "admissionNumber", "string", True, "Admission Number", "Unique admission number",
                ["ADM2024001", "ADM2024002", "ADM2024003"],
            ),
            EntityField("dateOfBirth", "date", True, "Date of Birth", "Date of birth (YYYY-MM-DD)"),
            EntityField("gender", "string", True, "Gender", "Gender (male/female)", ["male", "female"]),
            EntityField(
                "currentClassId", "string", True, "Current Class ID",
                "ID of current class (use class IDs from your system)",
            ),
            EntityField("address", "string", False, "Address", "Optional residential address"),
        ],
        import_limit=500,
    ),
}

# Import endpoints use plural names
ENTITY_ALIASES = {
    "classes": "class",
    "subjects": "subject",
    "terms": "term",
    "teachers": "teacher",
    "students": "student",
}

SAMPLE_TEMPLATES: dict[str, str] = {
    "classes": (
        "name,level,academicYear,teacherId\n"
        "JSS 1A,JSS1,2024/2025,teacher-id-1\n"
        "JSS 2B,JSS2,2024/2025,teacher-id-2\n"
        "SS 3C,SS3,2024/2025,"
    ),
    "subjects": (
        "name,code,maxScore,description\n"
        "Mathematics,MATH,100,Core subject\n"
        "English Language,ENG,100,Language and communication\n"
        "Physics,PHY,100,Science subject"
    ),
    "terms": (
        "name,startDate,endDate,isCurrent,academicYear\n"
        "First Term 2024/2025,2024-09-01,2024-12-15,true,2024/2025\n"
        "Second Term 2024/2025,2025-01-06,2025-04-15,false,2024/2025\n"
        "Third Term 2024/2025,2025-04-20,2025-07-31,false,2024/2025"
    ),
    "teachers": (
        "name,email,phone\n"
        "John Doe,john.doe@school.com,1234567890\n"
        "Jane Smith,jane.smith@school.com,0987654321\n"
        "Bob Johnson,bob.johnson@school.com,"
    ),
}


def scan_entity_structure(
    entity_type: str, tenant_settings: Mapping[str, Any] | None = None
) -> EntityStructure:
    """
    Return the field structure of an entity type.

    Custom fields declared under ``tenant_settings["customFields"][entity_type]``
    are appended as ``custom_fields``. The shared definitions are never mutated.

    Raises:
        UnknownEntityError: If the entity type is not known
    """
    entity_type = ENTITY_ALIASES.get(entity_type, entity_type)
    base = ENTITY_STRUCTURES.get(entity_type)
    if base is None:
        raise UnknownEntityError(entity_type, list(ENTITY_STRUCTURES))

    structure = copy.deepcopy(base)

    custom = ((tenant_settings or {}).get("customFields") or {}).get(entity_type) or []
    structure.custom_fields = [
        EntityField(
            name=cf["name"],
            type=cf.get("type") or "string",
            required=bool(cf.get("required", False)),
            label=cf.get("label") or cf["name"],
            description=cf.get("description"),
        )
        for cf in custom
    ]
    return structure


def generate_sample_data(
    entity_field: EntityField,
    count: int,
    empty_optional_fields: bool = False,
    today: date | None = None,
) -> list[Any]:
    """Generate ``count`` sample values for a field."""
    if not entity_field.required and empty_optional_fields:
        return [""] * count

    if entity_field.sample_values:
        values = entity_field.sample_values
        return [values[i % len(values)] for i in range(count)]

    if entity_field.type == "number":
        return [100] * count

    if entity_field.type == "date":
        start = today or date.today()
        return [(start + timedelta(days=i * 30)).isoformat() for i in range(count)]

    if entity_field.type == "boolean":
        return ["true" if i % 2 == 0 else "false" for i in range(count)]

    if entity_field.type == "email":
        return [f"sample{i + 1}@school.com" for i in range(count)]

    if entity_field.type == "phone":
        return [
            "" if not entity_field.required and i % 2 == 0 else f"123456789{i}"
            for i in range(count)
        ]

    return [f"Sample {entity_field.label} {i + 1}" for i in range(count)]


def generate_csv_template(
    structure: EntityStructure,
    include_optional: bool = True,
    include_custom_fields: bool = True,
    sample_rows: int = 3,
    empty_optional_fields: bool = False,
    today: date | None = None,
) -> str:
    """
    Build a CSV template: header row plus optional sample rows.

    Columns are ordered required fields first, then optional fields, then
    tenant custom fields.
    """
    columns = [f for f in structure.fields if f.required]
    if include_optional:
        columns.extend(f for f in structure.fields if not f.required)
    if include_custom_fields:
        columns.extend(structure.custom_fields)

    lines = [",".join(f.name for f in columns)]
    if sample_rows > 0:
        start = today or date.today()
        samples = []
        date_columns = 0
        for f in columns:
            # Later date columns start further out so end dates follow start dates
            offset = timedelta(days=DATE_COLUMN_GAP_DAYS * date_columns)
            if f.type == "date":
                date_columns += 1
            samples.append(
                generate_sample_data(
                    f, sample_rows, empty_optional_fields=empty_optional_fields, today=start + offset
                )
            )
        for i in range(sample_rows):
            lines.append(",".join(_format_cell(values[i]) for values in samples))

    return "\n".join(lines)


def export_to_csv(rows: Iterable[Mapping[str, Any]], headers: list[str]) -> str:
    """Render mappings as CSV text with the given header order."""
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(_format_cell(row.get(header)) for header in headers))
    return "\n".join(lines)


def sample_template(entity: str) -> str:
    """Fixed three-row sample CSV for an importable entity (plural or singular name)."""
    plural = {v: k for k, v in ENTITY_ALIASES.items()}.get(entity, entity)
    template = SAMPLE_TEMPLATES.get(plural)
    if template is None:
        raise UnknownEntityError(entity, list(SAMPLE_TEMPLATES))
    return template


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"

    text = str(value)
    if "," in text or '"' in text or "\n" in text:
        return '"' + text.replace('"', '""') + '"'
    return text
