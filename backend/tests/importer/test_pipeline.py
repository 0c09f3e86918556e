"""End-to-end tests for the CSV import pipelines."""

import pytest

from school_portal.services.importer import (
    BatchValidator,
    get_pipeline,
    parse_classes_csv,
    parse_subjects_csv,
    parse_teachers_csv,
    parse_terms_csv,
)
from school_portal.services.importer.entities import CLASSES, TEACHERS, UnknownEntityError

CLASS_HEADER = "name,level,academicYear,teacherId"
SUBJECT_HEADER = "name,code,maxScore,description"
TERM_HEADER = "name,startDate,endDate,isCurrent,academicYear"
TEACHER_HEADER = "name,email,phone"


class TestClassesImport:
    def test_parses_valid_file(self, make_csv):
        result = parse_classes_csv(
            make_csv(CLASS_HEADER, "JSS 1A,JSS1,2024/2025,teacher-1", "JSS 2B,JSS2,2024/2025,teacher-2")
        )
        assert result.success is True
        assert result.errors == []
        assert len(result.data) == 2
        assert result.data[0].model_dump(by_alias=True) == {
            "name": "JSS 1A",
            "level": "JSS1",
            "academicYear": "2024/2025",
            "teacherId": "teacher-1",
        }

    def test_optional_teacher_id(self, make_csv):
        result = parse_classes_csv(make_csv(CLASS_HEADER, "JSS 1A,JSS1,2024/2025,", "JSS 2B,JSS2,2024/2025,teacher-2"))
        assert result.data[0].teacher_id is None
        assert result.data[1].teacher_id == "teacher-2"

    def test_teacher_id_column_may_be_omitted(self, make_csv):
        result = parse_classes_csv(make_csv("name,level,academicYear", "JSS 1A,JSS1,2024/2025"))
        assert result.success is True

    def test_missing_headers_short_circuit(self):
        result = parse_classes_csv("name,level\nJSS 1A,JSS1")
        assert result.success is False
        assert result.data == []
        assert result.errors == ["Missing required header: academicYear"]

    def test_empty_file(self):
        result = parse_classes_csv("")
        assert result.success is False
        assert result.data == []
        assert result.errors == ["CSV file is empty"]

    def test_header_only_file_succeeds_with_no_rows(self):
        result = parse_classes_csv(CLASS_HEADER)
        assert result.success is True
        assert result.data == []

    def test_bom_is_ignored(self, make_csv):
        text = make_csv(CLASS_HEADER, "JSS 1A,JSS1,2024/2025,teacher-1")
        assert parse_classes_csv("\ufeff" + text) == parse_classes_csv(text)
        assert parse_classes_csv("\ufeff" + text).success is True

    def test_duplicate_names_keep_first(self, make_csv):
        result = parse_classes_csv(
            make_csv(CLASS_HEADER, "JSS 1A,JSS1,2024/2025,t1", "JSS 1A,JSS2,2024/2025,t2")
        )
        assert result.success is False
        assert result.errors == ["Duplicate class name found: JSS 1A"]
        assert len(result.data) == 1
        assert result.data[0].teacher_id == "t1"

    def test_class_names_compare_case_sensitively(self, make_csv):
        result = parse_classes_csv(make_csv(CLASS_HEADER, "JSS 1A,JSS1,2024/2025,", "jss 1a,JSS1,2024/2025,"))
        assert result.success is True

    def test_row_cap(self):
        rows = [f"Class {i},JSS1,2024/2025," for i in range(101)]
        result = parse_classes_csv("\n".join([CLASS_HEADER, *rows]))
        assert result.success is False
        assert "Maximum 100 classes allowed per import" in result.errors

    def test_row_cap_counts_invalid_rows(self):
        rows = [f"Class {i},JSS1,2024/2025," for i in range(100)]
        result = parse_classes_csv("\n".join([CLASS_HEADER, *rows, ",JSS1,2024/2025,"]))
        assert result.errors == [
            'Row 101: Missing required field "name"',
            "Maximum 100 classes allowed per import",
        ]
        assert len(result.data) == 100

    def test_row_cap_with_mostly_invalid_rows(self):
        valid = [f"Class {i},JSS1,2024/2025," for i in range(90)]
        invalid = [f"Class X{i},JSS1,24/25," for i in range(60)]
        result = parse_classes_csv("\n".join([CLASS_HEADER, *valid, *invalid]))
        assert "Maximum 100 classes allowed per import" in result.errors
        assert sum(e.startswith("Row ") for e in result.errors) == 60

    def test_exactly_at_cap_is_allowed(self):
        rows = [f"Class {i},JSS1,2024/2025," for i in range(100)]
        assert parse_classes_csv("\n".join([CLASS_HEADER, *rows])).success is True

    def test_row_errors_do_not_stop_processing(self, make_csv):
        result = parse_classes_csv(
            make_csv(CLASS_HEADER, ",JSS1,2024/2025,", "JSS 2B,JSS2,2024/2025,", "JSS 3C,JSS3,24/25,")
        )
        assert result.success is False
        assert result.errors == [
            'Row 1: Missing required field "name"',
            "Row 3: Invalid academic year format. Use YYYY/YYYY (e.g., 2024/2025)",
        ]
        assert [r.name for r in result.data] == ["JSS 2B"]

    def test_row_numbers_ignore_blank_lines(self):
        result = parse_classes_csv(f"{CLASS_HEADER}\n\nJSS 1A,JSS1,2024/2025,\n\n,JSS1,2024/2025,")
        assert result.errors == ['Row 2: Missing required field "name"']

    def test_issues_carry_codes(self, make_csv):
        result = parse_classes_csv(make_csv(CLASS_HEADER, ",JSS1,2024/2025,"))
        issue = result.issues[0]
        assert (issue.code, issue.row, issue.field) == ("MISSING_REQUIRED", 1, "name")


class TestSubjectsImport:
    def test_parses_valid_file(self, make_csv):
        result = parse_subjects_csv(make_csv(SUBJECT_HEADER, "Mathematics,MATH,100,Core subject"))
        assert result.success is True
        assert result.data[0].model_dump(by_alias=True) == {
            "name": "Mathematics",
            "code": "MATH",
            "maxScore": 100,
            "description": "Core subject",
        }

    def test_duplicate_code_keeps_first(self):
        result = parse_subjects_csv(
            "name,code,maxScore,description\nMath,MATH,100,Core\nMath2,MATH,100,Core"
        )
        assert result.success is False
        assert len(result.data) == 1
        assert result.data[0].name == "Math"
        assert result.errors == ["Duplicate subject code found: MATH"]

    def test_max_score_must_be_numeric_and_positive(self, make_csv):
        result = parse_subjects_csv(make_csv(SUBJECT_HEADER, "Math,MATH,abc,", "English,ENG,0,"))
        assert result.errors == [
            "Row 1: maxScore must be a positive number",
            "Row 2: maxScore must be a positive number",
        ]

    def test_missing_max_score_header(self, make_csv):
        result = parse_subjects_csv(make_csv("name,code,description", "Math,MATH,Core"))
        assert result.errors == ["Missing required header: maxScore"]

    def test_row_cap(self):
        rows = [f"Subject {i},SUB{i},100," for i in range(51)]
        result = parse_subjects_csv("\n".join([SUBJECT_HEADER, *rows]))
        assert "Maximum 50 subjects allowed per import" in result.errors


class TestTermsImport:
    def test_parses_valid_file(self, make_csv):
        result = parse_terms_csv(make_csv(TERM_HEADER, "First Term,2024-09-01,2024-12-15,true,2024/2025"))
        assert result.success is True
        assert result.data[0].model_dump(by_alias=True) == {
            "name": "First Term",
            "startDate": "2024-09-01",
            "endDate": "2024-12-15",
            "isCurrent": True,
            "academicYear": "2024/2025",
        }

    def test_is_current_boolean(self, make_csv):
        result = parse_terms_csv(
            make_csv(
                TERM_HEADER,
                "First Term,2024-09-01,2024-12-15,TRUE,2024/2025",
                "Second Term,2025-01-06,2025-04-15,false,2024/2025",
            )
        )
        assert [r.is_current for r in result.data] == [True, False]

    def test_end_date_after_start_date(self, make_csv):
        result = parse_terms_csv(make_csv(TERM_HEADER, "First Term,2024-12-15,2024-09-01,true,2024/2025"))
        assert result.errors == ["Row 1: endDate must be after startDate"]

    def test_missing_is_current_header(self, make_csv):
        result = parse_terms_csv(make_csv("name,startDate,endDate,academicYear", "T,2024-09-01,2024-12-15,2024/2025"))
        assert result.errors == ["Missing required header: isCurrent"]

    def test_duplicate_term_name(self, make_csv):
        result = parse_terms_csv(
            make_csv(
                TERM_HEADER,
                "First Term,2024-09-01,2024-12-15,true,2024/2025",
                "First Term,2025-01-06,2025-04-15,false,2025/2026",
            )
        )
        assert result.errors == ["Duplicate term name found: First Term"]

    def test_row_cap(self):
        rows = [f"Term {i},2024-09-01,2024-12-15,false,2024/2025" for i in range(21)]
        result = parse_terms_csv("\n".join([TERM_HEADER, *rows]))
        assert "Maximum 20 terms allowed per import" in result.errors


class TestTeachersImport:
    def test_trims_whitespace(self, make_csv):
        result = parse_teachers_csv(make_csv(TEACHER_HEADER, "  John Doe  ,  john@school.com  ,  1234567890  "))
        assert result.success is True
        row = result.data[0]
        assert (row.name, row.email, row.phone) == ("John Doe", "john@school.com", "1234567890")

    def test_optional_phone(self, make_csv):
        result = parse_teachers_csv(make_csv(TEACHER_HEADER, "John,john@school.com,", "Jane,jane@school.com,0987654321"))
        assert result.data[0].phone is None
        assert result.data[1].phone == "0987654321"

    def test_phone_header_is_required(self, make_csv):
        result = parse_teachers_csv(make_csv("name,email", "John,john@school.com"))
        assert result.errors == ["Missing required header: phone"]

    def test_duplicate_email_is_case_insensitive(self, make_csv):
        result = parse_teachers_csv(
            make_csv(TEACHER_HEADER, "John,john@school.com,", "Johnny,JOHN@School.com,")
        )
        assert result.errors == ["Duplicate email found: JOHN@School.com"]
        assert [r.name for r in result.data] == ["John"]

    def test_invalid_email(self, make_csv):
        result = parse_teachers_csv(make_csv(TEACHER_HEADER, "John,invalid-email,"))
        assert result.errors == ["Row 1: Invalid email format"]

    def test_row_cap(self):
        rows = [f"Teacher {i},t{i}@school.com," for i in range(101)]
        result = parse_teachers_csv("\n".join([TEACHER_HEADER, *rows]))
        assert "Maximum 100 teachers allowed per import" in result.errors


class TestBatchValidator:
    def test_cap_error_comes_before_duplicates(self):
        rows = [CLASSES.row_model(name="Same", level="L", academic_year="2024/2025")] * 101
        errors = BatchValidator(CLASSES).validate(rows)
        assert errors[0] == "Maximum 100 classes allowed per import"
        assert errors.count("Duplicate class name found: Same") == 100

    def test_cap_uses_parsed_count_when_given(self):
        rows = [CLASSES.row_model(name=f"C{i}", level="L", academic_year="2024/2025") for i in range(3)]
        assert BatchValidator(CLASSES).validate(rows, parsed_count=101) == [
            "Maximum 100 classes allowed per import"
        ]
        assert BatchValidator(CLASSES).validate(rows) == []

    def test_each_later_duplicate_is_reported(self):
        rows = [TEACHERS.row_model(name=f"T{i}", email="a@b.co") for i in range(3)]
        accepted, issues = BatchValidator(TEACHERS).check(rows)
        assert [r.name for r in accepted] == ["T0"]
        assert [i.code for i in issues] == ["DUPLICATE", "DUPLICATE"]


class TestPipelineLookup:
    @pytest.mark.parametrize("name", ["classes", "class"])
    def test_plural_and_singular(self, name):
        assert get_pipeline(name).schema is CLASSES

    def test_unknown_entity(self):
        with pytest.raises(UnknownEntityError) as exc_info:
            get_pipeline("students")
        assert "Supported types: classes, subjects, teachers, terms" in str(exc_info.value)
