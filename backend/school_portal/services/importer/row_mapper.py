"""Row mapper for import engine."""

import math
from typing import Any

from school_portal.schemas.csv_import import CSVRow
from school_portal.services.importer.entities import ImportSchema

# Stored for number cells that do not parse; the row validator rejects it
INVALID_NUMBER = -1

TRUE_VALUES = frozenset({"true", "1", "yes"})


class RowMapper:
    """Map tokenized CSV rows to typed row records according to schema."""

    def __init__(self, schema: ImportSchema):
        """
        Initialize row mapper.

        Args:
            schema: Import schema with mapping configuration
        """
        self.schema = schema
        self.mapping = schema.mapping

    def map_row(self, cells: list[str], header_index: dict[str, int]) -> CSVRow:
        """
        Map a tokenized CSV row to the schema's row model.

        Args:
            cells: Cell values of one data line
            header_index: Column position per header name

        Returns:
            Row model instance with trimmed and coerced values
        """
        values: dict[str, Any] = {}

        for field_name, config in self.mapping.items():
            position = header_index.get(config["column"])
            raw_value = ""
            if position is not None and position < len(cells):
                raw_value = cells[position].strip()

            mapped_value = self._transform_value(raw_value, config)

            # Blank optional cells stay unset rather than ""
            if mapped_value is None:
                continue
            values[field_name] = mapped_value

        return self.schema.row_model(**values)

    def _transform_value(self, value: str, config: dict[str, Any]) -> Any:
        """
        Transform a cell value according to its field config.

        Args:
            value: Trimmed cell value
            config: Field configuration from mapping

        Returns:
            Transformed value, or None for a blank optional field
        """
        field_type = config.get("type", "string")

        if field_type == "number":
            return parse_number(value)

        if field_type == "boolean":
            return value.lower() in TRUE_VALUES

        if not value and config.get("optional"):
            return None

        return value


def parse_number(value: str) -> int | float:
    """
    Parse a numeric cell; whole numbers come back as int, anything unparseable as -1.

    Accepts whatever ``float()`` accepts, so exponents (``1e2``), digit
    separators (``1_000``) and non-ASCII decimal digits parse as numbers.
    """
    try:
        number = float(value)
    except (ValueError, TypeError):
        return INVALID_NUMBER

    if not math.isfinite(number):
        return INVALID_NUMBER
    if number.is_integer():
        return int(number)
    return number
