"""Identifier validation and quoting.

Every schema, table and column name that ends up in SQL text passes through
``validate_identifier``. Identifiers cannot be bound as parameters, so this
module is the only place that turns a name into a SQL fragment.
"""

import re
from typing import Any

from gridsql.common.exceptions import invalid_identifier_error, invalid_input_error
from gridsql.constants import DEFAULT_SCHEMA, IDENTIFIER_PATTERN, MAX_IDENTIFIER_LENGTH
from gridsql.types import TableReference

_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN)


def is_valid_identifier(raw: Any) -> bool:
    """Check an identifier against the grammar without raising."""
    if not isinstance(raw, str):
        return False
    candidate = raw.strip()
    return len(candidate) <= MAX_IDENTIFIER_LENGTH and bool(_IDENTIFIER_RE.match(candidate))


def validate_identifier(raw: Any, role: str) -> str:
    """Validate an identifier and return it as an IRIS delimited identifier.

    Args:
        raw: Name to validate. Surrounding whitespace is ignored.
        role: What the name is used as, e.g. ``"column name"``. Carried
            into the error for diagnostics.

    Returns:
        The identifier wrapped in double quotes, e.g. ``"Name"``.

    Raises:
        GridSQLError: INVALID_IDENTIFIER when the name is empty, longer than
            128 characters or does not match ``^[A-Za-z_][A-Za-z0-9_]*$``.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise invalid_identifier_error(raw, role, "cannot be empty")

    candidate = raw.strip()
    if len(candidate) > MAX_IDENTIFIER_LENGTH:
        raise invalid_identifier_error(
            raw, role, f"exceeds {MAX_IDENTIFIER_LENGTH} characters"
        )
    if not _IDENTIFIER_RE.match(candidate):
        raise invalid_identifier_error(raw, role)

    return f'"{candidate}"'


def parse_qualified_table_name(display: str, default_schema: str = DEFAULT_SCHEMA) -> TableReference:
    """Split a ``schema.table`` display string on its first ``.``.

    Examples:
        ``"Ens_Lib.MessageHeader"`` -> schema ``Ens_Lib``, table ``MessageHeader``
        ``"Employees"`` -> schema ``SQLUser``, table ``Employees``

    Raises:
        GridSQLError: INVALID_IDENTIFIER when either segment is malformed,
            including a leading dot (empty schema).
    """
    if not isinstance(display, str):
        raise invalid_identifier_error(display, "table name", "is not a string")

    text = display.strip()
    if "." in text:
        schema_part, name_part = text.split(".", 1)
    else:
        schema_part, name_part = default_schema, text

    validate_identifier(schema_part, "schema name")
    validate_identifier(name_part, "table name")
    return TableReference(schema=schema_part.strip(), name=name_part.strip())


def escape_table_reference(table: TableReference) -> str:
    """Render a table reference as ``"schema"."name"``.

    Both segments are revalidated even though TableReference already
    constrains them.
    """
    escaped_schema = validate_identifier(table.schema_name, "schema name")
    escaped_name = validate_identifier(table.name, "table name")
    return f"{escaped_schema}.{escaped_name}"


def validate_non_negative_int(value: Any, role: str) -> int:
    """Validate a number that is interpolated into SQL text (TOP, %VID).

    Raises:
        GridSQLError: INVALID_INPUT unless ``value`` is an int >= 0.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise invalid_input_error(
            f"Invalid {role}: must be a non-negative integer, got {value!r}",
            field=role,
        )
    return value


def validate_positive_int(value: Any, role: str) -> int:
    """Like validate_non_negative_int but also rejects zero."""
    validate_non_negative_int(value, role)
    if value == 0:
        raise invalid_input_error(f"Invalid {role}: must be greater than zero", field=role)
    return value
