"""Filter and sort compilation.

Filter patterns become bound LIKE parameters; only validated column names
reach the SQL text. Unknown columns are dropped rather than rejected so a
grid with stale column state still gets a usable page.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple

from gridsql.constants import (
    LIKE_ESCAPE_CHAR,
    SortDirection,
)
from gridsql.constants.sql import (
    FILTER_WILDCARD_ANY,
    FILTER_WILDCARD_SINGLE,
    LIKE_ANY,
    LIKE_SINGLE,
)
from gridsql.logging import get_logger
from gridsql.query_builder.identifiers import is_valid_identifier, validate_identifier
from gridsql.types import FilterCriterion, SortSpec, TableSchema

logger = get_logger(__name__)


class CompiledFilter(NamedTuple):
    """WHERE clause (or ``""``) plus its bound parameters, in order."""
    where_clause: str = ""
    parameters: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.where_clause


EMPTY_FILTER = CompiledFilter()


def translate_wildcard_pattern(pattern: str) -> str:
    """Translate the ``*``/``?`` filter syntax into a LIKE pattern.

    Literal ``\\``, ``%`` and ``_`` in the user text are escaped first so
    they match themselves; then ``*`` becomes ``%`` and ``?`` becomes ``_``.
    The result is meant to be used with ``ESCAPE '\\'``.
    """
    escaped = (
        pattern.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace(LIKE_ANY, LIKE_ESCAPE_CHAR + LIKE_ANY)
        .replace(LIKE_SINGLE, LIKE_ESCAPE_CHAR + LIKE_SINGLE)
    )
    return escaped.replace(FILTER_WILDCARD_ANY, LIKE_ANY).replace(FILTER_WILDCARD_SINGLE, LIKE_SINGLE)


def compile_filters(criteria: Optional[Sequence[FilterCriterion]], schema: TableSchema) -> CompiledFilter:
    """Compile filter criteria into a case-insensitive WHERE clause.

    Each surviving criterion yields ``UPPER("col") LIKE UPPER(?) ESCAPE '\\'``;
    predicates are joined with AND. Criteria naming a column missing from
    ``schema`` or carrying a blank pattern are skipped.
    """
    if not criteria:
        return EMPTY_FILTER

    conditions: List[str] = []
    params: List[str] = []

    for criterion in criteria:
        if not schema.has_column(criterion.column):
            logger.warning(
                "Filter ignored: unknown column",
                extra={"column": criterion.column, "table": schema.table.qualified_name},
            )
            continue

        pattern = criterion.pattern.strip()
        if not pattern:
            continue

        column = validate_identifier(criterion.column, "filter column")
        conditions.append(f"UPPER({column}) LIKE UPPER(?) ESCAPE '{LIKE_ESCAPE_CHAR}'")
        params.append(translate_wildcard_pattern(pattern))

    if not conditions:
        return EMPTY_FILTER

    return CompiledFilter(f"WHERE {' AND '.join(conditions)}", tuple(params))


def compile_sort(
    spec: Optional[SortSpec],
    schema: TableSchema,
    tiebreaker: Optional[str] = None,
) -> str:
    """Compile the sort spec into an ORDER BY clause, or ``""``.

    Fails closed: an unknown or malformed sort column drops the sort
    instead of raising. ``tiebreaker`` (normally the primary key) is
    appended ascending when it is a valid schema column other than the
    sort column, and is used on its own when no sort is active.
    """
    keys: List[str] = []
    sort_column: Optional[str] = None

    if spec is not None and spec.is_active:
        if not schema.has_column(spec.column) or not is_valid_identifier(spec.column):
            logger.warning(
                "Sort ignored: unknown column",
                extra={"column": spec.column, "table": schema.table.qualified_name},
            )
        else:
            direction = SortDirection(spec.direction)
            sort_column = spec.column.strip()
            keys.append(f"{validate_identifier(sort_column, 'sort column')} {direction.keyword}")

    if tiebreaker and tiebreaker != sort_column:
        if schema.has_column(tiebreaker) and is_valid_identifier(tiebreaker):
            keys.append(f"{validate_identifier(tiebreaker, 'primary key column')} ASC")
        else:
            logger.warning(
                "Tiebreaker ignored: unknown column",
                extra={"column": tiebreaker, "table": schema.table.qualified_name},
            )

    if not keys:
        return ""
    return f"ORDER BY {', '.join(keys)}"
