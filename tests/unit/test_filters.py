"""Tests for filter and sort compilation."""

import re

import pytest

from gridsql.constants import SortDirection
from gridsql.query_builder.filters import EMPTY_FILTER, CompiledFilter, compile_filters, compile_sort, translate_wildcard_pattern
from gridsql.types import ColumnDescriptor, FilterCriterion, SortSpec, TableReference, TableSchema

from tests.conftest import like_to_regex


@pytest.fixture
def schema():
    return TableSchema(
        table=TableReference(schema="SQLUser", name="People"),
        columns=[
            ColumnDescriptor(name="ID", sql_type="INTEGER", is_identity=True),
            ColumnDescriptor(name="Name", sql_type="VARCHAR"),
            ColumnDescriptor(name="City", sql_type="VARCHAR"),
        ],
        primary_key="ID",
    )


class TestTranslateWildcardPattern:
    """Test the * / ? filter syntax translation."""

    @pytest.mark.parametrize(
        "pattern,expected",
        [
            ("Sm*h", "Sm%h"),
            ("J?n", "J_n"),
            ("100%", "100\\%"),
            ("a_b", "a\\_b"),
            ("back\\slash", "back\\\\slash"),
            ("*_*", "%\\_%"),
        ],
    )
    def test_translation(self, pattern, expected):
        assert translate_wildcard_pattern(pattern) == expected

    def test_star_matches_any_run(self):
        """'Sm*h' matches Smith and Smyth but not Smi."""
        regex = like_to_regex(translate_wildcard_pattern("Sm*h"))
        assert regex.fullmatch("Smith")
        assert regex.fullmatch("smyth")
        assert not regex.fullmatch("Smi")

    def test_literal_percent_is_not_a_wildcard(self):
        regex = like_to_regex(translate_wildcard_pattern("100%"))
        assert regex.fullmatch("100%")
        assert not regex.fullmatch("1000")


class TestCompileFilters:
    """Test WHERE clause compilation."""

    def test_no_criteria(self, schema):
        compiled = compile_filters(None, schema)
        assert compiled.is_empty
        assert compiled.parameters == ()

    def test_single_criterion(self, schema):
        compiled = compile_filters([FilterCriterion(column="Name", pattern="Sm*h")], schema)
        assert compiled.where_clause == "WHERE UPPER(\"Name\") LIKE UPPER(?) ESCAPE '\\'"
        assert compiled.parameters == ("Sm%h",)

    def test_multiple_criteria_join_with_and(self, schema):
        compiled = compile_filters(
            [FilterCriterion(column="Name", pattern="A*"), FilterCriterion(column="City", pattern="?oston")],
            schema,
        )
        assert compiled.where_clause.count("LIKE UPPER(?)") == 2
        assert " AND " in compiled.where_clause
        assert compiled.parameters == ("A%", "_oston")

    def test_pattern_text_never_reaches_sql(self, schema):
        """Values travel only as parameters."""
        hostile = "x' OR '1'='1"
        compiled = compile_filters([FilterCriterion(column="Name", pattern=hostile)], schema)
        assert hostile not in compiled.where_clause
        assert compiled.parameters == (hostile,)

    def test_unknown_column_and_blank_pattern_are_dropped(self, schema):
        compiled = compile_filters(
            [
                FilterCriterion(column="Missing", pattern="x"),
                FilterCriterion(column="Name; --", pattern="x"),
                FilterCriterion(column="City", pattern="   "),
            ],
            schema,
        )
        assert compiled.is_empty

    def test_placeholders_match_parameters(self, schema):
        compiled = compile_filters(
            [FilterCriterion(column="Name", pattern="a"), FilterCriterion(column="City", pattern="b")],
            schema,
        )
        assert compiled.where_clause.count("?") == len(compiled.parameters)

    def test_default_filter_is_immutable(self):
        """Filters built without arguments share no mutable state."""
        first, second = CompiledFilter(), CompiledFilter()
        assert first.parameters == ()
        assert isinstance(first.parameters, tuple)
        assert first == second == EMPTY_FILTER
        assert first.is_empty


class TestCompileSort:
    """Test ORDER BY compilation."""

    def test_sort_with_tiebreaker(self, schema):
        spec = SortSpec(column="Name", direction=SortDirection.DESCENDING)
        assert compile_sort(spec, schema, "ID") == 'ORDER BY "Name" DESC, "ID" ASC'

    def test_tiebreaker_alone_when_no_sort(self, schema):
        assert compile_sort(SortSpec.none(), schema, "ID") == 'ORDER BY "ID" ASC'
        assert compile_sort(None, schema, "ID") == 'ORDER BY "ID" ASC'

    def test_sort_on_tiebreaker_column_is_not_repeated(self, schema):
        spec = SortSpec(column="ID", direction=SortDirection.DESCENDING)
        assert compile_sort(spec, schema, "ID") == 'ORDER BY "ID" DESC'

    def test_unknown_sort_column_fails_closed(self, schema):
        spec = SortSpec(column="Name DESC; DROP TABLE x", direction=SortDirection.ASCENDING)
        assert compile_sort(spec, schema) == ""

    def test_no_sort_and_no_tiebreaker(self, schema):
        assert compile_sort(None, schema) == ""

    def test_ascending_keyword(self, schema):
        spec = SortSpec(column="City")
        assert re.fullmatch(r'ORDER BY "City" ASC', compile_sort(spec, schema))
