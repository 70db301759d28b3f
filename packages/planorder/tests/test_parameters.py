"""Tests for parameter validation."""

import pytest

from planorder.errors import ParameterError
from planorder.parameters import (
    parse_non_negative_int,
    validate_format,
    validate_sql_id,
    validate_statement_id,
    validate_table_name,
)


class TestSqlId:
    def test_valid(self):
        assert validate_sql_id(" 9vfvgsk7mtkr4 ") == "9vfvgsk7mtkr4"

    @pytest.mark.parametrize("sql_id", ["9vfvgsk7mtkr", "9VFVGSK7MTKR4", "9vfvgsk7mtkr4x", "9vfvgsk7mtk-4"])
    def test_invalid(self, sql_id):
        with pytest.raises(ParameterError, match="Invalid SQL_ID"):
            validate_sql_id(sql_id)

    def test_required(self):
        with pytest.raises(ParameterError):
            validate_sql_id(None)

    def test_optional(self):
        assert validate_sql_id("", required=False) is None


class TestTableName:
    def test_default(self):
        assert validate_table_name(None) == "PLAN_TABLE"

    def test_upper_cased(self):
        assert validate_table_name("scott.my_plans") == "SCOTT.MY_PLANS"

    @pytest.mark.parametrize("name", ["1plans", "plans; drop table emp", "a.b.c", '"plans"'])
    def test_invalid(self, name):
        with pytest.raises(ParameterError):
            validate_table_name(name)


class TestOtherParameters:
    def test_statement_id(self):
        assert validate_statement_id(None) is None
        assert validate_statement_id("stmt1") == "stmt1"
        with pytest.raises(ParameterError):
            validate_statement_id("x" * 31)

    def test_format(self):
        assert validate_format(None) == "TYPICAL"
        assert validate_format("basic +projection -rows") == "basic +projection -rows"
        with pytest.raises(ParameterError):
            validate_format("typical'); drop table emp; --")

    def test_integers(self):
        assert parse_non_negative_int(None, "Child number") is None
        assert parse_non_negative_int(" 3 ", "Child number") == 3
        with pytest.raises(ParameterError, match="must be an integer"):
            parse_non_negative_int("three", "Child number")
        with pytest.raises(ParameterError, match="must not be negative"):
            parse_non_negative_int("-1", "DBID")
