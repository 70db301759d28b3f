"""Tests for column_injector: Pid/Ord cells after the Id column."""

import logging

import pytest

from planorder.column_injector import ColumnInjector, format_cell, splice_index
from planorder.errors import RenderMismatchError
from planorder.line_classifier import classify_lines
from planorder.plan_tree import build_plan_map
from planorder.schemas import MismatchSeverity, PlanMap, column_width

from conftest import make_steps, render_table


EXPECTED_TABLE = [
    "----------------------------------------------------------------------------------------------------",
    "| Id  | Pid | Ord | Operation                    | Name    | Rows  | Bytes | Cost (%CPU)| Time     |",
    "----------------------------------------------------------------------------------------------------",
    "|   0 |     |   6 | SELECT STATEMENT             |         |    14 |   812 |     6  (17)| 00:00:01 |",
    "|   1 |   0 |   5 |  MERGE JOIN                  |         |    14 |   812 |     6  (17)| 00:00:01 |",
    "|   2 |   1 |   2 |   TABLE ACCESS BY INDEX ROWID| DEPT    |     4 |    80 |     2   (0)| 00:00:01 |",
    "|   3 |   2 |   1 |    INDEX FULL SCAN           | PK_DEPT |     4 |       |     1   (0)| 00:00:01 |",
    "|*  4 |   1 |   4 |   SORT JOIN                  |         |    14 |   532 |     4  (25)| 00:00:01 |",
    "|   5 |   4 |   3 |    TABLE ACCESS FULL         | EMP     |    14 |   532 |     3   (0)| 00:00:01 |",
    "----------------------------------------------------------------------------------------------------",
]


def inject(lines, steps, severity=MismatchSeverity.IGNORE):
    injector = ColumnInjector(build_plan_map(steps), severity)
    return injector, [line.text for line in injector.inject_all(classify_lines(lines))]


class TestCells:
    def test_format_cell(self):
        assert format_cell("Pid", 6) == " Pid |"
        assert format_cell(12, 6) == "  12 |"
        assert format_cell(None, 6) == "     |"
        assert format_cell(1234, 7) == " 1234 |"

    def test_splice_index(self):
        assert splice_index("| Id  | Operation |") == 7
        assert splice_index("no delimiters") is None
        assert splice_index("| one") is None

    @pytest.mark.parametrize(
        "max_order, width",
        [(1, 6), (9, 6), (999, 6), (1000, 7), (12345, 8)],
    )
    def test_column_width(self, max_order, width):
        assert column_width(max_order) == width


class TestInjection:
    def test_sample_report(self, report_lines, steps):
        _, annotated = inject(report_lines, steps)
        assert annotated[2:12] == EXPECTED_TABLE

    def test_surrounding_text_untouched(self, report_lines, steps):
        _, annotated = inject(report_lines, steps)
        assert annotated[:2] == report_lines[:2]
        assert annotated[12:] == report_lines[12:]

    def test_table_lines_stay_aligned(self, report_lines, steps):
        _, annotated = inject(report_lines, steps)
        assert len({len(line) for line in annotated[2:12]}) == 1

    def test_continuation_gets_blank_cells(self):
        steps = make_steps({0: None})
        lines = [
            "---------------------",
            "| Id  | Operation   |",
            "|   0 | SELECT      |",
            "|     |  (cont.)    |",
            "---------------------",
        ]
        _, annotated = inject(lines, steps)
        assert annotated[3] == "|     |     |     |  (cont.)    |"

    def test_wide_plan_uses_wider_cells(self):
        parents = {0: None}
        parents.update({i: 0 for i in range(1, 1000)})
        steps = make_steps(parents)
        injector, annotated = inject(render_table(steps), steps)
        assert injector.width == 7
        assert annotated[1].startswith("|  Id |  Pid |  Ord |")
        assert annotated[3].startswith("|   0 |      | 1000 |")
        assert annotated[0] == "-" * 14 + render_table(steps)[0]

    def test_no_plan_steps_leaves_report_unchanged(self, report_lines):
        injector = ColumnInjector(PlanMap())
        texts = [line.text for line in injector.inject_all(classify_lines(report_lines))]
        assert texts == report_lines

    def test_strip_restores_input(self, report_lines, steps):
        injector = ColumnInjector(build_plan_map(steps))
        spliced = injector.inject_all(classify_lines(report_lines))
        restored = [line.head + line.tail for line in spliced]
        assert restored == report_lines


class TestMismatch:
    def steps_without_five(self):
        return make_steps({0: None, 1: 0, 2: 1, 3: 2, 4: 1})

    def test_ignore_keeps_row_verbatim(self, report_lines):
        injector, annotated = inject(report_lines, self.steps_without_five())
        assert annotated[10] == report_lines[10]
        assert injector.unmatched == [5]

    def test_warn_logs(self, report_lines, caplog):
        with caplog.at_level(logging.WARNING, logger="planorder.column_injector"):
            injector, annotated = inject(report_lines, self.steps_without_five(), MismatchSeverity.WARN)
        assert annotated[10] == report_lines[10]
        assert "step id 5" in caplog.text

    def test_error_raises(self, report_lines):
        with pytest.raises(RenderMismatchError) as exc:
            inject(report_lines, self.steps_without_five(), MismatchSeverity.ERROR)
        assert exc.value.step_id == 5

    def test_severity_from_string(self):
        injector = ColumnInjector(PlanMap(), "warn")
        assert injector.severity == MismatchSeverity.WARN
