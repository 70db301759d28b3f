"""Pytest configuration and fixtures for planorder tests."""

from typing import Any, Dict, List, Optional, Sequence

import pytest

from planorder.schemas import PlanStep


# =============================================================================
# SAMPLE REPORTS
# =============================================================================

# SELECT * FROM emp e JOIN dept d ON e.deptno = d.deptno, DBMS_XPLAN.DISPLAY
EMP_DEPT_REPORT = """\
Plan hash value: 844388907

----------------------------------------------------------------------------------------
| Id  | Operation                    | Name    | Rows  | Bytes | Cost (%CPU)| Time     |
----------------------------------------------------------------------------------------
|   0 | SELECT STATEMENT             |         |    14 |   812 |     6  (17)| 00:00:01 |
|   1 |  MERGE JOIN                  |         |    14 |   812 |     6  (17)| 00:00:01 |
|   2 |   TABLE ACCESS BY INDEX ROWID| DEPT    |     4 |    80 |     2   (0)| 00:00:01 |
|   3 |    INDEX FULL SCAN           | PK_DEPT |     4 |       |     1   (0)| 00:00:01 |
|*  4 |   SORT JOIN                  |         |    14 |   532 |     4  (25)| 00:00:01 |
|   5 |    TABLE ACCESS FULL         | EMP     |    14 |   532 |     3   (0)| 00:00:01 |
----------------------------------------------------------------------------------------

Predicate Information (identified by operation id):
---------------------------------------------------

   4 - access("E"."DEPTNO"="D"."DEPTNO")
       filter("E"."DEPTNO"="D"."DEPTNO")
"""

EMP_DEPT_ROWS = [
    {"id": 0, "parent_id": None, "object_owner": None, "object_name": None},
    {"id": 1, "parent_id": 0, "object_owner": None, "object_name": None},
    {"id": 2, "parent_id": 1, "object_owner": "SCOTT", "object_name": "DEPT"},
    {"id": 3, "parent_id": 2, "object_owner": "SCOTT", "object_name": "PK_DEPT"},
    {"id": 4, "parent_id": 1, "object_owner": None, "object_name": None},
    {"id": 5, "parent_id": 4, "object_owner": "SCOTT", "object_name": "EMP"},
]

# Execution order of the MERGE JOIN plan above
EMP_DEPT_ORDER = {0: 6, 1: 5, 2: 2, 3: 1, 4: 4, 5: 3}


def make_steps(parents: Dict[int, Optional[int]], group_key: Any = None) -> List[PlanStep]:
    """Steps from an {id: parent_id} mapping."""
    return [PlanStep(id=i, parent_id=p, group_key=group_key) for i, p in parents.items()]


def render_table(steps: Sequence[PlanStep], plan_hash_value: Optional[int] = None) -> List[str]:
    """Minimal DBMS_XPLAN-like text for a list of steps."""
    id_width = max(2, max(len(str(s.id)) for s in steps))
    name_width = max([4] + [len(s.object_name or "") for s in steps])
    header = f"| {'Id':>{id_width}} | {'Operation':<20} | {'Name':<{name_width}} |"
    rule = "-" * len(header)
    lines = []
    if plan_hash_value is not None:
        lines += [f"Plan hash value: {plan_hash_value}", ""]
    lines += [rule, header, rule]
    for step in steps:
        operation = "TABLE ACCESS FULL" if step.object_name else "NESTED LOOPS"
        lines.append(
            f"| {step.id:>{id_width}} | {operation:<20} | {(step.object_name or ''):<{name_width}} |"
        )
    lines += [rule, ""]
    return lines


class FakeExecutor:
    """Stands in for OracleExecutor: canned rows per SQL fragment.

    Args:
        responses: (fragment, rows) pairs; the first fragment found in the
            SQL text wins. ``rows`` may be a callable taking the params.
    """

    def __init__(self, responses: Sequence = ()):
        self.responses = list(responses)
        self.calls: List[tuple] = []
        self.closed = False

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self.calls.append((sql, dict(params or {})))
        for fragment, rows in self.responses:
            if fragment in sql:
                return rows(params or {}) if callable(rows) else [dict(r) for r in rows]
        return []

    def sql_matching(self, fragment: str) -> List[tuple]:
        return [call for call in self.calls if fragment in call[0]]

    def __enter__(self) -> "FakeExecutor":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.closed = True


def output_rows(lines: Sequence[str]) -> List[Dict[str, str]]:
    """DBMS_XPLAN pipelined output as rows."""
    return [{"plan_table_output": line} for line in lines]


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate every test from PLANORDER_* variables and a local .env."""
    import os

    from planorder.config import get_settings

    for name in list(os.environ):
        if name.startswith("PLANORDER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def report_lines() -> List[str]:
    return EMP_DEPT_REPORT.splitlines()


@pytest.fixture
def steps() -> List[PlanStep]:
    return [PlanStep.from_row(row) for row in EMP_DEPT_ROWS]


@pytest.fixture
def fake_executor():
    return FakeExecutor
