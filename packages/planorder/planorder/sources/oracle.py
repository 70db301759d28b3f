"""Oracle plan sources: plan table, cursor cache and AWR repository.

Each source reads the flat step rows from a catalog view and the rendered
report from the matching DBMS_XPLAN pipelined function:

    PlanTableSource    PLAN_TABLE           DBMS_XPLAN.DISPLAY
    CursorCacheSource  V$SQL_PLAN           DBMS_XPLAN.DISPLAY_CURSOR
    AwrSource          DBA_HIST_SQL_PLAN    DBMS_XPLAN.DISPLAY_AWR

Usage:
    with OracleExecutor(dsn="dbhost:1521/ORCLPDB1", user="scott", password="tiger") as db:
        source = CursorCacheSource(db)
        report = annotate_plan(source, source, PlanTarget("9vfvgsk7mtkr4", 0))
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from ..config import build_database_url, get_settings
from ..errors import CatalogAccessError, ParameterError
from ..parameters import validate_table_name
from ..schemas import PlanStep
from .base import PlanSource, PlanTarget

logger = logging.getLogger(__name__)


class OracleExecutor:
    """Minimal Oracle executor over a SQLAlchemy engine (python-oracledb).

    Usage:
        with OracleExecutor(dsn="localhost:1521/FREEPDB1", user="scott") as db:
            rows = db.execute("SELECT sysdate AS now FROM dual")

    Args:
        dsn: Easy Connect string (host:port/service) or a full SQLAlchemy URL.
        user: Database user.
        password: Database password.
        echo: Log every statement through SQLAlchemy.
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        echo: Optional[bool] = None,
    ):
        settings = get_settings()
        self.dsn = dsn or settings.oracle_dsn
        self.user = user or settings.oracle_user
        self.password = password if password is not None else settings.oracle_password
        self.echo = settings.oracle_echo if echo is None else echo
        self._engine: Optional[Engine] = None
        self._conn: Optional[Connection] = None

    @property
    def url(self) -> str:
        return build_database_url(self.dsn, self.user, self.password)

    def connect(self) -> None:
        """Open the connection (no-op when already open)."""
        if self._conn is not None:
            return
        if not self.dsn:
            raise CatalogAccessError(
                "No Oracle DSN configured. Pass --dsn or set PLANORDER_ORACLE_DSN."
            )
        try:
            self._engine = create_engine(self.url, echo=self.echo, poolclass=NullPool)
            self._conn = self._engine.connect()
        except ImportError as e:
            raise CatalogAccessError(
                "python-oracledb is required for Oracle access. "
                "Install it with: pip install oracledb"
            ) from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to connect to Oracle at {self.dsn}: {e}")
            raise CatalogAccessError(f"Cannot connect to Oracle at {self.dsn}: {e}") from e
        logger.info(f"Connected to Oracle {self.dsn} as {self.user}")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "OracleExecutor":
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a query and return rows as dicts with lower-case keys."""
        self.connect()
        assert self._conn is not None
        try:
            result = self._conn.execute(text(sql), params or {})
            return [
                {str(k).lower(): v for k, v in row.items()}
                for row in result.mappings()
            ]
        except SQLAlchemyError as e:
            logger.error(f"Oracle query failed: {e}")
            raise CatalogAccessError(f"Oracle query failed: {e}") from e


def _steps_from_rows(rows: List[Dict[str, Any]]) -> List[PlanStep]:
    return [PlanStep.from_row(row) for row in rows]


def _output_lines(rows: List[Dict[str, Any]]) -> List[str]:
    return [row.get("plan_table_output") or "" for row in rows]


class PlanTableSource(PlanSource):
    """Explained statements in a plan table (EXPLAIN PLAN output)."""

    name = "display"

    LATEST_PLAN_SQL = """
        SELECT NVL(MAX(plan_id), -1) AS plan_id
        FROM   {table}
        WHERE  id = 0
        AND    NVL(statement_id, '~') = COALESCE(:statement_id, statement_id, '~')
    """
    STEPS_SQL = """
        SELECT id, parent_id, object_owner, object_name
        FROM   {table}
        WHERE  plan_id = :plan_id
        ORDER  BY id
    """
    RENDER_SQL = """
        SELECT plan_table_output
        FROM   TABLE(DBMS_XPLAN.DISPLAY(:table_name, :statement_id, :plan_format, :filter_preds))
    """

    def __init__(self, executor: OracleExecutor):
        self.executor = executor
        self.plan_id: Optional[int] = None

    def resolve(self, target: PlanTarget) -> PlanTarget:
        return target.with_values(identifier=validate_table_name(target.identifier))

    def fetch_steps(self, target: PlanTarget) -> List[PlanStep]:
        table = validate_table_name(target.identifier)
        rows = self.executor.execute(
            self.LATEST_PLAN_SQL.format(table=table),
            {"statement_id": target.selector},
        )
        plan_id = int(rows[0]["plan_id"]) if rows else -1
        if plan_id < 0:
            logger.info(f"No explained plan in {table} for statement id {target.selector!r}")
            return []
        self.plan_id = plan_id
        return _steps_from_rows(
            self.executor.execute(self.STEPS_SQL.format(table=table), {"plan_id": plan_id})
        )

    def render(self, target: PlanTarget, group_key: Any = None) -> List[str]:
        filter_preds = f"plan_id = {self.plan_id}" if self.plan_id is not None else None
        rows = self.executor.execute(
            self.RENDER_SQL,
            {
                "table_name": validate_table_name(target.identifier),
                "statement_id": target.selector,
                "plan_format": target.format,
                "filter_preds": filter_preds,
            },
        )
        return _output_lines(rows)


class CursorCacheSource(PlanSource):
    """Plans of cursors in the shared pool."""

    name = "cursor"

    LAST_CURSOR_SQL = """
        SELECT prev_sql_id AS sql_id, prev_child_number AS child_number
        FROM   v$session
        WHERE  sid = SYS_CONTEXT('userenv', 'sid')
        AND    username IS NOT NULL
        AND    prev_hash_value <> 0
    """
    STEPS_SQL = """
        SELECT id, parent_id, object_owner, object_name
        FROM   v$sql_plan
        WHERE  sql_id = :sql_id
        AND    child_number = :child_number
        ORDER  BY id
    """
    RENDER_SQL = """
        SELECT plan_table_output
        FROM   TABLE(DBMS_XPLAN.DISPLAY_CURSOR(:sql_id, :child_number, :plan_format))
    """

    def __init__(self, executor: OracleExecutor):
        self.executor = executor

    def resolve(self, target: PlanTarget) -> PlanTarget:
        """Default to the session's previously executed cursor."""
        if target.identifier:
            return target.with_values(selector=target.selector or 0)
        rows = self.executor.execute(self.LAST_CURSOR_SQL)
        if not rows or not rows[0].get("sql_id"):
            raise ParameterError("No SQL_ID given and the session has no previous cursor")
        child = target.selector if target.selector is not None else rows[0]["child_number"]
        return target.with_values(identifier=rows[0]["sql_id"], selector=int(child or 0))

    def fetch_steps(self, target: PlanTarget) -> List[PlanStep]:
        return _steps_from_rows(
            self.executor.execute(
                self.STEPS_SQL,
                {"sql_id": target.identifier, "child_number": target.selector or 0},
            )
        )

    def render(self, target: PlanTarget, group_key: Any = None) -> List[str]:
        rows = self.executor.execute(
            self.RENDER_SQL,
            {
                "sql_id": target.identifier,
                "child_number": target.selector or 0,
                "plan_format": target.format,
            },
        )
        return _output_lines(rows)


class AwrSource(PlanSource):
    """Historical plans in the AWR repository, one group per plan hash value.

    Reading DBA_HIST_* views requires the Oracle Diagnostics Pack licence.
    """

    name = "awr"

    DBID_SQL = "SELECT dbid FROM v$database"
    STEPS_SQL = """
        SELECT id, parent_id, object_owner, object_name, plan_hash_value
        FROM   dba_hist_sql_plan
        WHERE  sql_id = :sql_id
        AND    plan_hash_value = NVL(:plan_hash_value, plan_hash_value)
        AND    dbid = :dbid
        ORDER  BY plan_hash_value, id
    """
    RENDER_SQL = """
        SELECT plan_table_output
        FROM   TABLE(DBMS_XPLAN.DISPLAY_AWR(:sql_id, :plan_hash_value, :dbid, :plan_format))
    """

    def __init__(self, executor: OracleExecutor):
        self.executor = executor

    def resolve(self, target: PlanTarget) -> PlanTarget:
        if not target.identifier:
            raise ParameterError("A SQL_ID is required for AWR reports")
        if target.dbid is not None:
            return target
        rows = self.executor.execute(self.DBID_SQL)
        if not rows:
            raise CatalogAccessError("Could not determine the current DBID from V$DATABASE")
        return target.with_values(dbid=int(rows[0]["dbid"]))

    def fetch_steps(self, target: PlanTarget) -> List[PlanStep]:
        return _steps_from_rows(
            self.executor.execute(
                self.STEPS_SQL,
                {
                    "sql_id": target.identifier,
                    "plan_hash_value": target.selector,
                    "dbid": target.dbid,
                },
            )
        )

    def render(self, target: PlanTarget, group_key: Any = None) -> List[str]:
        plan_hash_value = group_key if group_key is not None else target.selector
        rows = self.executor.execute(
            self.RENDER_SQL,
            {
                "sql_id": target.identifier,
                "plan_hash_value": plan_hash_value,
                "dbid": target.dbid,
                "plan_format": target.format,
            },
        )
        return _output_lines(rows)
