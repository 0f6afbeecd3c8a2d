"""Read and write rows of ``public.reports``."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Callable, Optional

import psycopg
from psycopg.rows import dict_row

from fri.config import Settings
from fri.db.client import db_cursor
from fri.errors import PersistenceError
from fri.models import NewReport, Report, ReportFields
from fri.utils.logging import get_logger


logger = get_logger(__name__)

CursorFactory = Callable[..., AbstractContextManager[Any]]

EDITABLE_COLUMNS: tuple[str, ...] = tuple(ReportFields.model_fields)
SELECT_COLUMNS = ", ".join(("id", *EDITABLE_COLUMNS, "raw_message", "created_at", "updated_at"))
REPORT_NOT_FOUND_ERROR = "ไม่พบรายงานที่ต้องการแก้ไข"


class ReportStore:
    """Persistence for reports.

    ``raw_message`` is written on insert only; ``updated_at`` is assigned by
    the database on every update. Driver errors and a missing database URL
    both surface as ``PersistenceError``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cursor_factory: Optional[CursorFactory] = None,
    ) -> None:
        self.settings = settings
        self._cursor_factory = cursor_factory or db_cursor

    def _cursor(self) -> AbstractContextManager[Any]:
        return self._cursor_factory(self.settings, row_factory=dict_row)

    def insert(self, report: NewReport) -> Report:
        values = report.column_values()
        columns = (*values.keys(), "raw_message")
        params = [*values.values(), report.raw_message]
        placeholders = ", ".join(["%s"] * len(columns))
        query = (
            f"insert into public.reports ({', '.join(columns)}) "
            f"values ({placeholders}) returning {SELECT_COLUMNS}"
        )
        row = self._execute_one(query, params, action="insert")
        if row is None:
            raise PersistenceError("insert returned no row")
        stored = Report.model_validate(row)
        logger.info("reports.insert.ok", extra={"report_id": stored.id})
        return stored

    def update(self, report_id: str, fields: ReportFields) -> Report:
        values = fields.column_values()
        assignments = ", ".join(f"{column} = %s" for column in values)
        query = (
            f"update public.reports set {assignments}, updated_at = now() "
            f"where id = %s returning {SELECT_COLUMNS}"
        )
        row = self._execute_one(query, [*values.values(), report_id], action="update")
        if row is None:
            raise PersistenceError(REPORT_NOT_FOUND_ERROR)
        stored = Report.model_validate(row)
        logger.info("reports.update.ok", extra={"report_id": stored.id})
        return stored

    def get(self, report_id: str) -> Optional[Report]:
        query = f"select {SELECT_COLUMNS} from public.reports where id = %s"
        row = self._execute_one(query, [report_id], action="get")
        return Report.model_validate(row) if row else None

    def list_recent(self, limit: int = 50, status: Optional[str] = None) -> list[Report]:
        conditions: list[str] = []
        params: list[object] = []
        if status:
            conditions.append("status = %s")
            params.append(status)
        where = f" where {' and '.join(conditions)}" if conditions else ""
        query = (
            f"select {SELECT_COLUMNS} from public.reports{where} "
            "order by urgency_level desc, created_at desc limit %s"
        )
        params.append(limit)
        try:
            with self._cursor() as cursor:
                cursor.execute(query, params)
                rows = list(cursor.fetchall())
        except (psycopg.Error, ValueError) as exc:
            logger.error("reports.list.failed: %s", exc)
            raise PersistenceError(str(exc)) from exc
        return [Report.model_validate(row) for row in rows]

    def _execute_one(self, query: str, params: list[object], action: str) -> Optional[dict[str, Any]]:
        try:
            with self._cursor() as cursor:
                cursor.execute(query, params)
                return cursor.fetchone()
        except (psycopg.Error, ValueError) as exc:
            logger.error("reports.%s.failed: %s", action, exc)
            raise PersistenceError(str(exc)) from exc
