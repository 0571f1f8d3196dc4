from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import AuditTarget
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditLog
from .repository import AuditRepository

_SELECT = "SELECT log_id, actor_id, action, target_type, target_id, details, created_at FROM audit_logs"


def _row_to_log(r: dict[str, Any]) -> AuditLog:
    return AuditLog(
        log_id=int(r["log_id"]),
        actor_id=int(r["actor_id"]),
        action=r["action"],
        target_type=AuditTarget(r["target_type"]),
        target_id=r["target_id"],
        details=r["details"],
        created_at=r["created_at"],
    )


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        actor_id: int,
        action: str,
        target_type: AuditTarget,
        target_id: Optional[str],
        details: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO audit_logs(actor_id, action, target_type, target_id, details) VALUES(%s,%s,%s,%s,%s)",
                (int(actor_id), action, target_type.value, target_id, details),
            )
            return int(cur.lastrowid)

    def list_logs(
        self,
        *,
        actor_id: Optional[int] = None,
        target_type: Optional[AuditTarget] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[AuditLog]:
        where = []
        params: list[Any] = []
        if actor_id is not None:
            where.append("actor_id=%s")
            params.append(int(actor_id))
        if target_type is not None:
            where.append("target_type=%s")
            params.append(target_type.value)

        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, log_id DESC LIMIT %s OFFSET %s"
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_log(r) for r in fetchall(cur)]

    def list_for_target(self, *, target_type: AuditTarget, target_id: str) -> Sequence[AuditLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE target_type=%s AND target_id=%s ORDER BY created_at DESC, log_id DESC",
                (target_type.value, str(target_id)),
            )
            return [_row_to_log(r) for r in fetchall(cur)]
