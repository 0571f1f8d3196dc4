from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Sequence

from ..core.enums import RequestStatus, RequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LeaveRequest
from .repository import RequestRepository

_COLUMNS = """
    request_id, user_id, type, from_date_time, to_date_time, note, status,
    approver_id, decision_note, attachment_url, created_at, decided_at
"""


def _to_request(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        request_type=RequestType(r["type"]),
        from_date_time=r["from_date_time"],
        to_date_time=r["to_date_time"],
        note=r.get("note") or "",
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        decision_note=r.get("decision_note"),
        decided_at=r.get("decided_at"),
        attachment_url=r.get("attachment_url"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        request_type: RequestType,
        from_date_time: datetime,
        to_date_time: datetime,
        note: str,
        attachment_url: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    user_id, type, from_date_time, to_date_time, note, status, attachment_url
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    request_type.value,
                    from_date_time,
                    to_date_time,
                    note,
                    RequestStatus.PENDING.value,
                    attachment_url,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE user_id=%s
                ORDER BY created_at DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_request(r) for r in fetchall(cur)]

    @staticmethod
    def _pending_where(user_ids: Optional[Sequence[int]]) -> tuple[str, list[object]]:
        clauses = ["status=%s"]
        params: list[object] = [RequestStatus.PENDING.value]
        if user_ids is not None:
            clauses.append(f"user_id IN ({in_clause(user_ids)})")
            params.extend(int(u) for u in user_ids)
        return " AND ".join(clauses), params

    def list_pending(self, *, user_ids: Optional[Sequence[int]] = None, limit: int) -> Sequence[LeaveRequest]:
        if user_ids is not None and not user_ids:
            return []
        where, params = self._pending_where(user_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at ASC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def count_pending(self, *, user_ids: Optional[Sequence[int]] = None) -> int:
        if user_ids is not None and not user_ids:
            return 0
        where, params = self._pending_where(user_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM leave_requests WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: int,
        decision_note: Optional[str],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, decision_note=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approver_id),
                    decision_note,
                    decided_at,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_approved_overlapping(
        self,
        *,
        user_ids: Sequence[int],
        start: date,
        end: date,
        types: Iterable[RequestType],
    ) -> Sequence[LeaveRequest]:
        type_values = [t.value for t in types]
        if not user_ids or not type_values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE status=%s
                  AND user_id IN ({in_clause(user_ids)})
                  AND type IN ({in_clause(type_values)})
                  AND DATE(from_date_time) <= %s
                  AND DATE(to_date_time) >= %s
                ORDER BY from_date_time
                """,
                (RequestStatus.APPROVED.value, *[int(u) for u in user_ids], *type_values, end, start),
            )
            return [_to_request(r) for r in fetchall(cur)]
