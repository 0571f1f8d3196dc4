from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyCheckedIn
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import AttendanceRecord, Coordinates
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date, check_in_time, check_out_time, status, late_minutes,
    check_in_lat, check_in_lng, check_out_lat, check_out_lng
"""


def _opt_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in_time=normalize_mysql_time(r.get("check_in_time")),
        check_out_time=normalize_mysql_time(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]) if r.get("status") else None,
        late_minutes=int(r.get("late_minutes") or 0),
        check_in_lat=_opt_float(r.get("check_in_lat")),
        check_in_lng=_opt_float(r.get("check_in_lng")),
        check_out_lat=_opt_float(r.get("check_out_lat")),
        check_out_lng=_opt_float(r.get("check_out_lng")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND work_date=%s
                """,
                (user_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_range(self, *, start: date, end: date, user_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        if not user_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s AND user_id IN ({in_clause(user_ids)})
                ORDER BY work_date DESC, user_id ASC
                """,
                (start, end, *[int(u) for u in user_ids]),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in_time: time,
        status: AttendanceStatus,
        late_minutes: int,
        coords: Optional[Coordinates] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, work_date, check_in_time, status, late_minutes, check_in_lat, check_in_lng
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        user_id,
                        work_date,
                        check_in_time,
                        status.value,
                        int(late_minutes),
                        coords.lat if coords else None,
                        coords.lng if coords else None,
                    ),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as exc:
            # uq_attendance_user_date: a concurrent request won the race.
            raise AlreadyCheckedIn("Already checked in today") from exc

    def fill_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: time,
        status: AttendanceStatus,
        late_minutes: int,
        coords: Optional[Coordinates] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, status=%s, late_minutes=%s, check_in_lat=%s, check_in_lng=%s
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                (
                    check_in_time,
                    status.value,
                    int(late_minutes),
                    coords.lat if coords else None,
                    coords.lng if coords else None,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: time,
        coords: Optional[Coordinates] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_lat=%s, check_out_lng=%s
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (
                    check_out_time,
                    coords.lat if coords else None,
                    coords.lng if coords else None,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def admin_update_times(
        self,
        *,
        attendance_id: int,
        check_in_time: Optional[time],
        check_out_time: Optional[time],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s
                WHERE attendance_id=%s
                """,
                (check_in_time, check_out_time, int(attendance_id)),
            )
            return cur.rowcount > 0
