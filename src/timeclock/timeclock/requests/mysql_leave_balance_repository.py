from __future__ import annotations

from typing import Optional

from ..core.enums import RequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import LeaveBalance
from .repository import LeaveBalanceRepository

# (total, used, remaining) columns per chargeable request type.
_COLUMNS = {
    RequestType.ANNUAL_LEAVE: ("total_annual", "used_annual", "remaining_annual"),
    RequestType.SICK_LEAVE: ("total_sick", "used_sick", "remaining_sick"),
}


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, total_annual, used_annual, total_sick, used_sick
                FROM leave_balances
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveBalance(
                user_id=int(r["user_id"]),
                total_annual=int(r["total_annual"]),
                used_annual=int(r["used_annual"]),
                total_sick=int(r["total_sick"]),
                used_sick=int(r["used_sick"]),
            )

    def ensure(self, balance: LeaveBalance) -> None:
        # remaining_* columns are kept for reporting tools that read the table directly.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(
                    user_id, total_annual, used_annual, remaining_annual, total_sick, used_sick, remaining_sick
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE user_id=user_id
                """,
                (
                    balance.user_id,
                    balance.total_annual,
                    balance.used_annual,
                    balance.remaining_annual,
                    balance.total_sick,
                    balance.used_sick,
                    balance.remaining_sick,
                ),
            )

    def deduct(self, *, user_id: int, request_type: RequestType, days: int) -> bool:
        total, used, remaining = _COLUMNS[request_type]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE leave_balances
                SET {used}={used}+%s, {remaining}={remaining}-%s
                WHERE user_id=%s AND {total}-{used} >= %s
                """,
                (int(days), int(days), int(user_id), int(days)),
            )
            return cur.rowcount == 1

    def refund(self, *, user_id: int, request_type: RequestType, days: int) -> None:
        _, used, remaining = _COLUMNS[request_type]
        with db_cursor(self._conn_factory) as (_, cur):
            # Assignments run left to right: remaining reads used before it changes.
            cur.execute(
                f"""
                UPDATE leave_balances
                SET {remaining}={remaining}+LEAST({used}, %s), {used}=GREATEST({used}-%s, 0)
                WHERE user_id=%s
                """,
                (int(days), int(days), int(user_id)),
            )

    def reset_all(self, *, total_annual: int, total_sick: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET total_annual=%s, used_annual=0, remaining_annual=%s,
                    total_sick=%s, used_sick=0, remaining_sick=%s
                """,
                (int(total_annual), int(total_annual), int(total_sick), int(total_sick)),
            )
            return int(cur.rowcount)
