from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time, split_csv_ints
from .model import AttendancePolicy
from .repository import PolicyRepository


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self) -> Optional[AttendancePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT policy_id, work_start_time, work_end_time, grace_period_minutes, weekly_off_days,
                       max_late_days_before_warning, absent_cutoff_time,
                       annual_leave_per_year, sick_leave_per_year
                FROM attendance_policy
                ORDER BY policy_id
                LIMIT 1
                """
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendancePolicy(
                policy_id=int(r["policy_id"]),
                work_start=normalize_mysql_time(r["work_start_time"]),
                work_end=normalize_mysql_time(r["work_end_time"]),
                grace_period_minutes=int(r["grace_period_minutes"]),
                absent_cutoff=normalize_mysql_time(r["absent_cutoff_time"]),
                weekly_off_days=frozenset(split_csv_ints(r["weekly_off_days"])),
                max_late_days_before_warning=int(r["max_late_days_before_warning"]),
                annual_leave_per_year=int(r["annual_leave_per_year"]),
                sick_leave_per_year=int(r["sick_leave_per_year"]),
            )

    def save(self, policy: AttendancePolicy) -> AttendancePolicy:
        params = (
            policy.work_start,
            policy.work_end,
            int(policy.grace_period_minutes),
            ",".join(str(d) for d in sorted(policy.weekly_off_days)),
            int(policy.max_late_days_before_warning),
            policy.absent_cutoff,
            int(policy.annual_leave_per_year),
            int(policy.sick_leave_per_year),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT policy_id FROM attendance_policy ORDER BY policy_id LIMIT 1")
            existing = fetchone(cur)
            if existing:
                cur.execute(
                    """
                    UPDATE attendance_policy
                    SET work_start_time=%s, work_end_time=%s, grace_period_minutes=%s, weekly_off_days=%s,
                        max_late_days_before_warning=%s, absent_cutoff_time=%s,
                        annual_leave_per_year=%s, sick_leave_per_year=%s
                    WHERE policy_id=%s
                    """,
                    params + (int(existing["policy_id"]),),
                )
                return replace(policy, policy_id=int(existing["policy_id"]))

            cur.execute(
                """
                INSERT INTO attendance_policy(
                    work_start_time, work_end_time, grace_period_minutes, weekly_off_days,
                    max_late_days_before_warning, absent_cutoff_time,
                    annual_leave_per_year, sick_leave_per_year
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                params,
            )
            return replace(policy, policy_id=int(cur.lastrowid))
