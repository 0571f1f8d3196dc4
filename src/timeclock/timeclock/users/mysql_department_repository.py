from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .department_model import Department
from .department_repository import DepartmentRepository

_DUPLICATE_NAME = "Department name is already used in this organization"


def _to_department(r: Dict[str, Any]) -> Department:
    return Department(
        dept_id=int(r["dept_id"]),
        name=r["name"],
        name_ar=r.get("name_ar"),
        manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
    )


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT dept_id, name, name_ar, manager_id FROM departments ORDER BY name")
            return [_to_department(r) for r in fetchall(cur)]

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT dept_id, name, name_ar, manager_id FROM departments WHERE dept_id=%s", (int(dept_id),))
            r = fetchone(cur)
            return _to_department(r) if r else None

    def get_by_name(self, name: str) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT dept_id, name, name_ar, manager_id FROM departments WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_department(r) if r else None

    def create(self, *, name: str, name_ar: Optional[str], manager_id: Optional[int]) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO departments(name, name_ar, manager_id) VALUES(%s,%s,%s)",
                    (name, name_ar, manager_id),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as exc:
            raise ValidationError(_DUPLICATE_NAME, code="DUPLICATE_NAME") from exc

    def update(self, dept_id: int, *, name: str, name_ar: Optional[str], manager_id: Optional[int]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE departments SET name=%s, name_ar=%s, manager_id=%s WHERE dept_id=%s",
                    (name, name_ar, manager_id, int(dept_id)),
                )
                return cur.rowcount > 0
        except mysql_errors.IntegrityError as exc:
            raise ValidationError(_DUPLICATE_NAME, code="DUPLICATE_NAME") from exc

    def delete(self, dept_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM departments WHERE dept_id=%s", (int(dept_id),))
            return cur.rowcount > 0

    def count_members(self, dept_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE dept_id=%s AND is_active=1", (int(dept_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
