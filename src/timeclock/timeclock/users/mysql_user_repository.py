from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


def _to_user(r: Dict[str, Any]) -> User:
    return User(
        user_id=int(r["user_id"]),
        full_name=r["full_name"],
        email=r["email"],
        phone=r.get("phone"),
        role=Role(r["role"]),
        dept_id=int(r["dept_id"]) if r.get("dept_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, phone, role, dept_id, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            return _to_user(r) if r else None

    def list_users(self, *, dept_id: Optional[int] = None, active_only: bool = True) -> Sequence[User]:
        clauses = ["1=1"]
        params: list[object] = []
        if dept_id is not None:
            clauses.append("dept_id=%s")
            params.append(int(dept_id))
        if active_only:
            clauses.append("is_active=1")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id, full_name, email, phone, role, dept_id, is_active
                FROM users
                WHERE {" AND ".join(clauses)}
                ORDER BY full_name
                """,
                tuple(params),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def update_assignment(self, user_id: int, *, role: Role, dept_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET role=%s, dept_id=%s WHERE user_id=%s",
                (role.value, dept_id, int(user_id)),
            )
            return cur.rowcount > 0

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0
