from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..audit.service import AuditService
from ..common.validators import require_min_length
from ..core.enums import AuditTarget, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .department_model import Department
from .department_repository import DepartmentRepository
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


class UserService:
    """Use case: read and administer employee profiles.

    Profiles are provisioned by the external auth provider; this service only
    changes the attendance-relevant parts (role, department, active flag).

    A manager's reach is the set of departments whose ``manager_id`` names
    them. Visibility, user listings and request review all go through
    ``managed_department_ids``.
    """

    def __init__(self, users: UserRepository, departments: DepartmentRepository, audit: AuditService):
        self._users = users
        self._departments = departments
        self._audit = audit

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def managed_department_ids(self, manager: User) -> list[int]:
        if manager.role != Role.MANAGER:
            return []
        return [d.dept_id for d in self._departments.list_all() if d.manager_id == manager.user_id]

    def manages(self, manager: User, user_id: int) -> bool:
        user = self._users.get_by_id(int(user_id))
        return bool(user and user.dept_id is not None and user.dept_id in self.managed_department_ids(manager))

    def managed_members(
        self,
        manager: User,
        *,
        dept_id: Optional[int] = None,
        active_only: bool = True,
    ) -> list[User]:
        managed = self.managed_department_ids(manager)
        if dept_id is not None:
            if dept_id not in managed:
                raise AuthorizationError("Managers can only view departments they manage")
            managed = [dept_id]
        members = {u.user_id: u for d in managed for u in self._users.list_users(dept_id=d, active_only=active_only)}
        return sorted(members.values(), key=lambda u: u.full_name)

    def visible_users(self, current_user: User, *, dept_id: Optional[int] = None) -> Sequence[User]:
        """Users whose attendance ``current_user`` may read.

        Admins see everyone (optionally narrowed to one department), managers
        see themselves plus the members of the departments they manage,
        employees only themselves.
        """
        if current_user.role == Role.ADMIN:
            return self._users.list_users(dept_id=dept_id)
        if current_user.role == Role.MANAGER:
            members = self.managed_members(current_user, dept_id=dept_id)
            if dept_id is None and current_user.user_id not in {u.user_id for u in members}:
                members = sorted([*members, current_user], key=lambda u: u.full_name)
            return members
        return [current_user]

    def get_visible_user(self, *, current_user: User, user_id: int) -> User:
        user = self.get_user(user_id)
        if current_user.role != Role.ADMIN and user.user_id not in {u.user_id for u in self.visible_users(current_user)}:
            raise AuthorizationError("You do not have permission to view this user")
        return user

    def list_users(self, *, current_user: User, dept_id: Optional[int] = None, include_inactive: bool = False) -> Sequence[User]:
        if current_user.role == Role.EMPLOYEE:
            raise AuthorizationError("You do not have permission to list users")
        if current_user.role == Role.MANAGER:
            return self.managed_members(current_user, dept_id=dept_id, active_only=not include_inactive)
        return self._users.list_users(dept_id=dept_id, active_only=not include_inactive)

    def count_by_status(self) -> dict[str, int]:
        users = self._users.list_users(active_only=False)
        active = sum(1 for u in users if u.is_active)
        return {"active": active, "inactive": len(users) - active}

    def update_user(self, *, current_user: User, user_id: int, changes: Mapping[str, Any]) -> User:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can change user assignments")

        user = self.get_user(user_id)

        role = user.role
        if "role" in changes:
            try:
                role = Role(changes["role"])
            except ValueError:
                raise ValidationError(f"Unknown role: {changes['role']!r}")

        dept_id = user.dept_id
        if "departmentId" in changes:
            dept_id = _optional_int(changes["departmentId"], "departmentId")
            if dept_id is not None and not self._departments.get_by_id(dept_id):
                raise NotFoundError("Department not found")

        is_active = bool(changes["isActive"]) if "isActive" in changes else user.is_active

        if user.user_id == current_user.user_id:
            if role != Role.ADMIN:
                raise ValidationError("You cannot remove your own admin role")
            if not is_active:
                raise ValidationError("You cannot deactivate your own account")

        self._users.update_assignment(user.user_id, role=role, dept_id=dept_id)
        if is_active != user.is_active:
            self._users.set_active(user.user_id, is_active=is_active)

        logger.info("User %s updated by admin %s", user.user_id, current_user.user_id)
        self._audit.record(
            actor=current_user,
            action="Updated user assignment",
            target_type=AuditTarget.USER,
            target_id=user.user_id,
            details=f"role={role.value}, departmentId={dept_id}, isActive={is_active}",
        )
        return self.get_user(user.user_id)


class DepartmentService:
    def __init__(self, departments: DepartmentRepository, users: UserRepository, audit: AuditService):
        self._departments = departments
        self._users = users
        self._audit = audit

    def list_departments(self) -> Sequence[Department]:
        return self._departments.list_all()

    def get_department(self, dept_id: int) -> Department:
        dept = self._departments.get_by_id(int(dept_id))
        if not dept:
            raise NotFoundError("Department not found")
        return dept

    def _validate_manager(self, manager_id: Optional[int]) -> None:
        if manager_id is None:
            return
        manager = self._users.get_by_id(manager_id)
        if not manager:
            raise NotFoundError("Manager not found")
        if manager.role != Role.MANAGER:
            raise ValidationError("Department manager must hold the manager role", code="MANAGER_ROLE_REQUIRED")

    def _read_fields(self, data: Mapping[str, Any], base: Optional[Department] = None):
        name = data.get("name", base.name if base else None)
        name = require_min_length(name if isinstance(name, str) else "", "name", 2)
        name_ar = data.get("nameAr", base.name_ar if base else None)
        name_ar = (name_ar.strip() or None) if isinstance(name_ar, str) else None
        if "managerId" in data:
            manager_id = _optional_int(data["managerId"], "managerId")
        else:
            manager_id = base.manager_id if base else None
        return name, name_ar, manager_id

    def create_department(self, *, current_user: User, data: Mapping[str, Any]) -> Department:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage departments")

        name, name_ar, manager_id = self._read_fields(data)
        if self._departments.get_by_name(name):
            raise ValidationError("Department name is already used in this organization", code="DUPLICATE_NAME")
        self._validate_manager(manager_id)

        dept_id = self._departments.create(name=name, name_ar=name_ar, manager_id=manager_id)
        logger.info("Department %s (%s) created by admin %s", dept_id, name, current_user.user_id)
        self._audit.record(
            actor=current_user, action="Created department", target_type=AuditTarget.DEPARTMENT, target_id=dept_id, details=name
        )
        return self.get_department(dept_id)

    def update_department(self, *, current_user: User, dept_id: int, data: Mapping[str, Any]) -> Department:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage departments")

        dept = self.get_department(dept_id)
        name, name_ar, manager_id = self._read_fields(data, base=dept)
        other = self._departments.get_by_name(name)
        if other and other.dept_id != dept.dept_id:
            raise ValidationError("Department name is already used in this organization", code="DUPLICATE_NAME")
        if manager_id != dept.manager_id:
            self._validate_manager(manager_id)

        self._departments.update(dept.dept_id, name=name, name_ar=name_ar, manager_id=manager_id)
        self._audit.record(
            actor=current_user,
            action="Updated department",
            target_type=AuditTarget.DEPARTMENT,
            target_id=dept.dept_id,
            details=f"name={name}, managerId={manager_id}",
        )
        return self.get_department(dept.dept_id)

    def delete_department(self, *, current_user: User, dept_id: int) -> None:
        if current_user.role != Role.ADMIN:
            raise AuthorizationError("Only admins can manage departments")

        dept = self.get_department(dept_id)
        if self._departments.count_members(dept.dept_id) > 0:
            raise ValidationError("Department still has active members", code="DEPARTMENT_NOT_EMPTY")
        self._departments.delete(dept.dept_id)
        logger.info("Department %s deleted by admin %s", dept.dept_id, current_user.user_id)
        self._audit.record(
            actor=current_user, action="Deleted department", target_type=AuditTarget.DEPARTMENT, target_id=dept.dept_id, details=dept.name
        )
