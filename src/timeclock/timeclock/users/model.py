from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: employee profile.

    Note: Plain data object; credentials live with the external auth provider.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    dept_id: Optional[int]
    is_active: bool = True
    phone: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.user_id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role.value,
            "departmentId": self.dept_id,
            "isActive": self.is_active,
        }
