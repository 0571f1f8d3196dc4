from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Department:
    dept_id: int
    name: str
    name_ar: Optional[str] = None
    manager_id: Optional[int] = None

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.dept_id, "name": self.name, "nameAr": self.name_ar, "managerId": self.manager_id}
