from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import RequestStatus, RequestType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    request_type: RequestType
    from_date_time: datetime
    to_date_time: datetime
    note: str
    status: RequestStatus
    created_at: datetime
    approver_id: Optional[int] = None
    decision_note: Optional[str] = None
    decided_at: Optional[datetime] = None
    attachment_url: Optional[str] = None

    @property
    def from_date(self) -> date:
        return self.from_date_time.date()

    @property
    def to_date(self) -> date:
        return self.to_date_time.date()

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.request_id,
            "userId": self.user_id,
            "type": self.request_type.value,
            "fromDateTime": self.from_date_time.isoformat(timespec="minutes"),
            "toDateTime": self.to_date_time.isoformat(timespec="minutes"),
            "note": self.note,
            "status": self.status.value,
            "approverId": self.approver_id,
            "decisionNote": self.decision_note,
            "attachmentUrl": self.attachment_url,
            "createdAt": self.created_at.isoformat(timespec="seconds"),
            "decidedAt": self.decided_at.isoformat(timespec="seconds") if self.decided_at else None,
        }


@dataclass(frozen=True)
class LeaveBalance:
    user_id: int
    total_annual: int
    used_annual: int
    total_sick: int
    used_sick: int

    @property
    def remaining_annual(self) -> int:
        return self.total_annual - self.used_annual

    @property
    def remaining_sick(self) -> int:
        return self.total_sick - self.used_sick

    @classmethod
    def fresh(cls, user_id: int, *, total_annual: int, total_sick: int) -> "LeaveBalance":
        return cls(user_id=user_id, total_annual=total_annual, used_annual=0, total_sick=total_sick, used_sick=0)

    def remaining_for(self, request_type: RequestType) -> int:
        if request_type == RequestType.ANNUAL_LEAVE:
            return self.remaining_annual
        if request_type == RequestType.SICK_LEAVE:
            return self.remaining_sick
        raise ValueError(f"{request_type.value} is not charged against a leave balance")

    def to_payload(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "totalAnnual": self.total_annual,
            "usedAnnual": self.used_annual,
            "remainingAnnual": self.remaining_annual,
            "totalSick": self.total_sick,
            "usedSick": self.used_sick,
            "remainingSick": self.remaining_sick,
        }
