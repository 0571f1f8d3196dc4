from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import RequestStatus, RequestType
from .model import LeaveBalance, LeaveRequest


class RequestRepository(Protocol):
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
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_pending(self, *, user_ids: Optional[Sequence[int]] = None, limit: int) -> Sequence[LeaveRequest]:
        """Pending requests, oldest first. ``user_ids=None`` means everyone."""

        raise NotImplementedError

    def count_pending(self, *, user_ids: Optional[Sequence[int]] = None) -> int:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approver_id: int,
        decision_note: Optional[str],
        decided_at: datetime,
    ) -> bool:
        """Move a pending request to ``status``. False when it was no longer pending."""

        raise NotImplementedError

    def list_approved_overlapping(
        self,
        *,
        user_ids: Sequence[int],
        start: date,
        end: date,
        types: Iterable[RequestType],
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get(self, user_id: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def ensure(self, balance: LeaveBalance) -> None:
        """Insert ``balance`` unless the user already has a row."""

        raise NotImplementedError

    def deduct(self, *, user_id: int, request_type: RequestType, days: int) -> bool:
        """Charge ``days`` in one conditional write. False when the remaining allowance is too small."""

        raise NotImplementedError

    def refund(self, *, user_id: int, request_type: RequestType, days: int) -> None:
        raise NotImplementedError

    def reset_all(self, *, total_annual: int, total_sick: int) -> int:
        """Zero the used counters of every balance row; returns the row count."""

        raise NotImplementedError
