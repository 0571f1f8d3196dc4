"""Punch state machine for one user's day: empty -> checked_in -> checked_out."""

from __future__ import annotations

from typing import Optional, Union

from ..core.enums import PunchAction, PunchState
from ..core.exceptions import AlreadyCheckedIn, AlreadyCheckedOut, NotCheckedIn
from .model import AttendanceRecord, PunchRecord

Record = Union[AttendanceRecord, PunchRecord]


def punch_state(record: Optional[Record]) -> PunchState:
    return record.state if record is not None else PunchState.EMPTY


def ensure_can_check_in(record: Optional[Record]) -> None:
    if punch_state(record) != PunchState.EMPTY:
        raise AlreadyCheckedIn("Already checked in today")


def ensure_can_check_out(record: Optional[Record]) -> None:
    state = punch_state(record)
    if state == PunchState.EMPTY:
        raise NotCheckedIn("Must check in before checking out")
    if state == PunchState.CHECKED_OUT:
        raise AlreadyCheckedOut("Already checked out today")


def next_state(state: PunchState, action: PunchAction) -> PunchState:
    """Pure transition function; raises on a punch not allowed from ``state``."""
    if action == PunchAction.CHECK_IN:
        if state != PunchState.EMPTY:
            raise AlreadyCheckedIn("Already checked in today")
        return PunchState.CHECKED_IN
    if state == PunchState.EMPTY:
        raise NotCheckedIn("Must check in before checking out")
    if state == PunchState.CHECKED_OUT:
        raise AlreadyCheckedOut("Already checked out today")
    return PunchState.CHECKED_OUT
