from __future__ import annotations

from typing import Optional, Protocol

from .model import AttendancePolicy


class PolicyRepository(Protocol):
    def get(self) -> Optional[AttendancePolicy]:
        raise NotImplementedError

    def save(self, policy: AttendancePolicy) -> AttendancePolicy:
        """Insert the policy row if none exists, otherwise update it."""

        raise NotImplementedError
