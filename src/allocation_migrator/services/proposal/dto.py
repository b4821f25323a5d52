"""Submission outcome types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class SubmissionStatus(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """Classified response of one proposal POST."""

    status: SubmissionStatus
    safe_tx_hash: str
    reason: str | None = None
    status_code: int | None = None
    already_known: bool = False
    """Accepted because the service already had this exact hash."""

    @property
    def accepted(self) -> bool:
        return self.status is SubmissionStatus.ACCEPTED

    @property
    def retryable(self) -> bool:
        return self.status is SubmissionStatus.SERVICE_UNAVAILABLE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
