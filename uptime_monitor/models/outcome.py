"""Probe outcome and per-check log entry models."""

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel

from uptime_monitor.models.check import CheckState


TIMEOUT_DETAIL = "timeout"


class Outcome:
    """Classified result of one probe."""

    def __init__(
        self,
        error: bool,
        error_detail: Optional[str] = None,
        response_code: Optional[int] = None
    ):
        """
        Initialize probe outcome.

        Args:
            error: Whether the probe failed (network error or timeout)
            error_detail: Failure cause, "timeout" for deadline expiry
            response_code: HTTP status code when a response was received
        """
        self.error = error
        self.error_detail = error_detail
        self.response_code = response_code

    @classmethod
    def response(cls, status: int) -> "Outcome":
        return cls(error=False, response_code=status)

    @classmethod
    def failure(cls, detail: str) -> "Outcome":
        return cls(error=True, error_detail=detail)

    @classmethod
    def timeout(cls) -> "Outcome":
        return cls(error=True, error_detail=TIMEOUT_DETAIL)

    @property
    def timed_out(self) -> bool:
        return self.error and self.error_detail == TIMEOUT_DETAIL

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary, omitting unset fields."""
        data: Dict[str, Any] = {"error": self.error}
        if self.error_detail is not None:
            data["errorDetail"] = self.error_detail
        if self.response_code is not None:
            data["responseCode"] = self.response_code
        return data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        """String representation of probe outcome."""
        return (
            f"<Outcome(error={self.error}, "
            f"error_detail={self.error_detail!r}, "
            f"response_code={self.response_code})>"
        )


class LogEntry(BaseModel):
    """One line of a check's log stream."""
    check: Dict[str, Any]
    outcome: Dict[str, Any]
    state: CheckState
    alert: bool
    time: int

    def to_line(self) -> str:
        """Serialize the entry as a single JSON line (without newline)."""
        return json.dumps(self.model_dump(mode="json"), separators=(",", ":"))
