"""Check validator: turns a stored check record into a Check descriptor."""

from typing import Any, List

from pydantic import ValidationError

from uptime_monitor.models.check import Check


class InvalidCheckError(Exception):
    """Raised when a stored check record is missing or has malformed fields."""

    def __init__(self, errors: List[str]):
        super().__init__("invalid check data")
        self.errors = errors

    def __str__(self) -> str:
        if not self.errors:
            return "invalid check data"
        return f"invalid check data: {'; '.join(self.errors)}"


def validate_check_data(raw: Any) -> Check:
    """
    Validate and normalize a stored check record.

    Every required field must be present and well typed; ``state`` and
    ``lastChecked`` fall back to "down" / never-checked instead of failing.

    Args:
        raw: Record as read from the store

    Returns:
        Check: Normalized check descriptor

    Raises:
        InvalidCheckError: If any required field is missing or invalid
    """
    if not isinstance(raw, dict):
        raise InvalidCheckError([f"record must be an object, got {type(raw).__name__}"])

    try:
        return Check.model_validate(raw)
    except ValidationError as e:
        raise InvalidCheckError([
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        ]) from e
