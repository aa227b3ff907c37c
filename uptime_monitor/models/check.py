"""Check model - a user-configured HTTP/HTTPS endpoint probed every cycle."""

import math
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


CHECK_ID_LENGTH = 20
PHONE_LENGTH = 10
MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 5


class Protocol(str, Enum):
    """Supported probe protocols."""
    HTTP = "http"
    HTTPS = "https"


class HttpMethod(str, Enum):
    """Supported probe methods, stored lowercase."""
    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"


class CheckState(str, Enum):
    """Up/down classification persisted between cycles."""
    UP = "up"
    DOWN = "down"


def _require_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    return value


class Check(BaseModel):
    """
    Normalized check descriptor built from a stored check record.

    Attributes:
        id: 20-character opaque identifier
        user_phone: 10-digit phone number of the owner
        protocol: http or https
        url: Host and optional path/query, without the scheme
        method: get, post, put or delete
        success_codes: Response codes that count as "up"
        timeout_seconds: Probe deadline, 1 to 5 seconds
        state: Last persisted state, "down" when never set
        last_checked: Last evaluation time in ms, None when never evaluated

    Unknown keys of the stored record are kept as extra fields so the
    record round-trips unchanged apart from state and lastChecked.
    """

    # Stored records use camelCase keys only; snake_case keys are just extras
    model_config = ConfigDict(extra="allow")

    id: str
    user_phone: str = Field(alias="userPhone")
    protocol: Protocol
    url: str
    method: HttpMethod
    success_codes: List[StrictInt] = Field(alias="successCodes", min_length=1)
    timeout_seconds: int = Field(
        alias="timeoutSeconds",
        ge=MIN_TIMEOUT_SECONDS,
        le=MAX_TIMEOUT_SECONDS
    )
    state: CheckState = CheckState.DOWN
    last_checked: Optional[int] = Field(default=None, alias="lastChecked")

    @field_validator('id', mode='before')
    @classmethod
    def id_must_have_fixed_length(cls, v):
        v = _require_str(v, 'id').strip()
        if len(v) != CHECK_ID_LENGTH:
            raise ValueError(f'id must be {CHECK_ID_LENGTH} characters long')
        return v

    @field_validator('user_phone', mode='before')
    @classmethod
    def phone_must_have_fixed_length(cls, v):
        v = _require_str(v, 'userPhone').strip()
        if len(v) != PHONE_LENGTH:
            raise ValueError(f'userPhone must be {PHONE_LENGTH} characters long')
        return v

    @field_validator('protocol', 'method', mode='before')
    @classmethod
    def enum_values_must_be_strings(cls, v, info):
        return _require_str(v, info.field_name)

    @field_validator('url', mode='before')
    @classmethod
    def url_must_not_be_blank(cls, v):
        v = _require_str(v, 'url').strip()
        if not v:
            raise ValueError('url must not be empty')
        return v

    @field_validator('success_codes', mode='before')
    @classmethod
    def success_codes_must_be_list(cls, v):
        if not isinstance(v, list):
            raise ValueError('successCodes must be a list')
        return v

    @field_validator('timeout_seconds', mode='before')
    @classmethod
    def timeout_must_be_whole_number(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError('timeoutSeconds must be a number')
        if not math.isfinite(v) or v % 1 != 0:
            raise ValueError('timeoutSeconds must be a whole number')
        return int(v)

    @field_validator('state', mode='before')
    @classmethod
    def default_unknown_state(cls, v):
        if v in (CheckState.UP, CheckState.DOWN):
            return v
        return CheckState.DOWN

    @field_validator('last_checked', mode='before')
    @classmethod
    def default_unknown_last_checked(cls, v):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        # NaN and Infinity are accepted by json.loads
        if not math.isfinite(v) or v <= 0:
            return None
        return int(v)

    @property
    def target_url(self) -> str:
        """Probe endpoint, e.g. ``https://example.com/health?full=1``."""
        return f"{self.protocol.value}://{self.url}"

    @property
    def was_checked(self) -> bool:
        """Whether the check has been evaluated at least once."""
        return self.last_checked is not None

    def to_record(self) -> Dict[str, Any]:
        """Serialize back to the stored (camelCase) record shape."""
        record = self.model_dump(mode="json", by_alias=True)
        if record.get("lastChecked") is None:
            record.pop("lastChecked", None)
        return record

    def with_result(self, state: CheckState, checked_at: int) -> Dict[str, Any]:
        """Stored record updated with a freshly computed state and timestamp."""
        record = self.to_record()
        record["state"] = state.value
        record["lastChecked"] = checked_at
        return record
