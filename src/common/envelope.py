from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .result import Failure, Result, Success


SUCCESS_STATUS = 200
FALLBACK_ERROR_MESSAGE = "No error message"

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """
    Wire wrapper used by every Fitcoin endpoint.

    Success replies carry `{message, data}`; failures carry only `{message}`.
    Both decode into this model, with the missing fields left as None.
    """

    message: Optional[str] = None
    data: Optional[T] = None


class LinkStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class LinkRequestStatus(BaseModel):
    """
    Server-side view of a link request.

    Fields
    - created_at: when the request was issued (wire name `creation_date`).
    - status: pending until the user approves or denies it.
    - approved_user_id: the linked account (wire name `user_id`); present only
      once the request is approved.
    """

    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(..., alias="creation_date")
    status: LinkStatus
    approved_user_id: Optional[str] = Field(default=None, alias="user_id")

    @model_validator(mode="after")
    def check_user_id_matches_status(self) -> "LinkRequestStatus":
        approved = self.status is LinkStatus.APPROVED
        if approved != (self.approved_user_id is not None):
            raise ValueError("user_id must be present exactly when status is 'approved'")
        return self

    @property
    def is_approved(self) -> bool:
        return self.status is LinkStatus.APPROVED

    @property
    def is_resolved(self) -> bool:
        return self.status is not LinkStatus.PENDING

    def to_wire(self) -> Dict[str, Any]:
        # Unset user_id is omitted rather than sent as null
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserInfo(BaseModel):
    username: str
    balance: int


def decode_data(body: Optional[str], payload_type: Type[T]) -> Optional[T]:
    """
    Return the envelope's `data` parsed as `payload_type`.

    A missing body, malformed JSON, or a payload that does not fit the type
    all yield None.
    """
    if not body:
        return None
    try:
        envelope = Envelope[payload_type].model_validate_json(body)  # type: ignore[valid-type]
    except ValidationError:
        return None
    return envelope.data


def decode_error_message(body: Optional[str]) -> str:
    """
    Return the failure envelope's `message`.

    Falls back to FALLBACK_ERROR_MESSAGE when the body is absent, malformed,
    or has no message, so callers always get some text.
    """
    if not body:
        return FALLBACK_ERROR_MESSAGE
    try:
        envelope = Envelope[Any].model_validate_json(body)
    except ValidationError:
        return FALLBACK_ERROR_MESSAGE
    return envelope.message or FALLBACK_ERROR_MESSAGE


def decode_response(status_code: int, body: Optional[str], payload_type: Type[T]) -> Result[Optional[T]]:
    """Classify a reply by exact status 200 and decode the matching envelope."""
    if status_code == SUCCESS_STATUS:
        return Success(decode_data(body, payload_type))
    return Failure(decode_error_message(body), status_code=status_code)


__all__ = [
    "Envelope",
    "FALLBACK_ERROR_MESSAGE",
    "LinkRequestStatus",
    "LinkStatus",
    "SUCCESS_STATUS",
    "UserInfo",
    "decode_data",
    "decode_error_message",
    "decode_response",
]
