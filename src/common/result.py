from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union


T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Completed operation carrying its decoded payload."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    Failed operation.

    `status_code` is None for transport failures (no response was received)
    and the HTTP status otherwise.
    """

    message: str
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None


Result = Union[Success[T], Failure]


__all__ = ["Failure", "Result", "Success"]
