from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"
    NO_ROUTE = "no_route"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class ProviderResult(Generic[T]):
    """
    Outcome of a single provider call.

    Exactly one of ``value`` / ``kind`` is meaningful, selected by ``ok``.
    Callers branch on ``ok`` (and on ``kind`` for timeouts) instead of
    catching exceptions from the HTTP layer.
    """

    ok: bool
    value: Optional[T] = None
    kind: Optional[ErrorKind] = None
    detail: str = ""

    @classmethod
    def success(cls, value: T) -> "ProviderResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str = "") -> "ProviderResult[T]":
        return cls(ok=False, kind=kind, detail=detail)
