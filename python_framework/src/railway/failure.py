"""
Failure description — structured error information for the failure track.

ErrorCode is a member-less Enum base. Each application declares its own
taxonomy by subclassing it, so the framework never has to know which
failure categories a domain cares about:

    @unique
    class IssuanceErrorCode(ErrorCode):
        DECODE_ERROR = "DECODE_ERROR"
        SIGNING_ERROR = "SIGNING_ERROR"

FailureDescription pairs one of those codes with a message, the
underlying exception (if any) and a UTC timestamp.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class ErrorCode(Enum):
    """
    Base class for failure codes.

    Enums can only be subclassed while they have no members, so this class
    deliberately defines none. Subclass it and declare string-valued members.
    """


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor: error code, message, optional exception, timestamp.

    >>> from enum import unique
    >>> @unique
    ... class Code(ErrorCode):
    ...     BROKEN = "BROKEN"
    >>> desc = FailureDescription(Code.BROKEN, "Something broke")
    >>> desc.code.value
    'BROKEN'
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Return the message followed by the formatted exception chain, if any."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"

    def describe(self) -> str:
        """One-line summary: message plus the exception text when present."""
        if self.exception is None:
            return self.message
        return f"{self.message}: {self.exception}"
