"""
Ports — Protocol-based seams the issuance pipeline depends on.

Adapters satisfy these structurally; nothing has to inherit from them.
Tests substitute plain stubs.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Protocol, TypeAlias, runtime_checkable

Clock: TypeAlias = Callable[[], datetime]
"""Returns the current time as a timezone-aware UTC datetime."""


@runtime_checkable
class SerialNumberStrategy(Protocol):
    """
    Port: produce the serial number for the next issued certificate.

    Serial numbers must be unique per issuing CA and positive. RFC 5280
    limits them to 20 octets, so values must stay below 2**159.
    """

    def next_serial(self) -> int: ...
