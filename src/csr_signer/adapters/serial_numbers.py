"""
Serial number strategies — implementations of the SerialNumberStrategy port.

RandomSerialNumbers is the default: 159 random bits make collisions between
independent issuances negligible without any shared state.
SequentialSerialNumbers hands out increasing numbers from a counter, for
callers that persist the last value themselves and want ordered serials.
"""

from __future__ import annotations

import threading

from cryptography import x509

MAX_SERIAL = 2**159 - 1
"""Largest serial that fits the 20-octet limit of RFC 5280 as a positive INTEGER."""


class RandomSerialNumbers:
    """Random positive serial numbers of up to 159 bits."""

    def next_serial(self) -> int:
        return x509.random_serial_number()


class SequentialSerialNumbers:
    """
    Monotonically increasing serial numbers starting at `start`.

    Safe to share between threads: the counter is guarded by a lock.
    Raises OverflowError once the RFC 5280 range is exhausted.
    """

    def __init__(self, start: int = 1) -> None:
        if start < 1 or start > MAX_SERIAL:
            raise ValueError(f"Serial numbers must start within 1..2**159-1, got {start}")
        self._next = start
        self._lock = threading.Lock()

    def next_serial(self) -> int:
        with self._lock:
            serial = self._next
            if serial > MAX_SERIAL:
                raise OverflowError("Serial number space exhausted")
            self._next = serial + 1
            return serial

    @property
    def peek(self) -> int:
        """The serial the next call will return."""
        with self._lock:
            return self._next
