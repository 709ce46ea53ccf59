"""
Domain models — immutable value objects passed between pipeline stages.

None of them outlives a single sign_csr() invocation. They wrap the
cryptography types rather than copying their fields, since the library
objects are already immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes

DEFAULT_VALIDITY = timedelta(seconds=31_536_000)
"""365 days of wall-clock time, independent of leap years."""


@dataclass(frozen=True, slots=True)
class DecodedInputs:
    """
    The three caller inputs after PEM decoding.

    The private key is kept out of repr so it never ends up in a log line.
    """

    private_key: CertificateIssuerPrivateKeyTypes = field(repr=False)
    ca_certificate: x509.Certificate
    csr: x509.CertificateSigningRequest


@dataclass(frozen=True, slots=True)
class ValidityWindow:
    """notBefore / notAfter pair of the certificate being issued."""

    not_before: datetime
    not_after: datetime

    @staticmethod
    def starting_at(moment: datetime, duration: timedelta) -> ValidityWindow:
        """
        Build a window of exactly `duration` starting at `moment`.

        X.509 times carry whole seconds only, so the start is truncated
        before the end is computed. Otherwise the encoded notAfter would
        drift from notBefore + duration by the dropped microseconds. For the
        same reason the duration itself must be a whole number of seconds.
        """
        if duration <= timedelta(0):
            raise ValueError(f"Validity duration must be positive, got {duration}")
        if duration.microseconds:
            raise ValueError(f"Validity duration must be whole seconds, got {duration}")
        not_before = moment.replace(microsecond=0)
        return ValidityWindow(not_before=not_before, not_after=not_before + duration)

    @property
    def duration(self) -> timedelta:
        return self.not_after - self.not_before


@dataclass(frozen=True, slots=True)
class CertificateDraft:
    """An assembled but unsigned certificate, plus the values chosen for it."""

    builder: x509.CertificateBuilder = field(repr=False)
    serial_number: int
    validity: ValidityWindow
