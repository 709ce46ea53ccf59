"""
Certificate builder — assembles the unsigned certificate from the CSR.

Field sources:
  version     → v3 (the only version cryptography's CertificateBuilder emits)
  serial      → injected SerialNumberStrategy
  subject     → CSR subject, verbatim
  issuer      → CA certificate subject, verbatim
  validity    → clock() .. clock() + duration
  public key  → CSR public key

No X.509v3 extensions are attached. Which extensions an issued
certificate should carry (basicConstraints, keyUsage, subjectAltName)
depends on whether it is a leaf or an intermediate, and that is left
to the caller.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import CertificatePublicKeyTypes
from railway.result import Result

from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.domain.models import DEFAULT_VALIDITY, CertificateDraft, ValidityWindow
from csr_signer.domain.ports import Clock, SerialNumberStrategy

log = structlog.get_logger()


def utc_now() -> datetime:
    return datetime.now(UTC)


def _assemble(
    issuer: x509.Name,
    subject: x509.Name,
    public_key: CertificatePublicKeyTypes,
    serial_number: int,
    validity: ValidityWindow,
) -> CertificateDraft:
    """Apply every field to a fresh CertificateBuilder. Raises on any rejected field."""
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(public_key)
        .serial_number(serial_number)
        .not_valid_before(validity.not_before)
        .not_valid_after(validity.not_after)
    )
    return CertificateDraft(builder=builder, serial_number=serial_number, validity=validity)


def build_certificate(
    issuer: x509.Name,
    subject: x509.Name,
    public_key: CertificatePublicKeyTypes,
    serial_numbers: SerialNumberStrategy,
    validity: timedelta = DEFAULT_VALIDITY,
    clock: Clock = utc_now,
) -> Result[CertificateDraft]:
    """
    Produce an unsigned certificate draft.

    Returns Failure(BUILD_ERROR) if the serial strategy raises, the duration
    is not positive, or cryptography rejects any field (non-positive or
    oversized serial, unsupported public key type, ...).
    """
    return (
        Result.from_computation(
            lambda: ValidityWindow.starting_at(clock(), validity),
            IssuanceErrorCode.BUILD_ERROR,
            "Invalid certificate validity period",
        )
        .flat_map(
            lambda window: Result.from_computation(
                serial_numbers.next_serial,
                IssuanceErrorCode.BUILD_ERROR,
                "Serial number generation failed",
            ).flat_map(
                lambda serial: Result.from_computation(
                    lambda: _assemble(issuer, subject, public_key, serial, window),
                    IssuanceErrorCode.BUILD_ERROR,
                    "Certificate field rejected",
                )
            )
        )
        .peek(
            lambda draft: log.debug(
                "certificate.built",
                serial=hex(draft.serial_number),
                subject=subject.rfc4514_string(),
                issuer=issuer.rfc4514_string(),
                not_before=draft.validity.not_before.isoformat(),
                not_after=draft.validity.not_after.isoformat(),
            )
        )
    )


def build_from_inputs(
    ca_certificate: x509.Certificate,
    csr: x509.CertificateSigningRequest,
    serial_numbers: SerialNumberStrategy,
    validity: timedelta = DEFAULT_VALIDITY,
    clock: Clock = utc_now,
) -> Result[CertificateDraft]:
    """
    Convenience wrapper: take issuer from the CA certificate, subject and key from the CSR.

    Names and key are parsed lazily by cryptography, so reading them is part
    of the guarded computation rather than of the argument list.
    """
    return Result.from_computation(
        lambda: (ca_certificate.subject, csr.subject, csr.public_key()),
        IssuanceErrorCode.BUILD_ERROR,
        "CSR subject, CSR public key or CA subject could not be extracted",
    ).flat_map(
        lambda fields: build_certificate(
            issuer=fields[0],
            subject=fields[1],
            public_key=fields[2],
            serial_numbers=serial_numbers,
            validity=validity,
            clock=clock,
        )
    )
