"""
PEM input decoder — first stage of the issuance pipeline.

Adapter layer — turns the caller's three PEM byte strings into cryptography
objects:
  private key PEM  → load_pem_private_key (optionally passphrase-protected)
  CA cert PEM      → load_pem_x509_certificate
  CSR PEM          → load_pem_x509_csr

All three inputs are checked for emptiness before any of them is parsed,
in the order key, CA certificate, CSR. Every library exception is caught
at this boundary and reported as DECODE_ERROR.
"""

from __future__ import annotations

from typing import TypeVar

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    CertificateIssuerPrivateKeyTypes,
    PrivateKeyTypes,
)
from cryptography.hazmat.primitives.serialization import load_pem_private_key
from railway.result import Result

from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.domain.models import DecodedInputs

log = structlog.get_logger()

_Loaded = TypeVar("_Loaded", x509.Certificate, x509.CertificateSigningRequest)

_SIGNING_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    dsa.DSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
)


def _require_non_empty(blob: bytes, label: str) -> Result[bytes]:
    if not blob:
        return Result.failure(IssuanceErrorCode.DECODE_ERROR, f"{label} must not be empty")
    return Result.success(blob)


def _ensure_signing_key(key: PrivateKeyTypes) -> Result[CertificateIssuerPrivateKeyTypes]:
    """Reject key types that exist in PEM form but cannot sign certificates (X25519, DH, ...)."""
    if isinstance(key, _SIGNING_KEY_TYPES):
        return Result.success(key)
    return Result.failure(
        IssuanceErrorCode.DECODE_ERROR,
        f"Unsupported CA private key type: {type(key).__name__}",
    )


def decode_private_key(
    pem: bytes,
    passphrase: bytes | None = None,
) -> Result[CertificateIssuerPrivateKeyTypes]:
    """
    Decode the CA private key.

    An encrypted key needs the matching passphrase. A missing, wrong, or
    superfluous passphrase (one given for a plaintext key) is a DECODE_ERROR.
    """
    return Result.from_computation(
        lambda: load_pem_private_key(pem, password=passphrase),
        IssuanceErrorCode.DECODE_ERROR,
        "CA private key could not be decoded (malformed PEM or wrong passphrase)",
    ).flat_map(_ensure_signing_key)


def _require_readable_subject(
    loaded: _Loaded,
    label: str,
) -> Result[_Loaded]:
    """
    Decode the subject name of a freshly loaded certificate or CSR.

    cryptography parses names lazily, so a structurally valid PEM can still
    carry an attribute value (for example a UTF8String holding invalid
    UTF-8) that only fails when `.subject` is first read.
    """
    return Result.from_computation(
        lambda: loaded.subject,
        IssuanceErrorCode.DECODE_ERROR,
        f"{label} subject name could not be decoded",
    ).map(lambda _: loaded)


def decode_ca_certificate(pem: bytes) -> Result[x509.Certificate]:
    return Result.from_computation(
        lambda: x509.load_pem_x509_certificate(pem),
        IssuanceErrorCode.DECODE_ERROR,
        "CA certificate is not a valid PEM-encoded X.509 certificate",
    ).flat_map(lambda certificate: _require_readable_subject(certificate, "CA certificate"))


def decode_csr(pem: bytes) -> Result[x509.CertificateSigningRequest]:
    return Result.from_computation(
        lambda: x509.load_pem_x509_csr(pem),
        IssuanceErrorCode.DECODE_ERROR,
        "CSR is not a valid PEM-encoded certificate signing request",
    ).flat_map(lambda csr: _require_readable_subject(csr, "CSR"))


def decode_inputs(
    private_key_pem: bytes,
    ca_certificate_pem: bytes,
    csr_pem: bytes,
    passphrase: bytes | None = None,
) -> Result[DecodedInputs]:
    """
    Decode all three caller inputs into a DecodedInputs value object.

    Flow:
      1. Reject empty inputs (key, then CA certificate, then CSR)
      2. Decode the private key (with passphrase if given)
      3. Decode the CA certificate and its subject name
      4. Decode the CSR and its subject name

    Returns Result[DecodedInputs], or Failure(DECODE_ERROR) from the first
    input that fails.
    """
    return (
        _require_non_empty(private_key_pem, "CA private key")
        .flat_map(lambda _: _require_non_empty(ca_certificate_pem, "CA certificate"))
        .flat_map(lambda _: _require_non_empty(csr_pem, "CSR"))
        .flat_map(lambda _: decode_private_key(private_key_pem, passphrase))
        .flat_map(
            lambda key: decode_ca_certificate(ca_certificate_pem).flat_map(
                lambda ca_cert: decode_csr(csr_pem).map(
                    lambda csr: DecodedInputs(
                        private_key=key,
                        ca_certificate=ca_cert,
                        csr=csr,
                    )
                )
            )
        )
        .peek(
            lambda inputs: log.debug(
                "csr.decoded",
                key_type=type(inputs.private_key).__name__,
                issuer=inputs.ca_certificate.subject.rfc4514_string(),
                subject=inputs.csr.subject.rfc4514_string(),
            )
        )
    )
