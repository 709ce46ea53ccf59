"""
Pipeline — sign a CSR with a CA key, as one all-or-nothing railway.

  decode_inputs(key_pem, ca_pem, csr_pem)
    → verify_request(inputs)
      → build_from_inputs(ca_cert, csr)
        → sign_certificate(draft, ca_key)
          → encode_certificate(cert)
            → PEM bytes

Each stage returns Result[T]. The first failure short-circuits the rest and
is returned to the caller with its IssuanceErrorCode; nothing partial is
ever produced. The pipeline performs no file or network I/O.
"""

from __future__ import annotations

from datetime import timedelta

import structlog
from railway.failure import FailureDescription
from railway.result import Result

from csr_signer.adapters.certificate_builder import build_from_inputs, utc_now
from csr_signer.adapters.certificate_signer import encode_certificate, sign_certificate
from csr_signer.adapters.pem_decoder import decode_inputs
from csr_signer.adapters.request_verifier import verify_request
from csr_signer.adapters.serial_numbers import RandomSerialNumbers
from csr_signer.crypto_init import init_crypto
from csr_signer.domain.models import DEFAULT_VALIDITY, DecodedInputs
from csr_signer.domain.ports import Clock, SerialNumberStrategy

log = structlog.get_logger()


def _issue(
    inputs: DecodedInputs,
    serial_numbers: SerialNumberStrategy,
    validity: timedelta,
    clock: Clock,
) -> Result[bytes]:
    """Build, sign and encode — the stages that need the decoded CA key."""
    return (
        build_from_inputs(
            inputs.ca_certificate,
            inputs.csr,
            serial_numbers=serial_numbers,
            validity=validity,
            clock=clock,
        )
        .flat_map(lambda draft: sign_certificate(draft, inputs.private_key))
        .flat_map(encode_certificate)
    )


def _log_failure(error: FailureDescription) -> None:
    log.warning(
        "certificate.issuance_failed",
        code=error.code.value,
        error=error.describe(),
    )


def sign_csr(
    private_key_pem: bytes,
    ca_certificate_pem: bytes,
    csr_pem: bytes,
    *,
    passphrase: bytes | None = None,
    serial_numbers: SerialNumberStrategy | None = None,
    validity: timedelta = DEFAULT_VALIDITY,
    clock: Clock | None = None,
) -> Result[bytes]:
    """
    Issue a certificate for `csr_pem`, signed by the CA described by the other two inputs.

    Flow:
      1. Decode the CA key (with `passphrase` if encrypted), CA certificate and CSR
      2. Verify the CSR self-signature
      3. Build the certificate: subject and key from the CSR, issuer from the CA,
         serial from `serial_numbers` (random by default), validity from `clock`
      4. Sign with SHA-256 and encode as PEM

    Returns Result[bytes] with the signed PEM certificate on success, or the
    failure of the first stage that failed (DECODE_ERROR,
    SIGNATURE_VERIFICATION_ERROR, BUILD_ERROR, SIGNING_ERROR, ENCODING_ERROR).
    """
    init_crypto()
    serials = serial_numbers if serial_numbers is not None else RandomSerialNumbers()
    now = clock if clock is not None else utc_now

    return (
        decode_inputs(private_key_pem, ca_certificate_pem, csr_pem, passphrase=passphrase)
        .flat_map(verify_request)
        .flat_map(lambda inputs: _issue(inputs, serials, validity, now))
        .peek_failure(_log_failure)
    )
