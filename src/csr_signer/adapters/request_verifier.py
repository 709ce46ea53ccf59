"""
Request verifier — checks the CSR self-signature before anything is built.

This is the only integrity check in the pipeline: a CSR whose signature
does not match its embedded public key was forged or corrupted and must
never reach the builder.
"""

from __future__ import annotations

import structlog
from railway.result import Result

from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.domain.models import DecodedInputs

log = structlog.get_logger()


def verify_request(inputs: DecodedInputs) -> Result[DecodedInputs]:
    """
    Verify the CSR signature against the CSR's own public key.

    Returns the same DecodedInputs on success.
    Returns Failure(SIGNATURE_VERIFICATION_ERROR) when the signature does not
    verify, or when it cannot be checked at all (unsupported algorithm,
    undecodable public key).
    """
    return (
        Result.from_computation(
            lambda: inputs.csr.is_signature_valid,
            IssuanceErrorCode.SIGNATURE_VERIFICATION_ERROR,
            "CSR signature could not be checked",
        )
        .ensure(
            lambda valid: valid,
            IssuanceErrorCode.SIGNATURE_VERIFICATION_ERROR,
            "CSR signature does not match the CSR public key",
        )
        .map(lambda _: inputs)
        .peek(lambda _: log.debug("csr.verified", subject=inputs.csr.subject.rfc4514_string()))
    )
