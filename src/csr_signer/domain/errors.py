"""
Failure taxonomy for certificate issuance.

Each stage of the signing pipeline fails with exactly one of these codes,
so a host can branch on the category without parsing messages. The
underlying library exception travels alongside in FailureDescription.exception.
"""

from __future__ import annotations

from enum import unique

from railway import ErrorCode


@unique
class IssuanceErrorCode(ErrorCode):
    """Failure categories of the issuance pipeline, in pipeline order."""

    DECODE_ERROR = "DECODE_ERROR"
    """Empty input, malformed PEM, unsupported key type or wrong passphrase."""

    SIGNATURE_VERIFICATION_ERROR = "SIGNATURE_VERIFICATION_ERROR"
    """The CSR self-signature does not verify against its own public key."""

    BUILD_ERROR = "BUILD_ERROR"
    """A certificate field (serial, name, key, validity) was rejected."""

    SIGNING_ERROR = "SIGNING_ERROR"
    """The CA key could not produce the certificate signature."""

    ENCODING_ERROR = "ENCODING_ERROR"
    """The signed certificate could not be serialized to PEM."""
