"""
Certificate signer — signs the draft with the CA key and serializes it to PEM.

The digest is fixed at SHA-256. Ed25519 and Ed448 keys are the exception:
their signature scheme has the hash built in and cryptography requires
algorithm=None for them.
"""

from __future__ import annotations

import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ed448, ed25519
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes
from cryptography.hazmat.primitives.serialization import Encoding
from railway.result import Result

from csr_signer.domain.errors import IssuanceErrorCode
from csr_signer.domain.models import CertificateDraft

log = structlog.get_logger()


def signature_hash(private_key: CertificateIssuerPrivateKeyTypes) -> hashes.HashAlgorithm | None:
    """Digest to pass to CertificateBuilder.sign() for this key type."""
    if isinstance(private_key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return None
    return hashes.SHA256()


def sign_certificate(
    draft: CertificateDraft,
    private_key: CertificateIssuerPrivateKeyTypes,
) -> Result[x509.Certificate]:
    """
    Sign the draft with the CA private key.

    Returns Failure(SIGNING_ERROR) on key/algorithm mismatch or any other
    signing failure.
    """
    return Result.from_computation(
        lambda: draft.builder.sign(private_key=private_key, algorithm=signature_hash(private_key)),
        IssuanceErrorCode.SIGNING_ERROR,
        "Signing the certificate with the CA private key failed",
    ).peek(
        lambda certificate: log.info(
            "certificate.signed",
            serial=hex(certificate.serial_number),
            subject=certificate.subject.rfc4514_string(),
            issuer=certificate.issuer.rfc4514_string(),
            not_after=draft.validity.not_after.isoformat(),
        )
    )


def encode_certificate(certificate: x509.Certificate) -> Result[bytes]:
    """Serialize the signed certificate to PEM, exactly as emitted, no trailing bytes."""
    return Result.from_computation(
        lambda: certificate.public_bytes(Encoding.PEM),
        IssuanceErrorCode.ENCODING_ERROR,
        "Signed certificate could not be serialized to PEM",
    )
