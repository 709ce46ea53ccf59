"""
Shared test fixtures for the csr-signer test suite.

Generates CA material and certificate signing requests with cryptography
instead of shipping binary fixture files. Key generation is slow, so keys
are session-scoped; everything derived from them is cheap.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import CertificateIssuerPrivateKeyTypes
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID

CA_PASSPHRASE = b"correct horse battery staple"

UNREADABLE_CN = "unreadable-cn-marker"

APPLICANT_SUBJECT = x509.Name(
    [
        x509.NameAttribute(NameOID.COUNTRY_NAME, "NL"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example Applicant"),
        x509.NameAttribute(NameOID.COMMON_NAME, "service.example.test"),
    ]
)


@dataclass(frozen=True)
class CaMaterial:
    """A CA key and its self-signed certificate, as objects and as PEM."""

    key: CertificateIssuerPrivateKeyTypes = field(repr=False)
    certificate: x509.Certificate
    key_pem: bytes = field(repr=False)
    certificate_pem: bytes


def _hash_for(key: CertificateIssuerPrivateKeyTypes) -> hashes.HashAlgorithm | None:
    if isinstance(key, ed25519.Ed25519PrivateKey):
        return None
    return hashes.SHA256()


def make_ca(key: CertificateIssuerPrivateKeyTypes, common_name: str) -> CaMaterial:
    """Create a self-signed CA certificate for `key`."""
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "csr-signer tests"),
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )
    now = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=3650))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, _hash_for(key))
    )
    key_pem = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    return CaMaterial(
        key=key,
        certificate=certificate,
        key_pem=key_pem,
        certificate_pem=certificate.public_bytes(Encoding.PEM),
    )


def make_csr_pem(
    key: CertificateIssuerPrivateKeyTypes,
    subject: x509.Name = APPLICANT_SUBJECT,
) -> bytes:
    """Create a correctly self-signed PEM CSR for `key`."""
    csr = x509.CertificateSigningRequestBuilder().subject_name(subject).sign(key, _hash_for(key))
    return csr.public_bytes(Encoding.PEM)


def _pem_wrap(der: bytes, label: bytes) -> bytes:
    encoded = base64.b64encode(der)
    lines = [encoded[i : i + 64] for i in range(0, len(encoded), 64)]
    return (
        b"-----BEGIN " + label + b"-----\n"
        + b"\n".join(lines)
        + b"\n-----END " + label + b"-----\n"
    )


def tamper_csr_signature(csr_pem: bytes) -> bytes:
    """
    Flip one bit in the CSR signature and return the result as PEM.

    The signature BIT STRING is the last element of the DER encoding, so
    flipping the final byte corrupts the signature while leaving the
    structure parseable.
    """
    der = bytearray(x509.load_pem_x509_csr(csr_pem).public_bytes(Encoding.DER))
    der[-1] ^= 0x01
    return _pem_wrap(bytes(der), b"CERTIFICATE REQUEST")


def corrupt_common_name(der: bytes) -> bytes:
    """
    Overwrite every UNREADABLE_CN value in `der` with invalid UTF-8 of the same length.

    Lengths are unchanged, so the DER structure still loads; only reading
    the name fails.
    """
    marker = UNREADABLE_CN.encode("ascii")
    assert marker in der
    return der.replace(marker, b"\xff\xfe" * (len(marker) // 2))


# ─────────────────────── Keys (session-scoped) ───────────────────────


@pytest.fixture(scope="session")
def rsa_ca() -> CaMaterial:
    """RSA-2048 CA, the most common deployment key type."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return make_ca(key, "Test RSA Root CA")


@pytest.fixture(scope="session")
def ec_ca() -> CaMaterial:
    return make_ca(ec.generate_private_key(ec.SECP256R1()), "Test EC Root CA")


@pytest.fixture(scope="session")
def ed25519_ca() -> CaMaterial:
    return make_ca(ed25519.Ed25519PrivateKey.generate(), "Test Ed25519 Root CA")


@pytest.fixture(scope="session")
def applicant_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def encrypted_ca_key_pem(rsa_ca: CaMaterial) -> bytes:
    """The RSA CA key, encrypted with CA_PASSPHRASE."""
    return rsa_ca.key.private_bytes(
        Encoding.PEM,
        PrivateFormat.PKCS8,
        BestAvailableEncryption(CA_PASSPHRASE),
    )


# ─────────────────────── Derived inputs ───────────────────────


@pytest.fixture()
def csr_pem(applicant_key: rsa.RSAPrivateKey) -> bytes:
    return make_csr_pem(applicant_key)


@pytest.fixture()
def tampered_csr_pem(csr_pem: bytes) -> bytes:
    return tamper_csr_signature(csr_pem)


@pytest.fixture()
def unreadable_name_csr_pem(applicant_key: rsa.RSAPrivateKey) -> bytes:
    """A structurally valid CSR whose CN bytes are not valid UTF-8."""
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, UNREADABLE_CN)])
    der = x509.load_pem_x509_csr(make_csr_pem(applicant_key, subject)).public_bytes(Encoding.DER)
    return _pem_wrap(corrupt_common_name(der), b"CERTIFICATE REQUEST")


@pytest.fixture(scope="session")
def unreadable_name_ca_certificate_pem(rsa_ca: CaMaterial) -> bytes:
    """A certificate for the RSA CA key whose subject CN is not valid UTF-8."""
    der = make_ca(rsa_ca.key, UNREADABLE_CN).certificate.public_bytes(Encoding.DER)
    return _pem_wrap(corrupt_common_name(der), b"CERTIFICATE")


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog.configure() a test performed."""
    yield
    structlog.reset_defaults()


# ─────────────────────── Factories ───────────────────────
# Test modules are imported in importlib mode, so helpers are handed out
# as fixtures rather than imported from this module.


@pytest.fixture(scope="session")
def ca_passphrase() -> bytes:
    return CA_PASSPHRASE


@pytest.fixture(scope="session")
def make_csr():
    return make_csr_pem


@pytest.fixture(scope="session")
def tamper_csr():
    return tamper_csr_signature


@pytest.fixture(scope="session")
def applicant_subject() -> x509.Name:
    return APPLICANT_SUBJECT
