"""
One-time process-wide crypto setup.

cryptography loads OpenSSL lazily on first use. init_crypto() forces that
load up front behind a double-checked lock, confirms SHA-256 is available
and logs the linked OpenSSL version. It runs its body at most once per
process no matter how many threads call it. sign_csr() calls it itself, so
calling it explicitly is optional.
"""

from __future__ import annotations

import threading

import structlog
from cryptography.hazmat.primitives import hashes

log = structlog.get_logger()

_init_lock = threading.Lock()
_initialized = False


def _load_backend() -> str:
    """Load the OpenSSL backend and return its version string."""
    from cryptography.hazmat.backends.openssl import backend

    if not backend.hash_supported(hashes.SHA256()):
        raise RuntimeError("Linked OpenSSL does not support SHA-256")
    return backend.openssl_version_text()


def init_crypto() -> None:
    """Initialize the crypto backend once. Repeated calls are no-ops."""
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        version = _load_backend()
        _initialized = True
        log.info("crypto.initialized", openssl_version=version)


def is_crypto_initialized() -> bool:
    return _initialized
